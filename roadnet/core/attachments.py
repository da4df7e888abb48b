"""
Attachment bookkeeping for foreign scene objects.

Branches that end on an object outside the network create an endpoint next
to that object. The registry counts those endpoints per object so an object
cannot take more branches than a node could.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, Iterator, List, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class AttachmentEntry:
    """Endpoints attached to one foreign object."""

    object_id: Hashable
    endpoints: List[Hashable] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.endpoints)


class AttachmentRegistry:
    """
    Side table mapping foreign object identity to its attachments.

    Entries exist only while they hold at least one endpoint.
    """

    def __init__(self):
        self._entries: Dict[Hashable, AttachmentEntry] = {}

    def count(self, object_id: Hashable) -> int:
        """Number of endpoints attached to an object (0 if unknown)."""
        entry = self._entries.get(object_id)
        return entry.count if entry is not None else 0

    def has_capacity(self, object_id: Hashable, limit: int) -> bool:
        """Whether another endpoint may attach to the object."""
        return self.count(object_id) < limit

    def get(self, object_id: Hashable) -> Optional[AttachmentEntry]:
        return self._entries.get(object_id)

    def attach(self, object_id: Hashable, endpoint: Hashable) -> AttachmentEntry:
        """Register an endpoint against an object, creating its entry on demand."""
        entry = self._entries.get(object_id)
        if entry is None:
            entry = AttachmentEntry(object_id=object_id)
            self._entries[object_id] = entry
        entry.endpoints.append(endpoint)
        return entry

    def detach(self, endpoint: Hashable) -> Optional[Hashable]:
        """
        Remove an endpoint wherever it is registered.

        Returns
        -------
        object id or None
            The object the endpoint was attached to, if any
        """
        for object_id, entry in list(self._entries.items()):
            if endpoint in entry.endpoints:
                entry.endpoints.remove(endpoint)
                if entry.count == 0:
                    del self._entries[object_id]
                return object_id
        return None

    def prune(self, is_alive: Callable[[Hashable], bool]) -> int:
        """
        Drop endpoints the host reports as destroyed.

        Parameters
        ----------
        is_alive : callable
            Returns False for endpoints that no longer exist

        Returns
        -------
        int
            Number of endpoints removed
        """
        removed = 0
        for object_id, entry in list(self._entries.items()):
            alive = [e for e in entry.endpoints if is_alive(e)]
            removed += entry.count - len(alive)
            if alive:
                entry.endpoints = alive
            else:
                del self._entries[object_id]
        if removed:
            logger.debug(f"Pruned {removed} stale attachment endpoint(s)")
        return removed

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, object_id: Hashable) -> bool:
        return object_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[AttachmentEntry]:
        return iter(list(self._entries.values()))


__all__ = ["AttachmentEntry", "AttachmentRegistry"]
