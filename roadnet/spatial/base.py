"""
Base interface for scene query services.

The generation core never touches a host scene directly. Everything it needs
(neighbor queries, surface projection, creating endpoint objects, resolving
whether an object belongs to the network) goes through this interface, so a
game engine, an editor or the bundled in-memory scene can all back it.
"""

from abc import ABC, abstractmethod
from typing import Hashable, Iterable, List, Optional
import numpy as np

from ..core.types import NodeRef

ATTACHABLE = "attachable"
DEFAULT = "default"


class CollaboratorError(Exception):
    """Raised by a scene service when a query or object operation fails."""


def dedupe_handles(handles: Iterable[Hashable]) -> List[Hashable]:
    """Remove duplicate handles, keeping first-seen order."""
    seen = set()
    unique = []
    for handle in handles:
        if handle in seen:
            continue
        seen.add(handle)
        unique.append(handle)
    return unique


class SceneQueryService(ABC):
    """
    Abstract base class for the spatial query collaborator.

    Implementations must return query results in a stable order for a given
    scene state; generation under a fixed seed is only reproducible if they
    do. Failures are reported by raising CollaboratorError.
    """

    @abstractmethod
    def query_sphere(self, center: np.ndarray, radius: float, category: str) -> List[Hashable]:
        """
        Objects of ``category`` overlapping a sphere.

        Parameters
        ----------
        center : np.ndarray
            Sphere center (x, y, z)
        radius : float
            Sphere radius
        category : str
            Object category filter (e.g. ATTACHABLE)

        Returns
        -------
        list
            Object handles, possibly with duplicates
        """
        pass

    @abstractmethod
    def query_annulus(
        self,
        center: np.ndarray,
        inner_radius: float,
        outer_radius: float,
        category: str,
    ) -> List[Hashable]:
        """
        Objects of ``category`` overlapping the outer sphere but not the inner one.

        Returns
        -------
        list
            Object handles, possibly with duplicates
        """
        pass

    @abstractmethod
    def closest_point_on(self, handle: Hashable, reference: np.ndarray) -> np.ndarray:
        """Closest point on the object's surface (or inside it) to ``reference``."""
        pass

    @abstractmethod
    def create_endpoint(self, position: np.ndarray) -> Hashable:
        """Create a non-attachable endpoint object and return its handle."""
        pass

    @abstractmethod
    def node_component_of(self, handle: Hashable) -> Optional[NodeRef]:
        """The network node an object represents, or None for foreign objects."""
        pass

    @abstractmethod
    def create_marker(self, position: np.ndarray, category: str = ATTACHABLE) -> Hashable:
        """Create a point marker object (used to make nodes discoverable)."""
        pass

    @abstractmethod
    def bind_node(self, handle: Hashable, ref: NodeRef) -> None:
        """Associate an object with a network node."""
        pass

    @abstractmethod
    def remove(self, handle: Hashable) -> None:
        """Remove an object from the scene."""
        pass

    @abstractmethod
    def exists(self, handle: Hashable) -> bool:
        """Whether the object is still present in the scene."""
        pass


__all__ = [
    "ATTACHABLE",
    "DEFAULT",
    "CollaboratorError",
    "SceneQueryService",
    "dedupe_handles",
]
