"""
Basic value types shared across the road network library.
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Any
import numpy as np
from scipy.spatial.transform import Rotation

from ..policies import ConfigurationError
from ..utils.geometry import as_vector


class NodeRef(NamedTuple):
    """Stable reference from a scene object to a generated node."""

    network_id: str
    node_id: int


@dataclass
class Waypoint:
    """
    A point a chain must pass through.

    Waypoints anchor chains: the builder places one anchor node per waypoint
    and interpolates corners between consecutive waypoints.
    """

    position: np.ndarray
    orientation: Optional[Rotation] = None
    name: Optional[str] = None
    source_node_id: Optional[int] = None  # set when the waypoint copies a network node
    attributes: dict = field(default_factory=dict)  # copied onto the anchor node

    def __post_init__(self):
        self.position = as_vector(self.position)

    @classmethod
    def from_node(cls, node: Any) -> "Waypoint":
        """Create a waypoint at a node's position and orientation."""
        return cls(
            position=np.array(node.position, dtype=np.float64),
            orientation=node.orientation,
            name=node.name,
            source_node_id=node.id,
            attributes=dict(getattr(node, "attributes", {})),
        )


def to_waypoint(value: Any) -> Waypoint:
    """
    Coerce a waypoint-like value to a Waypoint.

    Accepts a Waypoint, anything with ``position`` and ``orientation``
    attributes (e.g. a Node or a branch endpoint), or a 3-sequence.
    """
    if isinstance(value, Waypoint):
        return value
    if hasattr(value, "to_waypoint"):
        return value.to_waypoint()
    if hasattr(value, "position") and hasattr(value, "id"):
        return Waypoint.from_node(value)
    if value is None:
        raise ConfigurationError("Waypoint is None")
    return Waypoint(position=value)


__all__ = ["NodeRef", "Waypoint", "to_waypoint"]
