"""Core data structures for road networks."""

from .types import NodeRef, Waypoint, to_waypoint
from .network import Node, Chain, RoadNetwork
from .attachments import AttachmentEntry, AttachmentRegistry
from .report import GenerationReport

__all__ = [
    "NodeRef",
    "Waypoint",
    "to_waypoint",
    "Node",
    "Chain",
    "RoadNetwork",
    "AttachmentEntry",
    "AttachmentRegistry",
    "GenerationReport",
]
