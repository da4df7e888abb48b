"""
Operations for building and expanding road networks.

    - roadnet.ops.interpolation: corner placement between anchors
    - roadnet.ops.builder: chain construction from waypoints
    - roadnet.ops.branching: per-node branch discovery
    - roadnet.ops.recursion: recursive side-branch generation
"""

from .interpolation import CornerPlacement, interpolate_corners, corner_positions
from .builder import build
from .branching import BranchEndpoint, BranchEvaluator
from .recursion import generate_branches

__all__ = [
    "CornerPlacement",
    "interpolate_corners",
    "corner_positions",
    "build",
    "BranchEndpoint",
    "BranchEvaluator",
    "generate_branches",
]
