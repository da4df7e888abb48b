"""
RoadNet - Procedural Road Network Generation

This package generates branching road networks through a scene: a primary
road is threaded through user waypoints with jittered corners, then side
roads branch off toward nearby attachable objects (or back onto the network
itself), recursively, up to a depth limit.

Main Entry Points:
    - RoadGenerator: owns one network and the scene objects it creates
    - generate_network(): one-call generation
    - build(): construct a single chain through waypoints
    - generate_branches(): recursive side-road pass over a built chain

Example:
    >>> from roadnet import GenerationPolicy, InMemoryScene, SphereObject, generate_network
    >>>
    >>> scene = InMemoryScene()
    >>> scene.add(SphereObject(center=(40, 0, 15), radius=2.0))
    >>> network, report = generate_network(
    ...     [(0, 0, 0), (100, 0, 0)],
    ...     policy=GenerationPolicy(branch_chance=100),
    ...     scene=scene,
    ...     seed=42,
    ... )
    >>> network.chain_count >= 1
    True
"""

from .api import RoadGenerator, generate_network, normalize_waypoints
from .ops import build, generate_branches, interpolate_corners, BranchEvaluator
from .core import (
    NodeRef,
    Waypoint,
    Node,
    Chain,
    RoadNetwork,
    AttachmentRegistry,
    GenerationReport,
)
from .policies import GenerationPolicy, ConfigurationError, clamp_policy
from .spatial import (
    CollaboratorError,
    SceneQueryService,
    InMemoryScene,
    SphereObject,
    BoxObject,
    MeshObject,
)
from .adapters import to_networkx_graph

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "RoadGenerator",
    "generate_network",
    "normalize_waypoints",
    # Operations
    "build",
    "generate_branches",
    "interpolate_corners",
    "BranchEvaluator",
    # Core types
    "NodeRef",
    "Waypoint",
    "Node",
    "Chain",
    "RoadNetwork",
    "AttachmentRegistry",
    "GenerationReport",
    # Policies
    "GenerationPolicy",
    "ConfigurationError",
    "clamp_policy",
    # Scene
    "CollaboratorError",
    "SceneQueryService",
    "InMemoryScene",
    "SphereObject",
    "BoxObject",
    "MeshObject",
    # Adapters
    "to_networkx_graph",
]
