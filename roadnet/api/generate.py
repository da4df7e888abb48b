"""
Unified generation API for road networks.

This module provides the main entry points: the RoadGenerator, which owns a
network's lifecycle (build, branch, clear), and generate_network() for
one-call generation.
"""

from typing import Any, List, Optional, Sequence, Tuple
import logging
import numpy as np

from ..core.attachments import AttachmentRegistry
from ..core.network import Chain, RoadNetwork
from ..core.report import GenerationReport
from ..core.types import Waypoint, to_waypoint
from ..policies import GenerationPolicy
from ..spatial.base import CollaboratorError, SceneQueryService
from ..spatial.scene import InMemoryScene
from ..ops.builder import build
from ..ops.recursion import generate_branches
from ..adapters.networkx_adapter import polylines as chain_polylines

logger = logging.getLogger(__name__)


def normalize_waypoints(waypoints: Sequence[Any]) -> List[Waypoint]:
    """
    Maintain a host-edited waypoint list.

    - pads the list to at least two entries (start and end)
    - drops missing (None) entries when more than two remain, unless every
      entry is missing
    - replaces missing entries and repeated references to the same waypoint
      object (anything with a ``position``) with fresh placeholders at the
      origin
    - names the entries StartPoint, Corner1..CornerN, EndPoint

    The result never holds fewer than two waypoints.

    Parameters
    ----------
    waypoints : sequence
        Waypoints, positions, or None for missing entries

    Returns
    -------
    List[Waypoint]
        Normalized waypoints
    """
    items = list(waypoints)

    if len(items) > 2 and not all(w is None for w in items):
        items = [w for w in items if w is not None]
    while len(items) < 2:
        items.append(None)

    normalized: List[Waypoint] = []
    for i, item in enumerate(items):
        # Plain coordinates are values, only object references can be shared
        shared = hasattr(item, "position") and any(other is item for other in items[:i])
        if item is None or shared:
            waypoint = Waypoint(position=np.zeros(3))
        else:
            waypoint = to_waypoint(item)

        if i == 0:
            waypoint.name = "StartPoint"
        elif i == len(items) - 1:
            waypoint.name = "EndPoint"
        else:
            waypoint.name = f"Corner{i}"
        normalized.append(waypoint)

    return normalized


class RoadGenerator:
    """
    Generator owning one road network and the scene objects it creates.

    Typical use::

        generator = RoadGenerator(waypoints, policy, scene=scene, seed=7)
        report = generator.generate()
        for line in generator.polylines():
            ...
    """

    def __init__(
        self,
        waypoints: Sequence[Any],
        policy: Optional[GenerationPolicy] = None,
        scene: Optional[SceneQueryService] = None,
        registry: Optional[AttachmentRegistry] = None,
        seed: Optional[int] = None,
        network_id: Optional[str] = None,
    ):
        """
        Initialize generator.

        Parameters
        ----------
        waypoints : sequence
            Fixed points the primary road passes through, in order
        policy : GenerationPolicy, optional
            Generation parameters (defaults if omitted)
        scene : SceneQueryService, optional
            Scene collaborator. A fresh InMemoryScene if omitted.
        registry : AttachmentRegistry, optional
            Attachment registry, shareable between generators on one scene
        seed : int, optional
            Random seed for reproducibility
        network_id : str, optional
            Identity of the generated network
        """
        self.waypoints = normalize_waypoints(waypoints)
        self.policy = policy if policy is not None else GenerationPolicy()
        self.scene = scene if scene is not None else InMemoryScene()
        self.registry = registry if registry is not None else AttachmentRegistry()
        self.seed = seed
        self.rng = np.random.default_rng(seed)
        self.network = RoadNetwork(network_id=network_id)
        self.report = GenerationReport(operation="generate_road_network")

    @property
    def root_chain(self) -> Optional[Chain]:
        return self.network.root

    def execute(self) -> Chain:
        """
        Build the primary chain through the waypoints.

        Raises
        ------
        ConfigurationError
            If the policy is invalid
        """
        self.policy.check()
        if self.network.root is not None:
            raise ValueError("Primary road already built; call clear() first")

        chain = build(
            self.waypoints,
            self.policy,
            network=self.network,
            rng=self.rng,
            scene=self.scene,
            report=self.report,
        )
        logger.info(
            f"Built primary road through {len(self.waypoints)} waypoint(s): "
            f"{len(chain)} nodes, length {chain.length():.2f}"
        )
        return chain

    def execute_side_roads(self) -> GenerationReport:
        """Run the recursive branch pass over the primary chain."""
        if self.network.root is None:
            raise ValueError("No primary road; call execute() first")
        if self.network.root.id in self.network.expanded_chain_ids:
            raise ValueError("Side roads already generated; call clear() first")
        return generate_branches(
            self.network,
            self.scene,
            registry=self.registry,
            rng=self.rng,
            report=self.report,
        )

    def generate(self) -> GenerationReport:
        """Clear, build the primary road and generate all side roads."""
        self.clear()
        self.execute()
        report = self.execute_side_roads()
        report.metadata["seed"] = self.seed
        return report

    def clear(self) -> None:
        """
        Remove everything this generator created.

        Deletes node markers and endpoints from the scene, releases the
        endpoints' attachment slots and empties the network. The random
        generator is re-seeded so the next generate() repeats the last one.
        """
        removed = 0
        handles = [n.handle for n in self.network.iter_nodes() if n.handle is not None]
        handles.extend(self.network.endpoint_handles)

        for handle in handles:
            self.registry.detach(handle)
            try:
                if self.scene.exists(handle):
                    self.scene.remove(handle)
                    removed += 1
            except CollaboratorError as e:
                logger.warning(f"Could not remove scene object {handle}: {e}")

        self.network.clear()
        self.rng = np.random.default_rng(self.seed)
        self.report = GenerationReport(operation="generate_road_network")
        if removed:
            logger.debug(f"Cleared {removed} generated scene object(s)")

    def polylines(self) -> List[np.ndarray]:
        """Node positions of every chain, root first (one (n, 3) array per chain)."""
        return chain_polylines(self.network)


def generate_network(
    waypoints: Sequence[Any],
    policy: Optional[GenerationPolicy] = None,
    scene: Optional[SceneQueryService] = None,
    seed: Optional[int] = None,
    registry: Optional[AttachmentRegistry] = None,
) -> Tuple[RoadNetwork, GenerationReport]:
    """
    Generate a road network through the given waypoints.

    Parameters
    ----------
    waypoints : sequence
        Fixed points of the primary road (at least two after normalization)
    policy : GenerationPolicy, optional
        Generation parameters
    scene : SceneQueryService, optional
        Scene to search for branch targets. A fresh InMemoryScene if omitted.
    seed : int, optional
        Random seed for reproducibility
    registry : AttachmentRegistry, optional
        Attachment registry to share with other generators

    Returns
    -------
    network : RoadNetwork
        Generated road network
    report : GenerationReport
        Pass metrics and collaborator warnings
    """
    generator = RoadGenerator(waypoints, policy=policy, scene=scene, registry=registry, seed=seed)
    report = generator.generate()
    return generator.network, report


__all__ = ["normalize_waypoints", "RoadGenerator", "generate_network"]
