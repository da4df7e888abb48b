"""
Chain construction from an ordered waypoint list.

The builder places one anchor node per waypoint and fills the gaps between
consecutive waypoints with interpolated corners. It performs no branch
discovery.
"""

from typing import Any, Optional, Sequence
import logging
import numpy as np

from ..core.network import Chain, Node, RoadNetwork
from ..core.report import GenerationReport
from ..core.types import to_waypoint
from ..policies import ConfigurationError, GenerationPolicy
from ..spatial.base import ATTACHABLE, CollaboratorError, SceneQueryService
from .interpolation import interpolate_corners

logger = logging.getLogger(__name__)


def _register_marker(
    node: Node,
    network: RoadNetwork,
    scene: SceneQueryService,
    report: Optional[GenerationReport],
) -> None:
    """Make a node discoverable by scene queries."""
    try:
        handle = scene.create_marker(node.position, ATTACHABLE)
        scene.bind_node(handle, network.ref(node))
    except CollaboratorError as e:
        message = f"Could not create scene marker for node {node.id} ({node.name}): {e}"
        logger.warning(message)
        if report is not None:
            report.add_warning(message)
        return
    node.handle = handle


def build(
    waypoints: Sequence[Any],
    policy: GenerationPolicy,
    network: Optional[RoadNetwork] = None,
    parent: Optional[Node] = None,
    rng: Optional[np.random.Generator] = None,
    scene: Optional[SceneQueryService] = None,
    report: Optional[GenerationReport] = None,
) -> Chain:
    """
    Build a chain through an ordered list of waypoints.

    Parameters
    ----------
    waypoints : sequence
        At least two waypoints: positions, Waypoint objects, nodes or branch
        endpoints. The first and last are the chain's end anchors.
    policy : GenerationPolicy
        Policy of the new chain; its depth is the chain depth
    network : RoadNetwork, optional
        Arena to build into. A new network is created if omitted.
    parent : Node, optional
        Node the chain branches from (None for the root chain)
    rng : np.random.Generator, optional
        Random generator for corner jitter
    scene : SceneQueryService, optional
        When given, every node gets an attachable marker bound to it
    report : GenerationReport, optional
        Collects collaborator warnings and chain metrics

    Returns
    -------
    Chain
        The populated chain (also stored in ``network``)

    Raises
    ------
    ConfigurationError
        If the policy is invalid or fewer than two waypoints are given
    """
    policy.check()
    if len(waypoints) < 2:
        raise ConfigurationError(f"A chain needs at least 2 waypoints, got {len(waypoints)}")

    points = [to_waypoint(w) for w in waypoints]
    if network is None:
        network = RoadNetwork()
    if rng is None:
        rng = np.random.default_rng()

    chain = network.new_chain(policy, parent=parent)

    def make_corner(position, orientation):
        return network.create_node(position, orientation, node_type="corner")

    for i, waypoint in enumerate(points):
        anchor = network.create_node(
            waypoint.position,
            waypoint.orientation,
            node_type="anchor",
            name=f"MainPoint{i}",
            source_node_id=waypoint.source_node_id,
        )
        anchor.attributes.update(waypoint.attributes)
        chain.append(anchor)

        if i == len(points) - 1:
            break

        corners = interpolate_corners(
            chain.last,
            points[i + 1].position,
            policy.corner_spacing,
            policy.max_corner_offset,
            rng,
            make_corner=make_corner,
        )
        for k, corner in enumerate(corners, start=1):
            corner.name = f"point{k}"
            chain.append(corner)

    if scene is not None:
        for node in chain.nodes:
            _register_marker(node, network, scene, report)

    if report is not None:
        report.increment("chains_built")
        report.increment("nodes_created", len(chain))

    logger.debug(
        f"Built chain {chain.id} at depth {chain.depth}: {len(points)} anchors, "
        f"{len(chain) - len(points)} corners"
    )
    return chain


__all__ = ["build"]
