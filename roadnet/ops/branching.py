"""
Branch discovery for a single node.

For a node of a chain, the evaluator searches the scene for attachable
objects in an annulus around the node and decides, candidate by candidate,
whether a side branch should end there. A branch can end on a foreign
object (a new endpoint is created next to it) or on another node of the
same network.

Acceptance rules, in order, per candidate:
1. the node still has branch capacity (otherwise the scan stops)
2. a percentage roll passes the depth-decayed branch chance
3. no other attachable object lies within the clearance radius of the
   contact point
4. foreign objects need free attachment slots; network nodes need free
   branch capacity and enough index separation from the node
"""

from dataclasses import dataclass
from typing import Hashable, List, Optional
import logging
import numpy as np
from scipy.spatial.transform import Rotation

from ..core.attachments import AttachmentRegistry
from ..core.network import Chain, Node, RoadNetwork
from ..core.report import GenerationReport
from ..core.types import Waypoint
from ..policies import GenerationPolicy
from ..spatial.base import ATTACHABLE, CollaboratorError, SceneQueryService, dedupe_handles
from ..utils.geometry import distance

logger = logging.getLogger(__name__)


@dataclass
class BranchEndpoint:
    """Accepted end of a side branch."""

    position: np.ndarray
    target: Hashable  # scene handle of the accepted candidate
    node: Optional[Node] = None  # set when the branch ends on a network node
    endpoint_handle: Optional[Hashable] = None  # set when an endpoint object was created
    orientation: Optional[Rotation] = None

    @property
    def is_foreign(self) -> bool:
        return self.node is None

    def to_waypoint(self) -> Waypoint:
        if self.node is not None:
            return Waypoint.from_node(self.node)
        return Waypoint(position=self.position, orientation=self.orientation, name="EndPoint")


class BranchEvaluator:
    """
    Decides which branches a node spawns during one generation pass.

    The evaluator mutates branch counts on nodes, the attachment registry
    and the scene (endpoint creation). It is single-threaded; registry
    updates happen in evaluation order, which decides who wins the last
    slot of a nearly full object.
    """

    def __init__(
        self,
        network: RoadNetwork,
        scene: SceneQueryService,
        registry: Optional[AttachmentRegistry] = None,
        rng: Optional[np.random.Generator] = None,
        report: Optional[GenerationReport] = None,
    ):
        self.network = network
        self.scene = scene
        self.registry = registry if registry is not None else AttachmentRegistry()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.report = report if report is not None else GenerationReport(operation="branch_evaluation")

    def evaluate(
        self,
        node: Node,
        predecessor: Node,
        chain: Optional[Chain] = None,
    ) -> List[BranchEndpoint]:
        """
        Find the branch endpoints for a node.

        Parameters
        ----------
        node : Node
            Branch origin; must not be the first node of its chain
        predecessor : Node
            The node immediately before ``node`` in its chain
        chain : Chain, optional
            Owning chain (looked up from the network if omitted)

        Returns
        -------
        List[BranchEndpoint]
            Accepted endpoints in acceptance order (possibly empty)
        """
        if chain is None:
            chain = self.network.get_chain(node.chain_id)
        if node.index == 0:
            raise ValueError(f"Node {node.id} is the entry anchor of chain {chain.id} and cannot branch")

        policy = chain.policy
        self.report.increment("branch_evaluations")

        exclusion_radius = distance(node.position, predecessor.position) + policy.exclusion_margin
        try:
            candidates = dedupe_handles(
                self.scene.query_annulus(
                    node.position, exclusion_radius, policy.max_branch_radius, ATTACHABLE
                )
            )
        except CollaboratorError as e:
            self._collaborator_failure(f"Annulus query failed for node {node.id} ({node.name})", e)
            return []

        endpoints: List[BranchEndpoint] = []
        for candidate in candidates:
            if not node.has_capacity(policy.max_branches_per_node):
                break

            try:
                endpoint = self._consider(node, candidate, policy)
            except CollaboratorError as e:
                self._collaborator_failure(
                    f"Skipping candidate {candidate} for node {node.id} ({node.name})", e
                )
                continue

            if endpoint is None:
                continue

            node.branch_count += 1
            endpoints.append(endpoint)

        if endpoints:
            self.report.increment("endpoints_accepted", len(endpoints))
            logger.debug(
                f"Node {node.id} ({node.name}, chain {chain.id}) accepted "
                f"{len(endpoints)} of {len(candidates)} candidate(s)"
            )
        return endpoints

    def _consider(
        self,
        node: Node,
        candidate: Hashable,
        policy: GenerationPolicy,
    ) -> Optional[BranchEndpoint]:
        """Apply the acceptance rules to one candidate."""
        roll = int(self.rng.integers(0, 101))
        if roll > policy.effective_branch_chance:
            return None

        contact = np.asarray(self.scene.closest_point_on(candidate, node.position), dtype=np.float64)
        crowd = dedupe_handles(
            self.scene.query_sphere(contact, policy.min_clearance_radius, ATTACHABLE)
        )
        if len(crowd) > 1:
            logger.debug(f"Candidate {candidate} rejected: {len(crowd)} objects within clearance")
            return None

        target_node = self.network.resolve(self.scene.node_component_of(candidate))

        if target_node is None:
            if not self.registry.has_capacity(candidate, policy.max_branches_per_node):
                logger.debug(f"Candidate {candidate} rejected: attachment slots exhausted")
                return None

            endpoint_handle = self.scene.create_endpoint(contact)
            self.registry.attach(candidate, endpoint_handle)
            self.network.endpoint_handles.append(endpoint_handle)
            self.report.increment("foreign_attachments")
            return BranchEndpoint(position=contact, target=candidate, endpoint_handle=endpoint_handle)

        if target_node is node:
            return None

        if (
            target_node.has_capacity(policy.max_branches_per_node)
            and abs(node.index - target_node.index) > policy.min_index_separation
        ):
            target_node.branch_count += 1
            self.report.increment("network_connections")
            return BranchEndpoint(
                position=np.array(target_node.position),
                target=candidate,
                node=target_node,
                orientation=target_node.orientation,
            )

        return None

    def _collaborator_failure(self, message: str, error: Exception) -> None:
        full = f"{message}: {error}"
        logger.warning(full)
        self.report.add_warning(full)
        self.report.increment("collaborator_failures")


__all__ = ["BranchEndpoint", "BranchEvaluator"]
