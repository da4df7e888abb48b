"""
Recursive side-branch generation.

Walks every node of a chain (except its entry anchor) in path order, asks
the branch evaluator for endpoints, and turns each non-empty result into a
child chain that is itself expanded before the walk continues
(depth-first). Recursion stops at the policy's max_depth.
"""

from typing import Optional
import logging
import numpy as np

from ..core.attachments import AttachmentRegistry
from ..core.network import Chain, RoadNetwork
from ..core.report import GenerationReport
from ..spatial.base import SceneQueryService
from .branching import BranchEvaluator
from .builder import build

logger = logging.getLogger(__name__)


def _expand_chain(
    chain: Chain,
    network: RoadNetwork,
    evaluator: BranchEvaluator,
    report: GenerationReport,
) -> None:
    """Branch pass over one chain, recursing into every child chain it creates."""
    network.expanded_chain_ids.add(chain.id)
    policy = chain.policy
    if not policy.can_branch:
        return

    for i in range(1, len(chain.nodes)):
        node = chain.nodes[i]
        predecessor = chain.nodes[i - 1]

        endpoints = evaluator.evaluate(node, predecessor, chain)
        if not endpoints:
            continue

        child = build(
            [node] + endpoints,
            policy.for_child(),
            network=network,
            parent=node,
            rng=evaluator.rng,
            scene=evaluator.scene,
            report=report,
        )
        logger.debug(
            f"Branch chain {child.id} from node {node.id} ({node.name}) of chain {chain.id}: "
            f"depth={child.depth}, nodes={len(child)}, endpoints={len(endpoints)}"
        )

        _expand_chain(child, network, evaluator, report)


def generate_branches(
    network: RoadNetwork,
    scene: SceneQueryService,
    registry: Optional[AttachmentRegistry] = None,
    rng: Optional[np.random.Generator] = None,
    chain: Optional[Chain] = None,
    report: Optional[GenerationReport] = None,
) -> GenerationReport:
    """
    Run the full recursive branch pass in place.

    Parameters
    ----------
    network : RoadNetwork
        Network holding the chain to expand
    scene : SceneQueryService
        Scene collaborator used for candidate search and endpoint creation
    registry : AttachmentRegistry, optional
        Attachment slots of foreign objects; shared across calls to keep
        slot limits across passes
    rng : np.random.Generator, optional
        Random generator for branch rolls and child-chain jitter
    chain : Chain, optional
        Chain to expand. Default: the network's root chain.
    report : GenerationReport, optional
        Report to accumulate into

    Returns
    -------
    GenerationReport
        Pass metrics and collaborator warnings

    Raises
    ------
    ValueError
        If the network has no chain, or the chain was already branched
    """
    if chain is None:
        chain = network.root
    if chain is None:
        raise ValueError("Network has no chains; build the root chain first")
    if chain.id in network.expanded_chain_ids:
        raise ValueError(f"Chain {chain.id} has already been branched; clear the network first")

    if report is None:
        report = GenerationReport(operation="generate_branches")
    report.effective_policy = chain.policy.to_dict()

    chains_before = network.chain_count
    evaluator = BranchEvaluator(network, scene, registry=registry, rng=rng, report=report)
    _expand_chain(chain, network, evaluator, report)

    report.metadata["branch_chains"] = network.chain_count - chains_before
    report.metadata["chain_count"] = network.chain_count
    report.metadata["node_count"] = network.node_count
    report.metadata["max_depth_reached"] = network.max_depth_reached
    report.metadata.setdefault("branch_evaluations", 0)

    logger.info(
        f"Branch pass on chain {chain.id}: {report.metadata['branch_chains']} branch chain(s), "
        f"{report.metadata['branch_evaluations']} evaluation(s), "
        f"max depth {report.metadata['max_depth_reached']}"
    )
    return report


__all__ = ["generate_branches"]
