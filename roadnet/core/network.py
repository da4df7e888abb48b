"""
Core network data structures.

A RoadNetwork is an arena of chains. Each chain is an ordered sequence of
nodes from one anchor to another; child chains point at their parent chain
and parent node by index rather than by live reference.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Iterator, Any, Set
import uuid
import numpy as np
from scipy.spatial.transform import Rotation

from .types import NodeRef
from ..policies import GenerationPolicy
from ..utils.geometry import heading_of, look_at, orientation_or_identity


@dataclass
class Node:
    """
    Node in a road network.

    Represents a waypoint anchor or an interpolated corner of a chain.
    ``index`` and ``chain_id`` are assigned when the node is appended to a
    chain and never change afterwards.
    """

    id: int
    position: np.ndarray
    orientation: Rotation
    node_type: str  # "anchor", "corner"
    name: str = ""
    index: int = -1
    chain_id: int = -1
    branch_count: int = 0
    handle: Optional[int] = None  # scene marker
    source_node_id: Optional[int] = None  # network node this anchor was copied from
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def heading(self) -> np.ndarray:
        """World-space heading (local +Z) of the node."""
        return heading_of(self.orientation)

    def look_at(self, target: np.ndarray) -> None:
        """Re-orient the node so its heading points at ``target``."""
        self.orientation = look_at(self.position, target)

    def has_capacity(self, max_branches: int) -> bool:
        """Whether the node can take another branch."""
        return self.branch_count < max_branches


@dataclass
class Chain:
    """
    Ordered sequence of nodes between two or more anchors.

    Insertion order is path order; node index is the ordering key used for
    every distance-along-path comparison.
    """

    id: int
    policy: GenerationPolicy
    nodes: List[Node] = field(default_factory=list)
    parent_chain_id: Optional[int] = None
    parent_node_id: Optional[int] = None

    @property
    def depth(self) -> int:
        return self.policy.depth

    @property
    def is_root(self) -> bool:
        return self.parent_chain_id is None

    @property
    def first(self) -> Node:
        return self.nodes[0]

    @property
    def last(self) -> Node:
        return self.nodes[-1]

    @property
    def anchors(self) -> List[Node]:
        return [n for n in self.nodes if n.node_type == "anchor"]

    @property
    def corners(self) -> List[Node]:
        return [n for n in self.nodes if n.node_type == "corner"]

    def append(self, node: Node) -> Node:
        """Append a node, assigning its index and owning chain."""
        node.index = len(self.nodes)
        node.chain_id = self.id
        self.nodes.append(node)
        return node

    def positions(self) -> np.ndarray:
        """Node positions in path order (shape (n, 3))."""
        if not self.nodes:
            return np.zeros((0, 3))
        return np.array([n.position for n in self.nodes])

    def length(self) -> float:
        """Total polyline length of the chain."""
        pts = self.positions()
        if len(pts) < 2:
            return 0.0
        return float(np.sum(np.linalg.norm(np.diff(pts, axis=0), axis=1)))

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)


class RoadNetwork:
    """
    Complete road network: the root chain and every branch chain below it.

    This is the in-memory tree produced by generation. Chain ids are arena
    indices; node ids are unique within the network.
    """

    def __init__(self, network_id: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize road network.

        Parameters
        ----------
        network_id : str, optional
            Identity used to tell this network's nodes apart from other
            networks sharing the same scene. Random if omitted.
        metadata : dict, optional
            Free-form metadata
        """
        self.network_id = network_id or uuid.uuid4().hex
        self.metadata = metadata or {}
        self.chains: List[Chain] = []
        self.nodes: Dict[int, Node] = {}
        self.endpoint_handles: List[int] = []  # foreign endpoints created for this network
        self.expanded_chain_ids: Set[int] = set()  # chains a branch pass has already walked
        self._next_node_id = 0

    def new_chain(
        self,
        policy: GenerationPolicy,
        parent: Optional[Node] = None,
    ) -> Chain:
        """
        Create an empty chain in the arena.

        Parameters
        ----------
        policy : GenerationPolicy
            Policy of the new chain (its depth is the chain depth)
        parent : Node, optional
            Node the chain branches from; None for the root chain
        """
        if parent is None and self.chains:
            raise ValueError("Network already has a root chain")
        if parent is not None:
            parent_chain = self.get_chain(parent.chain_id)
            if parent_chain is None:
                raise ValueError(f"Parent node {parent.id} is not part of this network")
            if policy.depth != parent_chain.depth + 1:
                raise ValueError(
                    f"Child chain depth {policy.depth} must be parent depth "
                    f"{parent_chain.depth} + 1"
                )

        chain = Chain(
            id=len(self.chains),
            policy=policy,
            parent_chain_id=parent.chain_id if parent is not None else None,
            parent_node_id=parent.id if parent is not None else None,
        )
        self.chains.append(chain)
        return chain

    def create_node(
        self,
        position: np.ndarray,
        orientation: Optional[Rotation] = None,
        node_type: str = "corner",
        name: str = "",
        source_node_id: Optional[int] = None,
    ) -> Node:
        """Create and register a node that is not yet part of a chain."""
        node = Node(
            id=self._next_node_id,
            position=np.array(position, dtype=np.float64),
            orientation=orientation_or_identity(orientation),
            node_type=node_type,
            name=name,
            source_node_id=source_node_id,
        )
        self._next_node_id += 1
        self.nodes[node.id] = node
        return node

    def get_node(self, node_id: int) -> Optional[Node]:
        """Get node by ID."""
        return self.nodes.get(node_id)

    def get_chain(self, chain_id: int) -> Optional[Chain]:
        """Get chain by ID."""
        if 0 <= chain_id < len(self.chains):
            return self.chains[chain_id]
        return None

    def ref(self, node: Node) -> NodeRef:
        """Scene-facing reference to a node of this network."""
        return NodeRef(self.network_id, node.id)

    def resolve(self, ref: Optional[NodeRef]) -> Optional[Node]:
        """Resolve a NodeRef to a node of this network, or None if it belongs elsewhere."""
        if ref is None or ref.network_id != self.network_id:
            return None
        return self.nodes.get(ref.node_id)

    @property
    def root(self) -> Optional[Chain]:
        return self.chains[0] if self.chains else None

    def parent_of(self, chain: Chain) -> Optional[Chain]:
        if chain.parent_chain_id is None:
            return None
        return self.chains[chain.parent_chain_id]

    def children_of(self, chain: Chain) -> List[Chain]:
        return [c for c in self.chains if c.parent_chain_id == chain.id]

    def iter_nodes(self) -> Iterator[Node]:
        """Iterate nodes chain by chain in path order."""
        for chain in self.chains:
            yield from chain.nodes

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def chain_count(self) -> int:
        return len(self.chains)

    @property
    def max_depth_reached(self) -> int:
        if not self.chains:
            return 0
        return max(c.depth for c in self.chains)

    def clear(self) -> None:
        """Remove every chain and node."""
        self.chains.clear()
        self.nodes.clear()
        self.endpoint_handles.clear()
        self.expanded_chain_ids.clear()
        self._next_node_id = 0


__all__ = ["Node", "Chain", "RoadNetwork"]
