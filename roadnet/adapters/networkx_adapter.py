"""
NetworkX adapter for road networks.

Converts a RoadNetwork to an undirected networkx graph for analysis
(connectivity, shortest routes, degree statistics). No file export is done
here.
"""

from typing import Dict, List, Tuple
import networkx as nx
import numpy as np

from ..core.network import RoadNetwork
from ..utils.geometry import distance


def to_networkx_graph(network: RoadNetwork) -> Tuple[nx.Graph, Dict[int, int]]:
    """
    Convert a RoadNetwork to a networkx Graph.

    Graph nodes are numbered contiguously in iteration order (chain by chain,
    path order). Consecutive nodes of a chain are joined by ``"road"`` edges
    weighted by their length. A child chain's entry anchor is a copy of the
    node it branches from, and any anchor copied from a network node is
    joined to that node by a zero-length ``"link"`` edge, so branches that
    end on another road connect the two roads in the graph.

    Parameters
    ----------
    network : RoadNetwork
        Network to convert

    Returns
    -------
    G : nx.Graph
        Graph with node attributes ``position``, ``node_type``, ``name``,
        ``chain_id``, ``index``, ``branch_count``, ``attributes`` and edge attributes
        ``kind``, ``chain_id``, ``length``
    node_id_map : dict
        Mapping from network node id to graph node id
    """
    G = nx.Graph()
    node_id_map: Dict[int, int] = {}

    for node in network.iter_nodes():
        nx_id = len(node_id_map)
        node_id_map[node.id] = nx_id
        G.add_node(
            nx_id,
            position=np.array(node.position),
            node_type=node.node_type,
            name=node.name,
            chain_id=node.chain_id,
            index=node.index,
            branch_count=node.branch_count,
            attributes=dict(node.attributes),
        )

    for chain in network.chains:
        for a, b in zip(chain.nodes[:-1], chain.nodes[1:]):
            G.add_edge(
                node_id_map[a.id],
                node_id_map[b.id],
                kind="road",
                chain_id=chain.id,
                length=distance(a.position, b.position),
            )

    for node in network.iter_nodes():
        if node.source_node_id is None or node.source_node_id not in node_id_map:
            continue
        u, v = node_id_map[node.id], node_id_map[node.source_node_id]
        if u == v or G.has_edge(u, v):
            continue
        G.add_edge(u, v, kind="link", chain_id=node.chain_id, length=0.0)

    return G, node_id_map


def polylines(network: RoadNetwork) -> List[np.ndarray]:
    """Ordered node positions of every chain (one (n, 3) array per chain)."""
    return [chain.positions() for chain in network.chains]


def network_summary(network: RoadNetwork) -> Dict[str, float]:
    """
    Summary statistics of a road network.

    Returns
    -------
    dict
        ``chain_count``, ``node_count``, ``max_depth``, ``total_length``
        (sum of road edges) and ``num_components`` (connected components of
        the graph view)
    """
    G, _ = to_networkx_graph(network)
    total_length = sum(
        data["length"] for _, _, data in G.edges(data=True) if data["kind"] == "road"
    )
    return {
        "chain_count": network.chain_count,
        "node_count": network.node_count,
        "max_depth": network.max_depth_reached,
        "total_length": float(total_length),
        "num_components": nx.number_connected_components(G) if G.number_of_nodes() else 0,
    }


__all__ = ["to_networkx_graph", "polylines", "network_summary"]
