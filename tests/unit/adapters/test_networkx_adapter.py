"""
Unit tests for the networkx adapter.
"""

import pytest
import numpy as np
import networkx as nx

from roadnet.adapters import network_summary, polylines, to_networkx_graph
from roadnet.core.network import RoadNetwork
from roadnet.ops.builder import build
from roadnet.policies import GenerationPolicy


@pytest.fixture
def policy():
    return GenerationPolicy(corner_spacing=10.0, max_corner_offset=0.0, min_clearance_radius=5.0)


class TestToNetworkxGraph:
    """Tests for graph conversion."""

    def test_single_chain(self, policy):
        network = RoadNetwork()
        build([(0, 0, 0), (100, 0, 0)], policy, network=network)

        G, node_id_map = to_networkx_graph(network)

        assert isinstance(G, nx.Graph)
        assert G.number_of_nodes() == 11
        assert G.number_of_edges() == 10
        assert sorted(node_id_map.values()) == list(range(11))
        assert all(data["kind"] == "road" for _, _, data in G.edges(data=True))

        first = node_id_map[network.root.first.id]
        assert G.nodes[first]["node_type"] == "anchor"
        assert G.nodes[first]["name"] == "MainPoint0"

    def test_child_chain_linked_to_origin(self, policy):
        network = RoadNetwork()
        root = build([(0, 0, 0), (100, 0, 0)], policy, network=network)
        origin = root.nodes[5]
        child = build([origin, (50, 0, 40)], policy.for_child(), network=network, parent=origin)

        G, node_id_map = to_networkx_graph(network)

        u, v = node_id_map[child.first.id], node_id_map[origin.id]
        assert G.has_edge(u, v)
        assert G.edges[u, v]["kind"] == "link"
        assert G.edges[u, v]["length"] == 0.0
        assert nx.number_connected_components(G) == 1


class TestPolylinesAndSummary:
    """Tests for polylines and network_summary."""

    def test_polylines(self, policy):
        network = RoadNetwork()
        build([(0, 0, 0), (30, 0, 0)], policy, network=network)

        lines = polylines(network)
        assert len(lines) == 1
        assert np.allclose(lines[0][:, 0], [0.0, 10.0, 20.0, 30.0])

    def test_summary(self, policy):
        network = RoadNetwork()
        build([(0, 0, 0), (100, 0, 0)], policy, network=network)

        summary = network_summary(network)
        assert summary["chain_count"] == 1
        assert summary["node_count"] == 11
        assert summary["max_depth"] == 0
        assert summary["total_length"] == pytest.approx(100.0)
        assert summary["num_components"] == 1

    def test_empty_summary(self):
        summary = network_summary(RoadNetwork())
        assert summary["num_components"] == 0
        assert summary["total_length"] == 0.0
