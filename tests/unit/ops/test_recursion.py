"""
Unit tests for the recursive side-branch pass.
"""

import pytest
import numpy as np

from roadnet.core.attachments import AttachmentRegistry
from roadnet.core.network import RoadNetwork
from roadnet.ops.builder import build
from roadnet.ops.recursion import generate_branches
from roadnet.policies import GenerationPolicy
from roadnet.spatial import InMemoryScene, SphereObject


def _policy(**overrides):
    params = dict(
        corner_spacing=10.0,
        max_corner_offset=0.0,
        min_clearance_radius=5.0,
        branch_chance=100,
    )
    params.update(overrides)
    return GenerationPolicy(**params)


def _root(policy, scene=None):
    network = RoadNetwork()
    build([(0, 0, 0), (100, 0, 0)], policy, network=network, scene=scene)
    return network


class TestDepthLimit:
    """Tests for recursion limits."""

    def test_max_depth_zero_evaluates_nothing(self):
        scene = InMemoryScene()
        scene.add(SphereObject(center=(50, 0, 20), radius=1.0))
        network = _root(_policy(max_depth=0))

        report = generate_branches(network, scene, rng=np.random.default_rng(0))

        assert report.metadata["branch_evaluations"] == 0
        assert report.metadata["branch_chains"] == 0
        assert network.chain_count == 1

    def test_every_node_but_the_entry_is_evaluated(self):
        network = _root(_policy(max_depth=1))
        report = generate_branches(network, InMemoryScene(), rng=np.random.default_rng(0))

        assert report.metadata["branch_evaluations"] == len(network.root) - 1
        assert report.metadata["chain_count"] == 1

    def test_chain_is_branched_once(self):
        policy = _policy(max_depth=1, max_branches_per_node=1, min_index_separation=10)
        scene = InMemoryScene()
        scene.add(SphereObject(center=(50, 0, 20), radius=1.0))
        network = _root(policy)

        generate_branches(network, scene, rng=np.random.default_rng(0))
        assert network.expanded_chain_ids == {0, 1}

        with pytest.raises(ValueError):
            generate_branches(network, scene, rng=np.random.default_rng(0))
        with pytest.raises(ValueError):
            generate_branches(network, scene, chain=network.chains[1])
        assert network.chain_count == 2

    def test_no_root_chain(self):
        with pytest.raises(ValueError):
            generate_branches(RoadNetwork(), InMemoryScene())


class TestSingleBranch:
    """One foreign object next to a straight road."""

    def test_one_child_chain(self):
        """
        Nodes at x = 30..70 can reach the object; the first of them takes
        the object's only attachment slot and later nodes are refused.
        """
        policy = _policy(max_depth=1, max_branches_per_node=1, min_index_separation=10)
        scene = InMemoryScene()
        house = scene.add(SphereObject(center=(50, 0, 20), radius=1.0))
        registry = AttachmentRegistry()
        network = _root(policy)

        report = generate_branches(network, scene, registry=registry, rng=np.random.default_rng(0))

        assert network.chain_count == 2
        root, child = network.chains
        origin = root.nodes[3]

        assert child.depth == 1
        assert child.parent_chain_id == root.id
        assert child.parent_node_id == origin.id
        assert origin.branch_count == 1
        assert child.first.source_node_id == origin.id
        assert np.allclose(child.first.position, origin.position)
        assert child.last.position[2] > 18.0
        assert registry.count(house) == 1
        assert network.endpoint_handles == registry.get(house).endpoints

        assert report.metadata["branch_evaluations"] == 10
        assert report.metadata["foreign_attachments"] == 1
        assert report.metadata["max_depth_reached"] == 1
        assert report.effective_policy["max_depth"] == 1

    def test_child_nodes_get_markers(self):
        policy = _policy(max_depth=1, max_branches_per_node=1, min_index_separation=10)
        scene = InMemoryScene()
        scene.add(SphereObject(center=(50, 0, 20), radius=1.0))
        network = _root(policy)

        generate_branches(network, scene, rng=np.random.default_rng(0))

        child = network.chains[1]
        for node in child:
            assert node.handle is not None
            assert network.resolve(scene.node_component_of(node.handle)) is node


class TestTreeInvariants:
    """Depth, capacity and parent links over a busy scene."""

    @pytest.fixture
    def busy_network(self):
        policy = GenerationPolicy(branch_chance=100, max_depth=3, max_branches_per_node=2)
        scene = InMemoryScene()
        rng = np.random.default_rng(7)
        for center in rng.uniform(-60, 160, size=(40, 3)) * np.array([1.0, 0.2, 1.0]):
            scene.add(SphereObject(center=center, radius=1.5))
        network = RoadNetwork()
        build([(0, 0, 0), (100, 0, 0)], policy, network=network, scene=scene, rng=rng)
        report = generate_branches(network, scene, rng=rng)
        return network, report, policy

    def test_depths(self, busy_network):
        network, _, policy = busy_network
        for chain in network.chains:
            assert chain.depth <= policy.max_depth
            parent = network.parent_of(chain)
            if parent is None:
                assert chain is network.root
            else:
                assert chain.depth == parent.depth + 1

    def test_branch_capacity(self, busy_network):
        network, _, policy = busy_network
        for node in network.iter_nodes():
            assert node.branch_count <= policy.max_branches_per_node

    def test_children_start_at_parent_node(self, busy_network):
        network, _, _ = busy_network
        for chain in network.chains[1:]:
            parent_node = network.get_node(chain.parent_node_id)
            assert parent_node.chain_id == chain.parent_chain_id
            assert np.allclose(chain.first.position, parent_node.position)
            assert chain.first.source_node_id == parent_node.id

    def test_report_matches_network(self, busy_network):
        network, report, _ = busy_network
        assert report.metadata["chain_count"] == network.chain_count
        assert report.metadata["node_count"] == network.node_count
        assert report.metadata["branch_chains"] == network.chain_count - 1
