"""
Unit tests for the RoadGenerator facade and waypoint maintenance.
"""

import pytest
import numpy as np

from roadnet.api import RoadGenerator, generate_network, normalize_waypoints
from roadnet.core.attachments import AttachmentRegistry
from roadnet.core.network import RoadNetwork
from roadnet.core.report import GenerationReport
from roadnet.core.types import Waypoint
from roadnet.policies import ConfigurationError, GenerationPolicy
from roadnet.spatial import InMemoryScene, SphereObject


def _scene():
    scene = InMemoryScene()
    for center in [(40, 0, 15), (70, 0, -20), (20, 0, 25), (90, 0, 10)]:
        scene.add(SphereObject(center=center, radius=1.5))
    return scene


class TestNormalizeWaypoints:
    """Tests for host-edited waypoint list maintenance."""

    def test_empty_list_padded(self):
        waypoints = normalize_waypoints([])
        assert [w.name for w in waypoints] == ["StartPoint", "EndPoint"]
        assert all(np.allclose(w.position, 0.0) for w in waypoints)

    def test_single_entry_padded(self):
        waypoints = normalize_waypoints([(1, 2, 3)])
        assert len(waypoints) == 2
        assert np.allclose(waypoints[0].position, [1.0, 2.0, 3.0])
        assert np.allclose(waypoints[1].position, 0.0)

    def test_missing_entries_dropped(self):
        waypoints = normalize_waypoints([(0, 0, 0), None, (10, 0, 0), None])
        assert [w.name for w in waypoints] == ["StartPoint", "EndPoint"]
        assert np.allclose(waypoints[1].position, [10.0, 0.0, 0.0])

    def test_all_missing_kept_as_placeholders(self):
        waypoints = normalize_waypoints([None, None, None])
        assert [w.name for w in waypoints] == ["StartPoint", "Corner1", "EndPoint"]

    def test_missing_entry_in_pair_replaced(self):
        waypoints = normalize_waypoints([(5, 0, 0), None])
        assert len(waypoints) == 2
        assert np.allclose(waypoints[1].position, 0.0)

    def test_duplicate_reference_replaced(self):
        shared = Waypoint(position=(5, 0, 0))
        waypoints = normalize_waypoints([shared, shared, (9, 0, 0)])

        assert waypoints[0] is shared
        assert waypoints[1] is not shared
        assert np.allclose(waypoints[1].position, 0.0)
        assert [w.name for w in waypoints] == ["StartPoint", "Corner1", "EndPoint"]


class TestRoadGeneratorLifecycle:
    """Tests for execute/execute_side_roads/generate/clear."""

    def test_generate_builds_root_and_branches(self):
        policy = GenerationPolicy(branch_chance=100)
        generator = RoadGenerator([(0, 0, 0), (100, 0, 0)], policy, scene=_scene(), seed=3)

        report = generator.generate()

        assert isinstance(report, GenerationReport)
        assert generator.root_chain is generator.network.root
        assert np.allclose(generator.root_chain.first.position, [0.0, 0.0, 0.0])
        assert np.allclose(generator.root_chain.last.position, [100.0, 0.0, 0.0])
        assert report.metadata["seed"] == 3
        assert report.metadata["chains_built"] == generator.network.chain_count
        assert len(generator.polylines()) == generator.network.chain_count

    def test_same_seed_same_network(self):
        policy = GenerationPolicy(branch_chance=60)
        a = RoadGenerator([(0, 0, 0), (120, 0, 30)], policy, scene=_scene(), seed=21)
        b = RoadGenerator([(0, 0, 0), (120, 0, 30)], policy, scene=_scene(), seed=21)
        a.generate()
        b.generate()

        lines_a, lines_b = a.polylines(), b.polylines()
        assert len(lines_a) == len(lines_b)
        for line_a, line_b in zip(lines_a, lines_b):
            assert np.array_equal(line_a, line_b)

    def test_regenerate_is_repeatable(self):
        scene = _scene()
        generator = RoadGenerator([(0, 0, 0), (100, 0, 0)], GenerationPolicy(branch_chance=100), scene=scene, seed=5)

        generator.generate()
        first = generator.polylines()
        objects_after_first = len(scene)
        generator.generate()

        assert len(scene) == objects_after_first
        assert len(generator.polylines()) == len(first)
        for line_a, line_b in zip(first, generator.polylines()):
            assert np.allclose(line_a, line_b)

    def test_clear_removes_generated_objects(self):
        scene = _scene()
        registry = AttachmentRegistry()
        generator = RoadGenerator(
            [(0, 0, 0), (100, 0, 0)], GenerationPolicy(branch_chance=100),
            scene=scene, registry=registry, seed=1,
        )
        generator.generate()
        assert len(scene) > 4

        generator.clear()

        assert len(scene) == 4
        assert len(registry) == 0
        assert generator.network.chain_count == 0
        assert generator.root_chain is None

    def test_execute_twice_rejected(self):
        generator = RoadGenerator([(0, 0, 0), (30, 0, 0)])
        generator.execute()
        with pytest.raises(ValueError):
            generator.execute()

    def test_side_roads_twice_rejected(self):
        """A second branch pass must not touch an already branched network."""
        rng = np.random.default_rng(1)
        scene = InMemoryScene()
        for center in rng.uniform([-20, -3, -40], [120, 3, 40], size=(30, 3)):
            scene.add(SphereObject(center=center, radius=1.5))
        registry = AttachmentRegistry()
        generator = RoadGenerator(
            [(0, 0, 0), (100, 0, 0)],
            GenerationPolicy(branch_chance=100, max_depth=1, max_branches_per_node=4),
            scene=scene, registry=registry, seed=1,
        )
        generator.execute()
        generator.execute_side_roads()

        chain_count = generator.network.chain_count
        branch_counts = [n.branch_count for n in generator.network.iter_nodes()]
        attachments = sum(entry.count for entry in registry)
        objects = len(scene)

        with pytest.raises(ValueError):
            generator.execute_side_roads()

        assert generator.network.chain_count == chain_count
        assert [n.branch_count for n in generator.network.iter_nodes()] == branch_counts
        assert sum(entry.count for entry in registry) == attachments
        assert len(scene) == objects

    def test_side_roads_allowed_after_clear(self):
        generator = RoadGenerator([(0, 0, 0), (30, 0, 0)], seed=0)
        generator.execute()
        generator.execute_side_roads()
        generator.clear()
        generator.execute()
        generator.execute_side_roads()
        assert generator.network.chain_count >= 1

    def test_side_roads_need_root(self):
        with pytest.raises(ValueError):
            RoadGenerator([(0, 0, 0), (30, 0, 0)]).execute_side_roads()

    def test_invalid_policy(self):
        generator = RoadGenerator([(0, 0, 0), (30, 0, 0)], GenerationPolicy(max_depth=40))
        with pytest.raises(ConfigurationError):
            generator.generate()

    def test_default_scene_and_policy(self):
        generator = RoadGenerator([(0, 0, 0), (30, 0, 0)], seed=0)
        generator.generate()
        assert isinstance(generator.scene, InMemoryScene)
        assert generator.policy == GenerationPolicy()
        assert generator.network.chain_count == 1


class TestGenerateNetwork:
    """Tests for the one-call entry point."""

    def test_returns_network_and_report(self):
        network, report = generate_network(
            [(0, 0, 0), (100, 0, 0)],
            policy=GenerationPolicy(branch_chance=100),
            scene=_scene(),
            seed=42,
        )
        assert isinstance(network, RoadNetwork)
        assert isinstance(report, GenerationReport)
        assert report.operation == "generate_road_network"
        assert report.success
        assert report.metadata["node_count"] == network.node_count
