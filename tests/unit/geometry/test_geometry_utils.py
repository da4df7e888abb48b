"""
Unit tests for the canonical geometry utilities.

These tests verify distances, interpolation, the look-at frame convention
(Y-up, heading along local +Z) and closest-point queries on primitives.
"""

import pytest
import numpy as np
from scipy.spatial.transform import Rotation

from roadnet.utils.geometry import (
    as_vector,
    distance,
    point_between,
    look_rotation,
    look_at,
    heading_of,
    lateral_offset,
    closest_point_on_sphere,
    closest_point_on_box,
    closest_point_on_triangles,
    orientation_or_identity,
)


class TestVectorHelpers:
    """Tests for as_vector, distance and point_between."""

    def test_as_vector_accepts_tuple(self):
        vec = as_vector((1, 2, 3))
        assert vec.dtype == np.float64
        assert vec.shape == (3,)

    def test_as_vector_rejects_wrong_shape(self):
        with pytest.raises(ValueError):
            as_vector((1.0, 2.0))

    def test_distance(self):
        assert distance((0, 0, 0), (3, 4, 0)) == pytest.approx(5.0)

    def test_point_between_fraction(self):
        result = point_between(np.zeros(3), np.array([8.0, 0.0, 4.0]), 0.25)
        assert np.allclose(result, [2.0, 0.0, 1.0])

    def test_point_between_endpoints(self):
        start = np.array([1.0, 2.0, 3.0])
        end = np.array([4.0, 5.0, 6.0])
        assert np.allclose(point_between(start, end, 0.0), start)
        assert np.allclose(point_between(start, end, 1.0), end)


class TestLookRotation:
    """Tests for the look-at frame convention."""

    def test_heading_points_along_forward(self):
        rot = look_rotation(np.array([1.0, 0.0, 0.0]))
        assert np.allclose(heading_of(rot), [1.0, 0.0, 0.0])

    def test_up_axis_stays_world_up_for_level_heading(self):
        rot = look_rotation(np.array([0.0, 0.0, -5.0]))
        assert np.allclose(rot.apply([0.0, 1.0, 0.0]), [0.0, 1.0, 0.0])

    def test_vertical_heading_uses_fallback_up(self):
        """Looking straight up must still give a valid frame."""
        rot = look_rotation(np.array([0.0, 3.0, 0.0]))
        assert np.allclose(heading_of(rot), [0.0, 1.0, 0.0])

    def test_zero_forward_is_identity(self):
        rot = look_rotation(np.zeros(3))
        assert np.allclose(rot.as_quat(), Rotation.identity().as_quat())

    def test_look_at_points_at_target(self):
        rot = look_at(np.array([1.0, 1.0, 1.0]), np.array([1.0, 1.0, 11.0]))
        assert np.allclose(heading_of(rot), [0.0, 0.0, 1.0])

    def test_orientation_or_identity(self):
        assert np.allclose(orientation_or_identity(None).as_quat(), Rotation.identity().as_quat())
        rot = look_rotation(np.array([1.0, 0.0, 0.0]))
        assert orientation_or_identity(rot) is rot


class TestLateralOffset:
    """Tests for jitter displacement perpendicular to the heading."""

    def test_offset_is_perpendicular_to_heading(self):
        rng = np.random.default_rng(0)
        rot = look_rotation(np.array([1.0, 2.0, 3.0]))
        heading = heading_of(rot)

        for _ in range(50):
            offset = lateral_offset(rot, 4.0, rng)
            assert abs(np.dot(offset, heading)) < 1e-9

    def test_offset_is_bounded(self):
        rng = np.random.default_rng(1)
        rot = look_rotation(np.array([0.0, 0.0, 1.0]))

        for _ in range(50):
            offset = lateral_offset(rot, 2.0, rng)
            assert np.all(np.abs(offset) <= 2.0 + 1e-9)

    def test_zero_offset(self):
        rng = np.random.default_rng(2)
        rot = look_rotation(np.array([1.0, 0.0, 0.0]))
        assert np.allclose(lateral_offset(rot, 0.0, rng), np.zeros(3))


class TestClosestPoints:
    """Tests for closest-point queries on scene primitives."""

    def test_sphere_outside_projects_to_surface(self):
        result = closest_point_on_sphere(np.array([10.0, 0.0, 0.0]), np.zeros(3), 2.0)
        assert np.allclose(result, [2.0, 0.0, 0.0])

    def test_sphere_inside_unchanged(self):
        point = np.array([0.5, 0.5, 0.0])
        assert np.allclose(closest_point_on_sphere(point, np.zeros(3), 2.0), point)

    def test_box_clamps_to_bounds(self):
        result = closest_point_on_box(
            np.array([5.0, -3.0, 0.5]), np.array([-1.0, -1.0, -1.0]), np.array([1.0, 1.0, 1.0])
        )
        assert np.allclose(result, [1.0, -1.0, 0.5])

    def test_triangle_projection(self):
        triangles = np.array([[[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]])
        result = closest_point_on_triangles(np.array([0.25, 0.25, 5.0]), triangles)
        assert np.allclose(result, [0.25, 0.25, 0.0])

    def test_triangle_picks_nearest_face(self):
        triangles = np.array([
            [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]],
            [[0.0, 0.0, 10.0], [1.0, 0.0, 10.0], [0.0, 1.0, 10.0]],
        ])
        result = closest_point_on_triangles(np.array([0.2, 0.2, 8.0]), triangles)
        assert np.allclose(result, [0.2, 0.2, 10.0])

    def test_empty_triangles_rejected(self):
        with pytest.raises(ValueError):
            closest_point_on_triangles(np.zeros(3), np.zeros((0, 3, 3)))
