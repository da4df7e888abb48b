"""
Canonical geometry utilities for road network generation.

This module provides the single source of truth for the vector math used
across the package: distances, interpolation between points, look-at
orientation frames and closest-point queries on scene primitives.

FRAME CONVENTIONS
-----------------
World space is Y-up. An orientation is a ``scipy.spatial.transform.Rotation``
mapping the local frame to world space, with local +Z as the heading
(forward), local +Y as up and local +X as right.
"""

import numpy as np
import trimesh
from scipy.spatial.transform import Rotation
from typing import Optional

WORLD_UP = np.array([0.0, 1.0, 0.0])
LOCAL_FORWARD = np.array([0.0, 0.0, 1.0])

EPSILON = 1e-10


def as_vector(value) -> np.ndarray:
    """Coerce a 3-sequence (tuple, list, array) to a float64 array of shape (3,)."""
    vec = np.asarray(value, dtype=np.float64).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"Expected a 3D vector, got shape {vec.shape}")
    return vec


def distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(np.asarray(b, dtype=np.float64) - np.asarray(a, dtype=np.float64)))


def point_between(start: np.ndarray, end: np.ndarray, fraction: float) -> np.ndarray:
    """
    Return the point a given fraction of the way from start to end.

    Parameters
    ----------
    start, end : np.ndarray
        Segment endpoints (shape (3,))
    fraction : float
        0.0 returns start, 1.0 returns end. Values outside [0, 1]
        extrapolate along the same line.

    Returns
    -------
    np.ndarray
        Interpolated point
    """
    start = np.asarray(start, dtype=np.float64)
    end = np.asarray(end, dtype=np.float64)
    return start + fraction * (end - start)


def look_rotation(forward: np.ndarray, up: np.ndarray = WORLD_UP) -> Rotation:
    """
    Build an orientation whose local +Z points along ``forward``.

    The right axis is ``up x forward`` so the frame stays right-handed.
    When ``forward`` is parallel to ``up`` a fallback up axis is used.
    A zero-length forward returns the identity rotation.

    Examples
    --------
    >>> import numpy as np
    >>> rot = look_rotation(np.array([1.0, 0.0, 0.0]))
    >>> np.allclose(rot.apply([0.0, 0.0, 1.0]), [1.0, 0.0, 0.0])
    True
    """
    forward = np.asarray(forward, dtype=np.float64)
    norm = np.linalg.norm(forward)
    if norm < EPSILON:
        return Rotation.identity()
    forward = forward / norm

    up = np.asarray(up, dtype=np.float64)
    right = np.cross(up, forward)
    if np.linalg.norm(right) < 1e-8:
        # Looking straight along the up axis
        fallback = np.array([0.0, 0.0, 1.0]) if abs(forward[2]) < 0.9 else np.array([1.0, 0.0, 0.0])
        right = np.cross(fallback, forward)
    right = right / np.linalg.norm(right)
    true_up = np.cross(forward, right)

    return Rotation.from_matrix(np.column_stack([right, true_up, forward]))


def look_at(position: np.ndarray, target: np.ndarray, up: np.ndarray = WORLD_UP) -> Rotation:
    """Orientation at ``position`` whose heading points at ``target``."""
    return look_rotation(np.asarray(target, dtype=np.float64) - np.asarray(position, dtype=np.float64), up)


def heading_of(orientation: Rotation) -> np.ndarray:
    """World-space heading (local +Z) of an orientation."""
    return orientation.apply(LOCAL_FORWARD)


def lateral_offset(
    orientation: Rotation,
    max_offset: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Random displacement in the plane perpendicular to the heading.

    Draws independent uniform values in ``[-max_offset, max_offset]`` along
    the local right (X) and up (Y) axes and maps them to world space.

    Parameters
    ----------
    orientation : Rotation
        Frame whose heading defines the perpendicular plane
    max_offset : float
        Bound on each lateral component
    rng : np.random.Generator
        Random generator

    Returns
    -------
    np.ndarray
        World-space offset vector (shape (3,))
    """
    local = np.zeros(3)
    local[:2] = rng.uniform(-max_offset, max_offset, size=2)
    return orientation.apply(local)


def closest_point_on_sphere(point: np.ndarray, center: np.ndarray, radius: float) -> np.ndarray:
    """
    Closest point of a solid sphere to ``point``.

    Points inside the sphere are returned unchanged.
    """
    point = np.asarray(point, dtype=np.float64)
    center = np.asarray(center, dtype=np.float64)
    offset = point - center
    dist = np.linalg.norm(offset)
    if dist <= radius:
        return point.copy()
    return center + offset * (radius / dist)


def closest_point_on_box(point: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> np.ndarray:
    """
    Closest point of a solid axis-aligned box to ``point``.

    Points inside the box are returned unchanged.
    """
    return np.clip(np.asarray(point, dtype=np.float64), lower, upper)


def closest_point_on_triangles(point: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """
    Closest point on a triangle soup to ``point``.

    Parameters
    ----------
    point : np.ndarray
        Query point (shape (3,))
    triangles : np.ndarray
        Triangle vertices (shape (n, 3, 3))

    Returns
    -------
    np.ndarray
        Closest point on the surface (shape (3,))
    """
    triangles = np.asarray(triangles, dtype=np.float64)
    if len(triangles) == 0:
        raise ValueError("Cannot compute closest point on an empty triangle set")

    points = np.tile(np.asarray(point, dtype=np.float64), (len(triangles), 1))
    candidates = trimesh.triangles.closest_point(triangles, points)
    dists = np.linalg.norm(candidates - points, axis=1)
    return candidates[int(np.argmin(dists))]


def orientation_or_identity(orientation: Optional[Rotation]) -> Rotation:
    """Return the given orientation, or identity when None."""
    if orientation is None:
        return Rotation.identity()
    return orientation


__all__ = [
    "WORLD_UP",
    "LOCAL_FORWARD",
    "as_vector",
    "distance",
    "point_between",
    "look_rotation",
    "look_at",
    "heading_of",
    "lateral_offset",
    "closest_point_on_sphere",
    "closest_point_on_box",
    "closest_point_on_triangles",
    "orientation_or_identity",
]
