"""Utility functions for the road network library."""

from .geometry import (
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
)

__all__ = [
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
]
