"""High-level API for road network generation."""

from .generate import normalize_waypoints, RoadGenerator, generate_network

__all__ = [
    "normalize_waypoints",
    "RoadGenerator",
    "generate_network",
]
