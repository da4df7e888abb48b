"""Adapters for converting road networks to other representations."""

from .networkx_adapter import to_networkx_graph, polylines, network_summary

__all__ = [
    "to_networkx_graph",
    "polylines",
    "network_summary",
]
