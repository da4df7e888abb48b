"""
Tests for RoadNet

This package contains tests for:
- Geometry utilities and generation policies
- Network data structures and the attachment registry
- The in-memory scene and its grid index
- Corner interpolation, chain building, branch evaluation and recursion
- The RoadGenerator facade and the networkx adapter
"""
