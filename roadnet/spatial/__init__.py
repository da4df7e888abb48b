"""Spatial queries: the scene collaborator interface and an in-memory scene."""

from .base import ATTACHABLE, DEFAULT, CollaboratorError, SceneQueryService, dedupe_handles
from .grid_index import ObjectGridIndex
from .scene import SceneObject, SphereObject, PointMarker, BoxObject, MeshObject, InMemoryScene

__all__ = [
    "ATTACHABLE",
    "DEFAULT",
    "CollaboratorError",
    "SceneQueryService",
    "dedupe_handles",
    "ObjectGridIndex",
    "SceneObject",
    "SphereObject",
    "PointMarker",
    "BoxObject",
    "MeshObject",
    "InMemoryScene",
]
