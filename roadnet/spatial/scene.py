"""
In-memory scene implementing SceneQueryService.

Holds simple solid primitives (spheres, axis-aligned boxes, triangle meshes)
and point markers, indexed in a uniform grid. An object overlaps a query
sphere when its closest point to the sphere center lies within the radius;
points inside a solid have distance zero.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Iterator
import logging
import numpy as np
import trimesh

from .base import SceneQueryService, CollaboratorError, ATTACHABLE, DEFAULT
from .grid_index import ObjectGridIndex
from ..core.types import NodeRef
from ..utils.geometry import (
    as_vector,
    closest_point_on_box,
    closest_point_on_sphere,
    closest_point_on_triangles,
)

logger = logging.getLogger(__name__)


class SceneObject(ABC):
    """Base class for objects that can live in an InMemoryScene."""

    category: str = DEFAULT
    name: str = ""

    @abstractmethod
    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Axis-aligned bounding box as (lower, upper)."""
        pass

    @abstractmethod
    def closest_point(self, point: np.ndarray) -> np.ndarray:
        """Closest point of the object to ``point``."""
        pass

    def distance_to(self, point: np.ndarray) -> float:
        return float(np.linalg.norm(self.closest_point(point) - np.asarray(point, dtype=np.float64)))


@dataclass
class SphereObject(SceneObject):
    """Solid sphere."""

    center: np.ndarray
    radius: float = 0.5
    category: str = ATTACHABLE
    name: str = ""

    def __post_init__(self):
        self.center = as_vector(self.center)
        if self.radius < 0:
            raise ValueError(f"Sphere radius must be >= 0, got {self.radius}")

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.center - self.radius, self.center + self.radius

    def closest_point(self, point: np.ndarray) -> np.ndarray:
        return closest_point_on_sphere(point, self.center, self.radius)


@dataclass
class PointMarker(SphereObject):
    """Small sphere standing in for a generated point (node marker or endpoint)."""

    radius: float = 0.5
    category: str = ATTACHABLE


@dataclass
class BoxObject(SceneObject):
    """Solid axis-aligned box given by its center and full extents."""

    center: np.ndarray
    extents: np.ndarray = field(default_factory=lambda: np.ones(3))
    category: str = ATTACHABLE
    name: str = ""

    def __post_init__(self):
        self.center = as_vector(self.center)
        self.extents = as_vector(self.extents)
        if np.any(self.extents < 0):
            raise ValueError(f"Box extents must be >= 0, got {self.extents}")

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        half = self.extents / 2.0
        return self.center - half, self.center + half

    def closest_point(self, point: np.ndarray) -> np.ndarray:
        lower, upper = self.bounds()
        return closest_point_on_box(point, lower, upper)


@dataclass
class MeshObject(SceneObject):
    """
    Triangle mesh object.

    Closest points are taken on the mesh surface; interior points are not
    detected, so a query center inside a closed mesh still projects onto
    the surface.
    """

    mesh: trimesh.Trimesh
    category: str = ATTACHABLE
    name: str = ""

    def __post_init__(self):
        if len(self.mesh.faces) == 0:
            raise ValueError("MeshObject requires a mesh with at least one face")

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        lower, upper = self.mesh.bounds
        return np.asarray(lower, dtype=np.float64), np.asarray(upper, dtype=np.float64)

    def closest_point(self, point: np.ndarray) -> np.ndarray:
        return closest_point_on_triangles(point, self.mesh.triangles)


class InMemoryScene(SceneQueryService):
    """
    Scene collaborator backed by an in-memory object table and grid index.

    Handles are integers assigned in insertion order, and query results are
    returned in ascending handle order, so results are stable for a given
    scene state.
    """

    def __init__(self, cell_size: float = 10.0, marker_radius: float = 0.5):
        """
        Initialize scene.

        Parameters
        ----------
        cell_size : float
            Grid cell size for the spatial index
        marker_radius : float
            Radius of the point markers created for nodes and endpoints
        """
        self.index = ObjectGridIndex(cell_size=cell_size)
        self.marker_radius = marker_radius
        self._objects: Dict[int, SceneObject] = {}
        self._node_refs: Dict[int, NodeRef] = {}
        self._next_handle = 0

    # -- object management -------------------------------------------------

    def add(self, obj: SceneObject) -> int:
        """Add an object and return its handle."""
        handle = self._next_handle
        self._next_handle += 1
        self._objects[handle] = obj
        lower, upper = obj.bounds()
        self.index.insert(handle, lower, upper)
        return handle

    def get(self, handle: int) -> SceneObject:
        try:
            return self._objects[handle]
        except KeyError:
            raise CollaboratorError(f"Unknown scene object handle: {handle}") from None

    def remove(self, handle: int) -> None:
        if handle not in self._objects:
            raise CollaboratorError(f"Unknown scene object handle: {handle}")
        del self._objects[handle]
        self._node_refs.pop(handle, None)
        self.index.remove(handle)

    def exists(self, handle: int) -> bool:
        return handle in self._objects

    def handles(self) -> List[int]:
        return sorted(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[Tuple[int, SceneObject]]:
        return iter(sorted(self._objects.items()))

    # -- SceneQueryService -------------------------------------------------

    def _overlapping(self, center: np.ndarray, radius: float, category: str) -> List[int]:
        center = as_vector(center)
        hits = []
        for handle in self.index.query_candidates(center, radius):
            obj = self._objects[handle]
            if obj.category != category:
                continue
            if obj.distance_to(center) <= radius:
                hits.append(handle)
        return hits

    def query_sphere(self, center: np.ndarray, radius: float, category: str) -> List[int]:
        return self._overlapping(center, radius, category)

    def query_annulus(
        self,
        center: np.ndarray,
        inner_radius: float,
        outer_radius: float,
        category: str,
    ) -> List[int]:
        if inner_radius > outer_radius:
            return []
        inner = set(self._overlapping(center, inner_radius, category))
        return [h for h in self._overlapping(center, outer_radius, category) if h not in inner]

    def closest_point_on(self, handle: int, reference: np.ndarray) -> np.ndarray:
        return self.get(handle).closest_point(as_vector(reference))

    def create_endpoint(self, position: np.ndarray) -> int:
        # Endpoints are never branch candidates themselves
        return self.add(PointMarker(center=position, radius=self.marker_radius, category=DEFAULT, name="EndPoint"))

    def create_marker(self, position: np.ndarray, category: str = ATTACHABLE) -> int:
        return self.add(PointMarker(center=position, radius=self.marker_radius, category=category))

    def bind_node(self, handle: int, ref: NodeRef) -> None:
        if handle not in self._objects:
            raise CollaboratorError(f"Cannot bind node to unknown handle: {handle}")
        self._node_refs[handle] = ref

    def node_component_of(self, handle: int) -> Optional[NodeRef]:
        return self._node_refs.get(handle)


__all__ = [
    "SceneObject",
    "SphereObject",
    "PointMarker",
    "BoxObject",
    "MeshObject",
    "InMemoryScene",
]
