"""
Uniform grid-based spatial index for fast neighbor queries.
"""

from collections import defaultdict
from typing import Dict, List, Set, Tuple
import numpy as np


class ObjectGridIndex:
    """
    Dynamic spatial index over axis-aligned object bounds.

    Objects are indexed by every grid cell their bounding box touches and
    can be inserted and removed incrementally while a network grows. Queries
    are broad-phase only: they return every object whose cells intersect the
    query region, and exact overlap tests are left to the caller.

    Candidate lists are sorted by object id so results are stable for a
    given index state.
    """

    def __init__(self, cell_size: float = 10.0):
        """
        Initialize dynamic spatial index.

        Parameters
        ----------
        cell_size : float
            Size of grid cells in world units. Should be on the order of the
            typical query radius for good performance.
        """
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self.cell_size = cell_size
        self.inv_cell_size = 1.0 / cell_size
        self.grid: Dict[Tuple[int, int, int], Set[int]] = defaultdict(set)
        self._object_cells: Dict[int, Set[Tuple[int, int, int]]] = {}

    def clear(self) -> None:
        """Clear all indexed objects."""
        self.grid.clear()
        self._object_cells.clear()

    def _get_cell_coords(self, point: np.ndarray) -> Tuple[int, int, int]:
        """Convert world coordinates to grid cell coordinates."""
        return (
            int(np.floor(point[0] * self.inv_cell_size)),
            int(np.floor(point[1] * self.inv_cell_size)),
            int(np.floor(point[2] * self.inv_cell_size)),
        )

    def _get_cells_for_bounds(
        self,
        lower: np.ndarray,
        upper: np.ndarray,
    ) -> Set[Tuple[int, int, int]]:
        """
        Get all grid cells that an axis-aligned box touches.

        Parameters
        ----------
        lower : np.ndarray
            Minimum corner of the box
        upper : np.ndarray
            Maximum corner of the box

        Returns
        -------
        Set[Tuple[int, int, int]]
            Set of cell coordinates
        """
        cell1 = self._get_cell_coords(lower)
        cell2 = self._get_cell_coords(upper)

        cells: Set[Tuple[int, int, int]] = set()
        for ci in range(cell1[0], cell2[0] + 1):
            for cj in range(cell1[1], cell2[1] + 1):
                for ck in range(cell1[2], cell2[2] + 1):
                    cells.add((ci, cj, ck))
        return cells

    def insert(self, object_id: int, lower: np.ndarray, upper: np.ndarray) -> None:
        """
        Insert an object into the spatial index.

        Re-inserting an existing id replaces its previous cells.

        Parameters
        ----------
        object_id : int
            Unique identifier for the object
        lower, upper : np.ndarray
            Bounding box corners (x, y, z)
        """
        if object_id in self._object_cells:
            self.remove(object_id)

        lower = np.asarray(lower, dtype=np.float64)
        upper = np.asarray(upper, dtype=np.float64)

        cells = self._get_cells_for_bounds(lower, upper)
        self._object_cells[object_id] = cells
        for cell in cells:
            self.grid[cell].add(object_id)

    def remove(self, object_id: int) -> bool:
        """
        Remove an object from the index.

        Returns
        -------
        bool
            True if the object was indexed
        """
        cells = self._object_cells.pop(object_id, None)
        if cells is None:
            return False
        for cell in cells:
            bucket = self.grid.get(cell)
            if bucket is None:
                continue
            bucket.discard(object_id)
            if not bucket:
                del self.grid[cell]
        return True

    def query_candidates(self, center: np.ndarray, radius: float) -> List[int]:
        """
        Query candidate object ids that might overlap a sphere.

        Parameters
        ----------
        center : np.ndarray
            Sphere center
        radius : float
            Sphere radius

        Returns
        -------
        List[int]
            Candidate ids in ascending order
        """
        center = np.asarray(center, dtype=np.float64)
        query_cells = self._get_cells_for_bounds(center - radius, center + radius)

        candidates: Set[int] = set()
        for cell in query_cells:
            if cell in self.grid:
                candidates.update(self.grid[cell])

        return sorted(candidates)

    def __contains__(self, object_id: int) -> bool:
        return object_id in self._object_cells

    @property
    def object_count(self) -> int:
        """Return the number of indexed objects."""
        return len(self._object_cells)


__all__ = ["ObjectGridIndex"]
