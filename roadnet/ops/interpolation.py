"""
Corner placement between two anchors.

Corners are placed incrementally: each step moves ``spacing`` from the last
placed corner toward the end anchor, so the step fraction is recomputed
from the shrinking remaining distance. Each corner is then pushed sideways
by a random offset in the plane perpendicular to its heading.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional
import numpy as np
from scipy.spatial.transform import Rotation

from ..policies import ConfigurationError
from ..utils.geometry import as_vector, distance, point_between, look_at, lateral_offset

# A corner landing on the end anchor (within this distance) is not placed
_END_TOLERANCE = 1e-6


@dataclass
class CornerPlacement:
    """Position and orientation of an interpolated corner."""

    position: np.ndarray
    orientation: Rotation


def check_spacing(spacing: float, jitter: float) -> None:
    """
    Validate interpolation parameters.

    ``jitter <= spacing`` guarantees every step makes progress toward the
    end anchor, so interpolation always terminates.

    Raises
    ------
    ConfigurationError
        If spacing is not positive or jitter is outside [0, spacing]
    """
    if not spacing > 0:
        raise ConfigurationError(f"spacing must be > 0, got {spacing}")
    if not 0 <= jitter <= spacing:
        raise ConfigurationError(f"jitter must be in [0, spacing={spacing}], got {jitter}")


def interpolate_corners(
    tail: Any,
    end: np.ndarray,
    spacing: float,
    jitter: float,
    rng: np.random.Generator,
    make_corner: Optional[Callable[[np.ndarray, Rotation], Any]] = None,
) -> Iterator[Any]:
    """
    Lazily place corners from ``tail`` toward ``end``.

    For every corner: step ``spacing`` toward ``end``, face ``end``, apply a
    lateral offset of at most ``jitter`` on each perpendicular axis, and
    re-orient the previous point (``tail`` for the first corner) to face the
    new corner. Placement continues while the remaining distance exceeds
    ``spacing + jitter``.

    Parameters
    ----------
    tail : object or array-like
        The last placed point. Anything with mutable ``position`` and
        ``orientation`` attributes (a Node, a CornerPlacement); a bare
        position is wrapped in a CornerPlacement.
    end : np.ndarray
        End anchor position
    spacing : float
        Target distance between corners (> 0)
    jitter : float
        Maximum lateral offset per axis (0 <= jitter <= spacing)
    rng : np.random.Generator
        Random generator for the lateral offsets
    make_corner : callable, optional
        Factory ``(position, orientation) -> corner``. The yielded objects
        are the ones returned by the factory and are re-oriented in place
        when superseded. Default: CornerPlacement.

    Yields
    ------
    corner
        One object per placed corner, in path order

    Raises
    ------
    ConfigurationError
        If spacing/jitter are invalid (raised on first iteration)
    """
    check_spacing(spacing, jitter)
    end = as_vector(end)
    if make_corner is None:
        make_corner = CornerPlacement
    if not hasattr(tail, "position"):
        start = as_vector(tail)
        tail = CornerPlacement(position=start, orientation=look_at(start, end))

    threshold = spacing + jitter
    remaining = distance(tail.position, end)

    while remaining > threshold + _END_TOLERANCE:
        position = point_between(tail.position, end, spacing / remaining)
        orientation = look_at(position, end)
        position = position + lateral_offset(orientation, jitter, rng)

        corner = make_corner(position, orientation)
        tail.orientation = look_at(tail.position, corner.position)

        yield corner

        tail = corner
        remaining = distance(tail.position, end)


def corner_positions(
    start: np.ndarray,
    end: np.ndarray,
    spacing: float,
    jitter: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Positions of the corners between two points (shape (n, 3)).

    Convenience wrapper that drains interpolate_corners.
    """
    if rng is None:
        rng = np.random.default_rng()
    corners = [c.position for c in interpolate_corners(start, end, spacing, jitter, rng)]
    if not corners:
        return np.zeros((0, 3))
    return np.array(corners)


__all__ = ["CornerPlacement", "check_spacing", "interpolate_corners", "corner_positions"]
