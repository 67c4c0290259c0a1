"""
Containment Predicates Module
=============================

Stateless point-in-polygon logic - applies geometry to query points.

Design:
- Pure functions (no state)
- Exact GEOS predicates through shapely, no tolerance
- Vectorized over candidate polygons
- Thread-safe (no mutations)
"""

import math
from enum import Enum
from typing import Sequence, Union

import numpy as np
import shapely
from shapely.geometry import Point


class BoundaryMode(str, Enum):
    """
    Whether points exactly on a polygon boundary count as contained.

    INCLUSIVE: covered-by semantics, boundary of exterior and holes is inside
    EXCLUSIVE: strict interior only
    """

    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"

    @classmethod
    def parse(cls, value: Union[str, 'BoundaryMode']) -> 'BoundaryMode':
        """
        Accept an enum member or its (case-insensitive) string value.

        Raises:
            ValueError: If value names no mode
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid boundary_mode: {value!r}. "
                f"Must be one of {[m.value for m in cls]}"
            ) from None


def normalize_longitude(longitude: float) -> float:
    """
    Wrap longitude into (-180, 180].

    200 -> -160, -200 -> 160, -180 -> 180. In-range values come back
    unchanged; fmod and the single +/-360 shift are exact in float64.
    Non-finite input yields NaN, which matches no bounding box.
    """
    if not math.isfinite(longitude):
        return math.nan
    wrapped = math.fmod(longitude, 360.0)
    if wrapped > 180.0:
        wrapped -= 360.0
    elif wrapped <= -180.0:
        wrapped += 360.0
    return wrapped


def contains_many(
    polygons: Union[np.ndarray, Sequence[shapely.Polygon]],
    point: Point,
    mode: BoundaryMode
) -> np.ndarray:
    """
    Vectorized containment of one point in many polygons.

    A point inside a hole is outside the polygon under both modes; the hole
    boundary belongs to the polygon boundary.

    Returns:
        Boolean mask of shape (N,) where True = polygon contains point
    """
    if len(polygons) == 0:
        return np.array([], dtype=bool)
    if mode is BoundaryMode.INCLUSIVE:
        return shapely.covers(polygons, point)
    return shapely.contains(polygons, point)
