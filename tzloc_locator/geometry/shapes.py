"""
Geometric Shapes Module
========================

Pure geometric representations - NO state, NO side effects.

Design:
- Immutable shapes (frozen dataclass pattern)
- Rings stored as read-only Nx2 float64 arrays, (lon, lat) order
- Closure and orientation corrected on construction
- Thread-safe by design (immutability)
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Sequence, Tuple

from shapely.geometry import Polygon as ShapelyPolygon


MIN_RING_VERTICES = 3


def signed_area(ring: np.ndarray) -> float:
    """
    Shoelace signed area of a closed ring.

    Returns:
        > 0 for counter-clockwise rings, < 0 for clockwise, 0 if degenerate
    """
    x = ring[:, 0]
    y = ring[:, 1]
    return float(np.dot(x[:-1], y[1:]) - np.dot(x[1:], y[:-1])) / 2.0


def close_ring(vertices: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Convert vertices into a closed, validated Nx2 float64 ring.

    Raises:
        ValueError: If the ring has the wrong shape, non-finite coordinates
            or fewer than 3 distinct vertices
    """
    try:
        ring = np.array(vertices, dtype=np.float64)
    except TypeError as e:
        raise ValueError(f"ring coordinates are not numeric: {e}") from e
    if ring.ndim != 2 or ring.shape[1] != 2:
        raise ValueError(f"ring must be Nx2 array, got shape {ring.shape}")
    if not np.isfinite(ring).all():
        raise ValueError("ring contains non-finite coordinates")

    distinct = len(np.unique(ring, axis=0)) if len(ring) else 0
    if distinct < MIN_RING_VERTICES:
        raise ValueError(
            f"ring must have at least {MIN_RING_VERTICES} distinct vertices, got {distinct}"
        )

    if not np.array_equal(ring[0], ring[-1]):
        ring = np.vstack([ring, ring[:1]])
    return ring


def orient_ring(ring: np.ndarray, counter_clockwise: bool) -> np.ndarray:
    """Return the ring reversed if its winding differs from the requested one."""
    area = signed_area(ring)
    if (area < 0 and counter_clockwise) or (area > 0 and not counter_clockwise):
        return ring[::-1].copy()
    return ring


@dataclass(frozen=True)
class BoundingBox:
    """
    Immutable axis-aligned envelope in degrees.

    The box is closed: points on any side are contained.

    Invariants:
        - min_lon <= max_lon
        - min_lat <= max_lat
    """
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def __post_init__(self):
        """Validate invariants."""
        if self.min_lon > self.max_lon:
            raise ValueError(
                f"BoundingBox min_lon {self.min_lon} > max_lon {self.max_lon}"
            )
        if self.min_lat > self.max_lat:
            raise ValueError(
                f"BoundingBox min_lat {self.min_lat} > max_lat {self.max_lat}"
            )

    @classmethod
    def of_ring(cls, ring: np.ndarray) -> 'BoundingBox':
        """Envelope of an Nx2 (lon, lat) array."""
        min_lon, min_lat = ring.min(axis=0)
        max_lon, max_lat = ring.max(axis=0)
        return cls(float(min_lon), float(min_lat), float(max_lon), float(max_lat))

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.min_lon, self.min_lat, self.max_lon, self.max_lat)


@dataclass(frozen=True, eq=False)
class RegionPolygon:
    """
    One polygon of a region: exterior ring, holes and the owning region id.

    Rings are closed and oriented in __post_init__ (exterior counter-clockwise,
    holes clockwise) whatever convention the producer used. The shapely
    geometry and the bounding box are derived once and never change.

    Attributes:
        region_id: Opaque region identifier (e.g. "Europe/Berlin")
        exterior: Exterior ring vertices, (lon, lat)
        holes: Interior rings ("holes")

    Example:
        >>> square = RegionPolygon(
        ...     region_id="Test/Zone",
        ...     exterior=[(-10, -10), (10, -10), (10, 10), (-10, 10)],
        ... )
        >>> square.bbox.as_tuple()
        (-10.0, -10.0, 10.0, 10.0)
    """

    region_id: str
    exterior: np.ndarray
    holes: Tuple[np.ndarray, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate, correct rings and derive geometry."""
        if not isinstance(self.region_id, str) or not self.region_id:
            raise ValueError("region_id must be a non-empty string")

        exterior = orient_ring(close_ring(self.exterior), counter_clockwise=True)
        holes = tuple(
            orient_ring(close_ring(hole), counter_clockwise=False)
            for hole in self.holes
        )

        for ring in (exterior, *holes):
            ring.flags.writeable = False

        object.__setattr__(self, 'exterior', exterior)
        object.__setattr__(self, 'holes', holes)
        object.__setattr__(self, '_bbox', BoundingBox.of_ring(exterior))
        object.__setattr__(self, '_geometry', ShapelyPolygon(exterior, holes))

    @property
    def bbox(self) -> BoundingBox:
        """Envelope of the exterior ring (holes lie inside it)."""
        return self._bbox

    @property
    def geometry(self) -> ShapelyPolygon:
        """Shapely polygon used by the exact containment predicates."""
        return self._geometry

    @property
    def vertex_count(self) -> int:
        return len(self.exterior) + sum(len(hole) for hole in self.holes)
