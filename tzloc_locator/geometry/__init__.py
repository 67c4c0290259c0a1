"""
Geometry Layer
==============

Bounded Context: Pure geometric shapes and containment predicates.

Responsibilities:
- Shape representation (immutable RegionPolygon, BoundingBox)
- Ring closure and orientation correction
- Exact point-in-polygon tests with boundary modes
- Longitude wraparound
- NO index, NO dataset I/O

Design Philosophy:
- Pure functions where possible
- Immutable data structures
- Fail-fast validation
- Zero side effects
"""

from tzloc_locator.geometry.shapes import (
    BoundingBox,
    RegionPolygon,
    close_ring,
    orient_ring,
    signed_area,
)
from tzloc_locator.geometry.predicates import (
    BoundaryMode,
    contains_many,
    normalize_longitude,
)

__all__ = [
    "BoundingBox",
    "RegionPolygon",
    "close_ring",
    "orient_ring",
    "signed_area",
    "BoundaryMode",
    "contains_many",
    "normalize_longitude",
]
