"""
tzloc Locator v1.0
==================

Bounded Context: Offline point location (lat/lon -> timezone ids).

Design Philosophy:
- Separation of Concerns: Geometry, Index, Engine, Service separated
- Immutable after construction: built once, queried concurrently
- Pragmatismo > Purismo: shapely/GEOS for exact predicates, numpy for the index

Architecture:

    tzloc_locator/
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── shapes.py      # RegionPolygon, BoundingBox, ring correction
    │   └── predicates.py  # BoundaryMode, containment, longitude wrap
    │
    ├── index/             # Coarse filter
    │   └── rtree.py       # PackedRTree (STR bulk load)
    │
    ├── store.py           # PolygonStore
    ├── engine.py          # PointLocationEngine (query pipeline)
    ├── service.py         # LocatorService (exactly-once construction)
    └── config.py          # LocatorConfig (YAML)

Usage:

    from tzloc_locator import RegionPolygon, PolygonStore, PointLocationEngine

    store = PolygonStore([
        RegionPolygon("Test/Zone", [(-10, -10), (10, -10), (10, 10), (-10, 10)]),
    ])
    engine = PointLocationEngine.from_store(store)

    engine.query(latitude=0, longitude=0)     # ['Test/Zone']
    engine.query(latitude=50, longitude=50)   # []

    # From a packed dataset, built once and shared
    from tzloc_locator import LocatorConfig, LocatorService

    service = LocatorService.from_config(LocatorConfig.from_yaml("locator.yaml"))
    service.initialize()
    service.query(52.52, 13.40)
"""

# Geometry Layer (immutable, stateless)
from tzloc_locator.geometry import (
    BoundaryMode,
    BoundingBox,
    RegionPolygon,
    normalize_longitude,
)

# Index Layer
from tzloc_locator.index import PackedRTree

# Dataset + Engine
from tzloc_locator.store import PolygonStore
from tzloc_locator.engine import PointLocationEngine

# Service + Config
from tzloc_locator.config import LocatorConfig
from tzloc_locator.service import LocatorService

__all__ = [
    # Geometry
    "BoundaryMode",
    "BoundingBox",
    "RegionPolygon",
    "normalize_longitude",
    # Index
    "PackedRTree",
    # Engine
    "PolygonStore",
    "PointLocationEngine",
    # Service
    "LocatorConfig",
    "LocatorService",
]

__version__ = "1.0.0"
