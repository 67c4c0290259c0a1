"""
Point Location Engine - coordinate to region ids.

Pipeline per query:
1. Normalize longitude into (-180, 180]
2. Coarse filter: PackedRTree boxes containing the point
3. Exact filter: polygon containment under the boundary mode
4. Distinct region ids, sorted

Thread Safety:
- Engine holds only immutable data (PolygonStore + PackedRTree)
- Queries take no locks and perform no I/O
"""

from typing import List

from shapely.geometry import Point

from tzloc_locator.geometry import BoundaryMode, contains_many, normalize_longitude
from tzloc_locator.index import PackedRTree, DEFAULT_NODE_CAPACITY
from tzloc_locator.store import PolygonStore


class PointLocationEngine:
    """
    Answers "which regions contain this point" over a static dataset.

    Usage:
        engine = PointLocationEngine.from_store(store)

        engine.query(latitude=52.52, longitude=13.40)
        # ['Europe/Berlin']

        engine.query_lon_lat(13.40, 52.52, BoundaryMode.EXCLUSIVE)
        # ['Europe/Berlin']
    """

    def __init__(self, store: PolygonStore, index: PackedRTree):
        """
        Args:
            store: Dataset entries
            index: Index over the entries' boxes, payload = store position

        Raises:
            ValueError: If index and store sizes differ, or the index
                references a position outside the store
        """
        if len(index) != len(store):
            raise ValueError(
                f"index holds {len(index)} entries, store holds {len(store)}"
            )
        ids = index.ids
        if len(ids) and (ids.min() < 0 or ids.max() >= len(store)):
            raise ValueError(
                f"index ids must lie in [0, {len(store)}), "
                f"got range [{ids.min()}, {ids.max()}]"
            )
        self._store = store
        self._index = index

    @classmethod
    def from_store(
        cls,
        store: PolygonStore,
        node_capacity: int = DEFAULT_NODE_CAPACITY
    ) -> "PointLocationEngine":
        """Bulk-load an index over the store's bounding boxes."""
        index = PackedRTree(store.bounding_boxes(), node_capacity=node_capacity)
        return cls(store, index)

    @property
    def store(self) -> PolygonStore:
        return self._store

    @property
    def index(self) -> PackedRTree:
        return self._index

    def __len__(self) -> int:
        return len(self._store)

    def region_ids(self) -> List[str]:
        return self._store.region_ids()

    def query(
        self,
        latitude: float,
        longitude: float,
        boundary_mode: BoundaryMode = BoundaryMode.INCLUSIVE
    ) -> List[str]:
        """
        Region ids whose polygons contain the point.

        Args:
            latitude: Degrees, used as given (out-of-range matches nothing)
            longitude: Degrees, any real value (wrapped into (-180, 180])
            boundary_mode: INCLUSIVE counts boundary points as inside

        Returns:
            Sorted distinct region ids; empty when nothing contains the point
        """
        mode = BoundaryMode.parse(boundary_mode)
        lon = normalize_longitude(float(longitude))
        lat = float(latitude)

        candidates = self._index.query_point(lon, lat)
        if len(candidates) == 0:
            return []

        mask = contains_many(self._store.geometries[candidates], Point(lon, lat), mode)
        return sorted({self._store[int(position)].region_id for position in candidates[mask]})

    def query_lon_lat(
        self,
        longitude: float,
        latitude: float,
        boundary_mode: BoundaryMode = BoundaryMode.INCLUSIVE
    ) -> List[str]:
        """Same as query() with longitude-first argument order."""
        return self.query(latitude, longitude, boundary_mode)
