"""
Polygon Store - immutable collection of region polygons.

Each entry pairs one polygon with its region id, so positions in the store
are the only identity the index needs.
"""

from typing import Iterable, Iterator, List, Tuple

import numpy as np

from tzloc_locator.geometry import RegionPolygon


class PolygonStore:
    """
    Immutable ordered collection of RegionPolygon entries.

    Thread Safety:
    - Read-only after construction; safe to share across threads

    Usage:
        store = PolygonStore([
            RegionPolygon("A", [(-10, -10), (0, -10), (0, 10), (-10, 10)]),
            RegionPolygon("B", [(0, -10), (10, -10), (10, 10), (0, 10)]),
        ])
        len(store)          # 2
        store.region_ids()  # ['A', 'B']
    """

    def __init__(self, entries: Iterable[RegionPolygon]):
        self._entries: Tuple[RegionPolygon, ...] = tuple(entries)
        for position, entry in enumerate(self._entries):
            if not isinstance(entry, RegionPolygon):
                raise TypeError(
                    f"entry {position} must be RegionPolygon, got {type(entry).__name__}"
                )

        geometries = np.empty(len(self._entries), dtype=object)
        for position, entry in enumerate(self._entries):
            geometries[position] = entry.geometry
        geometries.flags.writeable = False
        self._geometries = geometries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RegionPolygon]:
        return iter(self._entries)

    def __getitem__(self, position: int) -> RegionPolygon:
        return self._entries[position]

    @property
    def geometries(self) -> np.ndarray:
        """Shapely polygons as a read-only object array, store order."""
        return self._geometries

    def bounding_boxes(self) -> np.ndarray:
        """(N, 4) array of entry envelopes, store order."""
        if not self._entries:
            return np.empty((0, 4), dtype=np.float64)
        return np.array([entry.bbox.as_tuple() for entry in self._entries], dtype=np.float64)

    def region_ids(self) -> List[str]:
        """Sorted distinct region ids."""
        return sorted({entry.region_id for entry in self._entries})

    def vertex_count(self) -> int:
        return sum(entry.vertex_count for entry in self._entries)
