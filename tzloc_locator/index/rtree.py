"""
Packed R-tree Module
====================

Static bounding-box index built with Sort-Tile-Recursive (STR) bulk loading.

Design:
- Whole dataset known upfront: one bulk load, no insert/delete
- STR tiling keeps sibling boxes spatially compact (low overlap, full nodes)
- Each level stored as two read-only numpy arrays:
    bounds  (K, 4)  [min_lon, min_lat, max_lon, max_lat]
    payload (K,)    entry id (level 0) or (K, 2) child span [start, end)
- Children of a node are contiguous in the level below
- Query walks top-down, O(log N + k) box tests
- Thread-safe (no mutations after construction)

Layout (node_capacity M):

    levels[-1]  top level, at most M nodes (children of the implicit root)
    ...
    levels[1]   leaf nodes, spans into levels[0]
    levels[0]   entries, payload = entry id
"""

import math
from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np


DEFAULT_NODE_CAPACITY = 16


class _Level(NamedTuple):
    bounds: np.ndarray
    payload: np.ndarray


def _contains_point(bounds: np.ndarray, lon: float, lat: float) -> np.ndarray:
    """Closed-box containment mask for every row of bounds."""
    return (
        (bounds[:, 0] <= lon) & (lon <= bounds[:, 2])
        & (bounds[:, 1] <= lat) & (lat <= bounds[:, 3])
    )


def _sort_tile(bounds: np.ndarray, capacity: int) -> np.ndarray:
    """
    STR ordering of boxes.

    Sort by center longitude, cut into vertical slabs of whole nodes, sort
    each slab by center latitude. Consecutive runs of `capacity` items in the
    returned order form the nodes of the next level.
    """
    count = len(bounds)
    if count <= capacity:
        return np.arange(count)

    center_x = (bounds[:, 0] + bounds[:, 2]) / 2.0
    center_y = (bounds[:, 1] + bounds[:, 3]) / 2.0

    node_count = math.ceil(count / capacity)
    slab_count = math.ceil(math.sqrt(node_count))
    slab_size = math.ceil(node_count / slab_count) * capacity

    by_x = np.argsort(center_x, kind="stable")
    order = np.empty(count, dtype=np.int64)
    for start in range(0, count, slab_size):
        slab = by_x[start:start + slab_size]
        order[start:start + len(slab)] = slab[np.argsort(center_y[slab], kind="stable")]
    return order


def _pack_nodes(bounds: np.ndarray, capacity: int) -> Tuple[np.ndarray, np.ndarray]:
    """Group consecutive runs of `capacity` boxes into parent nodes."""
    count = len(bounds)
    starts = np.arange(0, count, capacity)
    ends = np.append(starts[1:], count)

    node_bounds = np.column_stack([
        np.minimum.reduceat(bounds[:, 0], starts),
        np.minimum.reduceat(bounds[:, 1], starts),
        np.maximum.reduceat(bounds[:, 2], starts),
        np.maximum.reduceat(bounds[:, 3], starts),
    ])
    spans = np.column_stack([starts, ends])
    return node_bounds, spans


class PackedRTree:
    """
    Immutable STR-packed R-tree answering point-in-box queries.

    Results are a superset of exact polygon matches: a box containing the
    point is necessary, not sufficient. Identical ids passed at construction
    are returned once per occurrence.

    Usage:
        boxes = np.array([[-10, -10, 10, 10], [0, 0, 20, 20]], dtype=float)
        tree = PackedRTree(boxes, ids=[0, 1], node_capacity=16)
        tree.query_point(5.0, 5.0)      # array([0, 1]) in tree order
        tree.query_point(50.0, 50.0)    # array([], dtype=int64)
    """

    def __init__(
        self,
        boxes: Sequence[Sequence[float]],
        ids: Optional[Sequence[int]] = None,
        node_capacity: int = DEFAULT_NODE_CAPACITY
    ):
        """
        Bulk-load the tree.

        Args:
            boxes: (N, 4) boxes as [min_lon, min_lat, max_lon, max_lat]
            ids: (N,) integer payloads (default: 0..N-1)
            node_capacity: Maximum children per node (>= 2)

        Raises:
            ValueError: On shape mismatch, inverted or non-finite boxes
        """
        if node_capacity < 2:
            raise ValueError(f"node_capacity must be >= 2, got {node_capacity}")

        boxes = np.asarray(boxes, dtype=np.float64).reshape(-1, 4)
        if ids is None:
            ids = np.arange(len(boxes), dtype=np.int64)
        ids = np.asarray(ids, dtype=np.int64).reshape(-1)

        if len(ids) != len(boxes):
            raise ValueError(
                f"ids length {len(ids)} does not match boxes length {len(boxes)}"
            )
        if not np.isfinite(boxes).all():
            raise ValueError("boxes contain non-finite coordinates")
        if np.any(boxes[:, 0] > boxes[:, 2]) or np.any(boxes[:, 1] > boxes[:, 3]):
            raise ValueError("boxes must satisfy min <= max on both axes")

        self.node_capacity = node_capacity
        self._size = len(boxes)
        self._levels = self._bulk_load(boxes, ids, node_capacity)

    @staticmethod
    def _bulk_load(
        boxes: np.ndarray,
        ids: np.ndarray,
        capacity: int
    ) -> Tuple[_Level, ...]:
        levels = []
        bounds, payload = boxes, ids
        while True:
            order = _sort_tile(bounds, capacity)
            bounds, payload = bounds[order], payload[order]
            bounds.flags.writeable = False
            payload.flags.writeable = False
            levels.append(_Level(bounds, payload))
            if len(bounds) <= capacity:
                break
            bounds, payload = _pack_nodes(bounds, capacity)
        return tuple(levels)

    def __len__(self) -> int:
        return self._size

    @property
    def height(self) -> int:
        """Number of stored levels, entries included."""
        return len(self._levels)

    @property
    def ids(self) -> np.ndarray:
        """Payload ids of every indexed box, in tree order."""
        return self._levels[0].payload

    @property
    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """Envelope of every indexed box, or None when empty."""
        if self._size == 0:
            return None
        top = self._levels[-1].bounds
        return (
            float(top[:, 0].min()),
            float(top[:, 1].min()),
            float(top[:, 2].max()),
            float(top[:, 3].max()),
        )

    def query_point(self, lon: float, lat: float) -> np.ndarray:
        """
        Return ids of every box containing (lon, lat), boundary included.

        NaN coordinates match nothing.
        """
        top = len(self._levels) - 1
        hits = np.flatnonzero(_contains_point(self._levels[top].bounds, lon, lat))

        for level in range(top, 0, -1):
            if len(hits) == 0:
                break
            spans = self._levels[level].payload[hits]
            children = np.concatenate([np.arange(start, end) for start, end in spans])
            below = self._levels[level - 1].bounds
            hits = children[_contains_point(below[children], lon, lat)]

        if len(hits) == 0:
            return np.array([], dtype=np.int64)
        return self._levels[0].payload[hits]
