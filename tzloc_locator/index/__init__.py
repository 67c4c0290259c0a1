"""
Index Layer
===========

Bounded Context: Coarse (broad-phase) filtering over bounding boxes.

Responsibilities:
- Bulk construction of a static R-tree from (box, id) pairs
- "Which boxes contain this point" queries
- NO exact geometry, NO region ids
"""

from tzloc_locator.index.rtree import PackedRTree, DEFAULT_NODE_CAPACITY

__all__ = [
    "PackedRTree",
    "DEFAULT_NODE_CAPACITY",
]
