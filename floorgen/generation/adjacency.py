"""Neighbor detection between leaf partitions.

Two leaves are neighbors when they share a boundary segment of positive
length. Leaves are bucketed by their right (``x_max``) and top (``y_max``)
edges so each leaf only compares against leaves whose far edge equals its
near edge.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Sequence

from .models import Partition


def _overlap(a_lo: int, a_hi: int, b_lo: int, b_hi: int) -> int:
    return min(a_hi, b_hi) - max(a_lo, b_lo)


def assign_neighbors(leaves: Sequence[Partition]) -> int:
    """Fill ``Partition.neighbors`` for every leaf; returns the number of unique pairs."""
    by_x_max: Dict[int, List[Partition]] = defaultdict(list)
    by_y_max: Dict[int, List[Partition]] = defaultdict(list)
    for leaf in leaves:
        by_x_max[leaf.rect.x_max].append(leaf)
        by_y_max[leaf.rect.y_max].append(leaf)

    pairs = set()
    for leaf in leaves:
        r = leaf.rect
        for other in by_x_max.get(r.x, ()):
            if _overlap(r.y, r.y_max, other.rect.y, other.rect.y_max) > 0:
                _link(leaf, other, pairs)
        for other in by_y_max.get(r.y, ()):
            if _overlap(r.x, r.x_max, other.rect.x, other.rect.x_max) > 0:
                _link(leaf, other, pairs)
    return len(pairs)


def _link(a: Partition, b: Partition, pairs: set) -> None:
    if a.id == b.id:
        return
    a.neighbors.add(b.id)
    b.neighbors.add(a.id)
    pairs.add((min(a.id, b.id), max(a.id, b.id)))


def are_neighbors(a: Partition, b: Partition) -> bool:
    ra, rb = a.rect, b.rect
    if ra.x_max == rb.x or rb.x_max == ra.x:
        return _overlap(ra.y, ra.y_max, rb.y, rb.y_max) > 0
    if ra.y_max == rb.y or rb.y_max == ra.y:
        return _overlap(ra.x, ra.x_max, rb.x, rb.x_max) > 0
    return False
