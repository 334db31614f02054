"""Binary space partitioning of the floor rectangle.

The root rectangle is split recursively until every leaf is within
``max_partition_size`` on both axes or too small to cut again. A node that
cannot be cut cleanly simply stays a leaf; nothing here raises.
"""
from __future__ import annotations

import random
from typing import Optional, Tuple

from ..logging_utils import get_logger
from .config import FloorConfig
from .models import Partition, PartitionTree, Rect

log = get_logger("floorgen.partitions")


def build_partition_tree(config: FloorConfig, rng: random.Random) -> PartitionTree:
    tree = PartitionTree()
    root = tree.add(Rect(0, 0, config.width, config.height), depth=0)
    tree.root = root.id
    _split(tree, root, config, rng)
    return tree


def _axis_splittable(size: int, config: FloorConfig) -> bool:
    # Needs to exceed the target size and leave room for two children.
    return size > config.max_partition_size and size >= 2 * config.min_partition_size


def choose_split_axis(rect: Rect, config: FloorConfig) -> Optional[str]:
    """Return 'vertical' (cut across x), 'horizontal' (cut across y) or None for a leaf."""
    if rect.w <= config.max_partition_size and rect.h <= config.max_partition_size:
        return None
    if rect.w <= config.min_partition_size or rect.h <= config.min_partition_size:
        return None
    can_vertical = _axis_splittable(rect.w, config)
    can_horizontal = _axis_splittable(rect.h, config)
    if can_vertical and can_horizontal:
        return "vertical" if rect.w > rect.h else "horizontal"
    if can_vertical:
        return "vertical"
    if can_horizontal:
        return "horizontal"
    return None


def split_point(size: int, ratio: float, min_size: int) -> Optional[int]:
    """Offset of the cut along an axis of ``size`` tiles, or None if no clean cut exists."""
    low, high = min_size, size - min_size
    if high < low:
        return None
    return max(low, min(high, round(size * ratio)))


def split_rect(rect: Rect, axis: str, cut: int) -> Tuple[Rect, Rect]:
    if axis == "vertical":
        return Rect(rect.x, rect.y, cut, rect.h), Rect(rect.x + cut, rect.y, rect.w - cut, rect.h)
    return Rect(rect.x, rect.y, rect.w, cut), Rect(rect.x, rect.y + cut, rect.w, rect.h - cut)


def _split(tree: PartitionTree, node: Partition, config: FloorConfig, rng: random.Random) -> None:
    axis = choose_split_axis(node.rect, config)
    if axis is None:
        return
    ratio = rng.uniform(config.min_split_ratio, config.max_split_ratio)
    size = node.rect.w if axis == "vertical" else node.rect.h
    cut = split_point(size, ratio, config.min_partition_size)
    if cut is None:
        log.debug(event="partition_unsplittable", partition=node.id, rect=tuple(node.rect))
        return
    first, second = split_rect(node.rect, axis, cut)
    left = tree.add(first, node.depth + 1)
    right = tree.add(second, node.depth + 1)
    node.left, node.right = left.id, right.id
    _split(tree, left, config, rng)
    _split(tree, right, config, rng)
