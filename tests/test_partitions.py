import random

import pytest

from floorgen.generation import FloorConfig, Rect
from floorgen.generation.partitions import (
    build_partition_tree,
    choose_split_axis,
    split_point,
    split_rect,
)


@pytest.mark.parametrize(
    "size,ratio,min_size,expected",
    [
        (100, 0.5, 20, 50),
        (50, 0.1, 20, 20),  # clamped up to min
        (50, 0.9, 20, 30),  # clamped down to size - min
        (30, 0.5, 20, None),  # two children of 20 do not fit
        (40, 0.5, 20, 20),  # exactly twice the minimum splits evenly
        (40, 0.9, 20, 20),
    ],
)
def test_split_point(size, ratio, min_size, expected):
    assert split_point(size, ratio, min_size) == expected


def test_choose_split_axis_prefers_larger_dimension():
    cfg = FloorConfig()
    assert choose_split_axis(Rect(0, 0, 100, 60), cfg) == "vertical"
    assert choose_split_axis(Rect(0, 0, 60, 100), cfg) == "horizontal"
    # square: width is not strictly larger so the cut runs across y
    assert choose_split_axis(Rect(0, 0, 100, 100), cfg) == "horizontal"


def test_choose_split_axis_single_axis_and_leaves():
    cfg = FloorConfig()
    assert choose_split_axis(Rect(0, 0, 60, 30), cfg) == "vertical"
    assert choose_split_axis(Rect(0, 0, 30, 30), cfg) is None
    assert choose_split_axis(Rect(0, 0, 100, 15), cfg) is None


def test_split_rect_tiles_parent():
    a, b = split_rect(Rect(5, 5, 40, 30), "vertical", 15)
    assert a == Rect(5, 5, 15, 30) and b == Rect(20, 5, 25, 30)
    a, b = split_rect(Rect(5, 5, 40, 30), "horizontal", 10)
    assert a == Rect(5, 5, 40, 10) and b == Rect(5, 15, 40, 20)


@pytest.mark.parametrize("seed", [1, 2, 3, 42, 999])
def test_children_exactly_tile_parent(seed):
    cfg = FloorConfig(seed=seed)
    tree = build_partition_tree(cfg, random.Random(seed))
    for node in tree.nodes:
        if node.is_leaf:
            continue
        left, right = tree.get(node.left), tree.get(node.right)
        assert left.rect.w * left.rect.h + right.rect.w * right.rect.h == node.rect.w * node.rect.h
        cells = set(left.rect.cells()) | set(right.rect.cells())
        assert cells == set(node.rect.cells())
        assert left.depth == right.depth == node.depth + 1


@pytest.mark.parametrize("seed", [1, 2, 3, 42, 999])
def test_leaves_cover_map_and_respect_minimum(seed):
    cfg = FloorConfig(seed=seed)
    tree = build_partition_tree(cfg, random.Random(seed))
    leaves = tree.leaves()
    covered = set()
    for leaf in leaves:
        assert leaf.rect.w >= cfg.min_partition_size
        assert leaf.rect.h >= cfg.min_partition_size
        cells = set(leaf.rect.cells())
        assert not covered & cells
        covered |= cells
    assert len(covered) == cfg.width * cfg.height
    assert len(leaves) > 1


def test_small_map_is_single_leaf():
    cfg = FloorConfig(width=20, height=20, min_partition_size=20)
    tree = build_partition_tree(cfg, random.Random(0))
    assert len(tree) == 1
    assert tree.leaves()[0].rect == Rect(0, 0, 20, 20)


def test_leaf_order_is_depth_first_left_to_right():
    cfg = FloorConfig(width=100, height=40, min_partition_size=20, max_partition_size=35)
    tree = build_partition_tree(cfg, random.Random(5))
    leaves = tree.leaves()
    # first leaf holds the origin because left children are visited first
    assert leaves[0].rect.x == 0 and leaves[0].rect.y == 0


def test_side_of_twice_the_minimum_is_split():
    cfg = FloorConfig(width=30, height=40, min_partition_size=20, max_partition_size=35)
    tree = build_partition_tree(cfg, random.Random(0))
    leaves = tree.leaves()
    assert [leaf.rect for leaf in leaves] == [Rect(0, 0, 30, 20), Rect(0, 20, 30, 20)]
