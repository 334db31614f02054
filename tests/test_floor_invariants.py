"""Structural invariants over a sweep of seeds and map sizes."""
from __future__ import annotations

import pytest

from floorgen.generation import FloorConfig, RoomAccess, RoomRole, generate_floor
from floorgen.generation.debug_checks import analyze, is_clean

from layout_test_utils import bfs_reachable, door_neighbors, first_floor_tile, walkable

SEEDS = [0, 1, 7, 13, 42, 99, 1337, 292372]
SIZES = [(60, 60), (100, 100), (140, 80)]


@pytest.fixture(scope="module", params=[(s, size) for s in SEEDS for size in SIZES], ids=lambda p: f"{p[0]}-{p[1][0]}x{p[1][1]}")
def layout(request):
    seed, (w, h) = request.param
    return generate_floor(FloorConfig(seed=seed, width=w, height=h, floor_level=5))


def test_debug_checks_clean(layout):
    report = analyze(layout)
    assert is_clean(report), {k: v for k, v in report.items() if v}


def test_rooms_do_not_overlap(layout):
    cells = set()
    for room in layout.rooms:
        mine = set(room.rect.cells())
        assert not cells & mine
        cells |= mine


def test_no_corridor_tile_in_any_interior(layout):
    for c in layout.corridors:
        for t in c.tiles:
            assert not any(r.is_interior(t) for r in layout.rooms)


def test_tile_sets_pairwise_disjoint(layout):
    walls = set(layout.wall_tiles)
    assert not layout.floor_tiles & walls
    assert not layout.floor_tiles & layout.door_tiles
    assert not walls & layout.door_tiles


def test_each_door_belongs_to_one_corridor_and_one_room(layout):
    used = [d for c in layout.corridors for d in c.doors]
    assert len(used) == len(set(used))
    assert set(used) == layout.door_tiles
    for door in layout.door_tiles:
        owners = [r for r in layout.rooms if r.is_perimeter(door)]
        assert len(owners) == 1
        interior, outside = door_neighbors(layout, door)
        assert interior == 1 and outside >= 1


def test_room_graph_connected(layout):
    assert layout.is_connected()


def test_every_room_walkable_from_entrance(layout):
    tiles = walkable(layout)
    reach = bfs_reachable(tiles, first_floor_tile(layout.entrance))
    for room in layout.rooms:
        assert first_floor_tile(room) in reach, room.id


def test_one_entrance_one_exit_one_boss(layout):
    assert len(layout.rooms_with_role(RoomRole.ENTRANCE)) == 1
    assert len(layout.rooms_with_role(RoomRole.EXIT)) == 1
    assert len(layout.rooms_with_role(RoomRole.BOSS)) == 1


def test_exit_is_farthest_from_entrance(layout):
    far = max(r.distance for r in layout.rooms)
    assert layout.exit.distance == far
    assert layout.entrance.distance == 0


def test_spawns_only_in_hostile_rooms(layout):
    for room in layout.rooms:
        if room.role in (RoomRole.COMBAT, RoomRole.BOSS):
            for p in room.spawn_positions:
                assert room.is_interior(p)
        else:
            assert room.spawn_positions == []


def test_metrics_consistent(layout):
    m = layout.metrics
    assert m["rooms"] == len(layout.rooms)
    assert m["corridors_selected"] == len(layout.corridors)
    assert m["tiles_floor"] == len(layout.floor_tiles)
    assert m["tiles_door"] == len(layout.door_tiles)
    assert m["tiles_wall"] == len(layout.wall_tiles)
    assert m["leaves"] == m["rooms"] + m["partitions_roomless"]
    assert set(m["phase_ms"]) >= {"partition", "rooms", "adjacency", "corridors", "selection", "roles", "geometry"}


def test_main_path_runs_entrance_to_exit(layout):
    path = [r for r in layout.rooms if r.on_main_path]
    assert layout.entrance.on_main_path and layout.exit.on_main_path
    # a shortest path holds exactly one room per distance step
    assert sorted(r.distance for r in path) == list(range(layout.exit.distance + 1))
    assert layout.metrics["main_path_rooms"] == len(path)


def test_locked_rooms_and_keys(layout):
    locked_rooms = [r for r in layout.rooms if r.state == RoomAccess.LOCKED]
    holders = [r for r in layout.rooms if r.has_key]
    if len(layout.rooms) >= 6:
        assert len(locked_rooms) == 1
    assert len(holders) == len(locked_rooms) == len(layout.key_tiles)
    assert layout.locked_door_tiles <= layout.door_tiles
    for room in locked_rooms:
        doors = {
            c.start_door if c.start_room_id == room.id else c.end_door
            for c in layout.corridors
            if room.id in (c.start_room_id, c.end_room_id)
        }
        assert doors and doors <= layout.locked_door_tiles
    for holder in holders:
        assert any(holder.distance < r.distance for r in locked_rooms)
        assert any(holder.is_interior(k) for k in layout.key_tiles)
    assert layout.key_tiles <= layout.floor_tiles
    assert layout.metrics["locked_doors"] == len(layout.locked_door_tiles)
