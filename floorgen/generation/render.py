"""Character grid rendering of a layout (debug output, CLI and the ascii endpoint)."""
from __future__ import annotations

from typing import Dict, List

from .models import Layout
from .tiles import RoomRole

# Tile constants
EMPTY = " "
ROOM = "R"
CORRIDOR = "T"
DOOR = "D"
WALL = "W"
LOCKED_DOOR = "L"
KEY = "K"

# Role markers drawn at room centers when requested.
ROLE_MARKERS = {
    RoomRole.ENTRANCE: "E",
    RoomRole.EXIT: "X",
    RoomRole.BOSS: "B",
    RoomRole.SHOP: "$",
    RoomRole.TREASURE: "*",
}

_CHAR_TYPES = {
    EMPTY: "empty",
    ROOM: "room",
    CORRIDOR: "corridor",
    DOOR: "door",
    WALL: "wall",
    LOCKED_DOOR: "locked_door",
    KEY: "key",
}


def char_to_type(ch: str) -> str:
    if ch in _CHAR_TYPES:
        return _CHAR_TYPES[ch]
    if ch in ROLE_MARKERS.values():
        return "room"
    return "unknown"


def to_grid(layout: Layout, mark_roles: bool = False) -> List[List[str]]:
    """grid[x][y] of tile characters."""
    w, h = layout.width, layout.height
    grid = [[EMPTY for _ in range(h)] for _ in range(w)]
    room_floor = set()
    for room in layout.rooms:
        room_floor.update(room.floor_tiles())
    for x, y in layout.floor_tiles:
        if 0 <= x < w and 0 <= y < h:
            grid[x][y] = ROOM if (x, y) in room_floor else CORRIDOR
    for x, y in layout.wall_tiles:
        if 0 <= x < w and 0 <= y < h:
            grid[x][y] = WALL
    for x, y in layout.door_tiles:
        grid[x][y] = DOOR
    for x, y in layout.locked_door_tiles:
        grid[x][y] = LOCKED_DOOR
    for x, y in layout.key_tiles:
        grid[x][y] = KEY
    if mark_roles:
        for room in layout.rooms:
            marker = ROLE_MARKERS.get(room.role)
            if marker:
                cx, cy = room.center
                grid[int(cx)][int(cy)] = marker
    return grid


def to_ascii(layout: Layout, mark_roles: bool = False) -> str:
    """Rows top (north) first, so ``y = height - 1`` is the first line."""
    grid = to_grid(layout, mark_roles=mark_roles)
    return "\n".join(
        "".join(grid[x][y] for x in range(layout.width)) for y in range(layout.height - 1, -1, -1)
    )


def tile_counts(layout: Layout) -> Dict[str, int]:
    counts = {char_to_type(c): 0 for c in _CHAR_TYPES}
    for column in to_grid(layout):
        for ch in column:
            counts[char_to_type(ch)] += 1
    return counts
