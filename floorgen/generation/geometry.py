"""Materialize rooms and selected corridors into floor, wall and door tile sets."""
from __future__ import annotations

from typing import Dict, Optional, Sequence, Set, Tuple

from .models import Coord, Corridor, Room
from .tiles import NEIGHBOR_OFFSETS, WallType

_CORNERS = {
    (True, False, True, False): WallType.NORTH_WEST_CORNER,
    (True, False, False, True): WallType.NORTH_EAST_CORNER,
    (False, True, True, False): WallType.SOUTH_WEST_CORNER,
    (False, True, False, True): WallType.SOUTH_EAST_CORNER,
}


def perimeter_wall_type(room: Room, pos: Coord) -> WallType:
    """Wall type of a perimeter tile by the edges it touches; north is the top row."""
    r = room.rect
    x, y = pos
    north = y == r.y_max - 1
    south = y == r.y
    west = x == r.x
    east = x == r.x_max - 1
    corner = _CORNERS.get((north, south, west, east))
    if corner is not None:
        return corner
    if north:
        return WallType.NORTH
    if south:
        return WallType.SOUTH
    if west:
        return WallType.WEST
    return WallType.EAST


def classify_wall(pos: Coord, rooms: Sequence[Room], corridor_floor: Set[Coord]) -> WallType:
    for room in rooms:
        if room.is_perimeter(pos):
            return perimeter_wall_type(room, pos)
    x, y = pos
    for dx, dy in NEIGHBOR_OFFSETS:
        if (x + dx, y + dy) in corridor_floor:
            return WallType.CORRIDOR
    return WallType.INTERIOR


def materialize(
    rooms: Sequence[Room],
    corridors: Sequence[Corridor],
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> Tuple[Set[Coord], Dict[Coord, WallType], Set[Coord]]:
    """Return ``(floor, walls, doors)``; the three sets never overlap."""
    doors: Set[Coord] = set()
    for c in corridors:
        doors.update(c.doors)

    floor: Set[Coord] = set()
    for room in rooms:
        floor.update(room.floor_tiles())
    corridor_floor: Set[Coord] = set()
    for c in corridors:
        corridor_floor.update(c.tiles)
    corridor_floor -= doors
    floor |= corridor_floor

    wall_cells: Set[Coord] = set()
    for room in rooms:
        wall_cells.update(room.perimeter_tiles())
    for x, y in corridor_floor:
        for dx, dy in NEIGHBOR_OFFSETS:
            nxt = (x + dx, y + dy)
            if width is not None and height is not None:
                if not (0 <= nxt[0] < width and 0 <= nxt[1] < height):
                    continue
            if nxt not in floor:
                wall_cells.add(nxt)
    wall_cells -= floor
    wall_cells -= doors

    # Perimeter lookup per tile keeps classification linear in wall count.
    owner: Dict[Coord, Room] = {}
    for room in rooms:
        for t in room.perimeter_tiles():
            owner.setdefault(t, room)
    walls: Dict[Coord, WallType] = {}
    for pos in wall_cells:
        room = owner.get(pos)
        if room is not None:
            walls[pos] = perimeter_wall_type(room, pos)
        else:
            walls[pos] = classify_wall(pos, (), corridor_floor)
    return floor, walls, doors
