"""Corridor candidates between neighboring rooms.

Every corridor runs door to door. A door is a non-corner perimeter tile of a
room: its inward neighbor is interior floor and its outward neighbor is the
first corridor tile. Door cells are reserved as soon as a corridor claims them
so no door ever serves two corridors.

Path search order for a door pair:
  1. L-shape with a randomly chosen leading axis (room interior tiles dropped)
  2. the same L-shape with the other axis leading
  3. guarded BFS that never enters a room rectangle except at the goal door
A pair for which all three fail yields no candidate.
"""
from __future__ import annotations

import math
import random
from collections import deque
from typing import Any, Deque, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..logging_utils import get_logger
from .models import Coord, Corridor, PartitionTree, Room
from .tiles import NEIGHBOR_OFFSETS

log = get_logger("floorgen.corridors")

DoorPair = Tuple[Coord, Coord]


def center_distance(a: Room, b: Room) -> float:
    (ax, ay), (bx, by) = a.center, b.center
    return math.hypot(ax - bx, ay - by)


def l_path(start: Coord, end: Coord, horizontal_first: bool) -> List[Coord]:
    """Tiles of an L-shaped path from ``start`` to ``end``, both included."""
    sx, sy = start
    ex, ey = end
    path: List[Coord] = [start]
    x, y = sx, sy
    legs = ("x", "y") if horizontal_first else ("y", "x")
    for leg in legs:
        if leg == "x":
            step = 1 if ex > x else -1
            while x != ex:
                x += step
                path.append((x, y))
        else:
            step = 1 if ey > y else -1
            while y != ey:
                y += step
                path.append((x, y))
    return path


def is_contiguous(tiles: Sequence[Coord]) -> bool:
    for (ax, ay), (bx, by) in zip(tiles, tiles[1:]):
        if abs(ax - bx) + abs(ay - by) != 1:
            return False
    return True


class CorridorBuilder:
    """Carves door-to-door corridors between rooms on a ``width`` x ``height`` map."""

    def __init__(
        self,
        rooms: Sequence[Room],
        width: int,
        height: int,
        rng: random.Random,
        metrics: Optional[Dict[str, Any]] = None,
    ):
        self.rooms = rooms
        self.width = width
        self.height = height
        self.rng = rng
        self.metrics = metrics if metrics is not None else {}
        self.reserved_doors: Set[Coord] = set()
        self._room_cells: Set[Coord] = set()
        for room in rooms:
            self._room_cells.update(room.rect.cells())

    def _bump(self, key: str, n: int = 1) -> None:
        if key in self.metrics:
            self.metrics[key] += n

    # ------------------------------------------------------------------
    # Door placement
    # ------------------------------------------------------------------
    def aligned_doors(self, a: Room, b: Room) -> Optional[DoorPair]:
        """Facing doors at a shared coordinate when the rooms overlap by more than two tiles."""
        ra, rb = a.rect, b.rect
        if ra.y_max <= rb.y or rb.y_max <= ra.y:
            lo, hi = max(ra.x, rb.x), min(ra.x_max, rb.x_max)
            if lo >= hi - 2:
                return None
            a_row = ra.y_max - 1 if ra.y_max <= rb.y else ra.y
            b_row = rb.y if ra.y_max <= rb.y else rb.y_max - 1
            options = [
                ((cx, a_row), (cx, b_row))
                for cx in range(lo + 1, hi - 1)
                if (cx, a_row) not in self.reserved_doors and (cx, b_row) not in self.reserved_doors
            ]
        elif ra.x_max <= rb.x or rb.x_max <= ra.x:
            lo, hi = max(ra.y, rb.y), min(ra.y_max, rb.y_max)
            if lo >= hi - 2:
                return None
            a_col = ra.x_max - 1 if ra.x_max <= rb.x else ra.x
            b_col = rb.x if ra.x_max <= rb.x else rb.x_max - 1
            options = [
                ((a_col, cy), (b_col, cy))
                for cy in range(lo + 1, hi - 1)
                if (a_col, cy) not in self.reserved_doors and (b_col, cy) not in self.reserved_doors
            ]
        else:
            return None
        if not options:
            return None
        return self.rng.choice(options)

    def closest_wall_door(self, room: Room, target: Room) -> Optional[Coord]:
        tx, ty = target.center
        best: Optional[Coord] = None
        best_d = math.inf
        for site in room.door_sites():
            if site in self.reserved_doors:
                continue
            d = math.hypot(site[0] - tx, site[1] - ty)
            if d < best_d:
                best, best_d = site, d
        return best

    def closest_wall_doors(self, a: Room, b: Room) -> Optional[DoorPair]:
        da = self.closest_wall_door(a, b)
        db = self.closest_wall_door(b, a)
        if da is None or db is None:
            return None
        return da, db

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    def _clean(self, tiles: Sequence[Coord], doors: DoorPair) -> bool:
        if len(tiles) < 2 or tiles[0] != doors[0] or tiles[-1] != doors[1]:
            return False
        if not is_contiguous(tiles):
            return False
        return all(t not in self._room_cells for t in tiles[1:-1])

    def carve_l(self, a: Room, b: Room, doors: DoorPair, horizontal_first: bool) -> List[Coord]:
        raw = l_path(doors[0], doors[1], horizontal_first)
        return [t for t in raw if not (a.is_interior(t) or b.is_interior(t))]

    def guarded_path(self, start: Coord, goal: Coord) -> List[Coord]:
        """Shortest 4-connected path that stays out of every room rect except ``goal``."""
        q: Deque[Coord] = deque([start])
        parent: Dict[Coord, Optional[Coord]] = {start: None}
        while q:
            x, y = q.popleft()
            if (x, y) == goal:
                break
            for dx, dy in NEIGHBOR_OFFSETS:
                nxt = (x + dx, y + dy)
                if nxt in parent:
                    continue
                if not (0 <= nxt[0] < self.width and 0 <= nxt[1] < self.height):
                    continue
                if nxt != goal and nxt in self._room_cells:
                    continue
                parent[nxt] = (x, y)
                q.append(nxt)
        if goal not in parent:
            return []
        path: List[Coord] = []
        cur: Optional[Coord] = goal
        while cur is not None:
            path.append(cur)
            cur = parent[cur]
        path.reverse()
        return path

    def path_between(self, a: Room, b: Room, doors: DoorPair, allow_l: bool = True) -> List[Coord]:
        if allow_l:
            first = self.rng.random() < 0.5
            for horizontal_first in (first, not first):
                tiles = self.carve_l(a, b, doors, horizontal_first)
                if self._clean(tiles, doors):
                    return tiles
                self._bump('corridor_fallbacks')
        tiles = self.guarded_path(doors[0], doors[1])
        if tiles:
            self._bump('guarded_paths')
        return tiles

    # ------------------------------------------------------------------
    # Corridors
    # ------------------------------------------------------------------
    def connect(self, a: Room, b: Room, aligned: bool = True) -> Optional[Corridor]:
        """Build and reserve a corridor between ``a`` and ``b`` or return None."""
        doors = self.aligned_doors(a, b) if aligned else None
        allow_l = True
        if doors is None:
            doors = self.closest_wall_doors(a, b)
            allow_l = aligned
        if doors is None:
            log.debug(event="corridor_no_doors", a=a.id, b=b.id)
            return None
        tiles = self.path_between(a, b, doors, allow_l=allow_l)
        if not tiles:
            log.debug(event="corridor_no_path", a=a.id, b=b.id, doors=doors)
            return None
        self.reserved_doors.update(doors)
        return Corridor(
            tiles=tiles,
            start_room_id=a.id,
            end_room_id=b.id,
            start_door=doors[0],
            end_door=doors[1],
            weight=center_distance(a, b),
        )

    def candidates(self, tree: PartitionTree) -> List[Corridor]:
        out: List[Corridor] = []
        seen: Set[Tuple[int, int]] = set()
        for leaf in tree.leaves():
            if leaf.room_id is None:
                continue
            for nid in sorted(leaf.neighbors):
                other = tree.get(nid)
                if other.room_id is None:
                    continue
                pair = (min(leaf.room_id, other.room_id), max(leaf.room_id, other.room_id))
                if pair in seen:
                    continue
                seen.add(pair)
                corridor = self.connect(self.rooms[leaf.room_id], self.rooms[other.room_id])
                if corridor is None:
                    self._bump('corridors_discarded')
                    continue
                out.append(corridor)
        self.metrics['corridor_candidates'] = len(out)
        return out


def corridor_tiles(corridors: Iterable[Corridor]) -> Set[Coord]:
    tiles: Set[Coord] = set()
    for c in corridors:
        tiles.update(c.tiles)
    return tiles
