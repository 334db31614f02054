"""Room role assignment over the selected corridor graph.

Roles are handed out in a fixed order so each step only sees rooms that are
still Combat:

    Entrance -> Exit -> Boss (boss floors only) -> Shop -> Treasure -> Empty

Rooms the BFS from the anchor never reaches keep ``distance == -1`` and stay
Combat; they are excluded from every selection.

Once corridors are final, ``place_locks_and_keys`` locks special rooms and hides
a key for each one in a shallower room.
"""
from __future__ import annotations

import math
import random
from collections import deque
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from ..logging_utils import get_logger
from .config import FloorConfig
from .models import Coord, Corridor, Room
from .tiles import HOSTILE_ROLES, RoomAccess, RoomRole

log = get_logger("floorgen.roles")

# Rooms with no links sort behind every connected room when picking the anchor.
_UNCONNECTED = 10**6


def edge_distance(room: Room, width: int, height: int) -> int:
    r = room.rect
    return min(r.x, r.y, width - r.x_max, height - r.y_max)


def anchor_key(room: Room, width: int, height: int) -> int:
    count = len(room.connected) or _UNCONNECTED
    return count * 1000 + edge_distance(room, width, height)


def pick_anchor(rooms: Sequence[Room], width: int, height: int) -> Room:
    return min(rooms, key=lambda r: (anchor_key(r, width, height), r.id))


def bfs_distances(rooms: Sequence[Room], start: Room) -> Dict[int, int]:
    dist = {start.id: 0}
    q = deque([start.id])
    while q:
        cur = q.popleft()
        for nid in sorted(rooms[cur].connected):
            if nid not in dist:
                dist[nid] = dist[cur] + 1
                q.append(nid)
    return dist


def bfs_parents(rooms: Sequence[Room], start: Room, blocked: Optional[Set[int]] = None) -> Dict[int, Optional[int]]:
    """BFS tree over room links as child -> parent; ``blocked`` rooms are never entered."""
    blocked = blocked or set()
    parent: Dict[int, Optional[int]] = {start.id: None}
    q = deque([start.id])
    while q:
        cur = q.popleft()
        for nid in sorted(rooms[cur].connected):
            if nid not in parent and nid not in blocked:
                parent[nid] = cur
                q.append(nid)
    return parent


def mark_main_path(rooms: Sequence[Room], entrance: Room, exit_room: Optional[Room]) -> List[int]:
    """Flag the rooms on the BFS path from Entrance to Exit. Returns their ids, Entrance first."""
    for room in rooms:
        room.on_main_path = False
    path = [entrance.id]
    if exit_room is not None:
        parent = bfs_parents(rooms, entrance)
        path = []
        cur: Optional[int] = exit_room.id
        while cur is not None:
            path.append(cur)
            cur = parent[cur]
        path.reverse()
    for rid in path:
        rooms[rid].on_main_path = True
    return path


def _farthest(candidates: Sequence[Room]) -> Optional[Room]:
    if not candidates:
        return None
    return min(candidates, key=lambda r: (-r.distance, r.id))


def _reached_combat(rooms: Sequence[Room]) -> List[Room]:
    return [r for r in rooms if r.role == RoomRole.COMBAT and r.distance >= 0]


def assign_boss(rooms: Sequence[Room], exit_room: Optional[Room]) -> Optional[Room]:
    pool = _reached_combat(rooms)
    if exit_room is not None:
        near_exit = [r for r in pool if r.id in exit_room.connected]
        boss = _farthest(near_exit) or _farthest(pool)
    else:
        boss = _farthest(pool)
    if boss is not None:
        boss.set_role(RoomRole.BOSS)
    return boss


def assign_special_rooms(rooms: Sequence[Room], shop_rooms: int, treasure_rooms: int) -> None:
    pool = _reached_combat(rooms)
    if len(pool) < 2:
        return
    mean = sum(r.distance for r in pool) / len(pool)
    ordered = sorted(pool, key=lambda r: (abs(r.distance - mean), r.id))
    for room in ordered[:shop_rooms]:
        room.set_role(RoomRole.SHOP)
    for room in ordered[shop_rooms:shop_rooms + treasure_rooms]:
        room.set_role(RoomRole.TREASURE)


def assign_empty_rooms(rooms: Sequence[Room], rng: random.Random) -> None:
    pool = _reached_combat(rooms)
    if not pool:
        return
    count = max(1, len(pool) // 4)
    for room in rng.sample(pool, min(count, len(pool))):
        room.set_role(RoomRole.EMPTY)


def spawn_positions(
    room: Room,
    count: int,
    rng: random.Random,
    padding: int = 2,
    attempts: int = 10,
) -> List[Coord]:
    """Spread ``count`` spawn points over a jittered square grid inside the room."""
    r = room.rect
    if count <= 0 or r.w <= 2 * padding or r.h <= 2 * padding:
        return []
    # Usable area, never wider than the room interior.
    x0, x1 = max(r.x + padding, r.x + 1), min(r.x_max - padding, r.x_max - 1) - 1
    y0, y1 = max(r.y + padding, r.y + 1), min(r.y_max - padding, r.y_max - 1) - 1
    if x1 < x0 or y1 < y0:
        return []
    cols = math.ceil(math.sqrt(count))
    span_w, span_h = x1 - x0 + 1, y1 - y0 + 1
    used = set()
    out: List[Coord] = []
    for i in range(count):
        gx, gy = i % cols, i // cols
        base_x = x0 + int((gx + 0.5) * span_w / cols)
        base_y = y0 + int((gy + 0.5) * span_h / cols)
        for _ in range(attempts):
            px = max(x0, min(x1, base_x + rng.randint(-1, 1)))
            py = max(y0, min(y1, base_y + rng.randint(-1, 1)))
            if (px, py) not in used:
                used.add((px, py))
                out.append((px, py))
                break
    return out


def assign_roles(
    rooms: Sequence[Room],
    config: FloorConfig,
    rng: random.Random,
    metrics: Optional[Dict[str, Any]] = None,
) -> None:
    if not rooms:
        return
    anchor = pick_anchor(rooms, config.width, config.height)
    dist = bfs_distances(rooms, anchor)
    for room in rooms:
        room.distance = dist.get(room.id, -1)
        room.set_role(RoomRole.COMBAT)
    unreached = [r.id for r in rooms if r.distance < 0]
    if unreached:
        log.warn(event="rooms_unreached", rooms=unreached)
    if metrics is not None:
        metrics['unreached_rooms'] = len(unreached)

    reached = [r for r in rooms if r.distance >= 0]
    entrance = min(reached, key=lambda r: (r.distance, r.id))
    entrance.set_role(RoomRole.ENTRANCE)
    exit_room = _farthest([r for r in reached if r.id != entrance.id])
    if exit_room is not None:
        exit_room.set_role(RoomRole.EXIT)
    path = mark_main_path(rooms, entrance, exit_room)
    if metrics is not None:
        metrics['main_path_rooms'] = len(path)

    if config.floor_level % config.boss_floor_interval == 0:
        boss = assign_boss(rooms, exit_room)
        if boss is None:
            log.debug(event="boss_skipped", floor_level=config.floor_level)
    assign_special_rooms(rooms, config.shop_rooms, config.treasure_rooms)
    assign_empty_rooms(rooms, rng)

    for room in rooms:
        room.spawn_positions = []
        if room.role in HOSTILE_ROLES:
            room.spawn_positions = spawn_positions(
                room, config.enemies_per_room, rng,
                padding=config.spawn_padding, attempts=config.spawn_attempts,
            )


def lock_candidates(rooms: Sequence[Room], count: int) -> List[Room]:
    """Shop and Treasure rooms, or failing that the ``count`` deepest rooms off the main path."""
    specials = [r for r in rooms if r.role in (RoomRole.SHOP, RoomRole.TREASURE) and r.distance > 0]
    if specials:
        return specials
    side = [
        r for r in rooms
        if r.distance > 0 and not r.on_main_path and r.role != RoomRole.BOSS
    ]
    side.sort(key=lambda r: (-r.distance, r.id))
    return side[:count]


def place_locks_and_keys(
    rooms: Sequence[Room],
    corridors: Sequence[Corridor],
    count: int,
    rng: random.Random,
    metrics: Optional[Dict[str, Any]] = None,
) -> Tuple[Set[Coord], Set[Coord]]:
    """Lock up to ``count`` rooms and drop one key for each in a shallower room.

    Every door into a locked room is locked. Its key sits at the center of a
    room with a smaller BFS distance that can be reached from the Entrance
    without passing any locked room. Returns (locked door tiles, key tiles).
    """
    locked: Set[Coord] = set()
    keys: Set[Coord] = set()
    pool = lock_candidates(rooms, count) if count > 0 else []
    entrance = next((r for r in rooms if r.role == RoomRole.ENTRANCE), None)
    if pool and entrance is not None:
        chosen = sorted(rng.sample(pool, min(count, len(pool))), key=lambda r: r.id)
        chosen_ids = {r.id for r in chosen}
        open_reach = bfs_parents(rooms, entrance, blocked=chosen_ids)
        for target in chosen:
            doors = [
                c.start_door if c.start_room_id == target.id else c.end_door
                for c in corridors
                if target.id in (c.start_room_id, c.end_room_id)
            ]
            shallower = [
                rooms[rid] for rid in sorted(open_reach)
                if rooms[rid].distance < target.distance and not rooms[rid].has_key
            ]
            holders = [r for r in shallower if r.role != RoomRole.ENTRANCE] or shallower
            if not doors or not holders:
                log.debug(event="lock_skipped", room=target.id)
                continue
            holder = rng.choice(holders)
            locked.update(doors)
            target.state = RoomAccess.LOCKED
            cx, cy = holder.center
            keys.add((int(cx), int(cy)))
            holder.has_key = True
    if metrics is not None:
        metrics['locked_doors'] = len(locked)
        metrics['keys_placed'] = len(keys)
    return locked, keys
