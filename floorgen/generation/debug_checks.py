"""Structural checks over a finished layout.

``analyze`` returns a dict of defect lists; every list is empty for a
consistent layout. Used by strict mode, ``scripts/diagnose_seeds.py`` and the
test suite.
"""
from __future__ import annotations

from collections import deque
from typing import Any, Dict, List, Set

from .corridors import is_contiguous
from .models import Coord, Layout
from .tiles import NEIGHBOR_OFFSETS, RoomRole, WallType


def walkable_reach(layout: Layout, start: Coord) -> Set[Coord]:
    """Tiles reachable from ``start`` over floor and door tiles."""
    walkable = layout.floor_tiles | layout.door_tiles
    if start not in walkable:
        return set()
    seen = {start}
    q = deque([start])
    while q:
        x, y = q.popleft()
        for dx, dy in NEIGHBOR_OFFSETS:
            nxt = (x + dx, y + dy)
            if nxt in walkable and nxt not in seen:
                seen.add(nxt)
                q.append(nxt)
    return seen


def _room_overlaps(layout: Layout) -> List[List[int]]:
    out = []
    rooms = layout.rooms
    for i, a in enumerate(rooms):
        for b in rooms[i + 1:]:
            ra, rb = a.rect, b.rect
            if ra.x < rb.x_max and rb.x < ra.x_max and ra.y < rb.y_max and rb.y < ra.y_max:
                out.append([a.id, b.id])
    return out


def _bad_doors(layout: Layout) -> List[Dict[str, Any]]:
    usage: Dict[Coord, int] = {}
    for c in layout.corridors:
        for d in c.doors:
            usage[d] = usage.get(d, 0) + 1
    bad = []
    for door in sorted(layout.door_tiles):
        owners = [r for r in layout.rooms if r.is_perimeter(door)]
        reason = None
        if usage.get(door, 0) != 1:
            reason = "shared" if usage.get(door, 0) > 1 else "orphan"
        elif len(owners) != 1:
            reason = "not_on_perimeter"
        else:
            room = owners[0]
            x, y = door
            around = [(x + dx, y + dy) for dx, dy in NEIGHBOR_OFFSETS]
            if not any(room.is_interior(p) for p in around):
                reason = "no_interior_neighbor"
            elif not any(p in layout.floor_tiles and not room.rect.contains(p) for p in around):
                reason = "no_corridor_neighbor"
        if reason:
            bad.append({"pos": list(door), "reason": reason})
    return bad


def _role_issues(layout: Layout) -> List[str]:
    issues = []
    n = len(layout.rooms)
    entrances = len(layout.rooms_with_role(RoomRole.ENTRANCE))
    exits = len(layout.rooms_with_role(RoomRole.EXIT))
    if entrances != 1:
        issues.append(f"entrance_count={entrances}")
    expected_exits = 1 if n >= 2 else 0
    if exits != expected_exits:
        issues.append(f"exit_count={exits}")
    return issues


def _lock_issues(layout: Layout) -> List[Dict[str, Any]]:
    bad = [{"pos": list(t), "reason": "locked_not_door"} for t in sorted(layout.locked_door_tiles - layout.door_tiles)]
    bad += [{"pos": list(t), "reason": "key_off_floor"} for t in sorted(layout.key_tiles - layout.floor_tiles)]
    return bad


def analyze(layout: Layout) -> Dict[str, List[Any]]:
    floor, doors = layout.floor_tiles, layout.door_tiles
    walls = set(layout.wall_tiles)

    corridor_in_interior = []
    broken_corridors = []
    for idx, c in enumerate(layout.corridors):
        if not is_contiguous(c.tiles):
            broken_corridors.append(idx)
        for t in c.tiles:
            if any(r.is_interior(t) for r in layout.rooms):
                corridor_in_interior.append(list(t))

    unreachable_rooms: List[int] = []
    entrance = layout.entrance
    if entrance is not None:
        start = next(entrance.floor_tiles(), None)
        reach = walkable_reach(layout, start) if start is not None else set()
        for r in layout.rooms:
            first = next(r.floor_tiles(), None)
            if first is None or first not in reach:
                unreachable_rooms.append(r.id)

    return {
        "room_overlaps": _room_overlaps(layout),
        "corridor_in_interior": corridor_in_interior,
        "broken_corridors": broken_corridors,
        "floor_wall_overlap": sorted(list(t) for t in floor & walls),
        "floor_door_overlap": sorted(list(t) for t in floor & doors),
        "wall_door_overlap": sorted(list(t) for t in walls & doors),
        "interior_walls": sorted(list(t) for t, wt in layout.wall_tiles.items() if wt == WallType.INTERIOR),
        "bad_doors": _bad_doors(layout),
        "disconnected_graph": [] if layout.is_connected() else [sorted(r.id for r in layout.rooms)],
        "unreachable_rooms": unreachable_rooms,
        "role_issues": _role_issues(layout),
        "lock_issues": _lock_issues(layout),
    }


def issue_counts(report: Dict[str, List[Any]]) -> Dict[str, int]:
    return {k: len(v) for k, v in report.items()}


def is_clean(report: Dict[str, List[Any]]) -> bool:
    return not any(report.values())


def run_for_seed(seed: int, config=None) -> Dict[str, Any]:
    """Generate ``seed`` (strict mode off) and return its per-check issue counts."""
    from .config import FloorConfig
    from .pipeline import generate_floor

    cfg = (config or FloorConfig()).replace(seed=seed, strict=False)
    layout = generate_floor(cfg)
    issues = issue_counts(analyze(layout))
    issues["repairs_performed"] = layout.metrics.get("repairs_performed", 0)
    ok = all(v == 0 for k, v in issues.items() if k != "repairs_performed")
    return {"seed": seed, "attempts": layout.attempts, "issues": issues, "ok": ok}
