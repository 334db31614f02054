"""Corridor selection: minimum spanning tree, extra loops and connectivity repair."""
from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from ..logging_utils import get_logger
from .corridors import CorridorBuilder, center_distance
from .errors import ConnectivityError
from .models import Corridor, Room

log = get_logger("floorgen.connectivity")


def minimum_spanning_corridors(room_count: int, candidates: Sequence[Corridor]) -> Tuple[List[Corridor], List[Corridor]]:
    """Kruskal over ``candidates``; returns (selected, discarded), both in weight order."""
    parent = list(range(room_count))

    def find(a):
        while parent[a] != a:
            parent[a] = parent[parent[a]]
            a = parent[a]
        return a

    def union(a, b):
        ra, rb = find(a), find(b)
        if ra != rb:
            parent[rb] = ra
            return True
        return False

    selected: List[Corridor] = []
    discarded: List[Corridor] = []
    for c in sorted(candidates, key=lambda c: c.weight):
        if union(c.start_room_id, c.end_room_id):
            selected.append(c)
        else:
            discarded.append(c)
    return selected, discarded


def add_extra_connections(
    selected: List[Corridor],
    discarded: Sequence[Corridor],
    count: int,
    rng: random.Random,
) -> int:
    """Re-add up to ``count`` discarded corridors to form loops. Returns how many were added."""
    pairs = {c.room_pair for c in selected}
    pool = [c for c in discarded if c.room_pair not in pairs]
    if count <= 0 or not pool:
        return 0
    added = 0
    for c in rng.sample(pool, min(count, len(pool))):
        if c.room_pair in pairs:
            continue
        selected.append(c)
        pairs.add(c.room_pair)
        added += 1
    return added


def room_components(room_count: int, corridors: Sequence[Corridor]) -> List[List[int]]:
    """Connected components of the room graph, each sorted, ordered by smallest room id."""
    adj: Dict[int, Set[int]] = {i: set() for i in range(room_count)}
    for c in corridors:
        adj[c.start_room_id].add(c.end_room_id)
        adj[c.end_room_id].add(c.start_room_id)
    seen: Set[int] = set()
    comps: List[List[int]] = []
    for start in range(room_count):
        if start in seen:
            continue
        comp = []
        stack = [start]
        seen.add(start)
        while stack:
            cur = stack.pop()
            comp.append(cur)
            for nxt in adj[cur]:
                if nxt not in seen:
                    seen.add(nxt)
                    stack.append(nxt)
        comps.append(sorted(comp))
    return comps


def repair_connectivity(
    rooms: Sequence[Room],
    selected: List[Corridor],
    builder: CorridorBuilder,
    metrics: Optional[Dict[str, Any]] = None,
) -> int:
    """Join every stray component to the one holding room 0.

    Room pairs across the gap are tried closest first with closest-wall doors
    and a guarded path. Raises ConnectivityError when a component cannot be
    reached.
    """
    repairs = 0
    comps = room_components(len(rooms), selected)
    while len(comps) > 1:
        stray = comps[1]
        pairs = sorted(
            ((center_distance(rooms[a], rooms[b]), a, b) for a in comps[0] for b in stray),
            key=lambda p: p[0],
        )
        joined: Optional[Corridor] = None
        for _d, a, b in pairs:
            joined = builder.connect(rooms[a], rooms[b], aligned=False)
            if joined is not None:
                break
        if joined is None:
            log.error(event="connectivity_repair_failed", components=len(comps), stray=stray)
            raise ConnectivityError(f"could not connect rooms {stray} to the main component", comps)
        log.warn(event="connectivity_repair", start=joined.start_room_id, end=joined.end_room_id, tiles=len(joined.tiles))
        selected.append(joined)
        repairs += 1
        comps = room_components(len(rooms), selected)
    if metrics is not None:
        metrics['repairs_performed'] = repairs
    return repairs


def select_corridors(
    rooms: Sequence[Room],
    candidates: Sequence[Corridor],
    builder: CorridorBuilder,
    extra_connections: int,
    rng: random.Random,
    metrics: Optional[Dict[str, Any]] = None,
) -> List[Corridor]:
    """Pick the corridors that make it into the floor and record room links."""
    selected, discarded = minimum_spanning_corridors(len(rooms), candidates)
    added = add_extra_connections(selected, discarded, extra_connections, rng)
    if metrics is not None:
        metrics['extra_connections_added'] = added
    if rooms:
        repair_connectivity(rooms, selected, builder, metrics)
    for c in selected:
        rooms[c.start_room_id].connected.add(c.end_room_id)
        rooms[c.end_room_id].connected.add(c.start_room_id)
    if metrics is not None:
        metrics['corridors_selected'] = len(selected)
    return selected
