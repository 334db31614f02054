"""Data model for a generated floor: rectangles, partitions, rooms, corridors, layout."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Set, Tuple

from .config import FloorConfig
from .tiles import DEFAULT_ACCESS, RoomAccess, RoomRole, WallType

Coord = Tuple[int, int]


class Rect(NamedTuple):
    x: int
    y: int
    w: int
    h: int

    @property
    def x_max(self) -> int:
        return self.x + self.w

    @property
    def y_max(self) -> int:
        return self.y + self.h

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.w / 2, self.y + self.h / 2)

    def contains(self, pos: Coord) -> bool:
        px, py = pos
        return self.x <= px < self.x_max and self.y <= py < self.y_max

    def cells(self) -> Iterator[Coord]:
        for ix in range(self.x, self.x_max):
            for iy in range(self.y, self.y_max):
                yield ix, iy

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass
class Partition:
    id: int
    rect: Rect
    depth: int
    left: Optional[int] = None
    right: Optional[int] = None
    room_id: Optional[int] = None
    neighbors: Set[int] = field(default_factory=set)

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


@dataclass
class PartitionTree:
    """Arena of partitions; children and neighbors are stored as node ids."""

    nodes: List[Partition] = field(default_factory=list)
    root: int = 0

    def add(self, rect: Rect, depth: int) -> Partition:
        node = Partition(id=len(self.nodes), rect=rect, depth=depth)
        self.nodes.append(node)
        return node

    def get(self, pid: int) -> Partition:
        return self.nodes[pid]

    def leaves(self) -> List[Partition]:
        """Leaf partitions in left-to-right depth-first order."""
        if not self.nodes:
            return []
        out: List[Partition] = []
        stack = [self.root]
        while stack:
            node = self.nodes[stack.pop()]
            if node.is_leaf:
                out.append(node)
                continue
            # right first so left is visited first
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)
        return out

    def __len__(self) -> int:
        return len(self.nodes)


@dataclass
class Room:
    id: int
    rect: Rect
    partition_id: int
    role: RoomRole = RoomRole.COMBAT
    state: RoomAccess = RoomAccess.CLOSED
    distance: int = -1
    connected: Set[int] = field(default_factory=set)
    spawn_positions: List[Coord] = field(default_factory=list)
    is_revealed: bool = False
    is_cleared: bool = False
    on_main_path: bool = False
    has_key: bool = False

    def set_role(self, role: RoomRole) -> None:
        self.role = role
        self.state = DEFAULT_ACCESS[role]
        self.is_revealed = role in (RoomRole.ENTRANCE, RoomRole.EXIT)
        self.is_cleared = role not in (RoomRole.COMBAT, RoomRole.BOSS)

    @property
    def center(self) -> Tuple[float, float]:
        return self.rect.center

    def floor_tiles(self) -> Iterator[Coord]:
        r = self.rect
        for ix in range(r.x + 1, r.x_max - 1):
            for iy in range(r.y + 1, r.y_max - 1):
                yield ix, iy

    def perimeter_tiles(self) -> Iterator[Coord]:
        r = self.rect
        for ix in range(r.x, r.x_max):
            yield ix, r.y
            if r.h > 1:
                yield ix, r.y_max - 1
        for iy in range(r.y + 1, r.y_max - 1):
            yield r.x, iy
            if r.w > 1:
                yield r.x_max - 1, iy

    def door_sites(self) -> Iterator[Coord]:
        """Perimeter tiles a door may be carved from (every side, corners excluded)."""
        r = self.rect
        for ix in range(r.x + 1, r.x_max - 1):
            yield ix, r.y_max - 1
        for ix in range(r.x + 1, r.x_max - 1):
            yield ix, r.y
        for iy in range(r.y + 1, r.y_max - 1):
            yield r.x_max - 1, iy
        for iy in range(r.y + 1, r.y_max - 1):
            yield r.x, iy

    def is_interior(self, pos: Coord) -> bool:
        r = self.rect
        px, py = pos
        return r.x < px < r.x_max - 1 and r.y < py < r.y_max - 1

    def is_perimeter(self, pos: Coord) -> bool:
        return self.rect.contains(pos) and not self.is_interior(pos)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "bounds": self.rect.to_dict(),
            "role": self.role.value,
            "state": self.state.value,
            "distance": self.distance,
            "connected_room_ids": sorted(self.connected),
            "spawn_positions": [list(p) for p in self.spawn_positions],
            "revealed": self.is_revealed,
            "cleared": self.is_cleared,
            "on_main_path": self.on_main_path,
            "has_key": self.has_key,
        }


@dataclass
class Corridor:
    tiles: List[Coord]
    start_room_id: int
    end_room_id: int
    start_door: Coord
    end_door: Coord
    weight: float = 0.0

    @property
    def room_pair(self) -> Tuple[int, int]:
        return (min(self.start_room_id, self.end_room_id), max(self.start_room_id, self.end_room_id))

    @property
    def doors(self) -> Tuple[Coord, Coord]:
        return (self.start_door, self.end_door)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tiles": [list(t) for t in self.tiles],
            "start_room_id": self.start_room_id,
            "end_room_id": self.end_room_id,
            "start_door": list(self.start_door),
            "end_door": list(self.end_door),
        }


@dataclass
class Layout:
    config: FloorConfig
    seed: int
    effective_seed: int
    attempts: int
    partitions: PartitionTree
    rooms: List[Room]
    corridors: List[Corridor]
    floor_tiles: Set[Coord] = field(default_factory=set)
    wall_tiles: Dict[Coord, WallType] = field(default_factory=dict)
    door_tiles: Set[Coord] = field(default_factory=set)
    # Subset of door_tiles that need a key.
    locked_door_tiles: Set[Coord] = field(default_factory=set)
    key_tiles: Set[Coord] = field(default_factory=set)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    def room(self, room_id: int) -> Room:
        return self.rooms[room_id]

    def rooms_with_role(self, role: RoomRole) -> List[Room]:
        return [r for r in self.rooms if r.role == role]

    @property
    def entrance(self) -> Optional[Room]:
        found = self.rooms_with_role(RoomRole.ENTRANCE)
        return found[0] if found else None

    @property
    def exit(self) -> Optional[Room]:
        found = self.rooms_with_role(RoomRole.EXIT)
        return found[0] if found else None

    def role_breakdown(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for r in self.rooms:
            counts[r.role.value] = counts.get(r.role.value, 0) + 1
        return counts

    def is_connected(self) -> bool:
        if not self.rooms:
            return True
        seen = {0}
        stack = [0]
        while stack:
            for nid in self.rooms[stack.pop()].connected:
                if nid not in seen:
                    seen.add(nid)
                    stack.append(nid)
        return len(seen) == len(self.rooms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "effective_seed": self.effective_seed,
            "attempts": self.attempts,
            "floor_level": self.config.floor_level,
            "width": self.width,
            "height": self.height,
            "rooms": [r.to_dict() for r in self.rooms],
            "corridors": [c.to_dict() for c in self.corridors],
            "floor_tiles": [list(t) for t in sorted(self.floor_tiles)],
            "wall_tiles": [[x, y, wt.value] for (x, y), wt in sorted(self.wall_tiles.items())],
            "door_tiles": [list(t) for t in sorted(self.door_tiles)],
            "locked_door_tiles": [list(t) for t in sorted(self.locked_door_tiles)],
            "key_tiles": [list(t) for t in sorted(self.key_tiles)],
            "metrics": dict(self.metrics),
        }


__all__ = ["Coord", "Rect", "Partition", "PartitionTree", "Room", "Corridor", "Layout"]
