"""Room role, access state and wall type enums shared by every generation stage."""
from __future__ import annotations

from enum import Enum


class RoomRole(str, Enum):
    # Endpoints
    ENTRANCE = "entrance"
    EXIT = "exit"
    # Standard
    EMPTY = "empty"
    COMBAT = "combat"
    SHOP = "shop"
    TREASURE = "treasure"
    # Special
    BOSS = "boss"
    SURVIVAL = "survival"
    PUZZLE = "puzzle"
    SECRET = "secret"


class RoomAccess(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    LOCKED = "locked"


class WallType(str, Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    NORTH_EAST_CORNER = "north_east_corner"
    NORTH_WEST_CORNER = "north_west_corner"
    SOUTH_EAST_CORNER = "south_east_corner"
    SOUTH_WEST_CORNER = "south_west_corner"
    CORRIDOR = "corridor"
    INTERIOR = "interior"


# Rooms that hold enemies start sealed until cleared.
DEFAULT_ACCESS = {
    RoomRole.ENTRANCE: RoomAccess.OPEN,
    RoomRole.EXIT: RoomAccess.OPEN,
    RoomRole.EMPTY: RoomAccess.OPEN,
    RoomRole.COMBAT: RoomAccess.CLOSED,
    RoomRole.SHOP: RoomAccess.OPEN,
    RoomRole.TREASURE: RoomAccess.OPEN,
    RoomRole.BOSS: RoomAccess.CLOSED,
    RoomRole.SURVIVAL: RoomAccess.CLOSED,
    RoomRole.PUZZLE: RoomAccess.OPEN,
    RoomRole.SECRET: RoomAccess.LOCKED,
}

# Roles that receive enemy spawn points.
HOSTILE_ROLES = frozenset({RoomRole.COMBAT, RoomRole.BOSS})

# Four-connectivity offsets, fixed order so every traversal is reproducible.
NEIGHBOR_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1))

__all__ = [
    "RoomRole",
    "RoomAccess",
    "WallType",
    "DEFAULT_ACCESS",
    "HOSTILE_ROLES",
    "NEIGHBOR_OFFSETS",
]
