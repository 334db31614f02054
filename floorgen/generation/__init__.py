"""Public floor generation interface."""

from .config import FloorConfig
from .errors import (
    ConfigError,
    ConnectivityError,
    GenerationError,
    GenerationFailed,
    InvariantViolation,
)
from .models import Corridor, Layout, Partition, PartitionTree, Rect, Room
from .pipeline import FloorGenerator, generate_floor, generate_floors, next_floor_config
from .render import CORRIDOR, DOOR, EMPTY, KEY, LOCKED_DOOR, ROOM, WALL, to_ascii
from .tiles import RoomAccess, RoomRole, WallType

__all__ = [
    "FloorConfig",
    "FloorGenerator",
    "generate_floor",
    "generate_floors",
    "next_floor_config",
    "Layout",
    "Room",
    "Corridor",
    "Partition",
    "PartitionTree",
    "Rect",
    "RoomRole",
    "RoomAccess",
    "WallType",
    "GenerationError",
    "ConfigError",
    "ConnectivityError",
    "InvariantViolation",
    "GenerationFailed",
    "to_ascii",
    "EMPTY",
    "ROOM",
    "CORRIDOR",
    "DOOR",
    "WALL",
    "LOCKED_DOOR",
    "KEY",
]
