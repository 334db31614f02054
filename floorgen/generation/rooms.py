"""Room placement inside leaf partitions."""
from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

from ..logging_utils import get_logger
from .config import FloorConfig
from .models import Partition, PartitionTree, Rect, Room

log = get_logger("floorgen.rooms")


def _inset(rng: random.Random, config: FloorConfig, dim: int) -> int:
    # Upper bound keeps both opposing insets from eating into min_room_size.
    draw = rng.randint(config.min_inset, config.max_inset)
    return max(1, min(draw, (dim - config.min_room_size) // 2))


def room_rect_for(partition: Partition, config: FloorConfig, rng: random.Random) -> Optional[Rect]:
    """Carve a room rect inside ``partition`` or return None when it is too small."""
    r = partition.rect
    if r.w - 2 < config.min_room_size or r.h - 2 < config.min_room_size:
        return None
    left = _inset(rng, config, r.w)
    right = _inset(rng, config, r.w)
    bottom = _inset(rng, config, r.h)
    top = _inset(rng, config, r.h)
    return Rect(r.x + left, r.y + bottom, r.w - left - right, r.h - bottom - top)


def place_rooms(
    tree: PartitionTree,
    config: FloorConfig,
    rng: random.Random,
    metrics: Optional[Dict[str, Any]] = None,
) -> List[Room]:
    rooms: List[Room] = []
    for leaf in tree.leaves():
        rect = room_rect_for(leaf, config, rng)
        if rect is None:
            log.debug(event="partition_roomless", partition=leaf.id, w=leaf.rect.w, h=leaf.rect.h)
            if metrics is not None:
                metrics['partitions_roomless'] += 1
            continue
        room = Room(id=len(rooms), rect=rect, partition_id=leaf.id)
        leaf.room_id = room.id
        rooms.append(room)
    if metrics is not None:
        metrics['rooms'] = len(rooms)
    return rooms
