from __future__ import annotations

import os
import random
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError


@dataclass
class FloorConfig:
    width: int = 100
    height: int = 100
    seed: Optional[int] = None
    floor_level: int = 1
    # Partitioning
    min_partition_size: int = 20
    max_partition_size: int = 35
    min_split_ratio: float = 0.35
    max_split_ratio: float = 0.65
    # Rooms
    min_inset: int = 1
    max_inset: int = 3
    min_room_size: int = 5
    # Connectivity
    extra_connections: int = 3
    # Roles
    boss_floor_interval: int = 5
    shop_rooms: int = 1
    treasure_rooms: int = 1
    enemies_per_room: int = 3
    spawn_padding: int = 2
    spawn_attempts: int = 10
    # Locks and keys
    locked_rooms: int = 1
    # Progression
    floor_growth: int = 20
    max_floor_size: int = 1000
    # Run control
    max_attempts: int = 3
    strict: bool = False

    def validate(self) -> "FloorConfig":
        """Raise ConfigError on values the pipeline cannot honor. Returns self for chaining."""
        if self.width < 3 or self.height < 3:
            raise ConfigError(f"floor must be at least 3x3, got {self.width}x{self.height}")
        if self.min_partition_size < 1:
            raise ConfigError("min_partition_size must be positive")
        if self.max_partition_size < self.min_partition_size:
            raise ConfigError("max_partition_size must be >= min_partition_size")
        if not 0.0 < self.min_split_ratio <= self.max_split_ratio < 1.0:
            raise ConfigError("split ratios must satisfy 0 < min_split_ratio <= max_split_ratio < 1")
        if self.min_inset < 1 or self.max_inset < self.min_inset:
            raise ConfigError("insets must satisfy 1 <= min_inset <= max_inset")
        if self.min_room_size < 3:
            raise ConfigError("min_room_size must be >= 3 so every room has an interior")
        if self.extra_connections < 0:
            raise ConfigError("extra_connections must be >= 0")
        if self.floor_level < 1:
            raise ConfigError("floor_level must be >= 1")
        if self.boss_floor_interval < 1:
            raise ConfigError("boss_floor_interval must be >= 1")
        if min(self.shop_rooms, self.treasure_rooms, self.locked_rooms, self.enemies_per_room, self.spawn_padding) < 0:
            raise ConfigError("room counts and spawn padding must be >= 0")
        if self.spawn_attempts < 1 or self.max_attempts < 1:
            raise ConfigError("spawn_attempts and max_attempts must be >= 1")
        return self

    def resolved_seed(self) -> int:
        # 0 is a valid deterministic seed; None draws one.
        if self.seed is None:
            self.seed = random.randint(0, 2**31 - 1)
        return self.seed

    def replace(self, **changes: Any) -> "FloorConfig":
        return replace(self, **changes)

    def next_floor(self, rng: random.Random) -> "FloorConfig":
        """Config for the floor below: one level deeper and grown along one random axis."""
        grown = self.replace(floor_level=self.floor_level + 1)
        if rng.random() < 0.5:
            grown.width = min(self.width + self.floor_growth, self.max_floor_size)
        else:
            grown.height = min(self.height + self.floor_growth, self.max_floor_size)
        return grown

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], base: Optional["FloorConfig"] = None) -> "FloorConfig":
        """Build a config from loosely typed values (query args, JSON, env).

        Unknown keys are ignored; known keys are coerced to the field's type.
        """
        cfg = replace(base) if base is not None else cls()
        for f in fields(cls):
            if f.name not in data:
                continue
            raw = data[f.name]
            setattr(cfg, f.name, _coerce(f.name, raw))
        return cfg

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FloorConfig":
        environ = os.environ if environ is None else environ
        prefix = "FLOORGEN_"
        data = {
            key[len(prefix):].lower(): value
            for key, value in environ.items()
            if key.startswith(prefix) and key[len(prefix):].lower() in _FIELD_NAMES
        }
        return cls.from_mapping(data)


_FIELD_NAMES = {f.name for f in fields(FloorConfig)}
_FLOAT_FIELDS = {"min_split_ratio", "max_split_ratio"}


def _coerce(name: str, raw: Any) -> Any:
    if name == "seed":
        if raw is None or (isinstance(raw, str) and raw.strip().lower() in {"", "none", "null"}):
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise ConfigError(f"seed must be an integer, got {raw!r}")
    if name == "strict":
        if isinstance(raw, str):
            return raw.strip().lower() not in {"0", "false", "no", "off", ""}
        return bool(raw)
    try:
        if name in _FLOAT_FIELDS:
            return float(raw)
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be {'a number' if name in _FLOAT_FIELDS else 'an integer'}, got {raw!r}")


__all__ = ["FloorConfig"]
