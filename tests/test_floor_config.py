import random

import pytest

from floorgen.generation import ConfigError, FloorConfig


def test_defaults_validate():
    cfg = FloorConfig()
    assert cfg.validate() is cfg
    assert (cfg.width, cfg.height) == (100, 100)
    assert cfg.seed is None
    assert cfg.boss_floor_interval == 5


@pytest.mark.parametrize(
    "changes",
    [
        {"width": 2},
        {"min_partition_size": 0},
        {"max_partition_size": 10, "min_partition_size": 20},
        {"min_split_ratio": 0.7, "max_split_ratio": 0.6},
        {"max_split_ratio": 1.0},
        {"min_inset": 0},
        {"max_inset": 0},
        {"min_room_size": 2},
        {"extra_connections": -1},
        {"floor_level": 0},
        {"boss_floor_interval": 0},
        {"enemies_per_room": -1},
        {"locked_rooms": -1},
        {"max_attempts": 0},
    ],
)
def test_invalid_values_raise(changes):
    with pytest.raises(ConfigError):
        FloorConfig(**changes).validate()


def test_config_error_is_value_error():
    with pytest.raises(ValueError):
        FloorConfig(width=1).validate()


def test_from_mapping_coerces_strings():
    cfg = FloorConfig.from_mapping({"width": "64", "min_split_ratio": "0.4", "strict": "yes", "seed": "12", "junk": "x"})
    assert cfg.width == 64
    assert cfg.min_split_ratio == pytest.approx(0.4)
    assert cfg.strict is True
    assert cfg.seed == 12
    assert not hasattr(cfg, "junk")


@pytest.mark.parametrize("raw", [None, "", "none", "NULL"])
def test_from_mapping_null_seed(raw):
    assert FloorConfig.from_mapping({"seed": raw}).seed is None


def test_from_mapping_rejects_garbage():
    with pytest.raises(ConfigError):
        FloorConfig.from_mapping({"height": "tall"})
    with pytest.raises(ConfigError):
        FloorConfig.from_mapping({"seed": "abc"})


def test_from_mapping_keeps_base():
    base = FloorConfig(width=70, extra_connections=0)
    cfg = FloorConfig.from_mapping({"height": 50}, base=base)
    assert (cfg.width, cfg.height, cfg.extra_connections) == (70, 50, 0)
    assert base.height == 100


def test_from_env_reads_prefixed_fields():
    env = {"FLOORGEN_WIDTH": "120", "FLOORGEN_STRICT": "0", "FLOORGEN_LOG_LEVEL": "debug", "WIDTH": "5"}
    cfg = FloorConfig.from_env(env)
    assert cfg.width == 120
    assert cfg.strict is False


def test_next_floor_grows_one_axis():
    cfg = FloorConfig(width=100, height=100, floor_growth=20, floor_level=3)
    nxt = cfg.next_floor(random.Random(1))
    assert nxt.floor_level == 4
    assert sorted((nxt.width, nxt.height)) == [100, 120]
    assert (cfg.width, cfg.height, cfg.floor_level) == (100, 100, 3)


def test_next_floor_capped():
    cfg = FloorConfig(width=990, height=990, floor_growth=20, max_floor_size=1000)
    nxt = cfg.next_floor(random.Random(2))
    assert max(nxt.width, nxt.height) == 1000


def test_to_dict_round_trip():
    cfg = FloorConfig(seed=4, width=80)
    assert FloorConfig.from_mapping(cfg.to_dict()) == cfg


def test_layout_carries_its_floor_config():
    from typing import get_type_hints

    from floorgen.generation import Layout, generate_floor

    assert get_type_hints(Layout)["config"] is FloorConfig
    layout = generate_floor(FloorConfig(seed=4, width=60, height=60))
    assert isinstance(layout.config, FloorConfig)
    assert (layout.width, layout.height) == (60, 60)
