import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from floorgen import create_app  # noqa: E402
from floorgen.generation import FloorConfig, generate_floor  # noqa: E402
from floorgen.routes.floor_api import clear_layout_cache  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    app = create_app({"TESTING": True, "FLOORGEN_DISABLE_CACHE": False, "FLOORGEN_DEFAULTS": FloorConfig()})
    return app


@pytest.fixture(autouse=True)
def _push_app_context(test_app):
    ctx = test_app.app_context()
    ctx.push()
    try:
        yield
    finally:
        ctx.pop()


@pytest.fixture()
def client(test_app):
    clear_layout_cache()
    return test_app.test_client()


@pytest.fixture(autouse=True)
def _quiet_logs(monkeypatch):
    # Generation logs at info on every floor; keep test output readable.
    monkeypatch.setenv("FLOORGEN_LOG_LEVEL", "error")


@pytest.fixture
def two_room_config():
    """20x10 map cut into two 10x10 partitions, each holding an 8x8 room."""
    return FloorConfig(
        width=20,
        height=10,
        seed=3,
        min_partition_size=9,
        max_partition_size=10,
        min_split_ratio=0.5,
        max_split_ratio=0.5,
        min_inset=1,
        max_inset=1,
        min_room_size=5,
    )


@pytest.fixture
def two_room_layout(two_room_config):
    return generate_floor(two_room_config)


@pytest.fixture(scope="session")
def default_layout():
    return generate_floor(FloorConfig(seed=42))
