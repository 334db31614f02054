import pytest

from floorgen.generation import GenerationFailed
from floorgen.routes import floor_api
from floorgen.utils.tile_compress import decode_tiles


def test_layout_endpoint_returns_full_layout(client):
    resp = client.get("/api/floor/layout?seed=42&width=60&height=60")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["seed"] == 42
    assert (data["width"], data["height"]) == (60, 60)
    assert data["rooms"] and data["corridors"]
    room = data["rooms"][0]
    assert set(room) >= {"id", "bounds", "role", "state", "distance", "connected_room_ids", "spawn_positions"}
    assert all(len(t) == 2 for t in data["floor_tiles"])
    assert all(len(t) == 3 for t in data["wall_tiles"])
    roles = [r["role"] for r in data["rooms"]]
    assert roles.count("entrance") == 1 and roles.count("exit") == 1


def test_layout_endpoint_compact(client):
    full = client.get("/api/floor/layout?seed=7&width=60&height=60").get_json()
    compact = client.get("/api/floor/layout?seed=7&width=60&height=60&compact=1").get_json()
    assert compact["encoding"] == "delta"
    assert decode_tiles(compact["floor_tiles"]) == [tuple(t) for t in full["floor_tiles"]]
    assert decode_tiles(compact["door_tiles"]) == [tuple(t) for t in full["door_tiles"]]
    wall_count = sum(len(decode_tiles(v)) for v in compact["wall_tiles"].values())
    assert wall_count == len(full["wall_tiles"])


def test_layout_is_cached_per_config(client):
    client.get("/api/floor/layout?seed=9&width=60&height=60")
    cfg_key_count = len(floor_api._layout_cache)
    client.get("/api/floor/layout?seed=9&width=60&height=60")
    assert len(floor_api._layout_cache) == cfg_key_count
    client.get("/api/floor/layout?seed=10&width=60&height=60")
    assert len(floor_api._layout_cache) == cfg_key_count + 1


def test_cache_size_limit(client, test_app, monkeypatch):
    monkeypatch.setitem(test_app.config, "FLOORGEN_CACHE_SIZE", 2)
    for seed in (1, 2, 3, 4):
        client.get(f"/api/floor/metrics?seed={seed}&width=40&height=40")
    assert len(floor_api._layout_cache) <= 2


def test_ascii_endpoint(client):
    resp = client.get("/api/floor/ascii?seed=3&width=50&height=40&roles=1")
    assert resp.status_code == 200
    assert resp.mimetype == "text/plain"
    lines = resp.get_data(as_text=True).rstrip("\n").split("\n")
    assert len(lines) == 40
    assert all(len(line) == 50 for line in lines)
    text = "\n".join(lines)
    assert "E" in text and "X" in text and "D" in text


def test_metrics_endpoint(client):
    data = client.get("/api/floor/metrics?seed=5&width=60&height=60&floor_level=5").get_json()
    assert data["rooms"] == data["metrics"]["rooms"]
    assert data["roles"]["boss"] == 1
    assert data["entrance_room_id"] is not None
    assert "phase_ms" in data["metrics"]


def test_seed_post_accepts_strings(client):
    a = client.post("/api/floor/seed", json={"seed": "hello world", "width": 60, "height": 60}).get_json()
    b = client.post("/api/floor/seed", json={"seed": "hello world", "width": 60, "height": 60}).get_json()
    assert a["seed"] == b["seed"]
    assert a["rooms"] == b["rooms"]
    numeric = client.post("/api/floor/seed", json={"seed": "1234", "width": 60, "height": 60}).get_json()
    assert numeric["seed"] == 1234


def test_seed_post_regenerate(client):
    data = client.post("/api/floor/seed", json={"regenerate": True, "width": 40, "height": 40}).get_json()
    assert isinstance(data["seed"], int)
    assert data["width"] == 40


@pytest.mark.parametrize("query", ["width=2", "width=abc", "min_split_ratio=0.9&max_split_ratio=0.1"])
def test_invalid_config_is_400(client, query):
    resp = client.get(f"/api/floor/layout?seed=1&{query}")
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_generation_failure_is_422(client, monkeypatch):
    def fail(cfg):
        raise GenerationFailed(cfg.seed, cfg.max_attempts, None)

    monkeypatch.setattr(floor_api, "generate_floor", fail)
    resp = client.get("/api/floor/layout?seed=4242&width=60&height=60")
    assert resp.status_code == 422
    body = resp.get_json()
    assert body["seed"] == 4242 and body["attempts"] == 3


@pytest.mark.parametrize(
    "value,expected",
    [(5, 5), ("17", 17), (-1, (2**31) - 1)],
)
def test_coerce_seed(value, expected):
    assert floor_api._coerce_seed(value) == expected


def test_coerce_seed_hashes_text():
    s = floor_api._coerce_seed("abc")
    assert s == floor_api._coerce_seed("abc")
    assert 0 <= s < 2**31
