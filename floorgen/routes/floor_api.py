"""
project: floorgen
module: floor_api.py
License: MIT

Floor layout API routes.

Every endpoint builds a FloorConfig from the app defaults plus request values
(query args for GET, JSON body for POST), generates or reuses a cached layout
and returns it in one of several shapes. ConfigError and GenerationFailed
propagate to the app-level JSON error handlers (400 / 422).
"""

import hashlib
import random
import threading

from flask import Blueprint, Response, current_app, jsonify, request

from floorgen.generation import FloorConfig, Layout, generate_floor, to_ascii
from floorgen.generation.pipeline import SEED_SPACE
from floorgen.logging_utils import get_logger
from floorgen.utils.tile_compress import encode_tiles

bp_floor = Blueprint("floor", __name__)
log = get_logger("floorgen.api")

# In-process cache config-tuple -> Layout. Guarded by a lock since the dev server may be threaded.
_layout_cache = {}
_layout_cache_lock = threading.Lock()


def _coerce_seed(payload_seed):
    """Convert provided seed (int or str) into a non-negative int below SEED_SPACE."""
    if payload_seed is None or isinstance(payload_seed, bool):
        return random.randint(1, 1_000_000)
    if isinstance(payload_seed, int):
        return payload_seed % SEED_SPACE
    if isinstance(payload_seed, str):
        s = payload_seed.strip()
        if not s:
            return random.randint(1, 1_000_000)
        if s.isdigit():
            return int(s) % SEED_SPACE
        h = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(h[:8], "big") % SEED_SPACE
    return random.randint(1, 1_000_000)


def _truthy(value) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _config_from(data) -> FloorConfig:
    base = current_app.config.get("FLOORGEN_DEFAULTS") or FloorConfig()
    cfg = FloorConfig.from_mapping(data, base=base)
    if cfg.seed is None:
        cfg.seed = _coerce_seed(None)
    return cfg.validate()


def get_cached_layout(config: FloorConfig) -> Layout:
    if current_app.config.get("FLOORGEN_DISABLE_CACHE"):
        return generate_floor(config)
    key = tuple(sorted(config.to_dict().items()))
    with _layout_cache_lock:
        layout = _layout_cache.get(key)
        if layout is not None:
            return layout
    layout = generate_floor(config)
    limit = max(1, int(current_app.config.get("FLOORGEN_CACHE_SIZE", 8)))
    with _layout_cache_lock:
        _layout_cache[key] = layout
        while len(_layout_cache) > limit:
            first_key = next(iter(_layout_cache.keys()))
            if first_key == key:
                break
            _layout_cache.pop(first_key, None)
    return layout


def clear_layout_cache() -> None:
    with _layout_cache_lock:
        _layout_cache.clear()


def compact_payload(layout: Layout) -> dict:
    """Layout dict with tile lists replaced by delta-encoded strings."""
    data = layout.to_dict()
    walls_by_type = {}
    for pos, wt in layout.wall_tiles.items():
        walls_by_type.setdefault(wt.value, []).append(pos)
    data["floor_tiles"] = encode_tiles(layout.floor_tiles)
    data["door_tiles"] = encode_tiles(layout.door_tiles)
    data["wall_tiles"] = {k: encode_tiles(v) for k, v in sorted(walls_by_type.items())}
    data["encoding"] = "delta"
    return data


def summary(layout: Layout) -> dict:
    entrance, exit_room = layout.entrance, layout.exit
    return {
        "seed": layout.seed,
        "effective_seed": layout.effective_seed,
        "attempts": layout.attempts,
        "floor_level": layout.config.floor_level,
        "width": layout.width,
        "height": layout.height,
        "rooms": len(layout.rooms),
        "corridors": len(layout.corridors),
        "entrance_room_id": entrance.id if entrance else None,
        "exit_room_id": exit_room.id if exit_room else None,
        "roles": layout.role_breakdown(),
    }


@bp_floor.route("/api/floor/layout")
def floor_layout():
    """Full layout. ``compact=1`` switches tile lists to the delta encoding."""
    cfg = _config_from(request.args)
    layout = get_cached_layout(cfg)
    if _truthy(request.args.get("compact", "0")):
        return jsonify(compact_payload(layout))
    return jsonify(layout.to_dict())


@bp_floor.route("/api/floor/ascii")
def floor_ascii():
    cfg = _config_from(request.args)
    layout = get_cached_layout(cfg)
    text = to_ascii(layout, mark_roles=_truthy(request.args.get("roles", "0")))
    return Response(text + "\n", mimetype="text/plain")


@bp_floor.route("/api/floor/metrics")
def floor_metrics():
    cfg = _config_from(request.args)
    layout = get_cached_layout(cfg)
    payload = summary(layout)
    payload["metrics"] = dict(layout.metrics)
    return jsonify(payload)


@bp_floor.route("/api/floor/seed", methods=["POST"])
def set_seed():
    """Generate a floor for a given (or random) seed.

    Body JSON (all optional):
      { "seed": <int|str|null>, "regenerate": <bool>, <any FloorConfig field>... }
    - seed omitted / null, or regenerate true without a seed => random seed.
    - string seeds that are not digits are hashed (sha256) into the seed space.

    Response: layout summary (seed, room/corridor counts, entrance/exit ids, roles).
    """
    data = request.get_json(silent=True) or {}
    provided = data.get("seed", None)
    if data.get("regenerate") and provided is None:
        seed = _coerce_seed(None)
    else:
        seed = _coerce_seed(provided)
    fields = {k: v for k, v in data.items() if k not in ("seed", "regenerate")}
    fields["seed"] = seed
    cfg = _config_from(fields)
    layout = get_cached_layout(cfg)
    log.info(event="seed_set", seed=seed, rooms=len(layout.rooms))
    return jsonify(summary(layout))
