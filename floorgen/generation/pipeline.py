"""Pipeline orchestration for floor generation.

Phases run in a fixed order on one ``random.Random`` seeded from the effective
seed of the attempt:

    partition -> rooms -> adjacency -> corridors -> selection -> roles -> locks -> geometry

Each phase is timed into ``metrics['phase_ms']``. A ConnectivityError (no room
placed, or rooms left disconnected) or an InvariantViolation in strict mode ends
the attempt; the run is retried with a seed derived from the original until
``max_attempts`` is exhausted, at which point GenerationFailed is raised.
"""
from __future__ import annotations

import random
import time
from typing import Any, Callable, Dict, List, Optional

from ..logging_utils import get_logger
from . import debug_checks
from .adjacency import assign_neighbors
from .config import FloorConfig
from .connectivity import select_corridors
from .corridors import CorridorBuilder
from .errors import ConnectivityError, GenerationFailed, InvariantViolation
from .geometry import materialize
from .metrics import init_metrics
from .models import Layout
from .partitions import build_partition_tree
from .roles import assign_roles, place_locks_and_keys
from .rooms import place_rooms

log = get_logger("floorgen.pipeline")

SEED_SPACE = 2**31
# Large prime stride keeps derived seeds far from the caller's neighbors.
_SEED_STRIDE = 1_000_003


def derive_seed(seed: int, attempt: int) -> int:
    """Seed for retry ``attempt`` (0 is the caller's seed itself)."""
    if attempt == 0:
        return seed
    return (seed + attempt * _SEED_STRIDE) % SEED_SPACE


class FloorGenerator:
    def __init__(self, config: Optional[FloorConfig] = None):
        # Private copy: resolving a random seed must not mutate the caller's config.
        self.config = (config or FloorConfig()).replace().validate()

    def generate(self) -> Layout:
        seed = self.config.resolved_seed()
        last_error: Optional[Exception] = None
        for attempt in range(self.config.max_attempts):
            effective = derive_seed(seed, attempt)
            try:
                layout = self._attempt(seed, effective, attempt + 1)
            except (ConnectivityError, InvariantViolation) as e:
                last_error = e
                log.warn(event="attempt_failed", seed=seed, effective_seed=effective, attempt=attempt + 1, error=type(e).__name__)
                continue
            m = layout.metrics
            log.info(
                event="floor_generated",
                seed=seed,
                effective_seed=effective,
                floor_level=self.config.floor_level,
                rooms=len(layout.rooms),
                corridors=len(layout.corridors),
                roles=",".join(f"{k}:{v}" for k, v in sorted(layout.role_breakdown().items())),
                runtime_ms=m.get('runtime_ms'),
            )
            return layout
        log.error(event="generation_failed", seed=seed, attempts=self.config.max_attempts, error=str(last_error))
        raise GenerationFailed(seed, self.config.max_attempts, last_error)

    def _attempt(self, seed: int, effective_seed: int, attempt_no: int) -> Layout:
        cfg = self.config
        rng = random.Random(effective_seed)
        metrics: Dict[str, Any] = init_metrics()
        phase_times: Dict[str, int] = {}
        start = time.perf_counter()

        def _phase(label: str, fn: Callable, *a, **k):
            ps = time.perf_counter()
            r = fn(*a, **k)
            phase_times[label] = int((time.perf_counter() - ps) * 1000)
            return r

        tree = _phase('partition', build_partition_tree, cfg, rng)
        leaves = tree.leaves()
        metrics['partitions'] = len(tree)
        metrics['leaves'] = len(leaves)
        rooms = _phase('rooms', place_rooms, tree, cfg, rng, metrics)
        if not rooms:
            raise ConnectivityError(f"no leaf partition fits a room of size {cfg.min_room_size}")
        metrics['neighbor_pairs'] = _phase('adjacency', assign_neighbors, leaves)
        builder = CorridorBuilder(rooms, cfg.width, cfg.height, rng, metrics)
        candidates = _phase('corridors', builder.candidates, tree)
        selected = _phase('selection', select_corridors, rooms, candidates, builder, cfg.extra_connections, rng, metrics)
        _phase('roles', assign_roles, rooms, cfg, rng, metrics)
        locked, keys = _phase('locks', place_locks_and_keys, rooms, selected, cfg.locked_rooms, rng, metrics)
        floor, walls, doors = _phase('geometry', materialize, rooms, selected, cfg.width, cfg.height)

        metrics['tiles_floor'] = len(floor)
        metrics['tiles_wall'] = len(walls)
        metrics['tiles_door'] = len(doors)
        layout = Layout(
            config=cfg,
            seed=seed,
            effective_seed=effective_seed,
            attempts=attempt_no,
            partitions=tree,
            rooms=rooms,
            corridors=selected,
            floor_tiles=floor,
            wall_tiles=walls,
            door_tiles=doors,
            locked_door_tiles=locked,
            key_tiles=keys,
            metrics=metrics,
        )
        if cfg.strict:
            report = _phase('checks', debug_checks.analyze, layout)
            if not debug_checks.is_clean(report):
                counts = {k: v for k, v in debug_checks.issue_counts(report).items() if v}
                log.error(event="invariant_violation", seed=seed, effective_seed=effective_seed, issues=counts)
                raise InvariantViolation(f"layout failed structural checks: {counts}", report)
        metrics['phase_ms'] = phase_times
        metrics['runtime_ms'] = int((time.perf_counter() - start) * 1000)
        return layout


def generate_floor(config: Optional[FloorConfig] = None, **overrides: Any) -> Layout:
    """Generate one floor. Keyword overrides are applied on top of ``config``."""
    cfg = config or FloorConfig()
    if overrides:
        cfg = cfg.replace(**overrides)
    return FloorGenerator(cfg).generate()


def next_floor_config(layout: Layout) -> FloorConfig:
    """Config for the floor below ``layout``: grown, one level deeper, seeded from seed + level."""
    rng = random.Random(layout.seed + layout.config.floor_level)
    cfg = layout.config.next_floor(rng)
    cfg.seed = (layout.seed + cfg.floor_level) % SEED_SPACE
    return cfg


def generate_floors(config: FloorConfig, count: int) -> List[Layout]:
    """Generate ``count`` consecutive floors starting at ``config``."""
    floors: List[Layout] = []
    cfg = config
    for _ in range(count):
        layout = generate_floor(cfg)
        floors.append(layout)
        cfg = next_floor_config(layout)
    return floors
