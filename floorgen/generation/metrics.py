from typing import Any, Dict


def init_metrics() -> Dict[str, Any]:
    return {
        'partitions': 0,
        'leaves': 0,
        'rooms': 0,
        'partitions_roomless': 0,
        'neighbor_pairs': 0,
        'corridor_candidates': 0,
        'corridors_discarded': 0,
        'corridor_fallbacks': 0,
        'guarded_paths': 0,
        'corridors_selected': 0,
        'extra_connections_added': 0,
        'repairs_performed': 0,
        'unreached_rooms': 0,
        'main_path_rooms': 0,
        'locked_doors': 0,
        'keys_placed': 0,
        'tiles_floor': 0,
        'tiles_wall': 0,
        'tiles_door': 0,
        'runtime_ms': 0,
        'phase_ms': {},
    }
