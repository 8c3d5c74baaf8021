from typing import Dict


def init_metrics() -> Dict[str, int | float | bool | str | dict]:
    return {
        'rooms_targeted': 0,
        'rooms_placed': 0,
        'rooms_dropped': 0,
        'extra_edges_added': 0,
        'loops_added': 0,
        'entrance_links_added': 0,
        'entrance_rooms_added': 0,
        'shortcut_edges_removed': 0,
        'frontier_rooms_added': 0,
        'shortcut_edges_added': 0,
        'band_met': False,
        'dead_ends_added': 0,
        'hazard_tier': 'none',
        'runtime_ms': 0.0,
    }
