import os
from dataclasses import dataclass, replace
from typing import Optional, Tuple


@dataclass(frozen=True)
class DungeonConfig:
    min_rooms: int = 12
    max_rooms: int = 16
    growth_attempts: int = 100
    min_extra_edges: int = 3
    max_extra_edges: int = 6
    min_loops: int = 2
    entrance_min_connections: int = 3
    min_distance: int = 5
    max_distance: int = 7
    band_attempts: int = 20
    min_dead_ends: int = 3
    max_dead_ends: int = 5
    include_hazard: bool = True
    clue_attempts: int = 10
    clue_salt: str = "-clues"
    par_buffer: int = 1
    strict: bool = False

    def __post_init__(self):
        if self.min_rooms < 2 or self.max_rooms < self.min_rooms:
            raise ValueError(f"Invalid room range {self.min_rooms}-{self.max_rooms}")
        if self.min_distance < 1 or self.max_distance < self.min_distance:
            raise ValueError(f"Invalid distance band {self.min_distance}-{self.max_distance}")
        if self.max_extra_edges < self.min_extra_edges or self.max_dead_ends < self.min_dead_ends:
            raise ValueError("Extra edge / dead end ranges must be ordered")
        if self.clue_attempts < 1 or self.band_attempts < 0 or self.growth_attempts < 1:
            raise ValueError("Attempt ceilings must be positive")

    @property
    def band(self) -> Tuple[int, int]:
        return (self.min_distance, self.max_distance)


# env var / Flask config key -> (field, parser)
_OVERRIDES = {
    "GUNUD_INCLUDE_HAZARD": ("include_hazard", lambda v: str(v).lower() not in {"0", "false", "no", ""}),
    "GUNUD_PAR_BUFFER": ("par_buffer", int),
    "GUNUD_STRICT_GENERATION": ("strict", lambda v: str(v).lower() not in {"0", "false", "no", ""}),
}


def resolve_config(base: Optional[DungeonConfig] = None) -> DungeonConfig:
    """Layer environment overrides, then active Flask app config, onto ``base``."""
    cfg = base or DungeonConfig()
    changes = {}
    for key, (attr, parse) in _OVERRIDES.items():
        if key in os.environ:
            changes[attr] = parse(os.environ[key])
    from flask import current_app, has_app_context

    if has_app_context():
        for key, (attr, parse) in _OVERRIDES.items():
            if key in current_app.config:
                changes[attr] = parse(current_app.config[key])
    return replace(cfg, **changes) if changes else cfg


__all__ = ["DungeonConfig", "resolve_config"]
