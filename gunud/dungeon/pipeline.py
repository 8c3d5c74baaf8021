"""Pipeline orchestration for puzzle generation.

``generate_dungeon`` -> ``generate_clues`` -> ``calculate_par`` are the pure
entry points collaborators call; ``generate_puzzle`` bundles all three into a
tagged :class:`Puzzle` so callers can tell a fully compliant puzzle from one
produced by a fallback path.
"""
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from ..logging_utils import get_logger
from .builder import DungeonBuilder
from .clues import Clue, assign_clues
from .config import DungeonConfig, resolve_config
from .errors import DegradedPuzzleError
from .graph import bfs_distances
from .metrics import init_metrics
from .placement import HAZARD_TIER_ANY, HAZARD_TIER_NONE, select_goal, select_hazard
from .rooms import Room
from .seeding import SeededRandom, date_to_seed

log = get_logger("gunud.dungeon")

ROOMS_DROPPED = "rooms_dropped"
ENTRANCE_UNDERCONNECTED = "entrance_underconnected"
GOAL_OUT_OF_BAND = "goal_out_of_band"
HAZARD_NOT_BYPASSABLE = "hazard_not_bypassable"
HAZARD_MISSING = "hazard_missing"
CLUES_AMBIGUOUS = "clues_ambiguous"


@dataclass(frozen=True)
class Dungeon:
    rooms: Tuple[Room, ...]
    entrance_id: int
    treasure_id: int
    dragon_id: Optional[int] = None
    date_string: str = ""
    seed: int = 0
    fallbacks: Tuple[str, ...] = ()
    metrics: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))

    @property
    def room_count(self) -> int:
        return len(self.rooms)

    def room(self, room_id: int) -> Room:
        return self.rooms[room_id]

    def to_dict(self):
        return {
            "date": self.date_string,
            "seed": self.seed,
            "rooms": [r.to_dict() for r in self.rooms],
            "entrance_id": self.entrance_id,
            "treasure_id": self.treasure_id,
            "dragon_id": self.dragon_id,
        }


@dataclass(frozen=True)
class Puzzle:
    dungeon: Dungeon
    clues: Mapping[int, Clue]
    par: int
    fallbacks: Tuple[str, ...] = ()
    clue_attempts: int = 0

    def __post_init__(self):
        object.__setattr__(self, "clues", MappingProxyType(dict(self.clues)))

    @property
    def status(self) -> str:
        return "degraded" if self.fallbacks else "ok"

    @property
    def date_string(self) -> str:
        return self.dungeon.date_string

    def to_dict(self):
        data = self.dungeon.to_dict()
        data.update(
            par=self.par,
            clues={str(rid): clue.to_dict() for rid, clue in self.clues.items()},
            status=self.status,
            fallbacks=list(self.fallbacks),
        )
        return data


def generate_dungeon(date_string: str, config: Optional[DungeonConfig] = None) -> Dungeon:
    """Build the room graph and place entrance, goal and hazard for a date."""
    cfg = config or resolve_config()
    seed = date_to_seed(date_string)
    rng = SeededRandom(seed)
    metrics = init_metrics()
    phase_times: Dict[str, float] = {}
    start = time.perf_counter()

    def _phase(label, fn, *a, **k):
        ps = time.perf_counter()
        r = fn(*a, **k)
        phase_times[label] = round((time.perf_counter() - ps) * 1000, 3)
        return r

    builder = DungeonBuilder(cfg, rng, metrics)
    _phase('grow', builder.grow)
    _phase('redundant_edges', builder.add_redundant_edges)
    _phase('loops', builder.inject_loops)
    _phase('entrance', builder.ensure_entrance_connections)
    _phase('distance_band', builder.enforce_distance_band)
    graph = builder.graph
    entrance_id = builder.entrance_id

    goal = _phase('goal', select_goal, graph, entrance_id, cfg.band, rng)
    _phase('dead_ends', builder.add_dead_ends, goal.room_id)
    dragon_id = None
    if cfg.include_hazard:
        hazard = _phase('hazard', select_hazard, graph, entrance_id, goal.room_id, rng)
        dragon_id = hazard.room_id
        metrics['hazard_tier'] = hazard.tier

    fallbacks = []
    if metrics['rooms_dropped']:
        fallbacks.append(ROOMS_DROPPED)
    if len(graph[entrance_id].connections) < cfg.entrance_min_connections:
        fallbacks.append(ENTRANCE_UNDERCONNECTED)
    if not goal.in_band:
        fallbacks.append(GOAL_OUT_OF_BAND)
    if metrics['hazard_tier'] == HAZARD_TIER_ANY:
        fallbacks.append(HAZARD_NOT_BYPASSABLE)
    elif cfg.include_hazard and metrics['hazard_tier'] == HAZARD_TIER_NONE:
        fallbacks.append(HAZARD_MISSING)
    glog = log.bind(date=date_string, seed=seed)
    for reason in fallbacks:
        glog.warn("generation_fallback", reason=reason, goal_distance=goal.distance)

    metrics['runtime_ms'] = round((time.perf_counter() - start) * 1000, 3)
    metrics['phase_ms'] = phase_times
    dungeon = Dungeon(
        rooms=graph.freeze(),
        entrance_id=entrance_id,
        treasure_id=goal.room_id,
        dragon_id=dragon_id,
        date_string=date_string,
        seed=seed,
        fallbacks=tuple(fallbacks),
        metrics=metrics,
    )
    glog.debug(
        "dungeon_generated",
        rooms=dungeon.room_count,
        goal_distance=goal.distance,
        band_met=metrics['band_met'],
        runtime_ms=metrics['runtime_ms'],
    )
    return dungeon


def assign_dungeon_clues(dungeon: Dungeon, date_string: str, config: Optional[DungeonConfig] = None):
    """Run the clue assigner on the clue-stage seed; returns the full :class:`ClueAssignment`."""
    cfg = config or resolve_config()
    rng = SeededRandom(date_to_seed(date_string + cfg.clue_salt))
    assignment = assign_clues(dungeon, rng, attempts=cfg.clue_attempts)
    if not assignment.solvable:
        log.bind(date=date_string).warn(
            "generation_fallback", reason=CLUES_AMBIGUOUS, attempts=assignment.attempts
        )
    return assignment


def generate_clues(dungeon: Dungeon, date_string: str, config: Optional[DungeonConfig] = None) -> Mapping[int, Clue]:
    """Read-only clue map for a dungeon, keyed by room id."""
    return MappingProxyType(assign_dungeon_clues(dungeon, date_string, config).clues)


def calculate_par(dungeon: Dungeon, buffer: Optional[int] = None) -> int:
    """Shortest entrance->goal hop count plus the clue-gathering buffer."""
    if buffer is None:
        buffer = resolve_config().par_buffer
    return bfs_distances(dungeon.rooms, dungeon.entrance_id).get(dungeon.treasure_id, 0) + buffer


def generate_puzzle(date_string: str, config: Optional[DungeonConfig] = None) -> Puzzle:
    cfg = config or resolve_config()
    dungeon = generate_dungeon(date_string, cfg)
    assignment = assign_dungeon_clues(dungeon, date_string, cfg)
    fallbacks = dungeon.fallbacks + (() if assignment.solvable else (CLUES_AMBIGUOUS,))
    if cfg.strict and fallbacks:
        raise DegradedPuzzleError(date_string, fallbacks)
    return Puzzle(dungeon, assignment.clues, calculate_par(dungeon, cfg.par_buffer), fallbacks, assignment.attempts)


def practice_seed() -> str:
    """Fresh seed string for an off-calendar (practice) puzzle."""
    return f"practice-{uuid.uuid4().hex}"


__all__ = [
    "Dungeon",
    "Puzzle",
    "generate_dungeon",
    "generate_clues",
    "assign_dungeon_clues",
    "calculate_par",
    "generate_puzzle",
    "practice_seed",
    "ROOMS_DROPPED",
    "ENTRANCE_UNDERCONNECTED",
    "GOAL_OUT_OF_BAND",
    "HAZARD_NOT_BYPASSABLE",
    "HAZARD_MISSING",
    "CLUES_AMBIGUOUS",
]
