"""Goal (treasure) and hazard (dragon) placement on a built room graph."""
from __future__ import annotations

from typing import NamedTuple, Optional, Tuple

from .graph import bfs_distances, reachable_avoiding
from .seeding import SeededRandom

HAZARD_TIER_NEAR = "near"
HAZARD_TIER_BYPASSABLE = "bypassable"
HAZARD_TIER_ANY = "any"
HAZARD_TIER_NONE = "none"


class GoalChoice(NamedTuple):
    room_id: int
    distance: int
    in_band: bool


class HazardChoice(NamedTuple):
    room_id: Optional[int]
    tier: str


def band_penalty(distance: int, band: Tuple[int, int]) -> int:
    lo, hi = band
    if distance < lo:
        return lo - distance
    if distance > hi:
        return distance - hi
    return 0


def select_goal(rooms, entrance_id: int, band: Tuple[int, int], rng: SeededRandom) -> GoalChoice:
    """Pick the goal room uniformly among rooms whose entrance distance is in band.

    Candidates are ordered farthest first before the draw. With no room in
    band, the least-penalised room wins (no draw), ties going to the farthest.
    """
    distances = bfs_distances(rooms, entrance_id)
    lo, hi = band
    others = [r for r in rooms if r.id != entrance_id]
    if not others:
        raise ValueError("A dungeon needs at least one room besides the entrance")
    in_band = [r for r in others if lo <= distances.get(r.id, 0) <= hi]
    if in_band:
        in_band.sort(key=lambda r: -distances.get(r.id, 0))
        goal = rng.choice(in_band)
        return GoalChoice(goal.id, distances.get(goal.id, 0), True)
    others.sort(key=lambda r: (band_penalty(distances.get(r.id, 0), band), -distances.get(r.id, 0)))
    goal = others[0]
    return GoalChoice(goal.id, distances.get(goal.id, 0), False)


def is_bypassable(rooms, entrance_id: int, goal_id: int, candidate_id: int) -> bool:
    """True if the goal stays reachable from the entrance with ``candidate_id`` sealed."""
    return reachable_avoiding(rooms, entrance_id, goal_id, excluded=(candidate_id,))


def select_hazard(rooms, entrance_id: int, goal_id: int, rng: SeededRandom) -> HazardChoice:
    """Place the hazard near the goal's depth without cutting the goal off.

    Pools are tried in order: bypassable rooms within one step of the goal's
    depth, any bypassable room, then any room at all (may block the goal).
    """
    distances = bfs_distances(rooms, entrance_id)
    goal_depth = distances.get(goal_id, 0)
    pool = [r for r in rooms if r.id not in (entrance_id, goal_id)]
    if not pool:
        return HazardChoice(None, HAZARD_TIER_NONE)
    bypassable = [r for r in pool if is_bypassable(rooms, entrance_id, goal_id, r.id)]
    near = [r for r in bypassable if abs(distances.get(r.id, 0) - goal_depth) <= 1]
    if near:
        return HazardChoice(rng.choice(near).id, HAZARD_TIER_NEAR)
    if bypassable:
        return HazardChoice(rng.choice(bypassable).id, HAZARD_TIER_BYPASSABLE)
    return HazardChoice(rng.choice(pool).id, HAZARD_TIER_ANY)


__all__ = [
    "GoalChoice",
    "HazardChoice",
    "band_penalty",
    "select_goal",
    "is_bypassable",
    "select_hazard",
    "HAZARD_TIER_NEAR",
    "HAZARD_TIER_BYPASSABLE",
    "HAZARD_TIER_ANY",
    "HAZARD_TIER_NONE",
]
