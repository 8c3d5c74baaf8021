"""Per-room clue assignment with a uniqueness check.

Every room except the goal and the hazard carries one clue about the goal
room. A clue is also a predicate over rooms ("would this room fit what the
clue says?"); intersecting all predicates over the full room set must leave
exactly the goal. Assignment is retried a bounded number of times and the
last attempt is returned if none pins the goal.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, NamedTuple, Optional, Union

from .graph import bfs_distances
from .seeding import SeededRandom


class ClueCategory(str, Enum):
    EXITS = "exits"
    SPATIAL = "spatial"
    MANHATTAN = "manhattan"
    PATH = "path"


CATEGORIES = (ClueCategory.EXITS, ClueCategory.SPATIAL, ClueCategory.MANHATTAN, ClueCategory.PATH)

ICONS = {
    ClueCategory.EXITS: "\U0001F517",
    ClueCategory.SPATIAL: "\U0001F4CD",
    ClueCategory.MANHATTAN: "\U0001F4CF",
    ClueCategory.PATH: "\U0001F6AA",
}

# direction token -> (full text, compact label)
_SPATIAL_TEXT = {
    "right": ("The gem is to the right of here", "→ Right"),
    "left": ("The gem is to the left of here", "← Left"),
    "column": ("The gem is in the same column", "↕ Col"),
    "below": ("The gem is below here", "↓ Below"),
    "above": ("The gem is above here", "↑ Above"),
    "row": ("The gem is in the same row", "↔ Row"),
}


@dataclass(frozen=True)
class Clue:
    category: ClueCategory
    text: str
    compact: str
    icon: str
    value: Union[int, str]

    def to_dict(self):
        return {
            "category": self.category.value,
            "text": self.text,
            "compact": self.compact,
            "icon": self.icon,
            "value": self.value,
        }


class ClueAssignment(NamedTuple):
    clues: Dict[int, Clue]
    attempts: int
    solvable: bool


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def spatial_direction(dx: int, dy: int, use_x: bool) -> str:
    if use_x:
        return "right" if dx > 0 else "left" if dx < 0 else "column"
    return "below" if dy > 0 else "above" if dy < 0 else "row"


def build_clue(category: ClueCategory, room, goal, goal_distances: Mapping[int, int], rng: SeededRandom) -> Clue:
    """Render the clue ``room`` gives about ``goal``.

    Only the spatial category draws from ``rng`` (one coin flip for the axis).
    """
    icon = ICONS[category]
    if category is ClueCategory.EXITS:
        n = len(goal.connections)
        return Clue(category, f"The gem chamber has {_plural(n, 'exit')}", _plural(n, "exit"), icon, n)
    if category is ClueCategory.SPATIAL:
        direction = spatial_direction(goal.x - room.x, goal.y - room.y, rng.random() < 0.5)
        text, compact = _SPATIAL_TEXT[direction]
        return Clue(category, text, compact, icon, direction)
    if category is ClueCategory.MANHATTAN:
        n = abs(goal.x - room.x) + abs(goal.y - room.y)
        return Clue(category, f"The gem is {_plural(n, 'grid square')} away", f"{n} sq.", icon, n)
    if category is ClueCategory.PATH:
        n = goal_distances.get(room.id, 0)
        return Clue(category, f"The gem is {_plural(n, 'step')} from here", _plural(n, "step"), icon, n)
    raise ValueError(f"Unknown clue category: {category!r}")


def room_matches_clue(candidate, clue: Clue, clue_room, rooms, clue_room_distances: Optional[Mapping[int, int]] = None) -> bool:
    """Would ``candidate`` be consistent with ``clue`` read in ``clue_room``?"""
    if clue.category is ClueCategory.EXITS:
        return len(candidate.connections) == clue.value
    if clue.category is ClueCategory.SPATIAL:
        dx = candidate.x - clue_room.x
        dy = candidate.y - clue_room.y
        return {
            "right": dx > 0,
            "left": dx < 0,
            "below": dy > 0,
            "above": dy < 0,
            "column": dx == 0,
            "row": dy == 0,
        }[clue.value]
    if clue.category is ClueCategory.MANHATTAN:
        return abs(candidate.x - clue_room.x) + abs(candidate.y - clue_room.y) == clue.value
    if clue.category is ClueCategory.PATH:
        if clue_room_distances is None:
            clue_room_distances = bfs_distances(rooms, clue_room.id)
        return clue_room_distances.get(candidate.id) == clue.value
    raise ValueError(f"Unknown clue category: {clue.category!r}")


def candidate_rooms(clues: Mapping[int, Clue], rooms) -> List[int]:
    """Room ids consistent with every clue."""
    candidates = [r.id for r in rooms]
    for room_id, clue in clues.items():
        clue_room = rooms[room_id]
        dist = bfs_distances(rooms, room_id) if clue.category is ClueCategory.PATH else None
        candidates = [cid for cid in candidates if room_matches_clue(rooms[cid], clue, clue_room, rooms, dist)]
        if not candidates:
            break
    return candidates


def is_solvable(clues: Mapping[int, Clue], rooms, goal_id: int) -> bool:
    return candidate_rooms(clues, rooms) == [goal_id]


def assign_clues(dungeon, rng: SeededRandom, attempts: int = 10) -> ClueAssignment:
    rooms = dungeon.rooms
    goal = rooms[dungeon.treasure_id]
    from_entrance = bfs_distances(rooms, dungeon.entrance_id)
    goal_distances = bfs_distances(rooms, goal.id)
    excluded = {dungeon.treasure_id, dungeon.dragon_id}
    clue_rooms = sorted((r for r in rooms if r.id not in excluded), key=lambda r: from_entrance.get(r.id, 0))

    clues: Dict[int, Clue] = {}
    for attempt in range(1, attempts + 1):
        # The closest rooms each get a different category so every kind of
        # clue shows up early.
        assignments = dict(zip((r.id for r in clue_rooms[:4]), rng.shuffled(CATEGORIES)))
        for room in clue_rooms[4:]:
            assignments[room.id] = rng.choice(CATEGORIES)
        clues = {room.id: build_clue(assignments[room.id], room, goal, goal_distances, rng) for room in clue_rooms}
        if is_solvable(clues, rooms, goal.id):
            return ClueAssignment(clues, attempt, True)
    return ClueAssignment(clues, attempts, False)


__all__ = [
    "Clue",
    "ClueCategory",
    "ClueAssignment",
    "CATEGORIES",
    "ICONS",
    "build_clue",
    "spatial_direction",
    "room_matches_clue",
    "candidate_rooms",
    "is_solvable",
    "assign_clues",
]
