"""Public puzzle-engine interface."""

from .clues import Clue, ClueCategory, room_matches_clue  # noqa: F401
from .config import DungeonConfig, resolve_config  # noqa: F401
from .errors import DegradedPuzzleError, GenerationError  # noqa: F401
from .graph import bfs_distances, grid_adjacent  # noqa: F401
from .pipeline import (  # noqa: F401
    Dungeon,
    Puzzle,
    calculate_par,
    generate_clues,
    generate_dungeon,
    generate_puzzle,
    practice_seed,
)
from .rooms import Room  # noqa: F401
from .seeding import date_to_seed  # noqa: F401

__all__ = [
    "Clue",
    "ClueCategory",
    "DegradedPuzzleError",
    "Dungeon",
    "DungeonConfig",
    "GenerationError",
    "Puzzle",
    "Room",
    "bfs_distances",
    "calculate_par",
    "date_to_seed",
    "generate_clues",
    "generate_dungeon",
    "generate_puzzle",
    "grid_adjacent",
    "practice_seed",
    "resolve_config",
    "room_matches_clue",
]
