"""Generation error types.

Normal generation never raises: fallbacks are tagged on the result instead.
These exist for strict callers that would rather reject a degraded puzzle.
"""
from typing import Iterable


class GenerationError(Exception):
    """Base class for puzzle generation failures."""


class DegradedPuzzleError(GenerationError):
    def __init__(self, date_string: str, reasons: Iterable[str]):
        self.date_string = date_string
        self.reasons = tuple(reasons)
        super().__init__(f"Puzzle {date_string!r} degraded: {', '.join(self.reasons)}")


__all__ = ["GenerationError", "DegradedPuzzleError"]
