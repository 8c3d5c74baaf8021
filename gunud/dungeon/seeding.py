"""Seeded pseudo-random sequence used by every generation phase.

Integer arithmetic is masked to 32 bits at each step so a given seed yields the
same float stream on any interpreter.
"""
from __future__ import annotations

from typing import Callable, List, MutableSequence, Sequence, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5


def _to_int32(value: int) -> int:
    value &= _MASK32
    return value - 0x100000000 if value & 0x80000000 else value


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def date_to_seed(date_string: str) -> int:
    """Hash a date (or any seed string) into a non-negative integer seed.

    Rolling ``h * 31 + code`` over UTF-16 code units, folded into a signed
    32-bit accumulator after every character.
    """
    h = 0
    raw = date_string.encode("utf-16-le")
    for i in range(0, len(raw), 2):
        code = raw[i] | (raw[i + 1] << 8)
        h = _to_int32((h << 5) - h + code)
    return abs(h)


def make_generator(seed: int) -> Callable[[], float]:
    """Return a closure producing a reproducible float sequence in [0, 1)."""
    state = seed & _MASK32

    def _next() -> float:
        nonlocal state
        state = (state + _INCREMENT) & _MASK32
        t = state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296

    return _next


class SeededRandom:
    """Small ``random.Random``-like facade over :func:`make_generator`.

    Only the helpers generation needs are provided, each consuming a fixed
    number of draws so call order alone decides the output.
    """

    __slots__ = ("seed", "_next")

    def __init__(self, seed: int):
        self.seed = seed
        self._next = make_generator(seed)

    @classmethod
    def from_string(cls, seed_string: str) -> "SeededRandom":
        return cls(date_to_seed(seed_string))

    def random(self) -> float:
        return self._next()

    def below(self, n: int) -> int:
        return int(self._next() * n)

    def randint(self, a: int, b: int) -> int:
        return a + self.below(b - a + 1)

    def choice(self, seq: Sequence[T]) -> T:
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.below(len(seq))]

    def shuffle(self, items: MutableSequence[T]) -> None:
        for j in range(len(items) - 1, 0, -1):
            k = self.below(j + 1)
            items[j], items[k] = items[k], items[j]

    def shuffled(self, items: Sequence[T]) -> List[T]:
        out = list(items)
        self.shuffle(out)
        return out


__all__ = ["date_to_seed", "make_generator", "SeededRandom"]
