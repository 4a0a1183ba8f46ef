# brainquest/utils/rng.py
"""Seeded randomness for procedural question generation.

The generator is Mulberry32, computed in explicit 32-bit integer arithmetic so
that a seed yields the same draws on every platform and interpreter. A
question is reproducible from ``(generator_id, seed, difficulty)`` alone.
"""

from __future__ import annotations

import uuid
from typing import List, Sequence, TypeVar

T = TypeVar("T")

_MASK = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296


class SeededRng:
    """Deterministic pseudo-random source; call it to draw a float in [0, 1)."""

    def __init__(self, seed: int):
        self.seed = int(seed)
        self._state = self.seed & _MASK

    def next_uint32(self) -> int:
        self._state = (self._state + _INCREMENT) & _MASK
        s = self._state
        t = ((s ^ (s >> 15)) * (1 | s)) & _MASK
        t = ((t + (((t ^ (t >> 7)) * (61 | t)) & _MASK)) & _MASK) ^ t
        return (t ^ (t >> 14)) & _MASK

    def __call__(self) -> float:
        return self.next_uint32() / _TWO_POW_32


def create_rng(seed: int) -> SeededRng:
    """Create a generator whose draw sequence is fixed by ``seed``."""
    return SeededRng(seed)


def pick(items: Sequence[T], rng: SeededRng) -> T:
    """Choose one element uniformly using a single draw."""
    if not items:
        raise ValueError("Cannot pick from an empty collection")
    return items[int(rng() * len(items))]


def shuffle(items: Sequence[T], rng: SeededRng) -> List[T]:
    """Return a shuffled copy (Fisher-Yates from the end); the input is left untouched."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = int(rng() * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result


def pick_n(items: Sequence[T], n: int, rng: SeededRng) -> List[T]:
    return shuffle(items, rng)[:n]


def random_int(low: int, high: int, rng: SeededRng) -> int:
    """Uniform integer in the inclusive range [low, high]."""
    return int(rng() * (high - low + 1)) + low


def seed_from_string(text: str) -> int:
    """Fold a string into a 32-bit seed with the usual 31-multiplier hash."""
    seed = 0
    for char in text:
        seed = (seed * 31 + ord(char)) & _MASK
    return seed


def unique_id() -> str:
    """Fresh identifier for questions, options and records; not seed-derived."""
    return uuid.uuid4().hex[:12]
