from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, TypeVar


T = TypeVar("T")

_INT32_SPAN = 1 << 32
_INT32_MAX = (1 << 31) - 1


def normalize_seed(seed: int) -> int:
    """Wrap ``seed`` into the signed 32-bit range (two's complement)."""
    seed = int(seed)
    if -_INT32_MAX - 1 <= seed <= _INT32_MAX:
        return seed
    seed &= _INT32_SPAN - 1
    return seed - _INT32_SPAN if seed > _INT32_MAX else seed


def pseudo_random(seed: int) -> float:
    """Sine-based scalar in [0, 1) matching the original TS helper.

      x = sin(seed) * 10000
      v = x - floor(x)

    Not a statistical RNG; it exists only to make mock data reproducible.
    """
    x = math.sin(normalize_seed(seed)) * 10000
    v = x - math.floor(x)
    # floating point can round the fraction up to exactly 1.0
    return v if v < 1.0 else 0.0


def base_seed(prefix: str) -> int:
    """Sum of the character codes of ``prefix``."""
    return sum(ord(ch) for ch in prefix)


@dataclass(frozen=True)
class SeededDraws:
    """Per-record draw source: ``pseudo_random(seed + offset)``.

    Each record field reads its scalar from a fixed offset so fields stay
    independent of one another and of the order they are computed in.
    """

    seed: int

    def draw(self, offset: int = 0) -> float:
        return pseudo_random(self.seed + offset)

    def pick(self, options: Sequence[T], offset: int) -> T:
        return options[int(self.draw(offset) * len(options))]

    @staticmethod
    def for_record(prefix: str, index: int) -> "SeededDraws":
        return SeededDraws(base_seed(prefix) + index)
