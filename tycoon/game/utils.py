"""Small numeric and random helpers shared by the rules modules."""

from __future__ import annotations

import math
import random
from typing import Any, Sequence


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity.

    ``round()`` uses banker's rounding, which turns a 0.5 energy drain into 0.
    """

    return int(math.floor(value + 0.5))


def roll_int(rng: random.Random, low: int, high: int) -> int:
    """Inclusive integer roll; tolerates ``low > high`` by swapping."""

    if low > high:
        low, high = high, low
    return rng.randint(int(low), int(high))


def pick(rng: random.Random, options: Sequence[Any]) -> Any:
    if not options:
        raise ValueError("Cannot pick from an empty sequence")
    return options[rng.randrange(len(options))]


def is_finite_number(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    return False


__all__ = ["clamp", "round_half_up", "roll_int", "pick", "is_finite_number"]
