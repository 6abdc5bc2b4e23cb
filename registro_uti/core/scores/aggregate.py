"""Summation helpers shared by the score families."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping

__all__ = ["TWO_PLACES", "sum_points", "sum_weights"]

TWO_PLACES = Decimal("0.01")


def sum_points(points: Iterable[int]) -> int:
    return sum(int(value) for value in points)


def sum_weights(weights: Mapping[str, Decimal], flags: Mapping[str, bool]) -> Decimal:
    """Add the weight of every selected item, rounded to storage precision."""

    total = Decimal("0")
    for item, weight in weights.items():
        if flags.get(item) is True:
            total += weight
    return total.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
