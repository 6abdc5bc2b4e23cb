"""Piecewise range tables mapping a measurement to score points."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from .errors import DOMAIN_RANGE, DomainRangeError, Violation

__all__ = ["RangeScoreTable", "ScoreRange", "above", "at_least", "below", "between", "exactly"]


@dataclass(frozen=True)
class ScoreRange:
    """One bucket of a table. ``None`` bounds are open-ended."""

    id: str
    points: int
    lower: Optional[float] = None
    upper: Optional[float] = None
    lower_inclusive: bool = True
    upper_inclusive: bool = False

    def contains(self, value: float) -> bool:
        if self.lower is not None:
            if value < self.lower or (value == self.lower and not self.lower_inclusive):
                return False
        if self.upper is not None:
            if value > self.upper or (value == self.upper and not self.upper_inclusive):
                return False
        return True


def at_least(range_id: str, lower: float, points: int) -> ScoreRange:
    return ScoreRange(range_id, points, lower=lower)


def above(range_id: str, lower: float, points: int) -> ScoreRange:
    return ScoreRange(range_id, points, lower=lower, lower_inclusive=False)


def below(range_id: str, upper: float, points: int, *, inclusive: bool = False) -> ScoreRange:
    return ScoreRange(range_id, points, upper=upper, upper_inclusive=inclusive)


def between(range_id: str, lower: float, upper: float, points: int, *, inclusive: bool = False) -> ScoreRange:
    """Bucket ``[lower, upper)``, or ``[lower, upper]`` when ``inclusive``."""

    return ScoreRange(range_id, points, lower=lower, upper=upper, upper_inclusive=inclusive)


def exactly(range_id: str, value: float, points: int) -> ScoreRange:
    return ScoreRange(range_id, points, lower=value, upper=value, upper_inclusive=True)


@dataclass(frozen=True)
class RangeScoreTable:
    """Ordered buckets for one variable.

    Buckets are declared from the extremes towards the normal band and the
    first one containing the value wins, so a value sitting on a shared
    boundary is scored by the named extreme bucket.
    """

    variable: str
    ranges: Tuple[ScoreRange, ...]
    integer: bool = False

    def __iter__(self) -> Iterator[ScoreRange]:
        return iter(self.ranges)

    @property
    def max_points(self) -> int:
        return max(bucket.points for bucket in self.ranges)

    def _reject(self, message: str) -> DomainRangeError:
        return DomainRangeError([Violation(reason=DOMAIN_RANGE, field=self.variable, message=message)])

    def classify(self, value: float) -> ScoreRange:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise self._reject(f"{self.variable}: valor no numérico ({value!r})")
        if self.integer and not float(value).is_integer():
            raise self._reject(f"{self.variable}: {value} debe ser un número entero")
        for bucket in self.ranges:
            if bucket.contains(value):
                return bucket
        raise self._reject(f"{self.variable}: {value} fuera de los rangos definidos")

    def points(self, value: float) -> int:
        return self.classify(value).points

    def get(self, range_id: str) -> Optional[ScoreRange]:
        for bucket in self.ranges:
            if bucket.id == range_id:
                return bucket
        return None

    def by_id(self) -> Dict[str, ScoreRange]:
        return {bucket.id: bucket for bucket in self.ranges}
