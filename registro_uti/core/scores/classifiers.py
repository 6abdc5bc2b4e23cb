"""Threshold classifiers turning score totals into categories."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence, Tuple, Union

from .errors import DOMAIN_RANGE, DomainRangeError, Violation

__all__ = [
    "APACHE_RISK",
    "KINESIOLOGY_COMPLEXITY",
    "NAS_WORKLOAD_LEVELS",
    "RISK_LEVELS",
    "ComplexityClassifier",
    "ComplexityTier",
    "RiskBucket",
    "RiskClassifier",
    "WorkloadLevel",
    "WorkloadLevelClassifier",
]

Number = Union[int, float, Decimal]


def _out_of_domain(field: str, total: Number, detail: str) -> DomainRangeError:
    return DomainRangeError(
        [Violation(reason=DOMAIN_RANGE, field=field, message=f"{field}={total} {detail}")]
    )


@dataclass(frozen=True)
class RiskBucket:
    upper: Optional[int]
    percentage: str
    level: str


class RiskClassifier:
    """Ordered inclusive upper bounds, evaluated low to high. ``None`` closes the table."""

    def __init__(self, buckets: Sequence[RiskBucket]):
        self.buckets: Tuple[RiskBucket, ...] = tuple(buckets)

    def classify(self, total: int) -> RiskBucket:
        if total < 0:
            raise _out_of_domain("puntajeTotal", total, "no puede ser negativo")
        for bucket in self.buckets:
            if bucket.upper is None or total <= bucket.upper:
                return bucket
        raise _out_of_domain("puntajeTotal", total, "sin categoría de riesgo")


APACHE_RISK = RiskClassifier(
    [
        RiskBucket(4, "4%", "Bajo"),
        RiskBucket(9, "8%", "Bajo-Moderado"),
        RiskBucket(14, "15%", "Moderado"),
        RiskBucket(19, "25%", "Alto"),
        RiskBucket(24, "40%", "Muy Alto"),
        RiskBucket(29, "55%", "Crítico"),
        RiskBucket(34, "73%", "Crítico"),
        RiskBucket(None, "85%", "Extremo"),
    ]
)

# Severity order of the qualitative labels, lowest first.
RISK_LEVELS: Tuple[str, ...] = ("Bajo", "Bajo-Moderado", "Moderado", "Alto", "Muy Alto", "Crítico", "Extremo")


@dataclass(frozen=True)
class ComplexityTier:
    lower: int
    upper: int
    complejidad: str
    carga_asistencial: str


class ComplexityClassifier:
    def __init__(self, tiers: Sequence[ComplexityTier], minimum: int, maximum: int):
        self.tiers: Tuple[ComplexityTier, ...] = tuple(tiers)
        self.minimum = minimum
        self.maximum = maximum

    def classify(self, total: int) -> ComplexityTier:
        if total < self.minimum or total > self.maximum:
            raise _out_of_domain(
                "puntajeTotal", total, f"fuera del rango {self.minimum}-{self.maximum}"
            )
        for tier in self.tiers:
            if tier.lower <= total <= tier.upper:
                return tier
        raise _out_of_domain("puntajeTotal", total, "sin nivel de complejidad")


KINESIOLOGY_COMPLEXITY = ComplexityClassifier(
    [
        ComplexityTier(5, 5, "Baja", "0-1"),
        ComplexityTier(6, 10, "Mediana", "2-3 + Noche"),
        ComplexityTier(11, 25, "Alta", "3-4 + Noche"),
    ],
    minimum=5,
    maximum=25,
)


@dataclass(frozen=True)
class WorkloadLevel:
    below: Optional[Decimal]
    label: str
    key: str


class WorkloadLevelClassifier:
    """NAS workload level: the first level whose exclusive upper bound exceeds the total."""

    def __init__(self, levels: Sequence[WorkloadLevel]):
        self.levels: Tuple[WorkloadLevel, ...] = tuple(levels)

    def classify(self, total: Number) -> WorkloadLevel:
        value = Decimal(str(total))
        if value < 0:
            raise _out_of_domain("puntuacionTotal", total, "no puede ser negativa")
        for level in self.levels:
            if level.below is None or value < level.below:
                return level
        raise _out_of_domain("puntuacionTotal", total, "sin nivel de carga")


NAS_WORKLOAD_LEVELS = WorkloadLevelClassifier(
    [
        WorkloadLevel(Decimal("40"), "Baja", "baja"),
        WorkloadLevel(Decimal("60"), "Moderada", "moderada"),
        WorkloadLevel(Decimal("80"), "Alta", "alta"),
        WorkloadLevel(None, "Muy Alta", "muyAlta"),
    ]
)
