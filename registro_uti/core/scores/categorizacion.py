"""Respiratory kinesiology categorization: five axes scored 1, 3 or 5."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

from .aggregate import sum_points
from .classifiers import KINESIOLOGY_COMPLEXITY
from .errors import DOMAIN_RANGE, ValidationResult, Violation

logger = logging.getLogger(__name__)

__all__ = ["ALLOWED_VALUES", "CATEGORIZATION_FIELDS", "CategorizationResult", "compute_categorization", "validate_axes"]

CATEGORIZATION_FIELDS: Tuple[str, ...] = (
    "patronRespiratorio",
    "asistenciaVentilatoria",
    "sasGlasgow",
    "tosSecreciones",
    "asistencia",
)

ALLOWED_VALUES = frozenset({1, 3, 5})


@dataclass(frozen=True)
class CategorizationResult:
    sub_scores: Dict[str, int]
    puntaje_total: int
    complejidad: str
    carga_asistencial: str

    def to_dict(self) -> Dict[str, object]:
        return {
            **self.sub_scores,
            "puntajeTotal": self.puntaje_total,
            "complejidad": self.complejidad,
            "cargaAsistencial": self.carga_asistencial,
        }


def validate_axes(sub_scores: Mapping[str, object]) -> ValidationResult:
    violations: List[Violation] = []
    for name in sub_scores:
        if name not in CATEGORIZATION_FIELDS:
            violations.append(Violation(reason=DOMAIN_RANGE, field=name, message=f"Campo desconocido: {name}"))
    for name in CATEGORIZATION_FIELDS:
        value = sub_scores.get(name)
        if isinstance(value, bool) or not isinstance(value, int) or value not in ALLOWED_VALUES:
            violations.append(
                Violation(
                    reason=DOMAIN_RANGE,
                    field=name,
                    message=f"{name}={value!r} debe ser 1, 3 o 5",
                )
            )
    return ValidationResult.collect(violations)


def compute_categorization(sub_scores: Mapping[str, object]) -> CategorizationResult:
    result = validate_axes(sub_scores)
    if not result.ok:
        logger.info("Categorización rechazada: %s", [v.field for v in result.violations])
    result.raise_for_violations()
    points = {name: int(sub_scores[name]) for name in CATEGORIZATION_FIELDS}
    total = sum_points(points.values())
    tier = KINESIOLOGY_COMPLEXITY.classify(total)
    return CategorizationResult(
        sub_scores=points,
        puntaje_total=total,
        complejidad=tier.complejidad,
        carga_asistencial=tier.carga_asistencial,
    )
