"""Nursing Activities Score: weighted item flags with exclusive option groups."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Mapping, Tuple

from .aggregate import sum_weights
from .classifiers import NAS_WORKLOAD_LEVELS
from .errors import DOMAIN_RANGE, DomainRangeError, Violation
from .groups import ExclusiveGroup, ExclusiveGroupValidator

logger = logging.getLogger(__name__)

__all__ = [
    "NAS_GROUPS",
    "NAS_ITEMS",
    "NAS_ITEM_LABELS",
    "NAS_VALIDATOR",
    "NAS_WEIGHTS",
    "WorkloadResult",
    "compute_workload",
    "normalize_flags",
    "selected_items",
]

# Percentage of one caregiver's shift, per item.
NAS_WEIGHTS: Dict[str, Decimal] = {
    item: Decimal(weight)
    for item, weight in (
        ("item_1a", "4.5"),
        ("item_1b", "12.1"),
        ("item_1c", "19.6"),
        ("item_2", "4.3"),
        ("item_3", "5.6"),
        ("item_4a", "4.1"),
        ("item_4b", "16.5"),
        ("item_4c", "20.0"),
        ("item_5", "1.8"),
        ("item_6a", "5.5"),
        ("item_6b", "12.4"),
        ("item_6c", "17.0"),
        ("item_7a", "4.0"),
        ("item_7b", "32.0"),
        ("item_8a", "4.2"),
        ("item_8b", "23.2"),
        ("item_8c", "30.0"),
        ("item_9", "1.4"),
        ("item_10", "1.8"),
        ("item_11", "4.4"),
        ("item_12", "1.2"),
        ("item_13", "2.5"),
        ("item_14", "1.7"),
        ("item_15", "7.1"),
        ("item_16", "7.7"),
        ("item_17", "7.0"),
        ("item_18", "1.6"),
        ("item_19", "1.3"),
        ("item_20", "2.8"),
        ("item_21", "1.3"),
        ("item_22", "2.8"),
        ("item_23", "1.9"),
    )
}

NAS_ITEMS: Tuple[str, ...] = tuple(NAS_WEIGHTS)

NAS_ITEM_LABELS: Dict[str, str] = {
    "item_1a": "Monitorización horaria (1a)",
    "item_1b": "Presencia continua ≥2h (1b)",
    "item_1c": "Presencia continua ≥4h (1c)",
    "item_2": "Analíticas (2)",
    "item_3": "Medicación (3)",
    "item_4a": "Higiene normal (4a)",
    "item_4b": "Higiene >2h (4b)",
    "item_4c": "Higiene >4h (4c)",
    "item_5": "Cuidados drenajes (5)",
    "item_6a": "Movilización ≤3 veces (6a)",
    "item_6b": "Movilización >3 veces (6b)",
    "item_6c": "Movilización ≥3 enfermeras (6c)",
    "item_7a": "Apoyo familia ~1h (7a)",
    "item_7b": "Apoyo familia ≥3h (7b)",
    "item_8a": "Admin rutinarias <2h (8a)",
    "item_8b": "Admin ~2h (8b)",
    "item_8c": "Admin ~4h (8c)",
    "item_9": "Soporte respiratorio (9)",
    "item_10": "Cuidados vía aérea (10)",
    "item_11": "Mejora función pulmonar (11)",
    "item_12": "Fármacos vasoactivos (12)",
    "item_13": "Reposición IV grandes pérdidas (13)",
    "item_14": "Monitorización aurícula izq (14)",
    "item_15": "RCP tras parada (15)",
    "item_16": "Hemofiltración/diálisis (16)",
    "item_17": "Diuresis cuantitativa (17)",
    "item_18": "Monitorización PIC (18)",
    "item_19": "Tratamiento acid/alc metabólica (19)",
    "item_20": "Nutrición parenteral (20)",
    "item_21": "Nutrición enteral (21)",
    "item_22": "Intervención específica UCI (22)",
    "item_23": "Intervención fuera UCI (23)",
}

NAS_GROUPS: Tuple[ExclusiveGroup, ...] = (
    ExclusiveGroup("grupo_1", ("item_1a", "item_1b", "item_1c"), "Grupo 1 (monitorización)"),
    ExclusiveGroup("grupo_4", ("item_4a", "item_4b", "item_4c"), "Grupo 4 (higiene)"),
    ExclusiveGroup("grupo_6", ("item_6a", "item_6b", "item_6c"), "Grupo 6 (movilización)"),
    ExclusiveGroup("grupo_7", ("item_7a", "item_7b"), "Grupo 7 (apoyo familiar)"),
    ExclusiveGroup("grupo_8", ("item_8a", "item_8b", "item_8c"), "Grupo 8 (tareas administrativas)"),
)

NAS_VALIDATOR = ExclusiveGroupValidator(NAS_GROUPS, NAS_ITEMS)


@dataclass(frozen=True)
class WorkloadResult:
    flags: Dict[str, bool]
    puntuacion_total: Decimal
    nivel_carga: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "selecciones": dict(self.flags),
            "puntuacionTotal": self.puntuacion_total,
            "nivelCarga": self.nivel_carga,
        }


def normalize_flags(flags: Mapping[str, bool]) -> Dict[str, bool]:
    """Expand a partial selection to every item, unselected ones set to False."""

    return {item: flags.get(item) is True for item in NAS_ITEMS}


def selected_items(flags: Mapping[str, bool]) -> List[str]:
    return [item for item in NAS_ITEMS if flags.get(item) is True]


def compute_workload(flags: Mapping[str, bool]) -> WorkloadResult:
    """Validate group exclusivity, then add the weights of the selected items.

    No score is produced when any group has more than one selected option.
    Totals above 100 are legitimate: the patient needs more than one
    caregiver for the shift.
    """

    if not isinstance(flags, Mapping):
        raise DomainRangeError(
            [
                Violation(
                    reason=DOMAIN_RANGE,
                    field="selecciones",
                    message=f"selecciones debe ser un objeto ítem -> verdadero/falso (recibido {flags!r})",
                )
            ]
        )
    result = NAS_VALIDATOR.validate(flags)
    if not result.ok:
        logger.info("NAS rechazado: %s", [v.group or v.field for v in result.violations])
    result.raise_for_violations()
    normalized = normalize_flags(flags)
    total = sum_weights(NAS_WEIGHTS, normalized)
    level = NAS_WORKLOAD_LEVELS.classify(total)
    return WorkloadResult(flags=normalized, puntuacion_total=total, nivel_carga=level.label)
