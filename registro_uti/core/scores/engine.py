"""Scoring facade used by the write path: validate, aggregate, classify."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional

from .apache2 import (
    AdmissionType,
    SeverityMeasurements,
    SeverityResult,
    compute_severity,
    evaluate_severity,
)
from .categorizacion import CategorizationResult, compute_categorization
from .errors import DOMAIN_RANGE, ValidationResult, Violation
from .nas import WorkloadResult, compute_workload
from .registry import register, run_score

__all__ = ["MEASUREMENT_FIELDS", "ScoringEngine", "engine", "measurements_from_payload"]

# Wire name -> SeverityMeasurements attribute, numeric measurements only.
MEASUREMENT_FIELDS: Dict[str, str] = {
    "temperatura": "temperatura",
    "presionArterialMedia": "presion_arterial_media",
    "frecuenciaCardiaca": "frecuencia_cardiaca",
    "frecuenciaRespiratoria": "frecuencia_respiratoria",
    "oxigenacion": "oxigenacion",
    "phArterial": "ph_arterial",
    "sodio": "sodio",
    "potasio": "potasio",
    "creatinina": "creatinina",
    "hematocrito": "hematocrito",
    "leucocitos": "leucocitos",
    "glasgow": "glasgow",
    "edad": "edad",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def measurements_from_payload(payload: Mapping[str, Any]) -> SeverityMeasurements:
    """Build raw measurements from their camelCase wire form.

    ``fio2`` and ``tipoAdmision`` are passed through untouched, missing or
    not, so the engine reports a missing discriminator as such.
    """

    violations: List[Violation] = []
    values: Dict[str, Any] = {}
    for wire_name, attribute in MEASUREMENT_FIELDS.items():
        value = payload.get(wire_name)
        if not _is_number(value):
            violations.append(
                Violation(
                    reason=DOMAIN_RANGE,
                    field=wire_name,
                    message=f"{wire_name} es requerido y debe ser numérico (recibido {value!r})",
                )
            )
            continue
        values[attribute] = value

    fio2 = payload.get("fio2")
    if fio2 is not None and not _is_number(fio2):
        violations.append(Violation(reason=DOMAIN_RANGE, field="fio2", message=f"fio2 no numérico: {fio2!r}"))

    tipo_admision: Optional[AdmissionType] = None
    raw_admission = payload.get("tipoAdmision")
    if raw_admission is not None:
        try:
            tipo_admision = AdmissionType(raw_admission)
        except ValueError:
            violations.append(
                Violation(
                    reason=DOMAIN_RANGE,
                    field="tipoAdmision",
                    message=f"tipoAdmision desconocido: {raw_admission!r}",
                )
            )

    ValidationResult.collect(violations).raise_for_violations()
    return SeverityMeasurements(
        fio2=fio2,
        enfermedad_cronica=bool(payload.get("enfermedadCronica", False)),
        tipo_admision=tipo_admision,
        **values,
    )


class ScoringEngine:
    """Pure entry points for the three score families.

    Every method either returns the complete derived field set or raises a
    :class:`~registro_uti.core.scores.errors.ScoringError`; nothing is
    partially computed and nothing is stored here.
    """

    def compute_severity(self, measurements: SeverityMeasurements) -> SeverityResult:
        return compute_severity(measurements)

    def evaluate_severity(
        self,
        sub_scores: Mapping[str, Any],
        selected_ranges: Optional[Mapping[str, str]] = None,
    ) -> SeverityResult:
        return evaluate_severity(sub_scores, selected_ranges)

    def compute_workload(self, flags: Mapping[str, bool]) -> WorkloadResult:
        return compute_workload(flags)

    def compute_categorization(self, sub_scores: Mapping[str, Any]) -> CategorizationResult:
        return compute_categorization(sub_scores)

    def compute(self, name: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return run_score(name, payload)


engine = ScoringEngine()


@register("apache2")
def _apache2(payload: Mapping[str, Any]) -> Dict[str, Any]:
    sub_scores = {key: value for key, value in payload.items() if key != "rangosSeleccionados"}
    return engine.evaluate_severity(sub_scores, payload.get("rangosSeleccionados")).to_dict()


@register("apache2_mediciones")
def _apache2_mediciones(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return engine.compute_severity(measurements_from_payload(payload)).to_dict()


@register("nas")
def _nas(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return engine.compute_workload(payload.get("selecciones") or {}).to_dict()


@register("categorizacion")
def _categorizacion(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return engine.compute_categorization(payload).to_dict()
