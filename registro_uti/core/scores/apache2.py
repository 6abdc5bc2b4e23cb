"""APACHE II severity score: canonical range tables and total/risk derivation.

The bucket identifiers are the ones the bedside form sends in
``rangosSeleccionados``; the same tables score raw measurements and validate
buckets picked by hand, so the two paths cannot drift apart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from .aggregate import sum_points
from .classifiers import APACHE_RISK
from .errors import (
    DOMAIN_RANGE,
    MISSING_DISCRIMINATOR,
    DomainRangeError,
    MissingDiscriminatorError,
    ValidationResult,
    Violation,
)
from .ranges import RangeScoreTable, ScoreRange, above, at_least, below, between, exactly

logger = logging.getLogger(__name__)

__all__ = [
    "AdmissionType",
    "CHRONIC_HEALTH",
    "FIO2_THRESHOLD",
    "SELECTABLE_RANGES",
    "SUBSCORE_FIELDS",
    "SUBSCORE_MAX",
    "SUMMARY_GRID_RANGES",
    "SeverityMeasurements",
    "SeverityResult",
    "chronic_health_range",
    "compute_severity",
    "evaluate_severity",
    "oxygenation_table",
    "validate_subscores",
]

FIO2_THRESHOLD = 0.5

TEMPERATURA = RangeScoreTable(
    "temperatura",
    (
        at_least("temp_≥41", 41, 4),
        between("temp_39-40.9", 39, 41, 3),
        between("temp_38.5-38.9", 38.5, 39, 1),
        below("temp_≤31.9", 32, 3),
        between("temp_32-33.9", 32, 34, 2),
        between("temp_34-35.9", 34, 36, 1),
        between("temp_36-38.4", 36, 38.5, 0),
    ),
)

PRESION_ARTERIAL = RangeScoreTable(
    "presionArterial",
    (
        at_least("pa_≥160", 160, 4),
        between("pa_130-159", 130, 160, 3),
        between("pa_110-129", 110, 130, 2),
        below("pa_≤49", 50, 4),
        between("pa_50-69", 50, 70, 2),
        between("pa_70-109", 70, 110, 0),
    ),
)

FRECUENCIA_CARDIACA = RangeScoreTable(
    "frecuenciaCardiaca",
    (
        at_least("fc_≥180", 180, 4),
        between("fc_140-179", 140, 180, 3),
        between("fc_110-139", 110, 140, 2),
        below("fc_≤54", 55, 3),
        between("fc_55-69", 55, 70, 2),
        between("fc_70-109", 70, 110, 0),
    ),
)

FRECUENCIA_RESPIRATORIA = RangeScoreTable(
    "frecuenciaRespiratoria",
    (
        at_least("fr_≥50", 50, 4),
        between("fr_35-49", 35, 50, 3),
        between("fr_25-34", 25, 35, 1),
        below("fr_≤9", 10, 2),
        between("fr_10-11", 10, 12, 1),
        between("fr_12-24", 12, 25, 0),
    ),
)

# FiO2 >= 0.5: alveolar-arterial gradient.
OXIGENACION_AADO2 = RangeScoreTable(
    "oxigenacion",
    (
        above("ox_aado2_high", 499, 4),
        between("ox_aado2_med", 350, 499, 3, inclusive=True),
        between("ox_aado2_low", 200, 350, 2),
        below("ox_normal", 200, 0),
    ),
)

# FiO2 < 0.5: arterial oxygen pressure.
OXIGENACION_PAO2 = RangeScoreTable(
    "oxigenacion",
    (
        below("ox_pao2_low", 56, 4),
        between("ox_pao2_55_60", 56, 61, 3),
        between("ox_pao2_61_70", 61, 70, 1, inclusive=True),
        above("ox_normal", 70, 0),
    ),
)

PH_ARTERIAL = RangeScoreTable(
    "phArterial",
    (
        at_least("ph_≥7.7", 7.7, 4),
        between("ph_7.6-7.69", 7.6, 7.7, 3),
        between("ph_7.5-7.59", 7.5, 7.6, 1),
        below("ph_<7.15", 7.15, 4),
        between("ph_7.15-7.24", 7.15, 7.25, 3),
        between("ph_7.25-7.32", 7.25, 7.33, 2),
        between("ph_7.33-7.49", 7.33, 7.5, 0),
    ),
)

SODIO = RangeScoreTable(
    "sodio",
    (
        at_least("na_≥180", 180, 4),
        between("na_160-179", 160, 180, 3),
        between("na_155-159", 155, 160, 2),
        between("na_150-154", 150, 155, 1),
        below("na_≤110", 111, 4),
        between("na_111-119", 111, 120, 3),
        between("na_120-129", 120, 130, 2),
        between("na_130-149", 130, 150, 0),
    ),
)

POTASIO = RangeScoreTable(
    "potasio",
    (
        at_least("k_≥7", 7, 4),
        between("k_6-6.9", 6, 7, 3),
        between("k_5.5-5.9", 5.5, 6, 1),
        below("k_<2.5", 2.5, 4),
        between("k_2.5-2.9", 2.5, 3, 2),
        between("k_3-3.4", 3, 3.5, 1),
        between("k_3.5-5.4", 3.5, 5.5, 0),
    ),
)

# 0.6 mg/dL is claimed by the low bucket, which is scanned before the normal band.
CREATININA = RangeScoreTable(
    "creatinina",
    (
        at_least("cr_≥3.5", 3.5, 4),
        between("cr_2-3.4", 2, 3.5, 3),
        between("cr_1.5-1.9", 1.5, 2, 2),
        below("cr_<0.6", 0.6, 2, inclusive=True),
        between("cr_0.6-1.4", 0.6, 1.5, 0),
    ),
)

HEMATOCRITO = RangeScoreTable(
    "hematocrito",
    (
        at_least("hto_≥60", 60, 4),
        between("hto_50-59.9", 50, 60, 2),
        between("hto_46-49.9", 46, 50, 1),
        below("hto_<20", 20, 4),
        between("hto_20-29.9", 20, 30, 2),
        between("hto_30-45.9", 30, 46, 0),
    ),
)

LEUCOCITOS = RangeScoreTable(
    "leucocitos",
    (
        at_least("wbc_≥40", 40, 4),
        between("wbc_20-39.9", 20, 40, 2),
        between("wbc_15-19.9", 15, 20, 1),
        below("wbc_<1", 1, 4),
        between("wbc_1-2.9", 1, 3, 2),
        between("wbc_3-14.9", 3, 15, 0),
    ),
)

GLASGOW = RangeScoreTable(
    "glasgow",
    (
        between("gcs_3-6", 3, 7, 4),
        between("gcs_7-9", 7, 10, 3),
        between("gcs_10-12", 10, 13, 2),
        between("gcs_13-14", 13, 15, 1),
        exactly("gcs_15", 15, 0),
    ),
    integer=True,
)

# Whole years, so 44.5 cannot fall between the 0 and 2 point buckets.
EDAD = RangeScoreTable(
    "edad",
    (
        at_least("edad_≥75", 75, 6),
        between("edad_65-74", 65, 75, 5),
        between("edad_55-64", 55, 65, 3),
        between("edad_45-54", 45, 55, 2),
        between("edad_≤44", 0, 45, 0),
    ),
    integer=True,
)


class AdmissionType(str, Enum):
    """Admission discriminator for the chronic-health component."""

    CIRUGIA_ELECTIVA = "cirugia_electiva"
    MEDICA = "medica"
    CIRUGIA_URGENTE = "cirugia_urgente"


CHRONIC_HEALTH: Dict[str, ScoreRange] = {
    "enf_sin": ScoreRange("enf_sin", 0),
    "enf_electiva": ScoreRange("enf_electiva", 2),
    "enf_urgente": ScoreRange("enf_urgente", 5),
}

# Bucket ids sent by the form's summary grid. They are accepted in
# ``rangosSeleccionados`` only and never used to score a measurement; the low
# tail of several variables is collapsed into a single +2 or +3 bucket there.
SUMMARY_GRID_RANGES: Dict[str, Tuple[ScoreRange, ...]] = {
    "oxigenacion": (between("ox_pao2_56_60", 56, 61, 3),),
    "sodio": (
        at_least("sodio_≥180", 180, 4),
        between("sodio_160-179", 160, 180, 3),
        between("sodio_155-159", 155, 160, 2),
        between("sodio_150-154", 150, 155, 1),
        between("sodio_130-149", 130, 150, 0),
        below("sodio_≤129", 130, 2),
    ),
    "potasio": (
        at_least("potasio_≥7", 7, 4),
        between("potasio_6-6.9", 6, 7, 3),
        between("potasio_5.5-5.9", 5.5, 6, 1),
        between("potasio_3.5-5.4", 3.5, 5.5, 0),
        between("potasio_3-3.4", 3, 3.5, 1),
        below("potasio_≤2.9", 3, 2),
    ),
    "creatinina": (
        at_least("creatinina_≥3.5", 3.5, 4),
        between("creatinina_2-3.4", 2, 3.5, 3),
        between("creatinina_1.5-1.9", 1.5, 2, 2),
        between("creatinina_0.6-1.4", 0.6, 1.5, 0),
        below("creatinina_≤0.6", 0.6, 2, inclusive=True),
    ),
    "hematocrito": (
        at_least("hto_≥60", 60, 4),
        between("hto_50-59.9", 50, 60, 2),
        between("hto_46-49.9", 46, 50, 1),
        between("hto_30-45.9", 30, 46, 0),
        below("hto_≤29.9", 30, 2),
    ),
    "leucocitos": (
        at_least("leuco_≥40", 40, 4),
        between("leuco_20-39.9", 20, 40, 2),
        between("leuco_15-19.9", 15, 20, 1),
        between("leuco_3-14.9", 3, 15, 0),
        below("leuco_≤2.9", 3, 2),
    ),
    "glasgow": (
        exactly("glasgow_15", 15, 0),
        between("glasgow_13-14", 13, 15, 1),
        between("glasgow_10-12", 10, 13, 2),
        between("glasgow_≤9", 3, 10, 3),
    ),
}

_MEASURED_TABLES: Tuple[RangeScoreTable, ...] = (
    TEMPERATURA,
    PRESION_ARTERIAL,
    FRECUENCIA_CARDIACA,
    FRECUENCIA_RESPIRATORIA,
    PH_ARTERIAL,
    SODIO,
    POTASIO,
    CREATININA,
    HEMATOCRITO,
    LEUCOCITOS,
    GLASGOW,
    EDAD,
)

SUBSCORE_FIELDS: Tuple[str, ...] = (
    "temperatura",
    "presionArterial",
    "frecuenciaCardiaca",
    "frecuenciaRespiratoria",
    "oxigenacion",
    "phArterial",
    "sodio",
    "potasio",
    "creatinina",
    "hematocrito",
    "leucocitos",
    "glasgow",
    "edad",
    "enfermedadCronica",
)


def _selectable_ranges() -> Dict[str, Dict[str, ScoreRange]]:
    ranges = {table.variable: table.by_id() for table in _MEASURED_TABLES}
    ranges["oxigenacion"] = {**OXIGENACION_AADO2.by_id(), **OXIGENACION_PAO2.by_id()}
    ranges["enfermedadCronica"] = dict(CHRONIC_HEALTH)
    for name, buckets in SUMMARY_GRID_RANGES.items():
        ranges[name].update((bucket.id, bucket) for bucket in buckets)
    return ranges


SELECTABLE_RANGES: Dict[str, Dict[str, ScoreRange]] = _selectable_ranges()

SUBSCORE_MAX: Dict[str, int] = {
    name: max(bucket.points for bucket in buckets.values())
    for name, buckets in SELECTABLE_RANGES.items()
}


@dataclass(frozen=True)
class SeverityMeasurements:
    """Raw bedside values. ``oxigenacion`` is AaDO2 or PaO2 depending on ``fio2``."""

    temperatura: float
    presion_arterial_media: float
    frecuencia_cardiaca: float
    frecuencia_respiratoria: float
    oxigenacion: float
    ph_arterial: float
    sodio: float
    potasio: float
    creatinina: float
    hematocrito: float
    leucocitos: float
    glasgow: int
    edad: float
    fio2: Optional[float] = None
    enfermedad_cronica: bool = False
    tipo_admision: Optional[AdmissionType] = None


@dataclass(frozen=True)
class SeverityResult:
    sub_scores: Dict[str, int]
    puntaje_total: int
    riesgo_mortalidad: str
    nivel_riesgo: str
    rangos_seleccionados: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            **self.sub_scores,
            "puntajeTotal": self.puntaje_total,
            "riesgoMortalidad": self.riesgo_mortalidad,
            "nivelRiesgo": self.nivel_riesgo,
            "rangosSeleccionados": dict(self.rangos_seleccionados),
        }


def _missing(field_name: str, message: str) -> ValidationResult:
    return ValidationResult.collect(
        [Violation(reason=MISSING_DISCRIMINATOR, field=field_name, message=message)]
    )


def oxygenation_table(fio2: Optional[float]) -> RangeScoreTable:
    """Select the oxygenation sub-table from the inspired oxygen fraction."""

    if fio2 is None:
        _missing("fio2", "oxigenacion requiere FiO2 para elegir entre AaDO2 y PaO2").raise_for_violations()
    if not 0 < fio2 <= 1:
        raise DomainRangeError(
            [Violation(reason=DOMAIN_RANGE, field="fio2", message=f"fio2={fio2} debe estar entre 0 y 1")]
        )
    return OXIGENACION_AADO2 if fio2 >= FIO2_THRESHOLD else OXIGENACION_PAO2


def chronic_health_range(enfermedad_cronica: bool, tipo_admision: Optional[AdmissionType]) -> ScoreRange:
    if not enfermedad_cronica:
        return CHRONIC_HEALTH["enf_sin"]
    if tipo_admision is None:
        _missing(
            "tipoAdmision",
            "enfermedadCronica requiere el tipo de admisión (cirugía electiva, médica o cirugía urgente)",
        ).raise_for_violations()
    if AdmissionType(tipo_admision) is AdmissionType.CIRUGIA_ELECTIVA:
        return CHRONIC_HEALTH["enf_electiva"]
    return CHRONIC_HEALTH["enf_urgente"]


def _score(result: ValidationResult, table: RangeScoreTable, value: float) -> Tuple[Optional[ScoreRange], ValidationResult]:
    try:
        return table.classify(value), result
    except DomainRangeError as exc:
        return None, result.merge(ValidationResult.collect(exc.violations))


def compute_severity(measurements: SeverityMeasurements) -> SeverityResult:
    """Score every raw measurement, then derive the total and mortality risk.

    All domain problems are collected before raising so the caller sees every
    rejected field at once. A missing discriminator is reported as such even
    when other fields are also out of range.
    """

    result = ValidationResult()
    values = {
        "temperatura": measurements.temperatura,
        "presionArterial": measurements.presion_arterial_media,
        "frecuenciaCardiaca": measurements.frecuencia_cardiaca,
        "frecuenciaRespiratoria": measurements.frecuencia_respiratoria,
        "phArterial": measurements.ph_arterial,
        "sodio": measurements.sodio,
        "potasio": measurements.potasio,
        "creatinina": measurements.creatinina,
        "hematocrito": measurements.hematocrito,
        "leucocitos": measurements.leucocitos,
        "glasgow": measurements.glasgow,
        "edad": measurements.edad,
    }
    selected: Dict[str, ScoreRange] = {}
    for table in _MEASURED_TABLES:
        bucket, result = _score(result, table, values[table.variable])
        if bucket is not None:
            selected[table.variable] = bucket

    discriminator_errors: List[Violation] = []
    try:
        oxygen = oxygenation_table(measurements.fio2)
    except MissingDiscriminatorError as exc:
        discriminator_errors.extend(exc.violations)
    except DomainRangeError as exc:
        result = result.merge(ValidationResult.collect(exc.violations))
    else:
        bucket, result = _score(result, oxygen, measurements.oxigenacion)
        if bucket is not None:
            selected["oxigenacion"] = bucket

    try:
        selected["enfermedadCronica"] = chronic_health_range(
            measurements.enfermedad_cronica, measurements.tipo_admision
        )
    except MissingDiscriminatorError as exc:
        discriminator_errors.extend(exc.violations)

    if discriminator_errors:
        result = ValidationResult.collect(discriminator_errors).merge(result)
    if not result.ok:
        logger.info("APACHE II rechazado: %s", [v.field for v in result.violations])
    result.raise_for_violations()

    sub_scores = {name: selected[name].points for name in SUBSCORE_FIELDS}
    rangos = {name: selected[name].id for name in SUBSCORE_FIELDS}
    return _derive(sub_scores, rangos)


def validate_subscores(
    sub_scores: Mapping[str, object],
    selected_ranges: Optional[Mapping[str, str]] = None,
) -> ValidationResult:
    """Check hand-picked sub-scores against their bounds and the canonical buckets."""

    violations: List[Violation] = []
    for name in sub_scores:
        if name not in SUBSCORE_MAX:
            violations.append(Violation(reason=DOMAIN_RANGE, field=name, message=f"Campo desconocido: {name}"))
    for name in SUBSCORE_FIELDS:
        value = sub_scores.get(name)
        if value is None:
            violations.append(Violation(reason=DOMAIN_RANGE, field=name, message=f"{name} es requerido"))
            continue
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= SUBSCORE_MAX[name]:
            violations.append(
                Violation(
                    reason=DOMAIN_RANGE,
                    field=name,
                    message=f"{name}={value!r} debe ser un entero entre 0 y {SUBSCORE_MAX[name]}",
                )
            )

    if selected_ranges is not None and not isinstance(selected_ranges, Mapping):
        violations.append(
            Violation(
                reason=DOMAIN_RANGE,
                field="rangosSeleccionados",
                message=f"rangosSeleccionados debe ser un objeto campo -> rango (recibido {selected_ranges!r})",
            )
        )
        selected_ranges = None

    for name, range_id in (selected_ranges or {}).items():
        buckets = SELECTABLE_RANGES.get(name)
        if buckets is None:
            violations.append(
                Violation(reason=DOMAIN_RANGE, field=name, message=f"Rango seleccionado para campo desconocido: {name}")
            )
            continue
        if not isinstance(range_id, str):
            violations.append(
                Violation(reason=DOMAIN_RANGE, field=name, message=f"{name}: el rango debe ser texto (recibido {range_id!r})")
            )
            continue
        bucket = buckets.get(range_id)
        if bucket is None:
            violations.append(
                Violation(reason=DOMAIN_RANGE, field=name, message=f"{name}: rango desconocido {range_id!r}")
            )
        elif sub_scores.get(name) != bucket.points:
            violations.append(
                Violation(
                    reason=DOMAIN_RANGE,
                    field=name,
                    message=(
                        f"{name}: el rango {range_id!r} vale {bucket.points} puntos,"
                        f" no {sub_scores.get(name)!r}"
                    ),
                )
            )
    return ValidationResult.collect(violations)


def evaluate_severity(
    sub_scores: Mapping[str, object],
    selected_ranges: Optional[Mapping[str, str]] = None,
) -> SeverityResult:
    """Derive total and risk from sub-scores already chosen at the bedside."""

    result = validate_subscores(sub_scores, selected_ranges)
    if not result.ok:
        logger.info("APACHE II rechazado: %s", [v.field for v in result.violations])
    result.raise_for_violations()
    points = {name: int(sub_scores[name]) for name in SUBSCORE_FIELDS}
    return _derive(points, dict(selected_ranges or {}))


def _derive(sub_scores: Dict[str, int], rangos: Dict[str, str]) -> SeverityResult:
    total = sum_points(sub_scores.values())
    risk = APACHE_RISK.classify(total)
    return SeverityResult(
        sub_scores=sub_scores,
        puntaje_total=total,
        riesgo_mortalidad=risk.percentage,
        nivel_riesgo=risk.level,
        rangos_seleccionados=rangos,
    )
