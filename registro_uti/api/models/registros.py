"""Database model representation using dataclasses.

Every record keeps the raw bedside input (``input_json``) next to the fields
the scoring engine derived from it, so a stored row can always be recomputed
and compared.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass
class ScoreRecord:
    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    paciente_rut: str = ""
    usuario_id: Optional[int] = None
    fecha: date = field(default_factory=date.today)
    input_json: str = "{}"
    output_json: str = "{}"
    observaciones: Optional[str] = None


@dataclass
class Apache2Evaluacion(ScoreRecord):
    # "puntajes": sub-scores picked at the bedside; "mediciones": raw vitals and labs.
    modo: str = "puntajes"
    puntaje_total: int = 0
    riesgo_mortalidad: str = ""
    nivel_riesgo: str = ""


@dataclass
class RegistroNAS(ScoreRecord):
    puntuacion_total: Decimal = Decimal("0.00")
    nivel_carga: str = ""


@dataclass
class CategorizacionKinesiologia(ScoreRecord):
    puntaje_total: int = 0
    complejidad: str = ""
    carga_asistencial: str = ""
