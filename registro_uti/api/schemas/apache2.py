"""Pydantic schemas for APACHE II evaluations.

Numeric fields are only type-checked here; bounds and bucket consistency are
the scoring engine's job, which reports them as structured violations.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field

from .common import CamelModel, Pagination, RegistroBase, RegistroMeta, RegistroUpdateBase


class Apache2Puntajes(CamelModel):
    temperatura: int
    presion_arterial: int
    frecuencia_cardiaca: int
    frecuencia_respiratoria: int
    oxigenacion: int
    ph_arterial: int
    sodio: int
    potasio: int
    creatinina: int
    hematocrito: int
    leucocitos: int
    glasgow: int
    edad: int
    enfermedad_cronica: int
    rangos_seleccionados: Dict[str, str] = Field(default_factory=dict)


class Apache2Create(Apache2Puntajes, RegistroBase):
    pass


class Apache2Mediciones(CamelModel):
    temperatura: float
    presion_arterial_media: float
    frecuencia_cardiaca: float
    frecuencia_respiratoria: float
    oxigenacion: float = Field(..., description="AaDO2 si FiO2 >= 0.5, si no PaO2")
    ph_arterial: float
    sodio: float
    potasio: float
    creatinina: float
    hematocrito: float
    leucocitos: float
    glasgow: int
    edad: int
    fio2: Optional[float] = None
    enfermedad_cronica: bool = False
    tipo_admision: Optional[str] = None


class Apache2MedicionesCreate(Apache2Mediciones, RegistroBase):
    pass


class Apache2Update(RegistroUpdateBase):
    """Partial update of a bedside evaluation; omitted sub-scores keep their stored value."""

    temperatura: Optional[int] = None
    presion_arterial: Optional[int] = None
    frecuencia_cardiaca: Optional[int] = None
    frecuencia_respiratoria: Optional[int] = None
    oxigenacion: Optional[int] = None
    ph_arterial: Optional[int] = None
    sodio: Optional[int] = None
    potasio: Optional[int] = None
    creatinina: Optional[int] = None
    hematocrito: Optional[int] = None
    leucocitos: Optional[int] = None
    glasgow: Optional[int] = None
    edad: Optional[int] = None
    enfermedad_cronica: Optional[int] = None
    rangos_seleccionados: Optional[Dict[str, str]] = None


class Apache2MedicionesUpdate(Apache2Mediciones, RegistroUpdateBase):
    pass


class Apache2Record(Apache2Puntajes, RegistroMeta):
    modo: str
    mediciones: Optional[Dict[str, Any]] = None
    puntaje_total: int
    riesgo_mortalidad: str
    nivel_riesgo: str


class Apache2List(CamelModel):
    items: List[Apache2Record]
    pagination: Pagination


class Apache2Resumen(CamelModel):
    total_registros: int
    promedio_puntaje: Optional[float] = None
    por_nivel_riesgo: Dict[str, int]
