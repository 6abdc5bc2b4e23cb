"""Pydantic schemas for respiratory kinesiology categorizations."""
from __future__ import annotations

from typing import Dict, List, Optional

from .common import CamelModel, Pagination, RegistroBase, RegistroMeta, RegistroUpdateBase


class CategorizacionEjes(CamelModel):
    patron_respiratorio: int
    asistencia_ventilatoria: int
    sas_glasgow: int
    tos_secreciones: int
    asistencia: int


class CategorizacionCreate(CategorizacionEjes, RegistroBase):
    pass


class CategorizacionUpdate(RegistroUpdateBase):
    patron_respiratorio: Optional[int] = None
    asistencia_ventilatoria: Optional[int] = None
    sas_glasgow: Optional[int] = None
    tos_secreciones: Optional[int] = None
    asistencia: Optional[int] = None


class CategorizacionRecord(CategorizacionEjes, RegistroMeta):
    puntaje_total: int
    complejidad: str
    carga_asistencial: str


class CategorizacionList(CamelModel):
    items: List[CategorizacionRecord]
    pagination: Pagination


class ComplejidadResumen(CamelModel):
    cantidad: int
    promedio_puntaje: Optional[float] = None


class CategorizacionResumen(CamelModel):
    total_registros: int
    promedio_puntaje: Optional[float] = None
    por_complejidad: Dict[str, ComplejidadResumen]
