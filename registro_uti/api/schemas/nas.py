"""Pydantic schemas for NAS (Nursing Activities Score) records."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from .common import CamelModel, Pagination, RegistroBase, RegistroMeta, RegistroUpdateBase, WorkloadScore


class NASCreate(RegistroBase):
    selecciones: Dict[str, bool] = Field(default_factory=dict)


class NASUpdate(RegistroUpdateBase):
    # Merged over the stored selection: items not mentioned keep their value.
    selecciones: Optional[Dict[str, bool]] = None


class NASRecord(RegistroMeta):
    selecciones: Dict[str, bool]
    items_seleccionados: List[str]
    puntuacion_total: WorkloadScore
    nivel_carga: str


class NASList(CamelModel):
    items: List[NASRecord]
    pagination: Pagination


class NASResumen(CamelModel):
    total_registros: int
    promedio: Optional[float] = None
    minimo: Optional[float] = None
    maximo: Optional[float] = None
    distribucion: Dict[str, int]


class NASItemFrecuente(CamelModel):
    item: str
    etiqueta: str
    frecuencia: int
