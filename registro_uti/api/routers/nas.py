"""API endpoints for NAS workload records."""
from __future__ import annotations

import json
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...core.scores.nas import selected_items
from ..core.config import settings
from ..deps import get_db_session
from ..models.registros import RegistroNAS
from ..schemas.common import Pagination, record_meta
from ..schemas.nas import NASCreate, NASItemFrecuente, NASList, NASRecord, NASResumen, NASUpdate
from ..services.base import page_count
from ..services.nas_service import nas_service

router = APIRouter(prefix="/api/nas", tags=["nas"])


def to_schema(record: RegistroNAS) -> NASRecord:
    selecciones = json.loads(record.output_json)["selecciones"]
    return NASRecord(
        **record_meta(record),
        selecciones=selecciones,
        items_seleccionados=selected_items(selecciones),
        puntuacion_total=record.puntuacion_total,
        nivel_carga=record.nivel_carga,
    )


@router.post("/", response_model=NASRecord, status_code=status.HTTP_201_CREATED)
def create_nas(payload: NASCreate, conn=Depends(get_db_session)) -> NASRecord:
    return to_schema(nas_service.create(conn, payload))


@router.get("/", response_model=NASList)
def list_nas(
    paciente_rut: Optional[str] = Query(default=None, alias="pacienteRut"),
    fecha_desde: Optional[date] = Query(default=None, alias="fechaDesde"),
    fecha_hasta: Optional[date] = Query(default=None, alias="fechaHasta"),
    limit: Optional[int] = Query(default=None, ge=1, le=settings.page_size_max),
    offset: int = Query(default=0, ge=0),
    conn=Depends(get_db_session),
) -> NASList:
    items, total, limit, offset = nas_service.list(
        conn,
        paciente_rut=paciente_rut,
        date_from=fecha_desde,
        date_to=fecha_hasta,
        limit=limit,
        offset=offset,
    )
    return NASList(
        items=[to_schema(item) for item in items],
        pagination=Pagination(total=total, limit=limit, offset=offset, pages=page_count(total, limit)),
    )


@router.get("/estadisticas/resumen", response_model=NASResumen)
def nas_summary(
    fecha_desde: Optional[date] = Query(default=None, alias="fechaDesde"),
    fecha_hasta: Optional[date] = Query(default=None, alias="fechaHasta"),
    conn=Depends(get_db_session),
) -> NASResumen:
    return NASResumen(**nas_service.summary(conn, date_from=fecha_desde, date_to=fecha_hasta))


@router.get("/estadisticas/items-frecuentes", response_model=List[NASItemFrecuente])
def nas_frequent_items(
    limit: int = Query(default=10, ge=1, le=50),
    fecha_desde: Optional[date] = Query(default=None, alias="fechaDesde"),
    fecha_hasta: Optional[date] = Query(default=None, alias="fechaHasta"),
    conn=Depends(get_db_session),
) -> List[NASItemFrecuente]:
    items = nas_service.frequent_items(conn, limit=limit, date_from=fecha_desde, date_to=fecha_hasta)
    return [NASItemFrecuente(**item) for item in items]


@router.get("/paciente/{rut}", response_model=NASList)
def list_nas_for_patient(
    rut: str,
    limit: Optional[int] = Query(default=None, ge=1, le=settings.page_size_max),
    offset: int = Query(default=0, ge=0),
    conn=Depends(get_db_session),
) -> NASList:
    return list_nas(paciente_rut=rut, fecha_desde=None, fecha_hasta=None, limit=limit, offset=offset, conn=conn)


@router.get("/{record_id}", response_model=NASRecord)
def get_nas(record_id: int, conn=Depends(get_db_session)) -> NASRecord:
    return to_schema(nas_service.get(conn, record_id))


@router.put("/{record_id}", response_model=NASRecord)
def update_nas(record_id: int, payload: NASUpdate, conn=Depends(get_db_session)) -> NASRecord:
    return to_schema(nas_service.update(conn, record_id, payload))


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_nas(record_id: int, conn=Depends(get_db_session)) -> None:
    nas_service.delete(conn, record_id)
