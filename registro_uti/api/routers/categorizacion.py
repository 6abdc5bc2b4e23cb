"""API endpoints for respiratory kinesiology categorizations."""
from __future__ import annotations

import json
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...core.scores.categorizacion import CATEGORIZATION_FIELDS
from ..core.config import settings
from ..deps import get_db_session
from ..models.registros import CategorizacionKinesiologia
from ..schemas.categorizacion import (
    CategorizacionCreate,
    CategorizacionList,
    CategorizacionRecord,
    CategorizacionResumen,
    CategorizacionUpdate,
)
from ..schemas.common import Pagination, record_meta
from ..services.base import page_count
from ..services.categorizacion_service import categorizacion_service

router = APIRouter(prefix="/api/categorizacion-kinesiologia", tags=["categorizacion"])


def to_schema(record: CategorizacionKinesiologia) -> CategorizacionRecord:
    output = json.loads(record.output_json)
    return CategorizacionRecord(
        **record_meta(record),
        **{name: output[name] for name in CATEGORIZATION_FIELDS},
        puntaje_total=record.puntaje_total,
        complejidad=record.complejidad,
        carga_asistencial=record.carga_asistencial,
    )


@router.post("/", response_model=CategorizacionRecord, status_code=status.HTTP_201_CREATED)
def create_categorizacion(payload: CategorizacionCreate, conn=Depends(get_db_session)) -> CategorizacionRecord:
    return to_schema(categorizacion_service.create(conn, payload))


@router.get("/", response_model=CategorizacionList)
def list_categorizaciones(
    paciente_rut: Optional[str] = Query(default=None, alias="pacienteRut"),
    fecha_desde: Optional[date] = Query(default=None, alias="fechaDesde"),
    fecha_hasta: Optional[date] = Query(default=None, alias="fechaHasta"),
    limit: Optional[int] = Query(default=None, ge=1, le=settings.page_size_max),
    offset: int = Query(default=0, ge=0),
    conn=Depends(get_db_session),
) -> CategorizacionList:
    items, total, limit, offset = categorizacion_service.list(
        conn,
        paciente_rut=paciente_rut,
        date_from=fecha_desde,
        date_to=fecha_hasta,
        limit=limit,
        offset=offset,
    )
    return CategorizacionList(
        items=[to_schema(item) for item in items],
        pagination=Pagination(total=total, limit=limit, offset=offset, pages=page_count(total, limit)),
    )


@router.get("/estadisticas/resumen", response_model=CategorizacionResumen)
def categorizacion_summary(
    fecha_desde: Optional[date] = Query(default=None, alias="fechaDesde"),
    fecha_hasta: Optional[date] = Query(default=None, alias="fechaHasta"),
    conn=Depends(get_db_session),
) -> CategorizacionResumen:
    return CategorizacionResumen(**categorizacion_service.summary(conn, date_from=fecha_desde, date_to=fecha_hasta))


@router.get("/paciente/{rut}", response_model=CategorizacionList)
def list_categorizaciones_for_patient(
    rut: str,
    limit: Optional[int] = Query(default=None, ge=1, le=settings.page_size_max),
    offset: int = Query(default=0, ge=0),
    conn=Depends(get_db_session),
) -> CategorizacionList:
    return list_categorizaciones(
        paciente_rut=rut, fecha_desde=None, fecha_hasta=None, limit=limit, offset=offset, conn=conn
    )


@router.get("/{record_id}", response_model=CategorizacionRecord)
def get_categorizacion(record_id: int, conn=Depends(get_db_session)) -> CategorizacionRecord:
    return to_schema(categorizacion_service.get(conn, record_id))


@router.put("/{record_id}", response_model=CategorizacionRecord)
def update_categorizacion(
    record_id: int, payload: CategorizacionUpdate, conn=Depends(get_db_session)
) -> CategorizacionRecord:
    return to_schema(categorizacion_service.update(conn, record_id, payload))


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_categorizacion(record_id: int, conn=Depends(get_db_session)) -> None:
    categorizacion_service.delete(conn, record_id)
