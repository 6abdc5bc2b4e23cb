"""API endpoints for APACHE II evaluations."""
from __future__ import annotations

import json
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...core.scores.apache2 import SUBSCORE_FIELDS
from ..core.config import settings
from ..deps import get_db_session
from ..models.registros import Apache2Evaluacion
from ..schemas.apache2 import (
    Apache2Create,
    Apache2List,
    Apache2MedicionesCreate,
    Apache2MedicionesUpdate,
    Apache2Record,
    Apache2Resumen,
    Apache2Update,
)
from ..schemas.common import Pagination, record_meta
from ..services.apache2_service import MODO_MEDICIONES, apache2_service
from ..services.base import page_count

router = APIRouter(prefix="/api/apache2", tags=["apache2"])


def to_schema(record: Apache2Evaluacion) -> Apache2Record:
    output = json.loads(record.output_json)
    return Apache2Record(
        **record_meta(record),
        **{name: output[name] for name in SUBSCORE_FIELDS},
        rangos_seleccionados=output.get("rangosSeleccionados", {}),
        modo=record.modo,
        mediciones=json.loads(record.input_json) if record.modo == MODO_MEDICIONES else None,
        puntaje_total=record.puntaje_total,
        riesgo_mortalidad=record.riesgo_mortalidad,
        nivel_riesgo=record.nivel_riesgo,
    )


@router.post("/", response_model=Apache2Record, status_code=status.HTTP_201_CREATED)
def create_apache2(payload: Apache2Create, conn=Depends(get_db_session)) -> Apache2Record:
    return to_schema(apache2_service.create(conn, payload))


@router.post("/mediciones", response_model=Apache2Record, status_code=status.HTTP_201_CREATED)
def create_apache2_from_measurements(payload: Apache2MedicionesCreate, conn=Depends(get_db_session)) -> Apache2Record:
    return to_schema(apache2_service.create_from_measurements(conn, payload))


@router.get("/", response_model=Apache2List)
def list_apache2(
    paciente_rut: Optional[str] = Query(default=None, alias="pacienteRut"),
    fecha_desde: Optional[date] = Query(default=None, alias="fechaDesde"),
    fecha_hasta: Optional[date] = Query(default=None, alias="fechaHasta"),
    limit: Optional[int] = Query(default=None, ge=1, le=settings.page_size_max),
    offset: int = Query(default=0, ge=0),
    conn=Depends(get_db_session),
) -> Apache2List:
    items, total, limit, offset = apache2_service.list(
        conn,
        paciente_rut=paciente_rut,
        date_from=fecha_desde,
        date_to=fecha_hasta,
        limit=limit,
        offset=offset,
    )
    return Apache2List(
        items=[to_schema(item) for item in items],
        pagination=Pagination(total=total, limit=limit, offset=offset, pages=page_count(total, limit)),
    )


@router.get("/estadisticas/resumen", response_model=Apache2Resumen)
def apache2_summary(
    fecha_desde: Optional[date] = Query(default=None, alias="fechaDesde"),
    fecha_hasta: Optional[date] = Query(default=None, alias="fechaHasta"),
    conn=Depends(get_db_session),
) -> Apache2Resumen:
    return Apache2Resumen(**apache2_service.summary(conn, date_from=fecha_desde, date_to=fecha_hasta))


@router.get("/paciente/{rut}", response_model=Apache2List)
def list_apache2_for_patient(
    rut: str,
    limit: Optional[int] = Query(default=None, ge=1, le=settings.page_size_max),
    offset: int = Query(default=0, ge=0),
    conn=Depends(get_db_session),
) -> Apache2List:
    return list_apache2(
        paciente_rut=rut, fecha_desde=None, fecha_hasta=None, limit=limit, offset=offset, conn=conn
    )


@router.get("/{record_id}", response_model=Apache2Record)
def get_apache2(record_id: int, conn=Depends(get_db_session)) -> Apache2Record:
    return to_schema(apache2_service.get(conn, record_id))


@router.put("/{record_id}", response_model=Apache2Record)
def update_apache2(record_id: int, payload: Apache2Update, conn=Depends(get_db_session)) -> Apache2Record:
    return to_schema(apache2_service.update(conn, record_id, payload))


@router.put("/{record_id}/mediciones", response_model=Apache2Record)
def update_apache2_measurements(
    record_id: int, payload: Apache2MedicionesUpdate, conn=Depends(get_db_session)
) -> Apache2Record:
    return to_schema(apache2_service.update_measurements(conn, record_id, payload))


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_apache2(record_id: int, conn=Depends(get_db_session)) -> None:
    apache2_service.delete(conn, record_id)
