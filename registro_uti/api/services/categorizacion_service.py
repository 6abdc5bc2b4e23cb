"""Respiratory kinesiology categorizations."""
from __future__ import annotations

import json
import sqlite3
from datetime import date
from typing import Any, Dict, Optional

from ...core.scores.classifiers import KINESIOLOGY_COMPLEXITY
from ..models.registros import CategorizacionKinesiologia
from ..repositories.registros_repo import CategorizacionRepository
from ..schemas.categorizacion import CategorizacionCreate, CategorizacionEjes, CategorizacionUpdate
from ..schemas.common import RegistroUpdateBase
from .base import ScoreService

_AXES = set(CategorizacionEjes.model_fields)


class CategorizacionService(ScoreService[CategorizacionKinesiologia]):
    repository = CategorizacionRepository
    label = "categorización kinesiológica"
    unique_per_day = True

    def score_name(self, record: CategorizacionKinesiologia) -> str:
        return "categorizacion"

    def apply_result(self, record: CategorizacionKinesiologia, result: Dict[str, Any]) -> None:
        record.puntaje_total = result["puntajeTotal"]
        record.complejidad = result["complejidad"]
        record.carga_asistencial = result["cargaAsistencial"]

    def create(self, conn: sqlite3.Connection, data: CategorizacionCreate) -> CategorizacionKinesiologia:
        record = CategorizacionKinesiologia(
            paciente_rut=data.paciente_rut,
            usuario_id=data.usuario_id,
            fecha=data.fecha,
            observaciones=data.observaciones,
        )
        return self._insert(conn, record, data.model_dump(by_alias=True, include=_AXES))

    def update(
        self, conn: sqlite3.Connection, record_id: int, data: CategorizacionUpdate
    ) -> CategorizacionKinesiologia:
        record = self.get(conn, record_id)
        payload = json.loads(record.input_json)
        changes = data.model_dump(by_alias=True, exclude_unset=True, exclude=set(RegistroUpdateBase.model_fields))
        payload.update({key: value for key, value in changes.items() if value is not None})
        return self._replace(conn, record, payload, fecha=data.fecha, observaciones=data.observaciones)

    def summary(
        self,
        conn: sqlite3.Connection,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Dict[str, Any]:
        records = self.all(conn, date_from=date_from, date_to=date_to)
        grouped: Dict[str, list] = {tier.complejidad: [] for tier in KINESIOLOGY_COMPLEXITY.tiers}
        for record in records:
            grouped[KINESIOLOGY_COMPLEXITY.classify(record.puntaje_total).complejidad].append(record.puntaje_total)
        promedio = None
        if records:
            promedio = round(sum(r.puntaje_total for r in records) / len(records), 2)
        return {
            "total_registros": len(records),
            "promedio_puntaje": promedio,
            "por_complejidad": {
                complejidad: {
                    "cantidad": len(totals),
                    "promedio_puntaje": round(sum(totals) / len(totals), 2) if totals else None,
                }
                for complejidad, totals in grouped.items()
            },
        }


categorizacion_service = CategorizacionService()
