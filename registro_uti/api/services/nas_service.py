"""NAS workload records and their aggregate statistics."""
from __future__ import annotations

import json
import sqlite3
from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ...core.scores.aggregate import TWO_PLACES
from ...core.scores.classifiers import NAS_WORKLOAD_LEVELS
from ...core.scores.nas import NAS_ITEM_LABELS, NAS_ITEMS, selected_items
from ..models.registros import RegistroNAS
from ..repositories.registros_repo import NASRepository
from ..schemas.nas import NASCreate, NASUpdate
from .base import ScoreService


class NASService(ScoreService[RegistroNAS]):
    repository = NASRepository
    label = "NAS"
    unique_per_day = True

    def score_name(self, record: RegistroNAS) -> str:
        return "nas"

    def apply_result(self, record: RegistroNAS, result: Dict[str, Any]) -> None:
        record.puntuacion_total = result["puntuacionTotal"]
        record.nivel_carga = result["nivelCarga"]

    def create(self, conn: sqlite3.Connection, data: NASCreate) -> RegistroNAS:
        record = RegistroNAS(
            paciente_rut=data.paciente_rut,
            usuario_id=data.usuario_id,
            fecha=data.fecha,
            observaciones=data.observaciones,
        )
        return self._insert(conn, record, {"selecciones": dict(data.selecciones)})

    def update(self, conn: sqlite3.Connection, record_id: int, data: NASUpdate) -> RegistroNAS:
        record = self.get(conn, record_id)
        selecciones = json.loads(record.input_json).get("selecciones", {})
        selecciones.update(data.selecciones or {})
        return self._replace(
            conn, record, {"selecciones": selecciones}, fecha=data.fecha, observaciones=data.observaciones
        )

    def summary(
        self,
        conn: sqlite3.Connection,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Dict[str, Any]:
        records = self.all(conn, date_from=date_from, date_to=date_to)
        distribucion = {level.key: 0 for level in NAS_WORKLOAD_LEVELS.levels}
        totals: List[Decimal] = []
        for record in records:
            totals.append(record.puntuacion_total)
            distribucion[NAS_WORKLOAD_LEVELS.classify(record.puntuacion_total).key] += 1
        summary: Dict[str, Any] = {
            "total_registros": len(records),
            "promedio": None,
            "minimo": None,
            "maximo": None,
            "distribucion": distribucion,
        }
        if totals:
            promedio = (sum(totals) / len(totals)).quantize(TWO_PLACES)
            summary.update(promedio=float(promedio), minimo=float(min(totals)), maximo=float(max(totals)))
        return summary

    def frequent_items(
        self,
        conn: sqlite3.Connection,
        *,
        limit: int = 10,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        counts: Counter = Counter()
        for record in self.all(conn, date_from=date_from, date_to=date_to):
            counts.update(selected_items(json.loads(record.output_json)["selecciones"]))
        ranked = sorted(counts.items(), key=lambda pair: (-pair[1], NAS_ITEMS.index(pair[0])))
        return [
            {"item": item, "etiqueta": NAS_ITEM_LABELS[item], "frecuencia": count}
            for item, count in ranked[:limit]
        ]


nas_service = NASService()
