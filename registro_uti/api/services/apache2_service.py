"""APACHE II evaluations: bedside sub-scores or raw measurements."""
from __future__ import annotations

import json
import sqlite3
from datetime import date
from typing import Any, Dict, Optional

from ...core.scores.apache2 import SUBSCORE_FIELDS
from ...core.scores.classifiers import APACHE_RISK, RISK_LEVELS
from ..models.registros import Apache2Evaluacion
from ..repositories.registros_repo import Apache2Repository
from ..schemas.apache2 import (
    Apache2Create,
    Apache2MedicionesCreate,
    Apache2MedicionesUpdate,
    Apache2Update,
)
from ..schemas.common import RegistroBase, RegistroUpdateBase
from .base import ScoreService

MODO_PUNTAJES = "puntajes"
MODO_MEDICIONES = "mediciones"

# Registered score used to recompute each kind of raw input.
SCORE_BY_MODE = {MODO_PUNTAJES: "apache2", MODO_MEDICIONES: "apache2_mediciones"}

_META = set(RegistroBase.model_fields) | set(RegistroUpdateBase.model_fields)


class Apache2Service(ScoreService[Apache2Evaluacion]):
    repository = Apache2Repository
    label = "APACHE II"

    def score_name(self, record: Apache2Evaluacion) -> str:
        return SCORE_BY_MODE[record.modo]

    def apply_result(self, record: Apache2Evaluacion, result: Dict[str, Any]) -> None:
        record.puntaje_total = result["puntajeTotal"]
        record.riesgo_mortalidad = result["riesgoMortalidad"]
        record.nivel_riesgo = result["nivelRiesgo"]

    def create(self, conn: sqlite3.Connection, data: Apache2Create) -> Apache2Evaluacion:
        record = self._new_record(data, MODO_PUNTAJES)
        return self._insert(conn, record, data.model_dump(by_alias=True, exclude=_META))

    def create_from_measurements(self, conn: sqlite3.Connection, data: Apache2MedicionesCreate) -> Apache2Evaluacion:
        record = self._new_record(data, MODO_MEDICIONES)
        return self._insert(conn, record, data.model_dump(by_alias=True, exclude=_META))

    def update(self, conn: sqlite3.Connection, record_id: int, data: Apache2Update) -> Apache2Evaluacion:
        """Change sub-scores by hand.

        Omitted sub-scores keep their stored points. A changed sub-score drops
        its stored bucket unless a new one is sent with it. A record scored
        from measurements becomes a bedside-scored record.
        """

        record = self.get(conn, record_id)
        stored = json.loads(record.output_json)
        changes = {
            key: value
            for key, value in data.model_dump(by_alias=True, exclude_unset=True, exclude=_META).items()
            if value is not None
        }
        rangos = {key: value for key, value in stored.get("rangosSeleccionados", {}).items() if key not in changes}
        rangos.update(changes.pop("rangosSeleccionados", {}))
        payload = {name: stored[name] for name in SUBSCORE_FIELDS}
        payload.update(changes)
        payload["rangosSeleccionados"] = rangos
        record.modo = MODO_PUNTAJES
        return self._replace(conn, record, payload, fecha=data.fecha, observaciones=data.observaciones)

    def update_measurements(
        self, conn: sqlite3.Connection, record_id: int, data: Apache2MedicionesUpdate
    ) -> Apache2Evaluacion:
        record = self.get(conn, record_id)
        record.modo = MODO_MEDICIONES
        payload = data.model_dump(by_alias=True, exclude=_META)
        return self._replace(conn, record, payload, fecha=data.fecha, observaciones=data.observaciones)

    def summary(
        self,
        conn: sqlite3.Connection,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Dict[str, Any]:
        records = self.all(conn, date_from=date_from, date_to=date_to)
        por_nivel = {level: 0 for level in RISK_LEVELS}
        for record in records:
            por_nivel[APACHE_RISK.classify(record.puntaje_total).level] += 1
        promedio = None
        if records:
            promedio = round(sum(r.puntaje_total for r in records) / len(records), 2)
        return {"total_registros": len(records), "promedio_puntaje": promedio, "por_nivel_riesgo": por_nivel}

    @staticmethod
    def _new_record(data: RegistroBase, modo: str) -> Apache2Evaluacion:
        return Apache2Evaluacion(
            paciente_rut=data.paciente_rut,
            usuario_id=data.usuario_id,
            fecha=data.fecha,
            observaciones=data.observaciones,
            modo=modo,
        )


apache2_service = Apache2Service()
