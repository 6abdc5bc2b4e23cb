"""Shared write path for score records: recompute, then persist raw + derived."""
from __future__ import annotations

import json
import logging
import math
import sqlite3
from datetime import date
from typing import Any, Dict, Generic, List, Mapping, Optional, Tuple, Type, TypeVar

from ...core.scores import engine
from ..core.config import settings
from ..models.registros import ScoreRecord
from ..repositories.registros_repo import ScoreRecordRepository

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=ScoreRecord)


class RecordNotFoundError(LookupError):
    """Raised when a record id does not exist."""


class DuplicateRecordError(ValueError):
    """Raised when a patient already has a record of the same kind on that date."""


def dump_json(payload: Mapping[str, Any]) -> str:
    # Decimals are kept as their exact string so stored totals compare byte for byte.
    return json.dumps(payload, default=str, ensure_ascii=False, sort_keys=True)


def page_bounds(limit: Optional[int], offset: Optional[int]) -> Tuple[int, int]:
    limit = limit or settings.page_size_default
    return max(1, min(limit, settings.page_size_max)), max(0, offset or 0)


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


class ScoreService(Generic[R]):
    """CRUD for one score family.

    Subclasses name the repository, whether a patient may have more than one
    record per day, and how engine output maps onto derived columns.
    """

    repository: Type[ScoreRecordRepository]
    label: str = ""
    unique_per_day: bool = False

    def score_name(self, record: R) -> str:
        raise NotImplementedError

    def apply_result(self, record: R, result: Dict[str, Any]) -> None:
        raise NotImplementedError

    def recompute(self, record: R) -> Dict[str, Any]:
        """Run the engine on the stored raw input."""

        return engine.compute(self.score_name(record), json.loads(record.input_json))

    def _score(self, record: R, payload: Mapping[str, Any]) -> R:
        # Engine errors propagate before anything is written.
        result = engine.compute(self.score_name(record), payload)
        record.input_json = dump_json(payload)
        record.output_json = dump_json(result)
        self.apply_result(record, result)
        return record

    def _check_duplicate(self, repo: ScoreRecordRepository, record: R) -> None:
        if not self.unique_per_day:
            return
        existing = repo.find_by_patient_date(record.paciente_rut, record.fecha, exclude_id=record.id)
        if existing:
            raise DuplicateRecordError(
                f"Ya existe un registro {self.label} para este paciente en la fecha {record.fecha.isoformat()}"
            )

    def _insert(self, conn: sqlite3.Connection, record: R, payload: Mapping[str, Any]) -> R:
        repo = self.repository(conn)
        self._score(record, payload)
        self._check_duplicate(repo, record)
        try:
            stored = repo.add(record)
        except sqlite3.IntegrityError as exc:
            raise DuplicateRecordError(f"Registro {self.label} duplicado: {exc}") from exc
        logger.info("%s creado id=%s", self.label, stored.id)
        return stored

    def _replace(
        self,
        conn: sqlite3.Connection,
        record: R,
        payload: Mapping[str, Any],
        *,
        fecha: Optional[date] = None,
        observaciones: Optional[str] = None,
    ) -> R:
        repo = self.repository(conn)
        if fecha is not None:
            record.fecha = fecha
        if observaciones is not None:
            record.observaciones = observaciones
        self._score(record, payload)
        self._check_duplicate(repo, record)
        try:
            stored = repo.update(record)
        except sqlite3.IntegrityError as exc:
            raise DuplicateRecordError(f"Registro {self.label} duplicado: {exc}") from exc
        logger.info("%s actualizado id=%s", self.label, stored.id)
        return stored

    def get(self, conn: sqlite3.Connection, record_id: int) -> R:
        record = self.repository(conn).get(record_id)
        if not record:
            raise RecordNotFoundError(f"Registro {self.label} {record_id} no encontrado")
        return record

    def delete(self, conn: sqlite3.Connection, record_id: int) -> None:
        if not self.repository(conn).delete(record_id):
            raise RecordNotFoundError(f"Registro {self.label} {record_id} no encontrado")
        logger.info("%s eliminado id=%s", self.label, record_id)

    def list(
        self,
        conn: sqlite3.Connection,
        *,
        paciente_rut: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Tuple[List[R], int, int, int]:
        limit, offset = page_bounds(limit, offset)
        items, total = self.repository(conn).list(
            paciente_rut=paciente_rut,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset,
        )
        return items, total, limit, offset

    def all(
        self,
        conn: sqlite3.Connection,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[R]:
        items, _ = self.repository(conn).list(date_from=date_from, date_to=date_to)
        return items