"""Repositories for score records using sqlite3."""
from __future__ import annotations

import sqlite3
from dataclasses import fields
from datetime import date, datetime
from decimal import Decimal
from typing import Generic, List, Optional, Tuple, Type, TypeVar

from ..models.registros import (
    Apache2Evaluacion,
    CategorizacionKinesiologia,
    RegistroNAS,
    ScoreRecord,
)

R = TypeVar("R", bound=ScoreRecord)

_MANAGED = ("id", "created_at", "updated_at")


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value if "T" in value else value.replace(" ", "T"))


def _to_db(value):
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


class ScoreRecordRepository(Generic[R]):
    """Persistence layer shared by the three score tables.

    Raw input and derived fields are written by a single statement, so a row
    never holds one without the other.
    """

    table: str = ""
    model: Type[R]

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    @property
    def _columns(self) -> List[str]:
        return [f.name for f in fields(self.model) if f.name not in _MANAGED]

    def add(self, record: R) -> R:
        columns = self._columns
        cursor = self.conn.execute(
            f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
            [_to_db(getattr(record, name)) for name in columns],
        )
        self.conn.commit()
        return self.get(cursor.lastrowid)

    def update(self, record: R) -> R:
        columns = self._columns
        assignments = ", ".join(f"{name} = ?" for name in columns)
        self.conn.execute(
            f"UPDATE {self.table} SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            [_to_db(getattr(record, name)) for name in columns] + [record.id],
        )
        self.conn.commit()
        return self.get(record.id)

    def delete(self, record_id: int) -> bool:
        cursor = self.conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (record_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    def get(self, record_id: int) -> Optional[R]:
        cursor = self.conn.execute(f"SELECT * FROM {self.table} WHERE id = ?", (record_id,))
        row = cursor.fetchone()
        if not row:
            return None
        return self._row_to_model(row)

    def find_by_patient_date(self, paciente_rut: str, fecha: date, *, exclude_id: Optional[int] = None) -> Optional[R]:
        query = f"SELECT * FROM {self.table} WHERE paciente_rut = ? AND fecha = ?"
        params: list = [paciente_rut, fecha.isoformat()]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)
        row = self.conn.execute(query, params).fetchone()
        return self._row_to_model(row) if row else None

    def list(
        self,
        *,
        paciente_rut: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[R], int]:
        where, params = self._filters(paciente_rut, date_from, date_to)
        total = self.conn.execute(f"SELECT COUNT(*) FROM {self.table}{where}", params).fetchone()[0]
        query = f"SELECT * FROM {self.table}{where} ORDER BY fecha DESC, id DESC"
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params = params + [limit, offset]
        cursor = self.conn.execute(query, params)
        return [self._row_to_model(row) for row in cursor.fetchall()], total

    def _filters(
        self,
        paciente_rut: Optional[str],
        date_from: Optional[date],
        date_to: Optional[date],
    ) -> Tuple[str, list]:
        conditions = []
        params: list = []
        if paciente_rut:
            conditions.append("paciente_rut = ?")
            params.append(paciente_rut)
        if date_from:
            conditions.append("fecha >= ?")
            params.append(date_from.isoformat())
        if date_to:
            conditions.append("fecha <= ?")
            params.append(date_to.isoformat())
        if not conditions:
            return "", params
        return " WHERE " + " AND ".join(conditions), params

    def _row_to_model(self, row: sqlite3.Row) -> R:
        values = {}
        for f in fields(self.model):
            value = row[f.name]
            if f.name in ("created_at", "updated_at"):
                value = _parse_timestamp(value)
            elif f.name == "fecha":
                value = date.fromisoformat(value)
            elif f.name == "puntuacion_total":
                value = Decimal(value)
            values[f.name] = value
        return self.model(**values)


class Apache2Repository(ScoreRecordRepository[Apache2Evaluacion]):
    table = "apache2"
    model = Apache2Evaluacion


class NASRepository(ScoreRecordRepository[RegistroNAS]):
    table = "nas"
    model = RegistroNAS


class CategorizacionRepository(ScoreRecordRepository[CategorizacionKinesiologia]):
    table = "categorizaciones_kinesiologia"
    model = CategorizacionKinesiologia
