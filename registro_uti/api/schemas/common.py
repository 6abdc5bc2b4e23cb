"""Shared pydantic building blocks for the camelCase wire format."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict
from pydantic.functional_serializers import PlainSerializer

RUT_PATTERN = r"^[0-9]{1,2}\.?[0-9]{3}\.?[0-9]{3}-[0-9kK]$"

# Two-place workload total, sent as a JSON number.
WorkloadScore = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegistroBase(CamelModel):
    paciente_rut: str = Field(..., pattern=RUT_PATTERN)
    usuario_id: Optional[int] = None
    fecha: date = Field(default_factory=date.today)
    observaciones: Optional[str] = Field(default=None, max_length=2000)


class RegistroUpdateBase(CamelModel):
    fecha: Optional[date] = None
    observaciones: Optional[str] = Field(default=None, max_length=2000)


class RegistroMeta(CamelModel):
    id: int
    created_at: datetime
    updated_at: datetime
    paciente_rut: str
    usuario_id: Optional[int] = None
    fecha: date
    observaciones: Optional[str] = None


class Pagination(CamelModel):
    total: int
    limit: int
    offset: int
    pages: int


def record_meta(record) -> dict:
    """Common columns of a stored record, keyed by field name."""

    return {
        "id": record.id,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
        "paciente_rut": record.paciente_rut,
        "usuario_id": record.usuario_id,
        "fecha": record.fecha,
        "observaciones": record.observaciones,
    }
