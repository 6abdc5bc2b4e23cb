"""Round-trip audit: recompute stored records and report derived-field drift."""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import List, Sequence

from ...core.scores import ScoringError
from .apache2_service import apache2_service
from .base import ScoreService, dump_json
from .categorizacion_service import categorizacion_service
from .nas_service import nas_service

logger = logging.getLogger(__name__)

SERVICES: Sequence[ScoreService] = (apache2_service, nas_service, categorizacion_service)


@dataclass
class Drift:
    tabla: str
    record_id: int
    detalle: str


def audit(conn: sqlite3.Connection, services: Sequence[ScoreService] = SERVICES) -> List[Drift]:
    """Return every record whose stored output no longer matches a recompute."""

    drifts: List[Drift] = []
    for service in services:
        checked = 0
        for record in service.all(conn):
            checked += 1
            try:
                recomputed = dump_json(service.recompute(record))
            except ScoringError as exc:
                drifts.append(Drift(service.repository.table, record.id, f"rechazado: {exc}"))
                continue
            if recomputed != record.output_json:
                drifts.append(Drift(service.repository.table, record.id, "campos derivados distintos"))
        logger.info("%s: %s registros verificados", service.label, checked)
    return drifts
