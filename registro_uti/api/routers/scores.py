"""Stateless score calculator: compute without storing anything."""
from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Body

from ...core.scores import available_scores, engine

router = APIRouter(prefix="/api/scores", tags=["scores"])


@router.get("/")
def list_scores() -> List[str]:
    return available_scores()


@router.post("/{nombre}", response_model=None)
def compute_score(nombre: str, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Decimal totals are encoded as JSON numbers."""

    return engine.compute(nombre, payload)
