"""Health check endpoint."""
from __future__ import annotations

from fastapi import APIRouter

from ... import __version__
from ...core.scores import available_scores

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/")
def healthcheck() -> dict:
    return {
        "status": "ok",
        "version": __version__,
        "scores": available_scores(),
    }
