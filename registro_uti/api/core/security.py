"""Security utilities such as CORS configuration."""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings


def enable_cors(app: FastAPI) -> None:
    """Allow the bedside web/mobile client origins configured in ``CORS_ORIGINS``."""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
