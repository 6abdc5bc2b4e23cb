"""FastAPI application bootstrap."""
from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.scores import ScoringError, UnknownScoreError
from .core.config import init_db, settings
from .core.logging import register_middleware, setup_logging
from .core.security import enable_cors
from .routers import apache2, categorizacion, health, nas, scores
from .services.base import DuplicateRecordError, RecordNotFoundError

setup_logging(settings.log_level.upper())
init_db()

app = FastAPI(title="Registro UTI API", version=__version__)

register_middleware(app)
enable_cors(app)

app.include_router(health.router)
app.include_router(apache2.router)
app.include_router(nas.router)
app.include_router(categorizacion.router)
app.include_router(scores.router)


@app.exception_handler(ScoringError)
async def scoring_error_handler(request: Request, exc: ScoringError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.to_dict()})


@app.exception_handler(RecordNotFoundError)
@app.exception_handler(UnknownScoreError)
async def not_found_handler(request: Request, exc: LookupError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(DuplicateRecordError)
async def duplicate_handler(request: Request, exc: DuplicateRecordError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.get("/")
def root() -> dict:
    return {"message": "Registro UTI API", "health": "/health"}
