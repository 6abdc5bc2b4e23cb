"""Application configuration and database utilities."""
from __future__ import annotations

import sqlite3
from functools import lru_cache
from pathlib import Path
from typing import Generator, List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central application settings loaded from environment variables."""

    db_url: str = Field(default="sqlite:///./registro_uti/data/registro_uti.db", alias="DB_URL")
    api_host: str = Field(default="127.0.0.1", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    page_size_default: int = Field(default=10, alias="PAGE_SIZE_DEFAULT")
    page_size_max: int = Field(default=100, alias="PAGE_SIZE_MAX")
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://127.0.0.1", "http://localhost"],
        alias="CORS_ORIGINS",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


def _db_path() -> Path:
    if settings.db_url.startswith("sqlite:///"):
        path_str = settings.db_url.replace("sqlite:///", "")
        return Path(path_str).resolve()
    raise ValueError("Unsupported DB_URL")


# Raw input and derived fields of a record always live in the same row.
_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS apache2 (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        paciente_rut TEXT NOT NULL,
        usuario_id INTEGER,
        fecha TEXT NOT NULL,
        modo TEXT NOT NULL CHECK (modo IN ('puntajes', 'mediciones')),
        input_json TEXT NOT NULL,
        output_json TEXT NOT NULL,
        puntaje_total INTEGER NOT NULL CHECK (puntaje_total >= 0),
        riesgo_mortalidad TEXT NOT NULL,
        nivel_riesgo TEXT NOT NULL,
        observaciones TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_apache2_paciente ON apache2 (paciente_rut)",
    "CREATE INDEX IF NOT EXISTS ix_apache2_fecha ON apache2 (fecha)",
    """
    CREATE TABLE IF NOT EXISTS nas (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        paciente_rut TEXT NOT NULL,
        usuario_id INTEGER,
        fecha TEXT NOT NULL,
        input_json TEXT NOT NULL,
        output_json TEXT NOT NULL,
        puntuacion_total TEXT NOT NULL,
        nivel_carga TEXT NOT NULL,
        observaciones TEXT,
        UNIQUE (paciente_rut, fecha)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS categorizaciones_kinesiologia (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        paciente_rut TEXT NOT NULL,
        usuario_id INTEGER,
        fecha TEXT NOT NULL,
        input_json TEXT NOT NULL,
        output_json TEXT NOT NULL,
        puntaje_total INTEGER NOT NULL CHECK (puntaje_total BETWEEN 5 AND 25),
        complejidad TEXT NOT NULL CHECK (complejidad IN ('Baja', 'Mediana', 'Alta')),
        carga_asistencial TEXT NOT NULL,
        observaciones TEXT,
        UNIQUE (paciente_rut, fecha)
    )
    """,
)


def init_db() -> None:
    path = _db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(path) as conn:
        for statement in _SCHEMA:
            conn.execute(statement)
        conn.commit()


def get_session() -> Generator[sqlite3.Connection, None, None]:
    # FastAPI may resolve the dependency and run the endpoint on different worker threads.
    conn = sqlite3.connect(_db_path(), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()
