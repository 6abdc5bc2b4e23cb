"""Common FastAPI dependencies."""
from __future__ import annotations

from typing import Generator

import sqlite3

from .core.config import get_session


def get_db_session() -> Generator[sqlite3.Connection, None, None]:
    yield from get_session()
