"""Logging helpers for the Registro UTI service."""
from __future__ import annotations

import logging
import re
import time
from typing import Callable, Union

from fastapi import FastAPI, Request

# Chilean RUT, with or without thousands dots: 12.345.678-5, 12345678-K
_RE_RUT = re.compile(r"\b\d{1,2}\.?\d{3}\.?\d{3}-[\dkK]\b")


class RUTRedactor(logging.Filter):
    """Filter that masks patient RUTs in log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if isinstance(record.msg, str):
            record.msg = _RE_RUT.sub("[RUT]", record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {key: _redact(value) for key, value in record.args.items()}
            else:
                record.args = tuple(_redact(arg) for arg in record.args)
        return True


def _redact(value):
    if isinstance(value, str):
        return _RE_RUT.sub("[RUT]", value)
    return value


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure global logging handlers."""

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    redactor = RUTRedactor()
    for handler in logging.getLogger().handlers:
        handler.addFilter(redactor)
    logging.getLogger("uvicorn.access").addFilter(redactor)


async def timing_middleware(request: Request, call_next: Callable):
    """Log HTTP request duration."""

    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logging.getLogger("registro_uti.request").info(
        "%s %s -> %s in %.2f ms", request.method, request.url.path, response.status_code, duration_ms
    )
    return response


def register_middleware(app: FastAPI) -> None:
    app.middleware("http")(timing_middleware)
