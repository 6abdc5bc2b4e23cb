"""Command line entry point: run the API or audit stored scores."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from .api.core.config import get_session, init_db, settings
from .api.core.logging import setup_logging
from .api.services.recalculo import audit


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="registro-uti", description="Registro clínico UTI")
    sub = parser.add_subparsers(dest="command", required=True)

    serve_cmd = sub.add_parser("serve", help="Ejecuta la API FastAPI (uvicorn)")
    serve_cmd.add_argument("--host", default=settings.api_host)
    serve_cmd.add_argument("--port", type=int, default=settings.api_port)
    serve_cmd.add_argument("--reload", action="store_true", help="Recarga automática en desarrollo")

    sub.add_parser("recalcular", help="Recalcula los registros guardados y reporta diferencias")
    return parser.parse_args(argv)


def serve(host: str, port: int, reload: bool = False) -> int:
    uvicorn.run("registro_uti.api.main:app", host=host, port=port, reload=reload, log_level=settings.log_level.lower())
    return 0


def recalcular() -> int:
    init_db()
    for conn in get_session():
        drifts = audit(conn)
    for drift in drifts:
        print(f"{drift.tabla} #{drift.record_id}: {drift.detalle}")
    if drifts:
        print(f"{len(drifts)} registro(s) con diferencias")
        return 1
    print("Todos los registros coinciden con el recálculo")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(settings.log_level.upper())
    logging.getLogger(__name__).debug("Comando %s", args.command)
    if args.command == "serve":
        return serve(args.host, args.port, args.reload)
    return recalcular()


if __name__ == "__main__":
    sys.exit(main())
