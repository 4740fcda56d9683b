"""Application-wide exception handlers.

- Request validation failures are client errors and answered with **400**,
  naming the offending field(s).
- Database errors that escape a route are logged with their traceback and
  answered with a generic **500**; details never reach the client.

Domain exceptions raised by managers are translated per route, not here.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError


def _describe(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path"))
        msg = str(error.get("msg", "invalid value")).removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _validation_error(_req: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": _describe(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def _database_error(req: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.opt(exception=exc).error("Database error on {} {}", req.method, req.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error."},
        )
