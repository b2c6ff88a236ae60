"""
Global middleware and error mapping.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from auth.errors import AuthError

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI) -> None:
    """Attach any app-level middleware."""

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug("%s %s — %.3fs", request.method, request.url.path, elapsed)
        return response


def register_error_handlers(app: FastAPI) -> None:
    """Turn ``AuthError`` into ``{"error": ...}`` responses."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        if exc.internal:
            logger.error(
                "%s %s failed: %s: %s",
                request.method,
                request.url.path,
                type(exc).__name__,
                exc.message,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.public_message},
        )
