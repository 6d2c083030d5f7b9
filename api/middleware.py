"""
Global middleware and request-validation error handling.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.users import LIST_FAILED, LOGIN_FAILED, SIGN_UP_FAILED

logger = logging.getLogger(__name__)

# Failure message per route path suffix.
_OPERATION_MESSAGES = {
    "/signUp": SIGN_UP_FAILED,
    "/login": LOGIN_FAILED,
    "/list": LIST_FAILED,
}


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg', 'invalid')}" if location else err.get("msg", "invalid"))
    return "; ".join(parts) or "Invalid request"


def register_middleware(app: FastAPI) -> None:
    """Attach app-level middleware and exception handlers."""

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug(
            "%s %s → %d — %.3fs",
            request.method, request.url.path, response.status_code, elapsed,
        )
        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_failed(request: Request, exc: RequestValidationError):
        message = next(
            (msg for suffix, msg in _OPERATION_MESSAGES.items() if request.url.path.endswith(suffix)),
            "Invalid request",
        )
        detail = _describe_validation_error(exc)
        logger.warning("%s %s rejected: %s", request.method, request.url.path, detail)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": message, "error": detail},
        )
