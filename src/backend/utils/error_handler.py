# src/backend/utils/error_handler.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Request, HTTPException as FastAPIHTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.backend.utils.exceptions import DirectoryError

logger = logging.getLogger("fastapi")

GENERIC_500 = "Internal Server Error. Please try again later."


def _safe_args(exc: Exception) -> str:
    try:
        a = getattr(exc, "args", None)
        return str(a) if a else "No additional details"
    except Exception:
        return "No additional details"


def _json_error(
    status_code: int,
    message: str,
    extra: Dict[str, Any] | None = None,
) -> JSONResponse:
    """
    Unified JSON error body: {"error": "..."}.
    5xx details never leave the server.
    """
    payload: Dict[str, Any] = {
        "error": GENERIC_500 if status_code >= 500 else message,
    }
    if extra:
        payload.update(extra)

    logger.debug("RETURN JSONResponse | status=%s body=%r", status_code, payload)
    return JSONResponse(status_code=status_code, content=payload)


def _log_http(request: Request, status_code: int, detail: str, exc: Exception) -> None:
    """
    Log levels:
    - 404 -> INFO (normal noise)
    - other 4xx -> WARNING (client error)
    - 5xx -> EXCEPTION (stack trace)
    """
    url = str(request.url)
    method = request.method

    if status_code == 404:
        logger.info("404 Not Found: %s %s | detail=%s", method, url, detail)
        return

    if 400 <= status_code < 500:
        logger.warning(
            "%s: %s %s | detail=%s | args=%s",
            status_code,
            method,
            url,
            detail,
            _safe_args(exc),
        )
        return

    logger.error("%s: %s %s | detail=%s", status_code, method, url, detail, exc_info=exc)


async def custom_exception_handler(request: Request, exc: Exception):
    """
    Single handler registered for every exception family the API can raise.
    """

    # -----------------------------
    # 1) Domain errors (validation, duplicate id, not found, storage)
    # -----------------------------
    if isinstance(exc, DirectoryError):
        status = int(exc.status_code)
        _log_http(request, status, exc.message, exc)
        return _json_error(status_code=status, message=exc.message)

    # -----------------------------
    # 2) FastAPI / Starlette HTTPException (routing 404, 405, ...)
    # -----------------------------
    if isinstance(exc, (FastAPIHTTPException, StarletteHTTPException)):
        status = int(exc.status_code)
        detail = str(exc.detail)
        _log_http(request, status, detail, exc)
        return _json_error(status_code=status, message=detail)

    # -----------------------------
    # 3) Validation error
    # -----------------------------
    if isinstance(exc, RequestValidationError):
        logger.warning(
            "422 Validation error: %s %s | %s",
            request.method,
            str(request.url),
            exc.errors(),
        )
        return _json_error(
            status_code=422,
            message="Validation error occurred",
            extra={"validation_errors": jsonable_errors(exc)},
        )

    # -----------------------------
    # 4) Any other unexpected exception
    # -----------------------------
    logger.exception("500 Unhandled exception: %s %s | %s", request.method, str(request.url), str(exc))
    return _json_error(status_code=500, message=GENERIC_500)


def jsonable_errors(exc: RequestValidationError):
    # errors() may carry raw exception objects under "ctx"
    return jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
