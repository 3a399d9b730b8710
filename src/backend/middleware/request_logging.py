# src/backend/middleware/request_logging.py
import time
import logging

from fastapi import Request

logger = logging.getLogger("backend.access")


async def request_logging_middleware(request: Request, call_next):
    started = time.perf_counter()
    resp = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000

    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        resp.status_code,
        elapsed_ms,
    )
    resp.headers.setdefault("X-Content-Type-Options", "nosniff")
    resp.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    return resp
