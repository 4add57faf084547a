from __future__ import annotations

import logging
import time

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("weekgrid.requests")

MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class MutationLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request that can change schedule state, with its outcome and latency."""

    def __init__(self, app, *, max_bytes: int, log_bodies: bool = False) -> None:
        super().__init__(app)
        self._max_bytes = max(1, max_bytes)
        self._log_bodies = log_bodies

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method not in MUTATING_METHODS:
            return await call_next(request)

        raw_length = request.headers.get("content-length")
        if raw_length and raw_length.isdigit() and int(raw_length) > self._max_bytes:
            logger.warning(
                "REQUEST REJECTED | method=%s | path=%s | bytes=%s",
                request.method,
                request.url.path,
                raw_length,
            )
            return JSONResponse(
                status_code=413,
                content={
                    "message": f"Request body too large, maximum is {self._max_bytes} bytes",
                    "code": "payload_too_large",
                    "details": {},
                },
            )

        if self._log_bodies:
            body = await request.body()
            logger.debug("REQUEST BODY | method=%s | path=%s | body=%s", request.method, request.url.path, body[:2000])

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
