"""Request-scoped logging middleware.

Every request gets an id, taken from ``X-Request-ID`` when the caller sent
one. The id is stored on ``request.state`` so pipeline logs can carry it,
and it is echoed back on the response.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("voice_gateway.middleware.structured")

REQUEST_ID_HEADER = "X-Request-ID"

_STATUS_COLORS = (
    (500, "\u001b[31m"),
    (400, "\u001b[33m"),
    (200, "\u001b[32m"),
    (0, "\u001b[36m"),
)
_RESET = "\u001b[0m"


def _colorize(status_code: int, message: str) -> str:
    color = next(code for floor, code in _STATUS_COLORS if status_code >= floor)
    return f"{color}{message}{_RESET}"


def _summary(record: dict[str, Any]) -> str:
    status_code = record.get("status_code") or 0
    line = (
        f"{record['method']} {record['path']} -> {status_code or '-'} "
        f"in {record.get('duration_ms', '-')}ms "
        f"request_id={record['request_id']} "
        f"bytes_in={record.get('content_length') or '-'} "
        f"client={record.get('client_ip') or '-'}"
    )
    return _colorize(status_code, line)


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Emit one coloured summary line (and a JSON debug record) per request."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id
        record: dict[str, Any] = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "content_length": request.headers.get("content-length"),
            "client_ip": request.client.host if request.client else None,
        }

        try:
            response = await call_next(request)
        except Exception as exc:
            record.update(status_code=500, duration_ms=_elapsed_ms(started), error=repr(exc))
            logger.exception(_summary(record))
            raise

        record.update(status_code=response.status_code, duration_ms=_elapsed_ms(started))
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(_summary(record))
        logger.debug(json.dumps(record, default=str, separators=(",", ":")))
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
