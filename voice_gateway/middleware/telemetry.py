"""Prometheus request instrumentation."""

from __future__ import annotations

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from voice_gateway.telemetry import observe_request

_UNMETERED_PATHS = frozenset({"/metrics", "/health"})


def _route_label(request: Request) -> str:
    """Templated route path when routing matched, raw path otherwise."""

    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Count and time every request except scrapes and health probes."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in _UNMETERED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            observe_request(
                request.method,
                _route_label(request),
                status_code,
                time.perf_counter() - started,
            )
