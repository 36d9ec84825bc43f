"""
Prometheus middleware recording the request counter and latency histogram.

Paths listed in ``excluded_paths`` (health probe, scrape endpoint) are not
recorded, so scrapes never feed back into the request metrics.
"""

import time
from collections.abc import Awaitable, Callable, Iterable

from fastapi.requests import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from grafana_demo.infrastructure.observability import HTTPMetrics


class PrometheusMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        metrics: HTTPMetrics,
        excluded_paths: Iterable[str] = (),
    ) -> None:
        super().__init__(app)
        self._metrics = metrics
        self._excluded_paths = frozenset(excluded_paths)

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        path = request.url.path
        if path in self._excluded_paths:
            return await call_next(request)

        start = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response

        finally:
            self._metrics.observe_request(
                path, request.method, status_code, time.perf_counter() - start
            )
