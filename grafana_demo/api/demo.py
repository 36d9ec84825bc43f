"""
Simulated three-tier request used to generate traces, metrics and logs.

Every path not claimed by another router lands here, for any method.
"""

import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from kink import di
from opentelemetry.semconv.attributes.http_attributes import HTTP_REQUEST_METHOD
from opentelemetry.semconv.attributes.url_attributes import URL_PATH
from opentelemetry.trace import Status, StatusCode, Tracer

from grafana_demo.core.logging import get_logger
from grafana_demo.domain.pipeline import BusinessLogicError, SimulatedPipeline

from .methods import ANY_METHOD

router = APIRouter(tags=['demo'])

SUCCESS_BODY = {'message': 'hello from grafana demo'}

_logger = get_logger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


@router.api_route('/{path:path}', methods=ANY_METHOD, include_in_schema=False)
@router.api_route('/', methods=ANY_METHOD)
def handle_root(request: Request) -> Response:
    # sync on purpose: the stage sleeps run on the worker thread pool
    start = time.perf_counter()
    path = request.url.path
    method = request.method

    with di[Tracer].start_as_current_span('handle_root') as span:
        span.set_attribute(HTTP_REQUEST_METHOD, method)
        span.set_attribute(URL_PATH, path)

        try:
            di[SimulatedPipeline].run()

        except BusinessLogicError as e:
            span.set_status(Status(StatusCode.ERROR, 'business logic failed'))
            status = 500

            _logger.error(
                'business logic failed',
                path=path,
                method=method,
                status=status,
                latency_ms=_elapsed_ms(start),
                error=str(e),
            )

            return PlainTextResponse('internal failure', status_code=status)

        _logger.info(
            'handled request',
            path=path,
            method=method,
            status=200,
            latency_ms=_elapsed_ms(start),
        )

        return JSONResponse(SUCCESS_BODY)
