from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import NoReturn

from fastapi import FastAPI
from kink import di, inject
from opentelemetry.sdk.trace import TracerProvider
from starlette.concurrency import run_in_threadpool

from grafana_demo.api import api_router
from grafana_demo.core.config import Configuration
from grafana_demo.domain.common.middleware import PrometheusMiddleware
from grafana_demo.infrastructure.observability import (
    HTTPMetrics,
    instrument_application,
    shutdown_tracing,
)


@asynccontextmanager  # type: ignore[arg-type]
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, NoReturn]:
    """Application lifespan manager.

    Buffered spans are flushed here so a graceful server shutdown
    exports them before the process exits.
    """
    try:
        yield

    finally:
        await run_in_threadpool(
            shutdown_tracing,
            di[TracerProvider],
            di[Configuration].observability.shutdown_timeout_millis,
        )


@inject
def get_application(
    config: Configuration, metrics: HTTPMetrics, tracer_provider: TracerProvider
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        docs_url=None,
        openapi_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        PrometheusMiddleware,
        metrics=metrics,
        excluded_paths=config.observability.excluded_paths,
    )

    if config.observability.enabled:
        instrument_application(app, config, tracer_provider)

    app.include_router(api_router)

    return app
