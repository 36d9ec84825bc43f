from __future__ import annotations

import json
import random
import sys
from collections.abc import AsyncIterator, Callable, Iterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from kink import di
from loguru import logger
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
    InMemorySpanExporter,
)
from opentelemetry.trace import Tracer

from grafana_demo.core.application import get_application
from grafana_demo.core.config import Configuration, get_config
from grafana_demo.core.configs import ChaosConfiguration
from grafana_demo.domain.pipeline import DelayRange, SimulatedPipeline
from grafana_demo.infrastructure.observability import HTTPMetrics

_ENV_VARS = (
    'PORT',
    'API_PORT',
    'API_HOST',
    'APP_NAME',
    'ENVIRONMENT',
    'OTEL_EXPORTER_OTLP_ENDPOINT',
    'OBSERVABILITY_ENABLED',
    'OBSERVABILITY_CONNECT_TIMEOUT',
    'LOG_LEVEL',
    'LOG_FORMAT',
    'CHAOS_ERROR',
    'CHAOS_ERROR_RATE',
    'CHAOS_DB_FAILURE',
    'CHAOS_SLOW_DB',
)


class RecordingSleep:
    """Stands in for ``time.sleep`` and remembers every requested duration."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


class LowerBoundSampler:
    def sample(self, delay: DelayRange) -> float:
        return delay.low_ms / 1000


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()

    yield

    get_config.cache_clear()
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def config() -> Configuration:
    return Configuration(app_environment='test')


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(span_exporter: InMemorySpanExporter) -> Iterator[TracerProvider]:
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))

    yield provider

    provider.shutdown()


@pytest.fixture
def tracer(tracer_provider: TracerProvider) -> Tracer:
    return tracer_provider.get_tracer('grafana-demo-test')


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def metrics() -> HTTPMetrics:
    return HTTPMetrics(runtime_collectors=False)


@pytest.fixture
def make_pipeline(
    tracer: Tracer, sleeper: RecordingSleep
) -> Callable[..., SimulatedPipeline]:
    def _make(
        chaos: ChaosConfiguration | None = None, rng: random.Random | None = None
    ) -> SimulatedPipeline:
        return SimulatedPipeline(
            chaos or ChaosConfiguration(),
            tracer,
            sampler=LowerBoundSampler(),
            rng=rng or random.Random(0),
            sleep=sleeper,
        )

    return _make


@pytest.fixture
def make_app(
    config: Configuration,
    metrics: HTTPMetrics,
    tracer_provider: TracerProvider,
    tracer: Tracer,
    make_pipeline: Callable[..., SimulatedPipeline],
) -> Callable[..., FastAPI]:
    def _make(
        chaos: ChaosConfiguration | None = None, rng: random.Random | None = None
    ) -> FastAPI:
        app_config = config.model_copy(update={'chaos': chaos or config.chaos})

        di[Configuration] = app_config
        di[HTTPMetrics] = metrics
        di[TracerProvider] = tracer_provider
        di[Tracer] = tracer
        di[SimulatedPipeline] = make_pipeline(app_config.chaos, rng)

        return get_application()  # type: ignore[call-arg]

    return _make


@pytest.fixture
def client_for() -> Callable[[FastAPI], AsyncClient]:
    def _client(app: FastAPI) -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=app), base_url='http://test')

    return _client


@pytest.fixture
async def api_client(
    make_app: Callable[..., FastAPI],
    client_for: Callable[[FastAPI], AsyncClient],
) -> AsyncIterator[AsyncClient]:
    async with client_for(make_app()) as client:
        yield client


@pytest.fixture
def log_lines() -> Iterator[list[str]]:
    from grafana_demo.core.logging import setup_logging

    lines: list[str] = []
    setup_logging(sink=lines.append)

    yield lines


def parse_lines(lines: list[str]) -> list[dict]:
    return [json.loads(line) for line in lines]


def spans_named(exporter: InMemorySpanExporter, name: str) -> list[ReadableSpan]:
    return [span for span in exporter.get_finished_spans() if span.name == name]
