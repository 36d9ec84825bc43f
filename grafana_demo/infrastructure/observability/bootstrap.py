from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import grpc
from opentelemetry import trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.propagators import (
    TraceResponsePropagator,
    set_global_response_propagator,
)
from opentelemetry.propagate import set_global_textmap
from opentelemetry.propagators.b3 import B3MultiFormat
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.propagators.jaeger import JaegerPropagator
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider, sampling
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from grafana_demo.core.logging import get_logger

if TYPE_CHECKING:
    from fastapi import FastAPI
    from opentelemetry.sdk.trace.sampling import Sampler

    from grafana_demo.core.config import Configuration

logger = get_logger(__name__)


class TracerInitializationError(RuntimeError):
    """The tracer provider could not be set up at startup."""


def _collector_address(endpoint: str) -> str:
    """Strip any scheme so ``host:port`` is left for the gRPC channel."""
    parsed = urlparse(endpoint if '://' in endpoint else f'http://{endpoint}')
    return parsed.netloc


def _wait_for_collector(endpoint: str, timeout: float) -> None:
    """Block until the collector accepts a gRPC connection."""
    address = _collector_address(endpoint)
    channel = grpc.insecure_channel(address)

    try:
        grpc.channel_ready_future(channel).result(timeout=timeout)

    except grpc.FutureTimeoutError as e:
        msg = f'collector at {address} not reachable within {timeout}s'
        raise TracerInitializationError(msg) from e

    finally:
        channel.close()


def excluded_url_patterns(paths: Iterable[str]) -> str:
    """Turn exact paths into the comma separated regexes the instrumentor expects.

    The instrumentor searches the whole URL, so each pattern is anchored on the
    path to skip exactly the routes the metrics middleware skips.
    """
    return ','.join(
        f'^[^:/]+://[^/]*{re.escape(path)}$' for path in sorted(paths)
    )


def _build_sampler(ratio: float) -> Sampler:
    if ratio >= 1.0:
        return sampling.ALWAYS_ON

    if ratio <= 0.0:
        return sampling.ALWAYS_OFF

    return sampling.TraceIdRatioBased(ratio)


# noinspection HttpUrlsUsage
def build_tracer_provider(config: Configuration) -> TracerProvider:
    """Create a tracer provider exporting batched spans over OTLP/gRPC."""
    observability = config.observability

    try:
        if observability.connect_timeout > 0:
            _wait_for_collector(
                observability.traces_endpoint, observability.connect_timeout
            )

        resource = Resource.create(
            {
                'service.name': config.app_name,
                'service.version': config.app_version,
                'service.namespace': config.app_environment,
                'deployment.environment': config.app_environment,
            }
        )

        provider = TracerProvider(
            sampler=_build_sampler(observability.tracing_sample_ratio),
            resource=resource,
        )

        endpoint = observability.traces_endpoint
        if not endpoint.startswith('http'):
            endpoint = f'http://{endpoint}'

        otlp_exporter = OTLPSpanExporter(
            endpoint=endpoint,
            insecure=True,
            timeout=30,
        )

        provider.add_span_processor(
            BatchSpanProcessor(
                otlp_exporter,
                max_queue_size=2048,
                max_export_batch_size=512,
                export_timeout_millis=30000,
                schedule_delay_millis=5000,
            )
        )

        if observability.traces_to_console:
            provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    except TracerInitializationError:
        raise

    except Exception as e:
        msg = f'failed to build tracer provider: {e}'
        raise TracerInitializationError(msg) from e

    return provider


def configure_tracing(config: Configuration) -> TracerProvider:
    """Install the process-wide tracer provider and propagators."""
    provider = build_tracer_provider(config)
    trace.set_tracer_provider(provider)

    set_global_textmap(
        CompositePropagator(
            [
                TraceContextTextMapPropagator(),
                W3CBaggagePropagator(),
                JaegerPropagator(),
                B3MultiFormat(),
            ]
        )
    )
    # echo the server span back to callers as a traceresponse header
    set_global_response_propagator(TraceResponsePropagator())

    logger.info(
        'tracer initialized',
        endpoint=config.observability.traces_endpoint,
        service=config.app_name,
    )

    return provider


def shutdown_tracing(provider: TracerProvider, timeout_millis: int) -> None:
    """Flush buffered spans within ``timeout_millis`` and stop the provider."""
    flushed = provider.force_flush(timeout_millis=timeout_millis)
    if not flushed:
        logger.warning('span flush timed out', timeout_millis=timeout_millis)

    provider.shutdown()


def instrument_application(
    app: FastAPI, config: Configuration, provider: TracerProvider
) -> None:
    """Wrap the application in the OpenTelemetry ASGI middleware."""
    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls=excluded_url_patterns(config.observability.excluded_paths),
        tracer_provider=provider,
        http_capture_headers_server_request=[
            'content-type',
            'user-agent',
        ],
        http_capture_headers_server_response=[
            'content-type',
            'content-length',
        ],
    )
