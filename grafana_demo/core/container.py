from fastapi import FastAPI
from kink import di
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import Tracer

from grafana_demo.core.application import get_application
from grafana_demo.core.config import Configuration, get_config
from grafana_demo.domain.pipeline import SimulatedPipeline
from grafana_demo.infrastructure.observability import HTTPMetrics, configure_tracing


def wire_dependencies(config: Configuration | None = None) -> None:
    """Register process-wide singletons.

    Raises ``TracerInitializationError`` when trace export cannot be set up.
    """
    _wire_core_dependencies(config)
    _wire_infrastructure_dependencies()
    _wire_services()
    _wire_application()


# noinspection PyArgumentList
def _wire_core_dependencies(config: Configuration | None) -> None:
    """Wire core application dependencies."""
    di[Configuration] = config if config is not None else get_config()


def _wire_infrastructure_dependencies() -> None:
    config = di[Configuration]

    di[HTTPMetrics] = HTTPMetrics()

    if config.observability.enabled:
        provider = configure_tracing(config)
    else:
        # spans still carry ids for log correlation, they are just not exported
        provider = TracerProvider(
            resource=Resource.create({'service.name': config.app_name})
        )

    di[TracerProvider] = provider
    di[Tracer] = provider.get_tracer(config.app_name, config.app_version)


def _wire_services() -> None:
    di[SimulatedPipeline] = SimulatedPipeline(di[Configuration].chaos, di[Tracer])


def _wire_application() -> None:
    di[FastAPI] = get_application()  # type: ignore[call-arg]
