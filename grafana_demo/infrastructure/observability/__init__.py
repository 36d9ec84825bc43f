from .bootstrap import (
    TracerInitializationError,
    build_tracer_provider,
    configure_tracing,
    instrument_application,
    shutdown_tracing,
)
from .metrics import HTTPMetrics

__all__ = [
    'HTTPMetrics',
    'TracerInitializationError',
    'build_tracer_provider',
    'configure_tracing',
    'instrument_application',
    'shutdown_tracing',
]
