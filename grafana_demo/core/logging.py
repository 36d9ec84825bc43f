import json
import logging
import sys
from typing import Any, TextIO

from loguru import logger
from opentelemetry.trace import get_current_span

from grafana_demo.core.configs import LogConfiguration

_RESERVED_KEYS = ('ts', 'level', 'msg', 'trace_id', 'span_id')


class InterceptHandler(logging.Handler):
    """Forward standard library log records (uvicorn, grpc) to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.bind(logger=record.name).opt(
            depth=depth, exception=record.exc_info
        ).log(level, record.getMessage())


def _inject_trace_context(record: dict[str, Any]) -> None:
    """Populate ``trace_id`` / ``span_id`` in ``record['extra']`` if absent."""
    span_ctx = get_current_span().get_span_context()

    if span_ctx and span_ctx.is_valid:
        record['extra'].setdefault('trace_id', f'{span_ctx.trace_id:032x}')
        record['extra'].setdefault('span_id', f'{span_ctx.span_id:016x}')


def serialize_record(record: dict[str, Any]) -> str:
    """Render a Loguru record as a single JSON object."""
    extra = record['extra']
    entry: dict[str, Any] = {
        'ts': record['time'].isoformat(),
        'level': record['level'].name.lower(),
        'msg': record['message'],
    }

    if 'trace_id' in extra:
        entry['trace_id'] = extra['trace_id']
        entry['span_id'] = extra['span_id']

    for key, value in extra.items():
        if key not in _RESERVED_KEYS and not key.startswith('_'):
            entry[key] = value

    if record['exception'] is not None:
        exc_type, exc_value, _ = record['exception']
        entry['exception'] = f'{exc_type.__name__}: {exc_value}' if exc_type else None

    return json.dumps(entry, default=str)


def format_json_record(record: dict[str, Any]) -> str:
    record['extra']['_serialized'] = serialize_record(record)
    return '{extra[_serialized]}\n'


def format_console_record(record: dict[str, Any]) -> str:
    """Colorized formatter for local development."""
    extra = record['extra']

    fmt = '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level>'

    if 'trace_id' in extra:
        fmt += ' | <blue>{extra[trace_id]}</blue>/<yellow>{extra[span_id]}</yellow>'

    fmt += ' | <level>{message}</level>'

    fields = {
        key: value
        for key, value in extra.items()
        if key not in _RESERVED_KEYS and not key.startswith('_')
    }
    if fields:
        extra['_fields'] = fields
        fmt += ' <white>{extra[_fields]}</white>'

    if record.get('exception'):
        fmt += '\n{exception}'

    return fmt + '\n'


# noinspection PyTypeChecker
def setup_logging(
    log_config: LogConfiguration | None = None, sink: TextIO | Any | None = None
) -> None:
    """Setup Loguru logging with configuration.

    Without ``log_config`` the defaults apply (JSON lines at INFO).
    """
    log_config = log_config or LogConfiguration.model_construct()
    sink = sink or sys.stdout

    # Remove default handler
    logger.remove()

    if log_config.format == 'console':
        logger.add(
            sink,
            level=log_config.level,
            format=format_console_record,  # type: ignore [arg-type]
            colorize=True,
            backtrace=True,
            diagnose=False,
        )
    else:
        logger.add(
            sink,
            level=log_config.level,
            format=format_json_record,  # type: ignore [arg-type]
            colorize=False,
            backtrace=False,
            diagnose=False,
        )

    logger.configure(patcher=_inject_trace_context)  # type: ignore [arg-type]

    # stdlib loggers (uvicorn, grpc) go through the same sink
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ('uvicorn', 'uvicorn.error', 'uvicorn.access'):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False


def get_logger(name: str | None = None) -> Any:
    """Get a Loguru logger instance."""
    return logger.bind(logger=name) if name else logger
