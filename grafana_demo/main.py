import signal
import sys

import uvicorn
from fastapi import FastAPI
from kink import inject
from pydantic import ValidationError

from grafana_demo.core.config import Configuration, get_config
from grafana_demo.core.container import wire_dependencies
from grafana_demo.core.logging import get_logger, setup_logging
from grafana_demo.infrastructure.observability import TracerInitializationError

logger = get_logger(__name__)


@inject
def run_asgi_server(app: FastAPI, config: Configuration) -> None:
    """Serve ``app`` on a single uvicorn process until it is told to stop."""
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=config.api.host,
            port=config.api.port,
            lifespan='on',
            log_config=None,
            access_log=config.api.access_log,
        )
    )

    logger.info('starting server', port=config.api.port)
    server.run()


def main() -> None:
    # JSON logging with defaults until the configuration is known
    setup_logging()

    try:
        config = get_config()

    except ValidationError as e:
        logger.error('invalid configuration', error=str(e))
        sys.exit(1)

    setup_logging(config.log)

    try:
        wire_dependencies(config)

    except TracerInitializationError as e:
        logger.error('failed to initialize tracer', error=str(e))
        sys.exit(1)

    # uvicorn re-raises the stop signal once drained; treat SIGTERM like Ctrl-C
    signal.signal(signal.SIGTERM, signal.default_int_handler)

    try:
        run_asgi_server()  # type: ignore[call-arg]

    except SystemExit as e:
        # uvicorn exits with status 1 when it cannot bind the listener
        if e.code not in (None, 0):
            logger.error('server failed', error=f'server exited with status {e.code}')
            sys.exit(1)
        raise

    except KeyboardInterrupt:
        pass

    logger.info('server stopped')


if __name__ == '__main__':
    main()
