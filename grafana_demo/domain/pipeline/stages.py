import random
import time
from collections.abc import Callable

from opentelemetry.trace import Span, Status, StatusCode, Tracer

from grafana_demo.core.configs import ChaosConfiguration

from .delays import (
    BUSINESS_LOGIC_DELAY,
    DATABASE_DELAY,
    DATABASE_TIMEOUT_DELAY,
    SLOW_DATABASE_DELAY,
    TEMPLATE_RENDER_DELAY,
    DelayRange,
    DelaySampler,
    UniformDelaySampler,
)
from .errors import BusinessLogicError, DatabaseTimeoutError

CHAOS_ATTRIBUTE = 'chaos'


class SimulatedPipeline:
    """Three sequential stages of fake work, each traced in its own span.

    Stages block the calling thread while they sleep. Chaos toggles come from
    the configuration given at construction and never change afterwards.
    """

    def __init__(
        self,
        chaos: ChaosConfiguration,
        tracer: Tracer,
        sampler: DelaySampler | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._chaos = chaos
        self._tracer = tracer
        self._rng = rng or random.Random()
        self._sampler = sampler or UniformDelaySampler(self._rng)
        self._sleep = sleep

    def _pause(self, delay: DelayRange) -> None:
        self._sleep(self._sampler.sample(delay))

    @staticmethod
    def _mark_failed(span: Span, error: Exception, chaos: str) -> None:
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, str(error)))
        span.set_attribute(CHAOS_ATTRIBUTE, chaos)

    def do_business_logic(self) -> None:
        """Raises :class:`BusinessLogicError` when the error toggle fires."""
        with self._tracer.start_as_current_span(
            'service_B_business_logic',
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            self._pause(BUSINESS_LOGIC_DELAY)

            if self._chaos.error and self._rng.random() < self._chaos.error_rate:
                error = BusinessLogicError('simulated business logic failure')
                self._mark_failed(span, error, 'random_error')
                raise error

    def call_database(self) -> None:
        with self._tracer.start_as_current_span('service_C_db_call') as span:
            if self._chaos.db_failure:
                error = DatabaseTimeoutError('db timeout')
                self._mark_failed(span, error, 'db_failure')
                self._pause(DATABASE_TIMEOUT_DELAY)
                return

            if self._chaos.slow_db:
                self._pause(SLOW_DATABASE_DELAY)
                span.set_attribute(CHAOS_ATTRIBUTE, 'slow_db')
                return

            self._pause(DATABASE_DELAY)

    def render_template(self) -> None:
        with self._tracer.start_as_current_span('template_rendering'):
            self._pause(TEMPLATE_RENDER_DELAY)

    def run(self) -> None:
        self.do_business_logic()
        self.call_database()
        self.render_template()
