"""Delay ranges for the simulated request stages."""

import random
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class DelayRange:
    """Half-open range ``[low_ms, high_ms)`` of simulated work, in milliseconds."""

    low_ms: int
    high_ms: int

    def __post_init__(self) -> None:
        if self.low_ms < 0 or self.high_ms < self.low_ms:
            msg = f'invalid delay range: [{self.low_ms}, {self.high_ms})'
            raise ValueError(msg)


BUSINESS_LOGIC_DELAY = DelayRange(50, 150)
DATABASE_DELAY = DelayRange(20, 70)
SLOW_DATABASE_DELAY = DelayRange(800, 2000)
DATABASE_TIMEOUT_DELAY = DelayRange(2000, 2000)
TEMPLATE_RENDER_DELAY = DelayRange(10, 40)


class DelaySampler(Protocol):
    def sample(self, delay: DelayRange) -> float:
        """Return a duration in seconds drawn from ``delay``."""
        ...


class UniformDelaySampler:
    """Draws whole milliseconds uniformly from a delay range."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def sample(self, delay: DelayRange) -> float:
        if delay.high_ms == delay.low_ms:
            return delay.low_ms / 1000

        return self._rng.randrange(delay.low_ms, delay.high_ms) / 1000
