"""
Request pacing before network calls.

The quote and statistics services throttle aggressive clients, so every
fetch waits on a Pacer first. Pacers are plain objects with a wait()
method and are injected into the DataClient.
"""

import logging
import random
import threading
import time
from typing import Callable, Optional, Protocol
from finformula.config import Settings

logger = logging.getLogger(__name__)


class Pacer(Protocol):
    """Anything that can delay the caller before a network call."""

    def wait(self) -> None: ...


class NoPacing:
    """Pacer that never waits."""

    def wait(self) -> None:
        return None


class RandomPacing:
    """
    Sleeps a random duration, several times in sequence, before each call.

    Representation Invariants:
        - 0 <= low <= high
        - rounds >= 1
    """

    def __init__(
        self,
        low: float = 1.0,
        high: float = 11.0,
        rounds: int = 2,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None
    ):
        if low < 0 or high < low:
            raise ValueError("pause bounds must satisfy 0 <= low <= high")
        if rounds < 1:
            raise ValueError("rounds must be at least 1")

        self.low = low
        self.high = high
        self.rounds = rounds
        self._sleep = sleep
        self._rng = rng or random.Random()

    def wait(self) -> None:
        for _ in range(self.rounds):
            delay = self._rng.uniform(self.low, self.high)
            logger.debug(f"Pausing {delay:.2f}s before request")
            self._sleep(delay)


class FixedIntervalPacing:
    """
    Keeps at least min_interval seconds between consecutive calls.

    The first call never waits. Concurrent callers are served one at a time.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        if min_interval <= 0:
            raise ValueError("min_interval must be positive")

        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None
        self._lock = threading.Lock()

    def wait(self) -> None:
        with self._lock:
            now = self._clock()
            if self._last_call is not None:
                remaining = self.min_interval - (now - self._last_call)
                if remaining > 0:
                    logger.debug(f"Pausing {remaining:.2f}s to keep request spacing")
                    self._sleep(remaining)
                    now = self._clock()
            self._last_call = now


def pacer_from_settings(settings: Settings) -> Pacer:
    """Build the pacer selected by settings.pacing."""
    if settings.pacing == "none":
        return NoPacing()
    if settings.pacing == "fixed":
        return FixedIntervalPacing(settings.min_interval_seconds)
    return RandomPacing(
        settings.pacing_min_seconds,
        settings.pacing_max_seconds,
        settings.pacing_rounds
    )
