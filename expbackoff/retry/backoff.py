"""Retry backoff utilities."""
from __future__ import annotations

import math
import sys
import threading
from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog

from .errors import BackOffInterruptedError, SleepInterruptedError
from .sleeper import Sleeper, ThreadWaitSleeper

if TYPE_CHECKING:
    from ..config.settings import BackoffSettings

logger = structlog.get_logger()

DEFAULT_INITIAL_INTERVAL = 100  # milliseconds
DEFAULT_MULTIPLIER = 2.0
DEFAULT_MAX_INTERVAL = 30000  # 30 seconds


def _to_millis(value: float) -> int:
    if math.isinf(value):
        return sys.maxsize
    return int(value)


class ExponentialBackoffState:
    """Backoff progress for a single retry sequence.

    Safe to share between threads retrying the same sequence: each call to
    ``next_delay`` reads and advances the interval under one lock.
    """

    def __init__(self, interval: int, multiplier: float, max_interval: int):
        self._interval = interval
        self._multiplier = multiplier
        self._max_interval = max_interval
        self._lock = threading.Lock()

    def next_delay(self) -> int:
        """Return the delay to use now and advance for the next call."""
        with self._lock:
            sleep = self._interval
            if sleep > self._max_interval:
                sleep = self._max_interval
            else:
                self._interval = self.next_interval()
            return sleep

    def next_interval(self) -> int:
        """Compute the interval following the current one."""
        try:
            return int(self._interval * self._multiplier)
        except OverflowError:
            # Past float range; saturate so growth stops.
            return self._max_interval + 1

    @property
    def interval(self) -> int:
        with self._lock:
            return self._interval

    @property
    def multiplier(self) -> float:
        return self._multiplier

    @property
    def max_interval(self) -> int:
        return self._max_interval

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(interval={self.interval}, "
            f"multiplier={self._multiplier}, max_interval={self._max_interval})"
        )


class ExponentialBackoffPolicy:
    """Exponential backoff capped at a maximum interval.

    The first retry waits ``initial_interval`` milliseconds and each later
    retry waits ``multiplier`` times longer, up to ``max_interval``.
    Configuration changes never affect states that were already started.
    """

    def __init__(
        self,
        initial_interval: int = DEFAULT_INITIAL_INTERVAL,
        multiplier: float = DEFAULT_MULTIPLIER,
        max_interval: int = DEFAULT_MAX_INTERVAL,
        sleeper: Optional[Sleeper] = None,
        listener: Optional[Callable[[int], None]] = None,
    ):
        self.initial_interval = initial_interval
        self.multiplier = multiplier
        self.max_interval = max_interval
        self.sleeper = sleeper
        self.listener = listener

    @classmethod
    def from_settings(
        cls, config: Optional[BackoffSettings] = None
    ) -> ExponentialBackoffPolicy:
        """Create a policy from environment settings."""
        if config is None:
            from ..config.settings import settings as config
        return cls(
            initial_interval=config.initial_interval,
            multiplier=config.multiplier,
            max_interval=config.max_interval,
        )

    @property
    def initial_interval(self) -> int:
        """Delay before the first retry, never less than 1ms."""
        return self._initial_interval

    @initial_interval.setter
    def initial_interval(self, value: int) -> None:
        self._initial_interval = _to_millis(value) if value > 1 else 1

    @property
    def multiplier(self) -> float:
        """Growth factor between retries, never less than 1.0."""
        return self._multiplier

    @multiplier.setter
    def multiplier(self, value: float) -> None:
        self._multiplier = float(value) if value > 1.0 else 1.0

    @property
    def max_interval(self) -> int:
        """Longest delay ever returned, reset to 1ms if not positive."""
        return self._max_interval

    @max_interval.setter
    def max_interval(self, value: int) -> None:
        self._max_interval = _to_millis(value) if value > 0 else 1

    @property
    def sleeper(self) -> Sleeper:
        return self._sleeper

    @sleeper.setter
    def sleeper(self, value: Optional[Sleeper]) -> None:
        self._sleeper = value if value is not None else ThreadWaitSleeper()

    def with_sleeper(self, sleeper: Sleeper) -> ExponentialBackoffPolicy:
        """Return a copy of this policy that pauses with ``sleeper``."""
        policy = self.new_instance()
        self.clone_values(policy)
        policy.sleeper = sleeper
        return policy

    def new_instance(self) -> ExponentialBackoffPolicy:
        return type(self)()

    def clone_values(self, target: ExponentialBackoffPolicy) -> None:
        target.initial_interval = self.initial_interval
        target.multiplier = self.multiplier
        target.max_interval = self.max_interval
        target.sleeper = self.sleeper
        target.listener = self.listener

    def start(self, context: Any = None) -> ExponentialBackoffState:
        """Start a retry sequence seeded with the current configuration."""
        return ExponentialBackoffState(
            self._initial_interval, self._multiplier, self._max_interval
        )

    def back_off(self, state: ExponentialBackoffState) -> None:
        """Pause for the current interval of ``state`` and advance it."""
        if not isinstance(state, ExponentialBackoffState):
            raise TypeError(
                f"Expected ExponentialBackoffState, got {type(state).__name__}"
            )

        delay = state.next_delay()
        logger.debug("backoff_sleeping", delay_ms=delay)
        if self.listener is not None:
            self.listener(delay)

        try:
            self._sleeper.sleep(delay)
        except SleepInterruptedError as e:
            logger.warning("backoff_interrupted", delay_ms=delay, error=str(e))
            raise BackOffInterruptedError(
                "Thread interrupted while sleeping", cause=e
            ) from e

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(initial_interval={self._initial_interval}, "
            f"multiplier={self._multiplier}, max_interval={self._max_interval})"
        )
