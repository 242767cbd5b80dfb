"""Sleepers that perform the actual backoff pause."""
from __future__ import annotations

import threading
from typing import Dict, List, Optional, Protocol, runtime_checkable

from .errors import SleepInterruptedError


@runtime_checkable
class Sleeper(Protocol):
    """Pause the calling thread for a number of milliseconds.

    Implementations block until the pause is over and raise
    ``SleepInterruptedError`` if it is cut short.
    """

    def sleep(self, millis: int) -> None:
        ...


class ThreadWaitSleeper:
    """Real-time sleeper whose pauses can be interrupted per thread.

    One sleeper is shared by every sequence of a policy, so interruption is
    tracked by thread ident. An interrupt aimed at a thread that is not
    sleeping stays pending until that thread's next ``sleep``, and the flag
    is cleared once the resulting ``SleepInterruptedError`` is raised.
    """

    def __init__(self):
        self._events: Dict[int, threading.Event] = {}
        self._lock = threading.Lock()

    def _event_for(self, ident: int) -> threading.Event:
        with self._lock:
            return self._events.setdefault(ident, threading.Event())

    def sleep(self, millis: int) -> None:
        """Wait for ``millis`` milliseconds unless this thread is interrupted."""
        ident = threading.get_ident()
        timeout = min(max(0, millis) / 1000, threading.TIMEOUT_MAX)
        self._event_for(ident).wait(timeout)

        with self._lock:
            event = self._events.pop(ident, None)
        if event is not None and event.is_set():
            raise SleepInterruptedError(f"Interrupted while sleeping for {millis}ms")

    def interrupt(self, thread_ident: Optional[int] = None) -> None:
        """Interrupt the pause of ``thread_ident`` (the calling thread by default)."""
        if thread_ident is None:
            thread_ident = threading.get_ident()
        self._event_for(thread_ident).set()

    def is_interrupted(self, thread_ident: Optional[int] = None) -> bool:
        if thread_ident is None:
            thread_ident = threading.get_ident()
        with self._lock:
            event = self._events.get(thread_ident)
        return event is not None and event.is_set()


class NoOpSleeper:
    """Sleeper that returns immediately."""

    def sleep(self, millis: int) -> None:
        pass


class RecordingSleeper:
    """Sleeper that records requested pauses without waiting."""

    def __init__(self):
        self.sleeps: List[int] = []
        self._lock = threading.Lock()

    def sleep(self, millis: int) -> None:
        with self._lock:
            self.sleeps.append(millis)

    @property
    def last_sleep(self) -> Optional[int]:
        with self._lock:
            return self.sleeps[-1] if self.sleeps else None
