"""Backoff errors."""
from typing import Optional


class BackoffError(Exception):
    """Base class for backoff failures."""
    pass


class SleepInterruptedError(BackoffError):
    """Raised by a sleeper when its pause is interrupted."""
    pass


class BackOffInterruptedError(BackoffError):
    """Raised when a backoff pause is interrupted before it completes."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
