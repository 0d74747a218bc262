from __future__ import annotations


class TimedDictError(Exception):
    """Base error for the timed dictionary and its server."""


class ValidationError(TimedDictError):
    """Raised when user input is invalid."""


class NotFoundError(TimedDictError):
    """Raised by the server tools when a requested key is not present."""


class SchedulerError(TimedDictError):
    """Raised when a timer cannot be armed (e.g. no running event loop)."""


class EmptyReductionError(TimedDictError, TypeError):
    """Raised when reducing an empty dictionary without an initial value."""
