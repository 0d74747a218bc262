"""Dataclasses and tagged values shared by the timed dictionary.

Includes the stored Entry/Timer pair, the four-way Timeout argument used by
mutation methods, the Factory wrapper for lazily computed values and the
TimerReading returned when sampling a timer during a copy.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from core.errors import ValidationError

V = TypeVar("V")


@dataclass(slots=True)
class Timer:
    # Scheduled deletion: fires at started_at + seconds (time.monotonic())
    seconds: float
    started_at: float


@dataclass(slots=True)
class Entry(Generic[V]):
    value: V
    timer: Optional[Timer] = None


class TimeoutMode(Enum):
    UNSPECIFIED = "unspecified"
    KEEP = "keep"
    CLEAR = "clear"
    SET = "set"


@dataclass(frozen=True, slots=True)
class Timeout:
    """Timeout argument accepted by set/add/update/ensure.

    Modes:
    - UNSPECIFIED: new entry gets no timer; existing timer is refreshed.
    - KEEP: new entry gets no timer; existing timer is left untouched.
    - CLEAR: new entry gets no timer; existing timer is cancelled.
    - SET: timer with `seconds` is created or replaces the existing one.
    """

    mode: TimeoutMode
    seconds: Optional[float] = None

    @classmethod
    def after(cls, seconds: float) -> "Timeout":
        seconds = float(seconds)
        if seconds <= 0:
            return CLEAR
        return cls(TimeoutMode.SET, seconds)

    @classmethod
    def coerce(cls, value: "Timeout | float | int") -> "Timeout":
        # Plain numbers follow the zero-or-negative-clears rule
        if isinstance(value, Timeout):
            return value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"Invalid timeout: {value!r}")
        return cls.after(value)


UNSPECIFIED = Timeout(TimeoutMode.UNSPECIFIED)
KEEP = Timeout(TimeoutMode.KEEP)
CLEAR = Timeout(TimeoutMode.CLEAR)


@dataclass(frozen=True, slots=True)
class Factory(Generic[V]):
    # Value computed from the key, only when the entry is actually created
    fn: Callable[[Any], V]

    def resolve(self, key: Any) -> V:
        return self.fn(key)


def resolve_value(value: Any, key: Any) -> Any:
    if isinstance(value, Factory):
        return value.resolve(key)
    return value


class TimerState(Enum):
    UNSET = "unset"
    ELAPSED = "elapsed"
    REMAINING = "remaining"
    EXPIRED = "expired"


@dataclass(frozen=True, slots=True)
class TimerReading:
    state: TimerState
    seconds: Optional[float] = None

    def to_timeout(self) -> Optional[Timeout]:
        # None means the entry expired and must not be copied
        if self.state is TimerState.EXPIRED:
            return None
        if self.state is TimerState.UNSET:
            return UNSPECIFIED
        return Timeout.after(self.seconds)
