"""Core protocol and interface definitions.

Defines the Scheduler protocol the timer manager arms deletion callbacks
with, so the dictionary can run on the asyncio loop or on a test clock.
"""

from __future__ import annotations

from typing import Callable, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Contract for anything that can run a callback after a delay."""

    def now(self) -> float:
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        ...
