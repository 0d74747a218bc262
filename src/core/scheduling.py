"""
Scheduling utilities.

Runs expiration callbacks on the asyncio event loop. The loop is resolved
lazily so a dictionary can be created outside of a coroutine and only needs a
running loop once a timed entry is added.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional

from core.errors import SchedulerError


class AsyncioScheduler:
    def __init__(self, *, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def now(self) -> float:
        # Same clock as the default event loop, immune to wall-clock changes.
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as e:
                raise SchedulerError("Timed entries require a running asyncio event loop") from e

        return loop.call_later(max(0.0, float(delay)), callback)
