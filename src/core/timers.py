"""Per-key expiration timers for the timed dictionary.

The manager keeps the scheduler handles in its own side table keyed by the
entry key; entries only store the timer's duration and start time. Expiry
callbacks remove the key from the backing store directly.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Dict, MutableMapping

from core.interfaces import Cancellable, Scheduler
from core.models import Entry, Timer, TimerReading, TimerState

logger = logging.getLogger(__name__)


class TimerManager:
    def __init__(self, *, scheduler: Scheduler, store: MutableMapping[Any, Entry]) -> None:
        self._scheduler = scheduler
        self._store = store
        self._handles: Dict[Any, Cancellable] = {}

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    def pending(self) -> int:
        return len(self._handles)

    def schedule(self, key: Any, seconds: float) -> None:
        entry = self._store[key]
        timer = Timer(seconds=float(seconds), started_at=self._scheduler.now())
        # Arm first: a scheduler failure must leave the old timer in place
        self._arm(key, timer)
        entry.timer = timer
        logger.debug("Scheduled expiry of %r in %.3fs", key, entry.timer.seconds)

    def cancel(self, key: Any) -> None:
        self._cancel_handle(key)
        entry = self._store.get(key)
        if entry is not None:
            entry.timer = None

    def refresh(self, key: Any) -> None:
        entry = self._store.get(key)
        if entry is None or entry.timer is None:
            return
        timer = Timer(seconds=entry.timer.seconds, started_at=self._scheduler.now())
        self._arm(key, timer)
        entry.timer = timer
        logger.debug("Refreshed expiry of %r (%.3fs)", key, entry.timer.seconds)

    def discard_all(self) -> None:
        # Cancel every pending callback; timer fields on entries are left as-is
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()

    def reading(self, entry: Entry, remaining: bool) -> TimerReading:
        timer = entry.timer
        if timer is None:
            return TimerReading(TimerState.UNSET)
        if not remaining:
            return TimerReading(TimerState.ELAPSED, timer.seconds)

        left = timer.seconds - (self._scheduler.now() - timer.started_at)
        if left <= 0:
            # Logically elapsed, callback not run yet
            return TimerReading(TimerState.EXPIRED)
        return TimerReading(TimerState.REMAINING, left)

    def _arm(self, key: Any, timer: Timer) -> None:
        handle = self._scheduler.call_later(timer.seconds, partial(self._expire, key, timer))
        self._cancel_handle(key)
        self._handles[key] = handle

    def _cancel_handle(self, key: Any) -> None:
        handle = self._handles.pop(key, None)
        if handle is not None:
            handle.cancel()

    def _expire(self, key: Any, timer: Timer) -> None:
        entry = self._store.get(key)
        # Ignore callbacks for a timer that has since been replaced or cleared
        if entry is None or entry.timer is not timer:
            return
        del self._store[key]
        self._handles.pop(key, None)
        logger.debug("Expired %r after %.3fs", key, timer.seconds)
