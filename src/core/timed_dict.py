"""Insertion-ordered dictionary whose entries may expire.

TimedDict wraps a plain dict of Entry objects and routes every timer change
through a TimerManager. Derived collections (clone, filter, partition,
concat, sort) all copy entries through one primitive so the same timer
policy applies everywhere.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import cmp_to_key
from itertools import islice
from typing import (
    Any,
    AsyncIterator,
    Callable,
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
)

from core.errors import EmptyReductionError, ValidationError
from core.interfaces import Scheduler
from core.models import (
    UNSPECIFIED,
    Entry,
    Factory,
    Timeout,
    TimeoutMode,
    TimerReading,
    TimerState,
    resolve_value,
)
from core.scheduling import AsyncioScheduler
from core.timers import TimerManager

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

_MISSING = object()
_SCALARS = (int, float, complex, str, bytes)


def compare_sort(first: Any, second: Any, first_key: Any = None, second_key: Any = None) -> int:
    # Ascending by value; anything not greater and not equal sorts first
    if first > second:
        return 1
    if first == second:
        return 0
    return -1


def _same_value(a: Any, b: Any) -> bool:
    # Identity, except equal immutable scalars count as the same value
    if a is b:
        return True
    if type(a) is not type(b) or not isinstance(a, _SCALARS):
        return False
    if isinstance(a, float) and a != a:
        return b != b
    return a == b


class TimedDict(Generic[K, V]):
    def __init__(self, *sources: Any, scheduler: Optional[Scheduler] = None) -> None:
        self._store: Dict[K, Entry[V]] = {}
        self._timers = TimerManager(scheduler=scheduler or AsyncioScheduler(), store=self._store)

        for source in sources:
            if isinstance(source, TimedDict):
                self.concat(source)
            elif isinstance(source, Mapping):
                for key, value in source.items():
                    self.set(key, value)
            elif isinstance(source, (tuple, list)) and len(source) == 2:
                self.set(source[0], source[1])
            else:
                raise ValidationError(f"Unsupported source: {source!r}")

    @property
    def size(self) -> int:
        return len(self._store)

    @property
    def scheduler(self) -> Scheduler:
        return self._timers.scheduler

    # ---- access ----

    def has(self, key: K) -> bool:
        return key in self._store

    def get(self, key: K, default: Any = None, refresh: bool = True) -> Any:
        entry = self._store.get(key)
        if entry is None:
            return default
        if refresh:
            self._timers.refresh(key)
        return entry.value

    def at(self, index: int, refresh: bool = True) -> Optional[Tuple[K, V]]:
        """Return the (key, value) pair at `index` in insertion order.

        Negative indices count from the end. Returns None when the index is
        outside [-size, size - 1].
        """
        size = len(self._store)
        if index < 0:
            index += size
        if not 0 <= index < size:
            return None
        key, entry = next(islice(self._store.items(), index, None))
        if refresh:
            self._timers.refresh(key)
        return key, entry.value

    def ensure(self, key: K, default: Any, timeout: Timeout | float = UNSPECIFIED, refresh: bool = True) -> V:
        """Return the value for `key`, creating it from `default` if absent.

        `default` may be a Factory, called with the key only when the entry
        is created. Existing values are returned unchanged.
        """
        timeout = Timeout.coerce(timeout)
        entry = self._store.get(key)
        if entry is not None:
            if refresh:
                self._timers.refresh(key)
            return entry.value
        return self._set_item(key, resolve_value(default, key), timeout, None)

    def ttl(self, key: K) -> Optional[float]:
        # Remaining seconds; None for missing or permanent entries
        entry = self._store.get(key)
        if entry is None:
            return None
        reading = self._timers.reading(entry, remaining=True)
        if reading.state is TimerState.UNSET:
            return None
        if reading.state is TimerState.EXPIRED:
            return 0.0
        return reading.seconds

    def first(self, count: int = 1) -> Iterator[Tuple[K, V]]:
        for key, entry in islice(self._live_entries(), max(0, count)):
            yield key, entry.value

    def last(self, count: int = 1) -> Iterator[Tuple[K, V]]:
        start = max(0, len(self._store) - max(0, count))
        for key, entry in islice(self._live_entries(), start, None):
            yield key, entry.value

    # ---- mutation ----

    def set(self, key: K, value: V, timeout: Timeout | float = UNSPECIFIED) -> V:
        """Add or overwrite `key`.

        Timeout handling when the key already exists:
        - UNSPECIFIED refreshes the current timer (no-op without one).
        - KEEP leaves the current timer untouched.
        - CLEAR (or a number <= 0) removes the timer.
        - Timeout.after(n) (or a number > 0) replaces the timer.
        New keys only get a timer for Timeout.after(n).
        """
        return self._set_item(key, value, Timeout.coerce(timeout), self._store.get(key))

    def add(self, key: K, value: Any, timeout: Timeout | float = UNSPECIFIED) -> Optional[V]:
        timeout = Timeout.coerce(timeout)
        if key in self._store:
            return None
        return self._set_item(key, resolve_value(value, key), timeout, None)

    def update(self, key: K, value: Any, timeout: Timeout | float = UNSPECIFIED) -> Optional[V]:
        timeout = Timeout.coerce(timeout)
        entry = self._store.get(key)
        if entry is None:
            return None
        return self._set_item(key, resolve_value(value, key), timeout, entry)

    def delete(self, key: K) -> Optional[V]:
        entry = self._store.get(key)
        if entry is None:
            return None
        self._delete_item(key)
        return entry.value

    def sweep(self, predicate: Callable[[V, K], Any]) -> int:
        """Delete every entry for which `predicate(value, key)` is true.

        Note the polarity is the opposite of filter(), which keeps matches.
        Returns the number of deleted entries.
        """
        removed = 0
        for key, entry in self._live_entries():
            if predicate(entry.value, key) and self._store.get(key) is entry:
                self._delete_item(key)
                removed += 1
        return removed

    def clear(self) -> int:
        return self.sweep(lambda value, key: True)

    # ---- comparison ----

    def equals(self, other: Any) -> bool:
        if self is other:
            return True
        if not isinstance(other, TimedDict) or len(other._store) != len(self._store):
            return False
        for key, entry in self._live_entries():
            other_entry = other._store.get(key)
            if other_entry is None or not _same_value(other_entry.value, entry.value):
                return False
        return True

    def every(self, predicate: Callable[[V, K], Any]) -> bool:
        for key, entry in self._live_entries():
            if not predicate(entry.value, key):
                return False
        return True

    def find(self, predicate: Callable[[V, K], Any]) -> Optional[Tuple[K, V]]:
        for key, entry in self._live_entries():
            if predicate(entry.value, key):
                return key, entry.value
        return None

    def has_all(self, *keys: K) -> bool:
        return all(key in self._store for key in keys)

    def has_any(self, *keys: K) -> bool:
        return any(key in self._store for key in keys)

    # ---- derived collections ----

    def clone(self, refresh: bool = True) -> "TimedDict[K, V]":
        result = self._spawn()
        for key, entry in self._live_entries():
            self._copy_entry(result, key, entry, refresh)
        return result

    def filter(self, predicate: Callable[[V, K], Any], refresh: bool = True) -> "TimedDict[K, V]":
        result = self._spawn()
        for key, entry in self._live_entries():
            if predicate(entry.value, key):
                self._copy_entry(result, key, entry, refresh)
        return result

    def partition(
        self,
        predicate: Callable[[V, K], Any],
        first: Optional["TimedDict[K, V]"] = None,
        second: Optional["TimedDict[K, V]"] = None,
        refresh: bool = True,
    ) -> Tuple["TimedDict[K, V]", "TimedDict[K, V]"]:
        # Explicit None checks: an empty TimedDict is falsy
        passed = first if first is not None else self._spawn()
        failed = second if second is not None else self._spawn()
        for key, entry in self._live_entries():
            target = passed if predicate(entry.value, key) else failed
            self._copy_entry(target, key, entry, refresh)
        return passed, failed

    def concat(self, other: "TimedDict[K, V]", refresh: bool = True) -> "TimedDict[K, V]":
        """Copy entries of `other` whose keys are not already present.

        Existing keys keep their current value (first-seen wins).
        """
        if other is self:
            return self
        for key, entry in list(other._store.items()):
            other._copy_entry(self, key, entry, refresh, ensure=True)
        return self

    def sort(
        self,
        comparator: Callable[[V, V, K, K], int] = compare_sort,
        refresh: bool = True,
    ) -> "TimedDict[K, V]":
        snapshot = [
            (key, entry.value, self._timers.reading(entry, remaining=not refresh))
            for key, entry in self._store.items()
        ]
        snapshot.sort(key=cmp_to_key(lambda a, b: comparator(a[1], b[1], a[0], b[0])))

        # Rebuild from scratch: old handles must not fire on the new entries
        self._timers.discard_all()
        self._store.clear()
        for key, value, reading in snapshot:
            self._place(self, key, value, reading, ensure=False)
        return self

    def map(self, fn: Callable[[V, K], Any]) -> List[Any]:
        return [fn(entry.value, key) for key, entry in self._live_entries()]

    def reduce(self, fn: Callable[[Any, Tuple[K, V]], Any], initial: Any = _MISSING) -> Any:
        pairs = self.items()
        if initial is _MISSING:
            try:
                acc = next(pairs)
            except StopIteration:
                raise EmptyReductionError("reduce() of empty TimedDict with no initial value") from None
        else:
            acc = initial
        for pair in pairs:
            acc = fn(acc, pair)
        return acc

    def each(self, fn: Callable[[V, K], Any]) -> "TimedDict[K, V]":
        for key, entry in self._live_entries():
            fn(entry.value, key)
        return self

    # ---- iteration / formatting ----

    def items(self) -> Iterator[Tuple[K, V]]:
        for key, entry in self._live_entries():
            yield key, entry.value

    def keys(self) -> Iterator[K]:
        for key, _ in self._live_entries():
            yield key

    def values(self) -> Iterator[V]:
        for _, entry in self._live_entries():
            yield entry.value

    def to_string(
        self,
        sep: str = " ",
        predicate: Optional[Callable[[V, K], Any]] = None,
        formatter: Optional[Callable[[V, K], Any]] = None,
    ) -> str:
        parts = []
        for key, value in self.items():
            if predicate is None or predicate(value, key):
                parts.append(str(formatter(value, key) if formatter else value))
        return sep.join(parts)

    def debug(self) -> None:
        logger.debug(
            "%s[%d] (%d pending timers):", type(self).__name__, len(self._store), self._timers.pending()
        )
        for key, entry in self._live_entries():
            logger.debug("> %r %r", key, entry)

    def __iter__(self) -> Iterator[Tuple[K, V]]:
        return self.items()

    async def __aiter__(self) -> AsyncIterator[Tuple[K, V]]:
        for pair in self.items():
            yield pair

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __getitem__(self, key: K) -> V:
        if key not in self._store:
            raise KeyError(key)
        return self.get(key)

    def __setitem__(self, key: K, value: V) -> None:
        self.set(key, value)

    def __delitem__(self, key: K) -> None:
        if key not in self._store:
            raise KeyError(key)
        self._delete_item(key)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        body = ", ".join(f"{key!r}: {value!r}" for key, value in self.items())
        return f"{type(self).__name__}({{{body}}})"

    # ---- internals ----

    def _live_entries(self) -> Iterator[Tuple[K, Entry[V]]]:
        # Snapshot of the keys; entries removed mid-iteration (callbacks, expiry) are skipped
        for key, entry in list(self._store.items()):
            if self._store.get(key) is entry:
                yield key, entry

    def _spawn(self) -> "TimedDict[K, V]":
        return type(self)(scheduler=self._timers.scheduler)

    def _set_item(self, key: K, value: V, timeout: Timeout, entry: Optional[Entry[V]]) -> V:
        if entry is not None:
            previous = entry.value
            entry.value = value
            try:
                if timeout.mode is TimeoutMode.SET:
                    self._timers.schedule(key, timeout.seconds)
                elif timeout.mode is TimeoutMode.CLEAR:
                    self._timers.cancel(key)
                elif timeout.mode is TimeoutMode.UNSPECIFIED:
                    self._timers.refresh(key)
            except Exception:
                # Timer changes are all-or-nothing, so only the value needs restoring
                entry.value = previous
                raise
            return value

        self._store[key] = Entry(value)
        if timeout.mode is TimeoutMode.SET:
            try:
                self._timers.schedule(key, timeout.seconds)
            except Exception:
                del self._store[key]
                raise
        return value

    def _delete_item(self, key: K) -> None:
        self._timers.cancel(key)
        del self._store[key]

    def _copy_entry(
        self,
        dest: "TimedDict[K, V]",
        key: K,
        entry: Entry[V],
        refresh: bool,
        ensure: bool = False,
    ) -> None:
        reading = self._timers.reading(entry, remaining=not refresh)
        self._place(dest, key, entry.value, reading, ensure)

    @staticmethod
    def _place(dest: "TimedDict[K, V]", key: K, value: V, reading: TimerReading, ensure: bool) -> None:
        timeout = reading.to_timeout()
        if timeout is None:
            logger.debug("Dropped %r: timer elapsed before its callback ran", key)
            return
        if ensure:
            dest.ensure(key, Factory(lambda _key: value), timeout)
        else:
            dest.set(key, value, timeout)
