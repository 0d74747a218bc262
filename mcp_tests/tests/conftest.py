import pytest


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool and resource registration."""

    def __init__(self) -> None:
        self.tools = {}
        self.resources = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator

    def resource(self, uri: str, **kwargs):
        def _decorator(fn):
            self.resources[uri] = fn
            return fn
        return _decorator


class FakeHandle:
    def __init__(self, when: float, callback) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock: callbacks run only when advance() passes their deadline."""

    def __init__(self) -> None:
        self.time = 0.0
        self.handles = []

    def now(self) -> float:
        return self.time

    def call_later(self, delay, callback):
        handle = FakeHandle(self.time + delay, callback)
        self.handles.append(handle)
        return handle

    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        self.time += seconds
        due = sorted((h for h in self.pending() if h.when <= self.time), key=lambda h: h.when)
        for h in due:
            if not h.cancelled:
                h.cancelled = True
                h.callback()


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def scheduler():
    return FakeScheduler()
