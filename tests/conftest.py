"""Shared fixtures: in-memory storage and a manually advanced scheduler."""

import pytest

from mdsession.config import Config
from mdsession.scheduler import Scheduler
from mdsession.session import Session
from mdsession.storage import MemoryStore


class FakeHandle:
    def __init__(self, when: float, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler(Scheduler):
    """Scheduler driven by advance(); time is in seconds."""

    def __init__(self):
        self.now = 0.0
        self.handles: list[FakeHandle] = []

    def call_later(self, delay, callback):
        handle = FakeHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def live(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self.live if h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.now = handle.when
            handle.cancelled = True
            handle.callback()
        self.now = target


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def storage():
    return MemoryStore()


@pytest.fixture
def config(tmp_path):
    return Config(data_dir=tmp_path)


@pytest.fixture
def session(storage, config, scheduler):
    s = Session(storage, config, scheduler=scheduler)
    assert s.initialize()
    yield s
    s.autosave.shutdown()
