"""Shared fakes for the tracker's collaborators."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

import pytest

from usage_tracker.config import TrackerSettings
from usage_tracker.models import Category, Observation
from usage_tracker.tracker import SessionTracker


class ManualClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class ScriptedInspector:
    """Returns queued observations; repeats the last one when the queue runs dry."""

    def __init__(self) -> None:
        self.queue: list[Observation | Exception] = []
        self.last: Observation = Observation()

    def push(self, executable: Optional[str], title: Optional[str] = None) -> None:
        self.queue.append(Observation(executable, title))

    def fail(self, exc: Optional[Exception] = None) -> None:
        self.queue.append(exc or OSError("no foreground window"))

    def inspect(self) -> Observation:
        if self.queue:
            head = self.queue.pop(0)
            if isinstance(head, Exception):
                raise head
            self.last = head
        return self.last


class MemoryStore:
    def __init__(self) -> None:
        self.applications: dict[str, tuple[int, Category]] = {}
        self.websites: dict[str, tuple[int, Category]] = {}
        self.records: list[dict] = []
        self.focus_mode = False
        self.blocked_apps: set[str] = set()
        self.blocked_sites: set[str] = set()
        self.fail_writes = False
        self.block_checks = 0

    def lookup_or_create_application(self, name: str, category: Category) -> int:
        if self.fail_writes:
            return -1
        entry = self.applications.setdefault(name, (len(self.applications) + 1, category))
        return entry[0]

    def lookup_or_create_website(self, domain: str, category: Category) -> int:
        if self.fail_writes:
            raise RuntimeError("database is locked")
        entry = self.websites.setdefault(domain, (len(self.websites) + 1, category))
        return entry[0]

    def append_activity_record(self, app_id, site_id, start_time, end_time, duration_seconds):
        if app_id is not None:
            label = next(n for n, (i, _) in self.applications.items() if i == app_id)
        else:
            label = next(n for n, (i, _) in self.websites.items() if i == site_id)
        self.records.append(
            {
                "label": label,
                "app_id": app_id,
                "site_id": site_id,
                "start_time": start_time,
                "end_time": end_time,
                "duration_seconds": duration_seconds,
            }
        )

    def is_focus_mode_enabled(self) -> bool:
        return self.focus_mode

    def is_application_blocked(self, name: str) -> bool:
        self.block_checks += 1
        return name in self.blocked_apps

    def is_website_blocked(self, domain: str) -> bool:
        self.block_checks += 1
        return any(domain in blocked for blocked in self.blocked_sites)


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def notify(self, title: str, message: str) -> None:
        if self.fail:
            raise RuntimeError("notification backend unavailable")
        self.sent.append((title, message))


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(datetime(2024, 5, 6, 9, 0, 0))


@pytest.fixture
def inspector() -> ScriptedInspector:
    return ScriptedInspector()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def settings() -> TrackerSettings:
    return TrackerSettings(poll_interval=timedelta(seconds=60))


@pytest.fixture
def tracker(inspector, store, notifier, settings, clock) -> SessionTracker:
    return SessionTracker(inspector, store, notifier, settings, clock=clock)


@pytest.fixture
def tick(tracker, inspector, clock):
    """Advance the clock one poll period and run a tick observing ``executable``."""

    def _tick(executable: Optional[str], title: Optional[str] = None, seconds: float = 4) -> None:
        clock.advance(seconds)
        inspector.push(executable, title)
        tracker.poll_once()

    return _tick
