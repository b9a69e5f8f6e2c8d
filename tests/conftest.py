"""Shared pytest fixtures for logshare tests.

- Stores are real SQLite files under tmp_path; no shared state between tests
- ManualExecutor runs background jobs only when a test asks it to
- FakeTimerFactory replaces threading.Timer so debounce windows elapse on demand
- FilterBuilders use a fixed UTC clock so time-range filters are deterministic
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Tuple

import pytest

CURRENT_SESSION = "session-current"
PREVIOUS_SESSION = "session-previous"
FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# ── Concurrency doubles ──────────────────────────────────────────────────────────

class ManualExecutor:
    """Executor double that queues submissions until run_next()/run_all()."""

    def __init__(self) -> None:
        self.pending: List[Tuple[Callable[..., Any], tuple, dict]] = []
        self.submitted = 0

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self.pending.append((fn, args, kwargs))
        self.submitted += 1

    def run_next(self) -> None:
        fn, args, kwargs = self.pending.pop(0)
        fn(*args, **kwargs)

    def run_all(self) -> None:
        while self.pending:
            self.run_next()

    def shutdown(self, wait: bool = True) -> None:
        self.pending.clear()


class FakeTimer:
    """threading.Timer stand-in fired explicitly by tests."""

    def __init__(self, interval, function, args=None, kwargs=None) -> None:
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function(*self.args, **self.kwargs)


class FakeTimerFactory:
    """Callable recording every FakeTimer it creates."""

    def __init__(self) -> None:
        self.timers: List[FakeTimer] = []

    def __call__(self, interval, function, args=None, kwargs=None) -> FakeTimer:
        timer = FakeTimer(interval, function, args=args, kwargs=kwargs)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> List[FakeTimer]:
        return [t for t in self.timers if t.started and not t.cancelled]

    def fire_active(self) -> None:
        for timer in self.active:
            timer.fire()


@pytest.fixture
def manual_executor():
    return ManualExecutor()


@pytest.fixture
def fake_timers():
    return FakeTimerFactory()


# ── Configuration ────────────────────────────────────────────────────────────────

@pytest.fixture
def share_config(tmp_path):
    """ShareConfig isolated to tmp_path (temp root and settings file)."""
    from config.settings import ShareConfig

    return ShareConfig(
        debounce_seconds=0.5,
        temp_root=str(tmp_path / "exports-tmp"),
        settings_path=str(tmp_path / "settings" / "sharing.json"),
        log_level="WARNING",
    )


@pytest.fixture
def fixed_builder():
    """FilterBuilder pinned to FIXED_NOW with UTC as the local zone."""
    from logshare.analysis.filter_builder import FilterBuilder

    return FilterBuilder(clock=lambda: FIXED_NOW, zone=timezone.utc)


@pytest.fixture
def logshare_caplog(caplog, monkeypatch):
    """caplog that still sees logshare records after configure_logging() ran."""
    monkeypatch.setattr(logging.getLogger("logshare"), "propagate", True)
    return caplog


# ── Stores ───────────────────────────────────────────────────────────────────────

@pytest.fixture
def empty_store(tmp_path):
    from logshare.clients.sqlite_store import SQLiteLogStore

    store = SQLiteLogStore(
        tmp_path / "store" / "logs.sqlite",
        session_id=CURRENT_SESSION,
        app_info={"name": "logshare-tests", "version": "1.0"},
    )
    yield store
    store.close()


@pytest.fixture
def scenario_store(empty_store):
    """3 records today (2 error, 1 debug) and 5 records from yesterday."""
    from logshare.models.options import SeverityLevel

    today = FIXED_NOW.replace(hour=9)
    yesterday = today - timedelta(days=1)

    empty_store.store_message("disk almost full", level=SeverityLevel.ERROR, created_at=today)
    empty_store.store_message(
        "cache warmed", level=SeverityLevel.DEBUG, created_at=today + timedelta(minutes=1)
    )
    empty_store.store_message(
        "payment declined", level=SeverityLevel.ERROR, created_at=today + timedelta(minutes=2)
    )
    for i in range(5):
        level = SeverityLevel.ERROR if i % 2 == 0 else SeverityLevel.INFO
        empty_store.store_message(
            f"old message {i}",
            level=level,
            created_at=yesterday + timedelta(minutes=i),
            session_id=PREVIOUS_SESSION,
        )
    return empty_store


@pytest.fixture
def network_store(empty_store):
    """Store with one failed and one successful network task plus plain messages."""
    from logshare.models.options import SeverityLevel

    base = FIXED_NOW - timedelta(minutes=30)
    empty_store.store_message("app launched", level=SeverityLevel.INFO, created_at=base)
    failed = empty_store.store_task(
        "https://api.example.com/orders",
        method="POST",
        status_code=500,
        duration=0.25,
        request_body='{"id": 1}',
        response_body="internal error",
        created_at=base + timedelta(minutes=1),
    )
    empty_store.store_message(
        "retrying order submission",
        level=SeverityLevel.WARNING,
        task_id=failed,
        created_at=base + timedelta(minutes=2),
    )
    empty_store.store_task(
        "https://api.example.com/profile",
        status_code=200,
        duration=0.05,
        created_at=base + timedelta(minutes=3),
    )
    return empty_store
