"""Unit tests for logshare.sharing.debounce.Debouncer."""

from __future__ import annotations

import threading

from logshare.sharing.debounce import Debouncer


class TestDebouncer:
    def setup_method(self):
        self.delivered = []

    def test_burst_delivers_last_value_once(self, fake_timers):
        debouncer = Debouncer(0.5, self.delivered.append, timer_factory=fake_timers)

        for value in ("a", "b", "c"):
            debouncer.submit(value)

        assert len(fake_timers.active) == 1
        assert fake_timers.timers[0].cancelled and fake_timers.timers[1].cancelled
        fake_timers.fire_active()

        assert self.delivered == ["c"]

        fake_timers.timers[2].fire()
        assert self.delivered == ["c"]

    def test_timers_are_daemon(self, fake_timers):
        Debouncer(0.5, self.delivered.append, timer_factory=fake_timers).submit(1)
        assert fake_timers.timers[0].daemon
        assert fake_timers.timers[0].interval == 0.5

    def test_stale_timer_fire_ignored(self, fake_timers):
        debouncer = Debouncer(0.5, self.delivered.append, timer_factory=fake_timers)
        debouncer.submit("first")
        debouncer.submit("second")

        # A cancelled timer that was already running still calls back
        fake_timers.timers[0].fire()
        assert self.delivered == []

        fake_timers.timers[1].fire()
        assert self.delivered == ["second"]

    def test_cancel_drops_pending(self, fake_timers):
        debouncer = Debouncer(0.5, self.delivered.append, timer_factory=fake_timers)
        debouncer.submit("x")
        debouncer.cancel()
        fake_timers.timers[0].fire()

        assert self.delivered == []

        debouncer.submit("y")
        fake_timers.fire_active()
        assert self.delivered == ["y"]

    def test_real_timer(self):
        done = threading.Event()
        received = []

        def callback(value):
            received.append(value)
            done.set()

        debouncer = Debouncer(0.01, callback)
        debouncer.submit(1)
        debouncer.submit(2)

        assert done.wait(2.0)
        assert received == [2]
