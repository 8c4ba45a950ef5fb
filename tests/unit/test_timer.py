"""
Unit tests for CountdownTimer.
"""

import threading

import pytest

from quizcore.study.timer import CountdownTimer


class CallCounter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


class TestCountdown:
    """Manual ticking."""

    def test_counts_down(self):
        timer = CountdownTimer(10)
        assert timer.tick() is False
        assert timer.tick(3) is False
        assert timer.remaining_seconds == 6
        assert timer.is_active

    def test_fires_exactly_once(self):
        callback = CallCounter()
        timer = CountdownTimer(3600, on_expire=callback)

        fired = [timer.tick() for _ in range(3600)]

        assert fired.count(True) == 1
        assert fired[-1] is True
        assert callback.calls == 1
        assert timer.expired
        assert timer.remaining_seconds == 0

        # Further ticks are no-ops
        assert timer.tick() is False
        assert callback.calls == 1

    def test_overshoot_clamps_to_zero(self):
        callback = CallCounter()
        timer = CountdownTimer(5, on_expire=callback)
        assert timer.tick(60) is True
        assert timer.remaining_seconds == 0
        assert callback.calls == 1

    def test_negative_duration_rejected(self):
        with pytest.raises(ValueError):
            CountdownTimer(-1)

    def test_format_remaining(self):
        timer = CountdownTimer(3600)
        assert timer.format_remaining() == "60:00"
        timer.tick(3600 - 65)
        assert timer.format_remaining() == "01:05"


class TestCancel:
    """Cancellation."""

    def test_cancel_prevents_expiry(self):
        callback = CallCounter()
        timer = CountdownTimer(2, on_expire=callback)

        assert timer.cancel() is True
        assert timer.tick(5) is False
        assert callback.calls == 0
        assert timer.cancelled
        assert not timer.expired

    def test_cancel_twice(self):
        timer = CountdownTimer(2)
        assert timer.cancel() is True
        assert timer.cancel() is False

    def test_cancel_after_expiry(self):
        timer = CountdownTimer(1)
        timer.tick()
        assert timer.cancel() is False
        assert not timer.cancelled


class TestRealtime:
    """Background driver."""

    def test_realtime_expiry(self):
        done = threading.Event()
        timer = CountdownTimer(2, on_expire=done.set)

        timer.start_realtime(interval=0.01)

        assert done.wait(timeout=5)
        assert timer.expired

    def test_cancel_stops_realtime(self):
        done = threading.Event()
        timer = CountdownTimer(3600, on_expire=done.set)

        timer.start_realtime(interval=0.01)
        timer.cancel()

        assert not done.wait(timeout=0.1)
        assert timer.cancelled
