"""Tests for Deadline and the clock abstraction."""

from __future__ import annotations

import time

import pytest

from sweep.execution.timeout import Deadline, MonotonicClock


class TestDeadline:
    def test_starts_at_clock_now(self, fake_clock):
        deadline = Deadline.start(30.0, fake_clock)
        assert deadline.start_time == 1000.0
        assert deadline.deadline == 1030.0

    def test_remaining_and_elapsed(self, fake_clock):
        deadline = Deadline.start(30.0, fake_clock)
        fake_clock.advance(12.0)
        assert deadline.remaining() == pytest.approx(18.0)
        assert deadline.elapsed == pytest.approx(12.0)
        assert not deadline.is_expired()

    def test_expires_exactly_at_deadline(self, fake_clock):
        deadline = Deadline.start(5.0, fake_clock)
        fake_clock.advance(5.0)
        assert deadline.is_expired()
        assert deadline.remaining() == 0

    def test_remaining_goes_negative(self, fake_clock):
        deadline = Deadline.start(5.0, fake_clock)
        fake_clock.advance(7.0)
        assert deadline.remaining() == pytest.approx(-2.0)

    @pytest.mark.parametrize("timeout", [0, -1])
    def test_non_positive_timeout_rejected(self, timeout):
        with pytest.raises(ValueError, match="positive"):
            Deadline(timeout_seconds=timeout)


class TestNextWait:
    def test_poll_interval_when_time_left(self, fake_clock):
        deadline = Deadline.start(30.0, fake_clock)
        assert deadline.next_wait(0.5) == 0.5

    def test_clamped_to_remaining(self, fake_clock):
        deadline = Deadline.start(30.0, fake_clock)
        fake_clock.advance(29.8)
        assert deadline.next_wait(0.5) == pytest.approx(0.2)

    def test_zero_once_expired(self, fake_clock):
        deadline = Deadline.start(1.0, fake_clock)
        fake_clock.advance(3.0)
        assert deadline.next_wait(0.5) == 0.0


class TestMonotonicClock:
    def test_now_is_monotonic(self):
        clock = MonotonicClock()
        first = clock.now()
        clock.sleep(0.01)
        assert clock.now() > first

    def test_zero_sleep_returns_immediately(self):
        started = time.monotonic()
        MonotonicClock().sleep(0)
        assert time.monotonic() - started < 0.05
