"""
Tests for RequestThrottle.

A fake monotonic clock advanced by the fake sleep keeps these tests free of
real wall-clock delay.
"""

import pytest
from breathroute.throttle import RequestThrottle


class FakeClock:
    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class TestRequestThrottle:
    """Test suite for RequestThrottle."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def throttle(self, clock):
        return RequestThrottle(0.2, sleep=clock.sleep, monotonic=clock.monotonic)

    def test_first_call_does_not_wait(self, throttle, clock):
        assert throttle.wait() == 0.0
        assert clock.sleeps == []

    def test_back_to_back_calls_are_spaced(self, throttle, clock):
        throttle.wait()
        slept = throttle.wait()

        assert slept == pytest.approx(0.2)
        assert clock.sleeps == [pytest.approx(0.2)]

    def test_partial_wait_after_elapsed_time(self, throttle, clock):
        throttle.wait()
        clock.now += 0.15
        assert throttle.wait() == pytest.approx(0.05)

    def test_no_wait_after_interval_elapsed(self, throttle, clock):
        throttle.wait()
        clock.now += 1.0
        assert throttle.wait() == 0.0
        assert clock.sleeps == []

    def test_successive_calls_respect_interval(self, throttle, clock):
        times = []
        for _ in range(5):
            throttle.wait()
            times.append(clock.now)
        gaps = [b - a for a, b in zip(times, times[1:])]
        assert all(gap >= 0.2 - 1e-9 for gap in gaps)

    def test_reset_skips_next_wait(self, throttle, clock):
        throttle.wait()
        throttle.reset()
        assert throttle.wait() == 0.0

    def test_zero_interval_never_sleeps(self, clock):
        throttle = RequestThrottle(0.0, sleep=clock.sleep, monotonic=clock.monotonic)
        for _ in range(3):
            throttle.wait()
        assert clock.sleeps == []

    def test_negative_interval_rejected(self):
        with pytest.raises(ValueError):
            RequestThrottle(-0.1)
