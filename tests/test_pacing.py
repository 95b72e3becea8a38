"""
Tests for request pacing.

Tests cover:
- Random pauses (bounds, rounds)
- Fixed spacing between calls
- Building pacers from settings
"""

import random
import threading
import time
import pytest
from finformula.config import Settings
from finformula.pacing import (
    FixedIntervalPacing,
    NoPacing,
    RandomPacing,
    pacer_from_settings,
)


class FakeClock:
    """Monotonic clock advanced by the fake sleep."""

    def __init__(self, start=100.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class TestRandomPacing:
    """Tests for RandomPacing."""

    def test_sleeps_each_round_within_bounds(self):
        """Test two pauses between 1 and 11 seconds by default."""
        sleeps = []
        pacer = RandomPacing(sleep=sleeps.append, rng=random.Random(7))
        pacer.wait()

        assert len(sleeps) == 2
        assert all(1.0 <= s <= 11.0 for s in sleeps)

    def test_rounds(self):
        """Test the number of pauses follows rounds."""
        sleeps = []
        pacer = RandomPacing(0.0, 0.5, rounds=3, sleep=sleeps.append, rng=random.Random(1))
        pacer.wait()
        pacer.wait()
        assert len(sleeps) == 6

    def test_deterministic_with_seeded_rng(self):
        """Test a seeded generator reproduces the same pauses."""
        first, second = [], []
        RandomPacing(sleep=first.append, rng=random.Random(3)).wait()
        RandomPacing(sleep=second.append, rng=random.Random(3)).wait()
        assert first == second

    def test_invalid_bounds_raise(self):
        """Test inverted bounds raise ValueError."""
        with pytest.raises(ValueError, match="pause bounds"):
            RandomPacing(5.0, 1.0)

    def test_invalid_rounds_raise(self):
        """Test zero rounds raise ValueError."""
        with pytest.raises(ValueError, match="rounds"):
            RandomPacing(rounds=0)


class TestFixedIntervalPacing:
    """Tests for FixedIntervalPacing."""

    def test_first_call_does_not_wait(self):
        """Test the first call returns immediately."""
        clock = FakeClock()
        pacer = FixedIntervalPacing(2.0, clock=clock, sleep=clock.sleep)
        pacer.wait()
        assert clock.sleeps == []

    def test_waits_remaining_interval(self):
        """Test a quick second call sleeps for the remaining time."""
        clock = FakeClock()
        pacer = FixedIntervalPacing(2.0, clock=clock, sleep=clock.sleep)
        pacer.wait()
        clock.now += 0.5
        pacer.wait()
        assert clock.sleeps == [pytest.approx(1.5)]

    def test_no_wait_after_interval_elapsed(self):
        """Test no sleep when enough time has passed."""
        clock = FakeClock()
        pacer = FixedIntervalPacing(2.0, clock=clock, sleep=clock.sleep)
        pacer.wait()
        clock.now += 3.0
        pacer.wait()
        assert clock.sleeps == []

    def test_spacing_measured_from_last_call(self):
        """Test consecutive calls are each spaced by the interval."""
        clock = FakeClock()
        pacer = FixedIntervalPacing(1.0, clock=clock, sleep=clock.sleep)
        for _ in range(3):
            pacer.wait()
        assert clock.sleeps == [pytest.approx(1.0), pytest.approx(1.0)]

    def test_concurrent_callers_are_spaced(self):
        """Test calls from several threads still keep the interval between them."""
        clock = FakeClock()

        def slow_sleep(seconds):
            time.sleep(0.01)
            clock.sleep(seconds)

        pacer = FixedIntervalPacing(1.0, clock=clock, sleep=slow_sleep)
        threads = [threading.Thread(target=pacer.wait) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert clock.sleeps == [pytest.approx(1.0)] * 4
        assert clock.now == pytest.approx(104.0)

    def test_invalid_interval_raises(self):
        """Test a non-positive interval raises ValueError."""
        with pytest.raises(ValueError, match="min_interval"):
            FixedIntervalPacing(0)


class TestPacerFromSettings:
    """Tests for pacer_from_settings."""

    def test_default_is_random(self):
        """Test default settings give the two-round random pacer."""
        pacer = pacer_from_settings(Settings())
        assert isinstance(pacer, RandomPacing)
        assert (pacer.low, pacer.high, pacer.rounds) == (1.0, 11.0, 2)

    def test_fixed(self):
        """Test the fixed policy."""
        pacer = pacer_from_settings(Settings(pacing="fixed", min_interval_seconds=0.25))
        assert isinstance(pacer, FixedIntervalPacing)
        assert pacer.min_interval == 0.25

    def test_none(self):
        """Test the none policy."""
        assert isinstance(pacer_from_settings(Settings(pacing="none")), NoPacing)
