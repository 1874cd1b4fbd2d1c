"""
Tests for the time-bounded regeneration tracker.
"""
import pytest

from worksheet_studio.synthesis.layout import RegenerationTracker


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker(clock):
    return RegenerationTracker(timeout_s=8.0, clock=clock)


def test_start_marks_pending(tracker):
    assert tracker.start("s1") is True
    assert tracker.is_pending("s1")
    assert not tracker.is_pending("s2")


def test_second_start_while_pending_is_refused(tracker):
    tracker.start("s1")
    assert tracker.start("s1") is False


def test_pending_marker_expires_after_timeout(tracker, clock):
    """The marker clears itself even if no completion ever arrives."""
    tracker.start("s1")

    clock.advance(7.5)
    assert tracker.is_pending("s1")

    clock.advance(0.5)
    assert not tracker.is_pending("s1")
    assert tracker.start("s1") is True


def test_complete_clears_early(tracker):
    tracker.start("s1")
    tracker.complete("s1")
    assert not tracker.is_pending("s1")


def test_complete_unknown_section_is_noop(tracker):
    tracker.complete("never-started")
    assert tracker.pending_ids() == ()


def test_pending_ids_in_request_order(tracker, clock):
    tracker.start("b")
    clock.advance(1)
    tracker.start("a")
    assert tracker.pending_ids() == ("b", "a")

    tracker.clear()
    assert tracker.pending_ids() == ()


def test_invalid_timeout_rejected():
    with pytest.raises(ValueError):
        RegenerationTracker(timeout_s=0)
