"""
Unit tests for the progress channel and the session tracker.
"""

import re
import threading

import pytest
from src.scraper.models import JobStatus, PlaceRecord, ProgressSnapshot
from src.sessions.progress import ProgressChannel, console_subscriber
from src.sessions.tracker import SessionTracker, new_session_id


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def completed(results, total=None):
    return ProgressSnapshot(
        current=len(results), total=total if total is not None else len(results),
        message=f"Done! Collected {len(results)} places",
        status=JobStatus.COMPLETED, results=results,
    )


class TestProgressChannel:
    """Tests for ProgressChannel."""

    def test_delivers_in_order(self, channel, snapshots):
        """Test snapshots reach the subscriber in emission order."""
        channel.running(0, 5, "Launching browser...")
        channel.running(1, 5, "Collected: A (1 total)")
        assert [s.message for s in snapshots] == ["Launching browser...", "Collected: A (1 total)"]
        assert channel.emitted == 2
        assert channel.last is snapshots[-1]

    def test_completed_snapshot(self, channel, sample_places):
        """Test completed carries results and their count."""
        channel.completed(sample_places, 5, "Done! Collected 3 places")
        assert channel.last.status is JobStatus.COMPLETED
        assert channel.last.current == 3
        assert channel.last.results == sample_places

    def test_failed_snapshot(self, channel):
        """Test failed carries the error text."""
        channel.failed("boom", [], 5)
        assert channel.last.status is JobStatus.ERROR
        assert channel.last.message == "Error occurred"
        assert channel.last.error == "boom"

    def test_subscriber_errors_contained(self):
        """Test a broken subscriber does not raise into the engine."""
        def broken(snapshot):
            raise RuntimeError("subscriber down")

        channel = ProgressChannel(broken)
        channel.running(0, 1, "Launching browser...")
        assert channel.emitted == 1

    def test_console_subscriber(self, capsys):
        """Test console output lines."""
        console_subscriber(ProgressSnapshot(current=1, total=5, message="Collected: A (1 total)"))
        console_subscriber(ProgressSnapshot(status=JobStatus.ERROR, message="Error occurred", error="boom"))
        out = capsys.readouterr().out
        assert "[1/5] Collected: A (1 total)" in out
        assert "[error] Error occurred: boom" in out


class TestNewSessionId:
    """Tests for new_session_id."""

    def test_format(self):
        """Test ids look like session_<ms>_<9 chars>."""
        assert re.fullmatch(r"session_\d{13,}_[0-9a-f]{9}", new_session_id())

    def test_unique(self):
        """Test ids do not repeat."""
        assert len({new_session_id() for _ in range(200)}) == 200


class TestSessionTracker:
    """Tests for SessionTracker."""

    def test_unknown_id(self):
        """Test unknown ids read as None."""
        assert SessionTracker().get("session_0_missing") is None

    def test_new_session_running(self):
        """Test a session is running with zero progress right after creation."""
        tracker = SessionTracker()
        job_id = tracker.create_session(total=200)
        session = tracker.get(job_id)
        assert session.status is JobStatus.RUNNING
        assert session.progress == 0
        assert session.total == 200
        assert session.message == "Starting scraper..."
        assert job_id in tracker
        assert len(tracker) == 1

    def test_update_folds_snapshot(self):
        """Test updates overwrite the stored state."""
        tracker = SessionTracker()
        job_id = tracker.create_session(total=10)
        assert tracker.update(job_id, ProgressSnapshot(current=3, total=8, message="Processing item 4/8..."))
        session = tracker.get(job_id)
        assert (session.progress, session.total, session.message) == (3, 8, "Processing item 4/8...")

    def test_update_unknown_dropped(self):
        """Test updates for unknown ids are ignored."""
        assert SessionTracker().update("nope", ProgressSnapshot()) is False

    def test_terminal_state_immutable(self, sample_places):
        """Test nothing changes a finished session."""
        tracker = SessionTracker()
        job_id = tracker.create_session(total=3)
        tracker.update(job_id, completed(sample_places))

        assert tracker.update(job_id, ProgressSnapshot(current=0, total=3, message="late")) is False
        assert tracker.fail(job_id, "Job cancelled") is False
        session = tracker.get(job_id)
        assert session.status is JobStatus.COMPLETED
        assert session.message == "Done! Collected 3 places"
        assert len(session.results) == 3

    def test_fail_running_session(self):
        """Test fail forces the error state."""
        tracker = SessionTracker()
        job_id = tracker.create_session(total=3)
        assert tracker.fail(job_id, "Job cancelled") is True
        session = tracker.get(job_id)
        assert session.status is JobStatus.ERROR
        assert session.error == "Job cancelled"

    def test_get_returns_copy(self, sample_places):
        """Test callers cannot mutate stored state."""
        tracker = SessionTracker()
        job_id = tracker.create_session(total=3)
        tracker.get(job_id).message = "tampered"
        assert tracker.get(job_id).message == "Starting scraper..."

    def test_subscriber_for(self):
        """Test the channel subscriber writes into the session."""
        tracker = SessionTracker()
        job_id = tracker.create_session(total=2)
        ProgressChannel(tracker.subscriber_for(job_id)).running(1, 2, "Collected: A (1 total)")
        assert tracker.get(job_id).progress == 1

    def test_concurrent_updates(self):
        """Test concurrent writers never corrupt a session."""
        tracker = SessionTracker()
        job_id = tracker.create_session(total=1000)

        def writer(start):
            for i in range(start, start + 100):
                tracker.update(job_id, ProgressSnapshot(current=i, total=1000, message=f"item {i}"))

        threads = [threading.Thread(target=writer, args=(n * 100,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        session = tracker.get(job_id)
        assert session.message == f"item {session.progress}"


class TestEviction:
    """Tests for TTL eviction of finished sessions."""

    def test_ttl_zero_keeps_everything(self, sample_places):
        """Test TTL 0 never evicts."""
        clock = FakeClock()
        tracker = SessionTracker(ttl_seconds=0, clock=clock)
        job_id = tracker.create_session(total=3)
        tracker.update(job_id, completed(sample_places))
        clock.now += 10 ** 6
        assert tracker.evict_expired() == []
        assert tracker.get(job_id) is not None

    def test_finished_sessions_expire(self, sample_places):
        """Test finished sessions older than the TTL are dropped."""
        clock = FakeClock()
        tracker = SessionTracker(ttl_seconds=60, clock=clock)
        done = tracker.create_session(total=3)
        tracker.update(done, completed(sample_places))

        clock.now += 30
        assert tracker.evict_expired() == []

        clock.now += 31
        assert tracker.evict_expired() == [done]
        assert tracker.get(done) is None

    def test_running_sessions_never_expire(self):
        """Test running jobs are kept regardless of age."""
        clock = FakeClock()
        tracker = SessionTracker(ttl_seconds=1, clock=clock)
        job_id = tracker.create_session(total=3)
        clock.now += 3600
        assert tracker.evict_expired() == []
        assert tracker.get(job_id).status is JobStatus.RUNNING

    def test_create_session_evicts(self, sample_places):
        """Test creating a session sweeps expired ones."""
        clock = FakeClock()
        tracker = SessionTracker(ttl_seconds=5, clock=clock)
        old = tracker.create_session(total=3)
        tracker.update(old, completed([PlaceRecord(name="A", url="https://x/place/A")], total=3))
        clock.now += 10
        tracker.create_session(total=1)
        assert old not in tracker
        assert len(tracker) == 1
