"""
Session Tracker: in-memory registry of job sessions.

Maps an opaque job identifier to the latest progress of that job. The
progress channel of the job is the only writer; pollers only read copies.

Rules enforced here:
- status moves only running -> completed or running -> error
- once terminal, a session ignores further updates
- read-modify-write of one session is serialized by that session's lock
- finished sessions older than the TTL are evicted (TTL 0 keeps them)
"""

import threading
import time
import uuid
from typing import Callable, Dict, List, Optional

from src.core.logging import get_logger
from src.scraper.models import JobStatus, ProgressSnapshot
from src.sessions.models import Session

logger = get_logger(__name__)


def new_session_id() -> str:
    """
    Opaque job identifier.

    Example:
        >>> new_session_id()
        'session_1760856180123_9f2c1ab04'
    """
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class SessionTracker:
    """
    Thread-safe registry of sessions.

    Example:
        >>> tracker = SessionTracker()
        >>> job_id = tracker.create_session(total=200)
        >>> tracker.get(job_id).status
        <JobStatus.RUNNING: 'running'>
    """

    def __init__(self, ttl_seconds: float = 0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._sessions)

    def __contains__(self, job_id: str) -> bool:
        with self._registry_lock:
            return job_id in self._sessions

    def _entry(self, job_id: str):
        with self._registry_lock:
            return self._sessions.get(job_id), self._locks.get(job_id)

    def create_session(self, total: int, message: str = "Starting scraper...") -> str:
        """Register a new running session and return its id."""
        self.evict_expired()
        now = self._clock()
        job_id = new_session_id()
        session = Session(
            session_id=job_id,
            total=total,
            message=message,
            created_at=now,
            updated_at=now,
        )
        with self._registry_lock:
            self._sessions[job_id] = session
            self._locks[job_id] = threading.Lock()
        logger.info(f"Session {job_id} created (total={total})")
        return job_id

    def update(self, job_id: str, snapshot: ProgressSnapshot) -> bool:
        """
        Fold a snapshot into the stored session.

        Returns:
            False if the session is unknown or already terminal
        """
        session, lock = self._entry(job_id)
        if session is None:
            logger.warning(f"Update for unknown session {job_id} dropped")
            return False

        with lock:
            if session.is_terminal:
                logger.debug(f"Session {job_id} already {session.status.value}; update ignored")
                return False
            session.apply(snapshot, self._clock())

        if session.is_terminal:
            logger.info(f"Session {job_id} finished: {session.status.value} ({session.progress} places)")
        return True

    def fail(self, job_id: str, error: str) -> bool:
        """Force a still-running session into the error state."""
        session, lock = self._entry(job_id)
        if session is None:
            return False
        with lock:
            if session.is_terminal:
                return False
            session.apply(
                ProgressSnapshot(
                    current=session.progress,
                    total=session.total,
                    message="Error occurred",
                    status=JobStatus.ERROR,
                    error=error,
                ),
                self._clock(),
            )
        return True

    def get(self, job_id: str) -> Optional[Session]:
        """Copy of the session, or None when the id is unknown."""
        session, lock = self._entry(job_id)
        if session is None:
            return None
        with lock:
            return session.model_copy(deep=True)

    def subscriber_for(self, job_id: str) -> Callable[[ProgressSnapshot], None]:
        """Progress channel subscriber that writes into this session."""
        def _subscriber(snapshot: ProgressSnapshot) -> None:
            self.update(job_id, snapshot)
        return _subscriber

    def evict_expired(self) -> List[str]:
        """Drop terminal sessions that finished more than ``ttl_seconds`` ago."""
        if self.ttl_seconds <= 0:
            return []

        cutoff = self._clock() - self.ttl_seconds
        with self._registry_lock:
            expired = [
                job_id for job_id, s in self._sessions.items()
                if s.finished_at is not None and s.finished_at <= cutoff
            ]
            for job_id in expired:
                del self._sessions[job_id]
                self._locks.pop(job_id, None)

        if expired:
            logger.info(f"Evicted {len(expired)} finished session(s)")
        return expired
