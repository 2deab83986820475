"""
Progress Channel: ordered stream of ProgressSnapshot events.

The traversal engine writes to a channel; exactly one subscriber consumes
it. Snapshots are delivered synchronously in emission order, so the
subscriber never sees them reordered.

Two subscribers exist:
- the Session Tracker (see SessionTracker.subscriber_for), used by the API
- console_subscriber, used by the command line
"""

from typing import Callable, List, Optional

from src.core.logging import get_logger
from src.scraper.models import JobStatus, PlaceRecord, ProgressSnapshot

logger = get_logger(__name__)

Subscriber = Callable[[ProgressSnapshot], None]


class ProgressChannel:
    """
    Single-subscriber progress stream.

    Example:
        >>> channel = ProgressChannel(console_subscriber)
        >>> channel.emit(ProgressSnapshot(current=0, total=5, message="Launching browser..."))
    """

    def __init__(self, subscriber: Subscriber):
        self._subscriber = subscriber
        self._last: Optional[ProgressSnapshot] = None
        self._emitted = 0

    @property
    def last(self) -> Optional[ProgressSnapshot]:
        return self._last

    @property
    def emitted(self) -> int:
        return self._emitted

    def emit(self, snapshot: ProgressSnapshot) -> None:
        self._last = snapshot
        self._emitted += 1
        try:
            self._subscriber(snapshot)
        except Exception as e:
            # A broken subscriber must not take the job down with it
            logger.error(f"Progress subscriber failed: {e}")

    def running(self, current: int, total: int, message: str) -> None:
        self.emit(ProgressSnapshot(current=current, total=total, message=message))

    def completed(self, results: List[PlaceRecord], total: int, message: str) -> None:
        self.emit(ProgressSnapshot(
            current=len(results),
            total=total,
            message=message,
            status=JobStatus.COMPLETED,
            results=list(results),
        ))

    def failed(self, error: str, results: List[PlaceRecord], total: int, message: str = "Error occurred") -> None:
        self.emit(ProgressSnapshot(
            current=len(results),
            total=total,
            message=message,
            status=JobStatus.ERROR,
            results=list(results),
            error=error,
        ))


def console_subscriber(snapshot: ProgressSnapshot) -> None:
    """Print progress lines for command line runs."""
    if snapshot.status is JobStatus.ERROR:
        print(f"[error] {snapshot.message}: {snapshot.error}", flush=True)
    else:
        print(f"[{snapshot.current}/{snapshot.total}] {snapshot.message}", flush=True)
