"""
Session tracking for extraction jobs.

This module turns long-running scrapes into pollable units of work:
- progress: single-subscriber progress channel and console subscriber
- models: Session state served to pollers
- tracker: thread-safe session registry with TTL eviction
- jobs: background job runner with cancellation (requires playwright)
"""

from src.sessions.progress import ProgressChannel, console_subscriber
from src.sessions.models import Session
from src.sessions.tracker import SessionTracker, new_session_id


def __getattr__(name):
    """Lazy loading for the playwright-dependent job runner."""
    if name in ("JobRunner", "CancelOutcome"):
        from src.sessions import jobs
        return getattr(jobs, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ProgressChannel",
    "console_subscriber",
    "Session",
    "SessionTracker",
    "new_session_id",
    "JobRunner",
    "CancelOutcome",
]
