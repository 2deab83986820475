"""
Job Runner

Starts extraction jobs in the background and returns their session id at
once, so clients poll for progress instead of holding a request open.

Each job is one asyncio task owning its own browser. Cancelling the task
interrupts the job at its next suspension point.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from src.core.config import Config, get_config
from src.core.logging import get_logger
from src.db.supabase_client import upsert_places
from src.scraper.engine import scrape_list
from src.scraper.models import PlaceRecord
from src.sessions.progress import ProgressChannel
from src.sessions.tracker import SessionTracker

logger = get_logger(__name__)

ScrapeFn = Callable[..., Awaitable[List[PlaceRecord]]]


class CancelOutcome(str, Enum):
    CANCELLED = "cancelled"
    NOT_FOUND = "not_found"
    ALREADY_FINISHED = "already_finished"


class JobRunner:
    """
    Background execution of scrape jobs tracked by a SessionTracker.

    Example:
        >>> runner = JobRunner(SessionTracker())
        >>> job_id = runner.submit("https://maps.app.goo.gl/abc", max_items=20)
        >>> runner.tracker.get(job_id).status
        <JobStatus.RUNNING: 'running'>
    """

    def __init__(
        self,
        tracker: SessionTracker,
        config: Optional[Config] = None,
        scrape: ScrapeFn = scrape_list,
    ):
        self.tracker = tracker
        self.config = config or get_config()
        self._scrape = scrape
        self._tasks: Dict[str, asyncio.Task] = {}

    def submit(self, list_url: str, max_items: int) -> str:
        """
        Create a session and start the job on the running event loop.

        Returns:
            Session id for status polling
        """
        job_id = self.tracker.create_session(total=max_items)
        task = asyncio.get_running_loop().create_task(self._run(job_id, list_url, max_items))
        self._tasks[job_id] = task
        task.add_done_callback(lambda _t, jid=job_id: self._finished(jid))
        logger.info(f"Job {job_id} started for {list_url} (max_items={max_items})")
        return job_id

    def _finished(self, job_id: str) -> None:
        self._tasks.pop(job_id, None)
        # A task cancelled before its first step never runs _run's handlers
        self.tracker.fail(job_id, "Job cancelled")

    async def _run(self, job_id: str, list_url: str, max_items: int) -> None:
        channel = ProgressChannel(self.tracker.subscriber_for(job_id))
        try:
            results = await self._scrape(
                list_url, max_items, channel, config=self.config, session_id=job_id
            )
            upsert_places(results, list_url, session_id=job_id)
        except asyncio.CancelledError:
            self.tracker.fail(job_id, "Job cancelled")
            logger.info(f"Job {job_id} cancelled")
            raise
        except Exception as e:
            # The engine has normally reported the error snapshot already
            self.tracker.fail(job_id, str(e) or "Unknown error occurred")
            logger.error(f"Job {job_id} failed: {e}")
        else:
            self.tracker.fail(job_id, "Job ended without a final status")

    def is_running(self, job_id: str) -> bool:
        task = self._tasks.get(job_id)
        return task is not None and not task.done()

    def cancel(self, job_id: str) -> CancelOutcome:
        session = self.tracker.get(job_id)
        if session is None:
            return CancelOutcome.NOT_FOUND
        task = self._tasks.get(job_id)
        if session.is_terminal or task is None or task.done():
            return CancelOutcome.ALREADY_FINISHED
        task.cancel()
        logger.info(f"Cancellation requested for job {job_id}")
        return CancelOutcome.CANCELLED

    async def wait(self, job_id: str) -> None:
        """Wait for a job's task to finish (no-op if it already has)."""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel every running job and wait for browsers to close."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
