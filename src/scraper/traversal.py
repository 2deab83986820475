"""
Traversal Controller: walks the list entry by entry and collects places.

State machine per job: idle -> running -> completed | error.

While running, each index is one step: locate the entry, open it, confirm
the detail URL, de-duplicate, extract, append. Two circuit breakers bound
the run when the heuristics stop working:

- consecutive failures (entry missing or step raised), default 3
- consecutive duplicate detail URLs, default 5

Either breaker ends the loop, not the job: the job still completes with
whatever was collected. Only failures outside the per-item scope (initial
navigation, list container never appearing) end the job in error.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set

from playwright.async_api import Page

from src.core.error_logger import get_error_logger
from src.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage
from src.core.logging import get_logger
from src.scraper.errors import ListContainerNotFoundError
from src.scraper.extractor import PLACEHOLDER_NAME, DetailExtractor, is_usable_name
from src.scraper.locator import ListLocator
from src.scraper.models import PlaceRecord
from src.scraper.navigator import EntryNavigator, is_detail_url
from src.scraper.scripts import LIST_CONTAINER_SELECTOR
from src.sessions.progress import ProgressChannel
from src.utils.retry import RetryConfig, retry_async_with_backoff
from src.utils.url_utils import extract_domain

logger = get_logger(__name__)


class StopReason(str, Enum):
    RANGE_EXHAUSTED = "range_exhausted"
    FAILURE_THRESHOLD = "failure_threshold"
    DUPLICATE_THRESHOLD = "duplicate_threshold"


class StepOutcome(str, Enum):
    COLLECTED = "collected"
    MISSING = "missing"
    INCONCLUSIVE = "inconclusive"
    DUPLICATE = "duplicate"
    UNNAMED = "unnamed"
    FAILED = "failed"


@dataclass
class TraversalLimits:
    max_consecutive_failures: int = 3
    max_duplicates: int = 5
    scroll_every: int = 3
    after_collect_ms: int = 150
    sidebar_timeout_ms: int = 15000
    sidebar_settle_ms: int = 1000
    navigation_retry: RetryConfig = field(
        default_factory=lambda: RetryConfig(max_retries=2, base_delay=1.0, max_delay=5.0)
    )


@dataclass
class TraversalState:
    """Mutable state of one run; lives only as long as the job."""
    total_target: int
    index: int = 0
    results: List[PlaceRecord] = field(default_factory=list)
    urls_seen: Set[str] = field(default_factory=set)
    consecutive_failures: int = 0
    duplicate_count: int = 0
    stop_reason: Optional[StopReason] = None


def reconcile_total(estimated: int, max_items: int) -> int:
    """Entries to visit: the estimate capped at max_items, or max_items if unknown."""
    return min(estimated, max_items) if estimated > 0 else max_items


class TraversalController:
    """
    Drives locator, navigator and extractor over one list page.

    The page is passed in explicitly and owned by the caller; the controller
    never launches or closes a browser. ``stage`` names the phase in
    progress, so a failure can be attributed to it.

    Example:
        >>> controller = TraversalController(page, ProgressChannel(console_subscriber))
        >>> places = await controller.run("https://maps.app.goo.gl/abc", max_items=50)
    """

    def __init__(
        self,
        page: Page,
        channel: ProgressChannel,
        limits: Optional[TraversalLimits] = None,
        locator: Optional[ListLocator] = None,
        navigator: Optional[EntryNavigator] = None,
        extractor: Optional[DetailExtractor] = None,
        placeholder_name: str = PLACEHOLDER_NAME,
        session_id: Optional[str] = None,
    ):
        self.page = page
        self.channel = channel
        self.limits = limits or TraversalLimits()
        self.locator = locator or ListLocator(page)
        self.navigator = navigator or EntryNavigator(page)
        self.extractor = extractor or DetailExtractor(page, placeholder=placeholder_name)
        self.placeholder_name = placeholder_name
        self.session_id = session_id
        self.state: Optional[TraversalState] = None
        self.stage = ErrorStage.NAVIGATE_LIST
        self._domain = "unknown"

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------

    async def open_list(self, list_url: str, max_items: int) -> None:
        """Navigate to the list and wait for its container. Failures are fatal."""
        self.channel.running(0, max_items, "Navigating to Google Maps list...")
        self.stage = ErrorStage.NAVIGATE_LIST
        await retry_async_with_backoff(
            lambda: self.page.goto(list_url, wait_until="domcontentloaded"),
            config=self.limits.navigation_retry,
        )

        self.channel.running(0, max_items, "Waiting for sidebar to load...")
        self.stage = ErrorStage.WAIT_FOR_LIST
        try:
            await self.page.wait_for_selector(
                LIST_CONTAINER_SELECTOR, timeout=self.limits.sidebar_timeout_ms
            )
        except Exception as e:
            raise ListContainerNotFoundError(
                f"List container did not appear within {self.limits.sidebar_timeout_ms}ms: {e}"
            ) from e

        await self.page.wait_for_timeout(self.limits.sidebar_settle_ms)
        await self.navigator.dismiss_dialogs()
        await self.page.wait_for_timeout(200)
        await self.navigator.dismiss_dialogs()

    async def detect_total(self, max_items: int) -> int:
        self.channel.running(0, max_items, "Detecting number of items in list...")
        self.stage = ErrorStage.COUNT_ENTRIES
        estimated = await self.locator.estimate_total_count()
        total = reconcile_total(estimated, max_items)
        if estimated > 0:
            message = f"Found {estimated} items in list. Scraping {total} items..."
        else:
            message = f"Could not detect item count. Will attempt to scrape up to {max_items} items..."
        logger.info(message)
        self.channel.running(0, total, message)
        return total

    # ------------------------------------------------------------------
    # Per-item step
    # ------------------------------------------------------------------

    def _record_failure(self, state: TraversalState) -> None:
        state.consecutive_failures += 1
        if state.consecutive_failures >= self.limits.max_consecutive_failures:
            state.stop_reason = StopReason.FAILURE_THRESHOLD

    async def _visit(self, state: TraversalState, i: int) -> StepOutcome:
        self.stage = ErrorStage.LOCATE_ENTRY
        if i > 0 and i % self.limits.scroll_every == 0:
            await self.locator.scroll_down()

        previous_url = self.page.url
        entry = await self.locator.entry_at(i)
        if entry is None:
            self._record_failure(state)
            if state.stop_reason is None:
                await self.locator.scroll_down()
            return StepOutcome.MISSING

        self.stage = ErrorStage.OPEN_ENTRY
        await self.navigator.open(entry)
        place_url = self.page.url
        if place_url == previous_url or not is_detail_url(place_url, self.navigator.detail_marker):
            # Usually a non-entry element was hit; neither counter moves
            return StepOutcome.INCONCLUSIVE

        if place_url in state.urls_seen:
            state.duplicate_count += 1
            if state.duplicate_count >= self.limits.max_duplicates:
                state.stop_reason = StopReason.DUPLICATE_THRESHOLD
            return StepOutcome.DUPLICATE

        state.consecutive_failures = 0
        state.duplicate_count = 0
        state.urls_seen.add(place_url)

        self.stage = ErrorStage.EXTRACT_DETAILS
        record = await self.extractor.extract()
        if not is_usable_name(record.name, self.placeholder_name):
            logger.debug(f"Discarding unnamed place at {place_url}")
            return StepOutcome.UNNAMED

        state.results.append(record)
        logger.info(f"Collected: {record.name} ({len(state.results)} total)")
        self.channel.running(
            len(state.results), state.total_target,
            f"Collected: {record.name} ({len(state.results)} total)",
        )
        await self.page.wait_for_timeout(self.limits.after_collect_ms)
        return StepOutcome.COLLECTED

    async def step(self, state: TraversalState, i: int) -> StepOutcome:
        """Process index ``i``; per-item errors are absorbed into the failure counter."""
        state.index = i
        self.channel.running(
            len(state.results), state.total_target,
            f"Processing item {i + 1}/{state.total_target}...",
        )
        try:
            return await self._visit(state, i)
        except Exception as e:
            self._record_failure(state)
            logger.warning(f"Item {i + 1} failed ({state.consecutive_failures} in a row): {e}")
            get_error_logger().log_exception(
                e,
                component=ErrorComponent.SCRAPER,
                stage=self.stage,
                domain=self._domain,
                url=self.page.url,
                session_id=self.session_id,
                severity=ErrorSeverity.WARNING,
                metadata={"index": i, "consecutive_failures": state.consecutive_failures},
            )
            return StepOutcome.FAILED

    async def traverse(self, total: int) -> List[PlaceRecord]:
        """Visit indices ``[0, total)`` until the range or a circuit breaker ends the loop."""
        state = TraversalState(total_target=total)
        self.state = state
        self.stage = ErrorStage.TRAVERSE

        for i in range(total):
            await self.step(state, i)
            if state.stop_reason is not None:
                break
        else:
            state.stop_reason = StopReason.RANGE_EXHAUSTED

        logger.info(f"Traversal stopped: {state.stop_reason.value}, {len(state.results)} places collected")
        return state.results

    # ------------------------------------------------------------------
    # Whole run
    # ------------------------------------------------------------------

    @property
    def collected(self) -> List[PlaceRecord]:
        return list(self.state.results) if self.state else []

    async def run(self, list_url: str, max_items: int) -> List[PlaceRecord]:
        """
        Open the list, traverse it and emit the terminal completed snapshot.

        Fatal failures propagate; the caller reports them.
        """
        self._domain = extract_domain(list_url) or "unknown"
        await self.open_list(list_url, max_items)
        total = await self.detect_total(max_items)
        results = await self.traverse(total)
        self.channel.completed(results, total, f"Done! Collected {len(results)} places")
        return results
