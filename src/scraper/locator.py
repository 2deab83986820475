"""
List Locator: finds list entries in the sidebar and estimates their number.

The locator samples the DOM through in-page scripts, classifies candidates
with src.scraper.heuristics and exposes entries as lightweight references
that are resolved to element handles on demand.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from playwright.async_api import ElementHandle, Page

from src.core.logging import get_logger
from src.scraper.heuristics import Candidate, select_entries
from src.scraper.scripts import (
    CANDIDATE_AT_JS,
    CANDIDATE_SELECTOR,
    COLLECT_CANDIDATES_JS,
    FEED_SELECTOR,
    LIST_CONTAINER_SELECTOR,
    SCROLL_BY_JS,
    SCROLL_TO_BOTTOM_JS,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class EntryRef:
    """
    Opaque reference to a classified list entry.

    ``position`` is the raw candidate position in document order at the time
    of classification; ``rule`` is the heuristic rule that accepted it.
    """
    position: int
    rule: str
    text: str


class ListLocator:
    """
    Classifies list entries and estimates the list length for one page.

    Example:
        >>> locator = ListLocator(page)
        >>> total = await locator.estimate_total_count()
        >>> first = await locator.entry_at(0)
    """

    def __init__(
        self,
        page: Page,
        container_selector: str = LIST_CONTAINER_SELECTOR,
        candidate_selector: str = CANDIDATE_SELECTOR,
        feed_selector: str = FEED_SELECTOR,
        scroll_step_px: int = 300,
        scroll_wait_ms: int = 200,
        count_settle_ms: int = 1500,
        count_scroll_wait_ms: int = 800,
        max_scroll_attempts: int = 30,
        stable_rounds: int = 3,
    ):
        self.page = page
        self.container_selector = container_selector
        self.candidate_selector = candidate_selector
        self.feed_selector = feed_selector
        self.scroll_step_px = scroll_step_px
        self.scroll_wait_ms = scroll_wait_ms
        self.count_settle_ms = count_settle_ms
        self.count_scroll_wait_ms = count_scroll_wait_ms
        self.max_scroll_attempts = max_scroll_attempts
        self.stable_rounds = stable_rounds

    async def _candidates(self) -> List[Candidate]:
        raw: List[Any] = await self.page.evaluate(
            COLLECT_CANDIDATES_JS, [self.container_selector, self.candidate_selector]
        )
        return [Candidate.from_js(r) for r in raw or []]

    async def classify_entries(self) -> List[EntryRef]:
        """Current list entries in document order."""
        candidates = await self._candidates()
        return [
            EntryRef(position=pos, rule=rule, text=candidates[pos].text.strip()[:60])
            for pos, rule in select_entries(candidates)
        ]

    async def count_entries(self) -> int:
        return len(await self.classify_entries())

    async def resolve(self, entry: EntryRef) -> Optional[ElementHandle]:
        """Element handle for a previously classified entry, or None."""
        handle = await self.page.evaluate_handle(
            CANDIDATE_AT_JS,
            [self.container_selector, self.candidate_selector, entry.position],
        )
        return handle.as_element()

    async def entry_at(self, index: int) -> Optional[ElementHandle]:
        """
        Element handle of the ``index``-th list entry.

        Returns None when the entry does not exist or the DOM query fails.
        """
        try:
            entries = await self.classify_entries()
            if index == 0 and entries:
                logger.debug("Entries in list: " + "; ".join(f"{i}: {e.text}" for i, e in enumerate(entries)))
            if index >= len(entries):
                logger.debug(f"No list entry at index {index} ({len(entries)} classified)")
                return None
            return await self.resolve(entries[index])
        except Exception as e:
            logger.debug(f"Could not locate list entry {index}: {e}")
            return None

    async def scroll_down(self) -> None:
        """Scroll the list by one step so more entries load."""
        try:
            await self.page.evaluate(
                SCROLL_BY_JS, [self.container_selector, self.feed_selector, self.scroll_step_px]
            )
            await self.page.wait_for_timeout(self.scroll_wait_ms)
        except Exception as e:
            logger.debug(f"Could not scroll list: {e}")

    async def scroll_to_bottom(self) -> bool:
        return bool(await self.page.evaluate(
            SCROLL_TO_BOTTOM_JS, [self.container_selector, self.feed_selector]
        ))

    async def estimate_total_count(self) -> int:
        """
        Scroll to the bottom until the entry count stops changing.

        The count is stable once ``stable_rounds`` consecutive scroll attempts
        observe the same non-zero count as the previous attempt.

        Returns:
            The stable entry count, or 0 when the count never stabilised
            within ``max_scroll_attempts`` (caller falls back to its cap).
        """
        try:
            await self.page.wait_for_timeout(self.count_settle_ms)

            previous_count = 0
            stable = 0
            for attempt in range(self.max_scroll_attempts):
                count = await self.count_entries()
                if attempt == 0:
                    logger.info(f"Initial count: {count} entries")

                if count == previous_count and count > 0:
                    stable += 1
                    if stable >= self.stable_rounds:
                        logger.info(f"Entry count stable at {count} after {attempt + 1} samples")
                        return count
                else:
                    stable = 0

                previous_count = count
                await self.scroll_to_bottom()
                await self.page.wait_for_timeout(self.count_scroll_wait_ms)

            logger.warning(
                f"Entry count did not stabilise within {self.max_scroll_attempts} attempts "
                f"(last count {previous_count})"
            )
            return 0
        except Exception as e:
            logger.warning(f"Error detecting entry count: {e}")
            return 0
