"""
Entry Navigator: opens a list entry and waits for the detail page.

Handles the interstitial dialogs the host UI injects late (join prompts,
share sheets, "not now" banners) before each click.
"""

from typing import Tuple

from playwright.async_api import ElementHandle, Page

from src.core.logging import get_logger

logger = get_logger(__name__)


# URL fragment that identifies a place detail page
DETAIL_URL_MARKER = "/place/"

# Dialog controls tried in order each round
DIALOG_CONTROLS: Tuple[Tuple[str, str], ...] = (
    ("cancel", 'button[aria-label="Cancel"]'),
    ("close", 'button[aria-label="Close"]'),
    ("dismiss", 'button:has-text("No thanks"), button:has-text("Dismiss"), button:has-text("Not now")'),
)


def is_detail_url(url: str, marker: str = DETAIL_URL_MARKER) -> bool:
    return bool(url) and marker in url


class EntryNavigator:
    """
    Clicks list entries and confirms navigation to a detail page.

    The navigator only waits for the URL to change shape; judging whether the
    step succeeded is left to the traversal controller.
    """

    def __init__(
        self,
        page: Page,
        detail_marker: str = DETAIL_URL_MARKER,
        dialog_rounds: int = 3,
        dialog_settle_ms: int = 250,
        control_timeout_ms: int = 500,
        after_action_ms: int = 100,
        after_click_ms: int = 400,
        url_poll_interval_ms: int = 150,
        url_poll_attempts: int = 4,
    ):
        self.page = page
        self.detail_marker = detail_marker
        self.dialog_rounds = dialog_rounds
        self.dialog_settle_ms = dialog_settle_ms
        self.control_timeout_ms = control_timeout_ms
        self.after_action_ms = after_action_ms
        self.after_click_ms = after_click_ms
        self.url_poll_interval_ms = url_poll_interval_ms
        self.url_poll_attempts = url_poll_attempts

    async def _try_close(self, label: str, selector: str) -> bool:
        try:
            control = self.page.locator(selector).first
            if await control.is_visible(timeout=self.control_timeout_ms):
                await control.click()
                logger.debug(f"Dialog closed via {label} control")
                await self.page.wait_for_timeout(self.after_action_ms)
                return True
        except Exception as e:
            logger.debug(f"Dialog control '{label}' not usable: {e}")
        return False

    async def dismiss_dialogs(self) -> int:
        """
        Close any interstitial dialog.

        Each round tries every known control, then presses Escape. Stops early
        once a round closes nothing.

        Returns:
            Number of controls clicked
        """
        await self.page.wait_for_timeout(self.dialog_settle_ms)

        closed_total = 0
        for _ in range(self.dialog_rounds):
            closed = 0
            for label, selector in DIALOG_CONTROLS:
                if await self._try_close(label, selector):
                    closed += 1

            try:
                await self.page.keyboard.press("Escape")
                await self.page.wait_for_timeout(self.after_action_ms)
            except Exception as e:
                logger.debug(f"Escape failed: {e}")

            closed_total += closed
            if not closed:
                break
        return closed_total

    async def wait_for_detail_url(self) -> bool:
        """Poll the current URL until it looks like a detail page."""
        attempts = 0
        while not is_detail_url(self.page.url, self.detail_marker) and attempts < self.url_poll_attempts:
            await self.page.wait_for_timeout(self.url_poll_interval_ms)
            attempts += 1
        return is_detail_url(self.page.url, self.detail_marker)

    async def open(self, entry: ElementHandle) -> bool:
        """
        Dismiss dialogs, click the entry and wait briefly for navigation.

        Click failures propagate to the caller.

        Returns:
            True if the current URL is a detail page afterwards
        """
        await self.dismiss_dialogs()
        await entry.click()
        await self.page.wait_for_timeout(self.after_click_ms)
        await self.page.wait_for_timeout(self.after_action_ms)
        return await self.wait_for_detail_url()
