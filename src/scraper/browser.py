"""
Browser lifecycle for one extraction job.

Each job owns its own Chromium instance; it is closed on every exit path.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Page, async_playwright

from src.core.config import Config
from src.core.logging import get_logger

logger = get_logger(__name__)

# Flags that keep Chromium stable inside containers and small VMs
LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]


@asynccontextmanager
async def open_page(config: Config) -> AsyncIterator[Page]:
    """
    Launch Chromium and yield a fresh page with default timeouts applied.

    Example:
        >>> async with open_page(get_config()) as page:
        ...     await page.goto(url)
    """
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=config.headless, args=LAUNCH_ARGS)
        try:
            page = await browser.new_page()
            page.set_default_timeout(config.nav_timeout_ms)
            page.set_default_navigation_timeout(config.nav_timeout_ms)
            yield page
        finally:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Browser close failed: {e}")
