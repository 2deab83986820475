"""
Single entry point of the extraction engine.

``scrape_list`` owns the browser for one job and reports everything through
a ProgressChannel. The command line and the HTTP job runner are thin
adapters around it that differ only in the channel's subscriber.
"""

import asyncio
from contextlib import AbstractAsyncContextManager
from typing import Callable, List, Optional

from playwright.async_api import Page

from src.core.config import Config, get_config
from src.core.error_logger import get_error_logger
from src.core.error_models import ErrorComponent, ErrorStage
from src.core.logging import get_logger
from src.scraper.browser import open_page
from src.scraper.locator import ListLocator
from src.scraper.models import PlaceRecord
from src.scraper.traversal import TraversalController, TraversalLimits
from src.sessions.progress import ProgressChannel
from src.utils.url_utils import extract_domain

logger = get_logger(__name__)

CANCELLED_MESSAGE = "Job cancelled"

PageFactory = Callable[[Config], AbstractAsyncContextManager]


def limits_from_config(config: Config) -> TraversalLimits:
    return TraversalLimits(
        max_consecutive_failures=config.max_consecutive_failures,
        max_duplicates=config.max_duplicates,
        sidebar_timeout_ms=config.sidebar_timeout_ms,
    )


def build_controller(
    page: Page,
    channel: ProgressChannel,
    config: Config,
    session_id: Optional[str] = None,
) -> TraversalController:
    return TraversalController(
        page,
        channel,
        limits=limits_from_config(config),
        locator=ListLocator(page, max_scroll_attempts=config.count_max_scroll_attempts),
        session_id=session_id,
    )


async def scrape_list(
    list_url: str,
    max_items: int,
    channel: ProgressChannel,
    config: Optional[Config] = None,
    session_id: Optional[str] = None,
    page_factory: PageFactory = open_page,
) -> List[PlaceRecord]:
    """
    Run one extraction job from browser launch to a terminal snapshot.

    On success the controller emits ``completed``. Any fatal failure (and
    cancellation) emits ``error`` carrying the message and the places
    collected so far, then re-raises.

    Args:
        list_url: Shared list URL to open
        max_items: Cap on the number of entries to visit
        channel: Progress channel receiving every snapshot
        config: Configuration (default: global config)
        session_id: Job identifier for error records
        page_factory: Async context manager factory yielding a page

    Returns:
        Collected places in list order
    """
    config = config or get_config()
    controller: Optional[TraversalController] = None

    try:
        channel.running(0, max_items, "Launching browser...")
        async with page_factory(config) as page:
            controller = build_controller(page, channel, config, session_id=session_id)
            return await controller.run(list_url, max_items)

    except asyncio.CancelledError:
        collected = controller.collected if controller else []
        logger.info(f"Job {session_id or '-'} cancelled after {len(collected)} places")
        channel.failed(CANCELLED_MESSAGE, collected, max_items, message=CANCELLED_MESSAGE)
        raise

    except Exception as e:
        collected = controller.collected if controller else []
        logger.error(f"Scrape of {list_url} failed: {e}")
        get_error_logger().log_exception(
            e,
            component=ErrorComponent.SCRAPER,
            stage=controller.stage if controller else ErrorStage.LAUNCH_BROWSER,
            domain=extract_domain(list_url) or "unknown",
            url=list_url,
            session_id=session_id,
            metadata={"collected": len(collected), "max_items": max_items},
        )
        channel.failed(str(e) or type(e).__name__, collected, max_items)
        raise
