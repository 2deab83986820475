"""
Retry utility with exponential backoff for the Maps list scraper.

This module provides retry logic for transient browser failures.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar
from dataclasses import dataclass
from src.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0

    def __post_init__(self):
        """Validate configuration."""
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay <= 0:
            raise ValueError("base_delay must be positive")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.exponential_base <= 1:
            raise ValueError("exponential_base must be > 1")

    def delay_for(self, attempt: int) -> float:
        """Backoff delay in seconds before retry number ``attempt + 1``."""
        return min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)


async def retry_async_with_backoff(
    func: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    retry_on: tuple = (Exception,),
    on_retry: Optional[Callable[[int, Exception], None]] = None,
) -> T:
    """
    Await a coroutine factory with exponential backoff between attempts.

    Args:
        func: Zero-argument callable returning a fresh awaitable on each call
        config: Retry configuration (default: 3 retries, 1s base delay)
        retry_on: Tuple of exception types to retry on
        on_retry: Optional callback called on each retry (attempt, exception)

    Returns:
        Result from the first successful attempt

    Raises:
        Last exception if all retries exhausted

    Example:
        >>> await retry_async_with_backoff(
        ...     lambda: page.goto(url, wait_until="domcontentloaded"),
        ...     config=RetryConfig(max_retries=2, base_delay=1.0),
        ... )
    """
    if config is None:
        config = RetryConfig()

    for attempt in range(config.max_retries + 1):
        try:
            return await func()
        except retry_on as e:
            # Last attempt - don't wait, just raise
            if attempt == config.max_retries:
                logger.error(f"All {config.max_retries} retries exhausted: {e}")
                raise

            delay = config.delay_for(attempt)
            logger.warning(
                f"Retry {attempt + 1}/{config.max_retries} "
                f"after {delay:.2f}s: {e}"
            )

            if on_retry:
                on_retry(attempt + 1, e)

            await asyncio.sleep(delay)

    raise RuntimeError("Retry logic error")
