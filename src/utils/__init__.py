"""
Shared utility functions for the Maps list scraper.

This module contains reusable utilities used across components:
- URL validation
- Async retry logic with exponential backoff
"""

from src.utils.url_utils import validate_url, extract_domain
from src.utils.retry import retry_async_with_backoff, RetryConfig

__all__ = [
    # URL utilities
    "validate_url",
    "extract_domain",
    # Retry utilities
    "retry_async_with_backoff",
    "RetryConfig",
]
