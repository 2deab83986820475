"""
URL utility functions for the Maps list scraper.

This module provides URL validation and small helpers for place URLs.
"""

from typing import Optional
from urllib.parse import urlparse


def validate_url(url: str) -> bool:
    """
    Check if a URL is valid and complete.

    Args:
        url: URL to validate

    Returns:
        True if URL is valid and complete, False otherwise

    Examples:
        >>> validate_url("https://www.google.com/maps/placelists/list/abc")
        True

        >>> validate_url("/maps/place/123")
        False

        >>> validate_url("not-a-url")
        False
    """
    if not url or not isinstance(url, str):
        return False

    url = url.strip()

    # Must start with http:// or https://
    if not url.startswith(('http://', 'https://')):
        return False

    try:
        result = urlparse(url)
        return bool(result.scheme and result.netloc)
    except Exception:
        return False


def extract_domain(url: str) -> Optional[str]:
    """
    Extract domain from a URL.

    Args:
        url: URL to extract domain from

    Returns:
        Lowercase domain (netloc) or None if invalid

    Examples:
        >>> extract_domain("https://maps.app.goo.gl/vjh2BSZ8EpCwSBuf8")
        'maps.app.goo.gl'

        >>> extract_domain("invalid")
        None
    """
    if not url or not isinstance(url, str):
        return None

    try:
        result = urlparse(url)
        return result.netloc.lower() if result.netloc else None
    except Exception:
        return None
