"""
Scraper module for Google Maps saved lists.

This module drives a headless browser through a list view, opens each
entry and extracts structured place records.

Module Structure:
- models: PlaceRecord, ProgressSnapshot, JobStatus
- heuristics: list entry classification rules
- scripts: in-page JavaScript
- locator: list entry lookup and count estimation (requires playwright)
- navigator: dialog dismissal and entry opening (requires playwright)
- extractor: detail page field extraction (requires playwright)
- traversal: per-job state machine and circuit breakers (requires playwright)
- engine: browser-owning entry point (requires playwright)
- file_manager: results document output
"""

# Export models and heuristics directly (no playwright dependency)
from src.scraper.models import JobStatus, PlaceRecord, ProgressSnapshot
from src.scraper.heuristics import Candidate, classify, is_list_entry
from src.scraper.errors import (
    ScraperError,
    PageNotInitializedError,
    ListContainerNotFoundError,
)
from src.scraper.file_manager import write_results


# Lazy loading for playwright-dependent classes
def __getattr__(name):
    """Lazy loading for playwright-dependent classes."""
    if name == "ListLocator":
        from src.scraper.locator import ListLocator
        return ListLocator
    if name == "EntryNavigator":
        from src.scraper.navigator import EntryNavigator
        return EntryNavigator
    if name == "DetailExtractor":
        from src.scraper.extractor import DetailExtractor
        return DetailExtractor
    if name in ("TraversalController", "TraversalLimits"):
        from src.scraper import traversal
        return getattr(traversal, name)
    if name == "scrape_list":
        from src.scraper.engine import scrape_list
        return scrape_list

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Models
    "JobStatus",
    "PlaceRecord",
    "ProgressSnapshot",
    # Heuristics
    "Candidate",
    "classify",
    "is_list_entry",
    # Errors
    "ScraperError",
    "PageNotInitializedError",
    "ListContainerNotFoundError",
    # Output
    "write_results",
    # Engine (require playwright - lazy loaded)
    "ListLocator",
    "EntryNavigator",
    "DetailExtractor",
    "TraversalController",
    "TraversalLimits",
    "scrape_list",
]
