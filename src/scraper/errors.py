"""Exceptions raised by the extraction engine."""


class ScraperError(Exception):
    """Base class for fatal scraper failures."""


class PageNotInitializedError(ScraperError):
    """The automation surface has no page to work with."""

    def __init__(self, message: str = "Page not initialized"):
        super().__init__(message)


class ListContainerNotFoundError(ScraperError):
    """The list/sidebar container never appeared."""
