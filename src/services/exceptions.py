# src/services/exceptions.py

"""Caller-visible failures of the price observation pipeline."""

from src.models.scrape_result import ScrapeResult


class PriceScrapingError(Exception):
    """Base class for every terminal scrape/persist failure."""


class ObservationValidationError(PriceScrapingError, ValueError):
    """Missing or unusable arguments; raised before any network work."""


class StoreNotRegisteredError(PriceScrapingError):
    """The URL's hostname belongs to no registered store."""

    def __init__(self, hostname: str) -> None:
        super().__init__(
            f"Store not found for hostname {hostname}. "
            "Create a Store entry first."
        )
        self.hostname = hostname


class PageLoadError(PriceScrapingError):
    """Navigation timed out or the browser failed before extraction."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url
        self.reason = reason


class PriceNotFoundError(PriceScrapingError):
    """Page loaded but no tier produced a price.

    Raised after the sentinel observation row has been written.
    """

    def __init__(self, result: ScrapeResult) -> None:
        super().__init__(f"Price not found at {result.url}")
        self.result = result
