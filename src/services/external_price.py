# src/services/external_price.py

"""Scrape-and-record entry point for external store prices."""

import logging
from datetime import datetime
from urllib.parse import urlparse

from src.config.settings import Settings
from src.models.price_observation import PriceObservation
from src.models.scrape_result import ScrapeResult
from src.models.store import Store, normalize_hostname
from src.services.exceptions import (
    ObservationValidationError,
    PriceNotFoundError,
    StoreNotRegisteredError,
)
from src.services.price_scraper import PriceScraper
from src.storage.price_observation_db import PriceObservationDB

logger = logging.getLogger("price_observer.external_price")


def url_path_in_store(url: str) -> str:
    """Store-relative part of a product URL (path plus query)."""
    parsed = urlparse(url)
    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"
    return path


class ExternalPriceService:
    """Resolves the store, scrapes, and appends one observation row.

    Every call that reaches extraction writes exactly one row: the
    price on success, the ``-1`` sentinel on a total miss. Validation
    and store-resolution failures happen before the browser is
    launched and write nothing. Navigation failures propagate without
    a row, since extraction was never attempted.
    """

    def __init__(
        self,
        db: PriceObservationDB,
        scraper: PriceScraper | None = None,
    ) -> None:
        self.settings = Settings()
        self.db = db
        self.scraper = scraper or PriceScraper()

    def resolve_store(self, url: str) -> Store:
        """Map *url* to its registered store or raise."""
        hostname = normalize_hostname(url)
        if not hostname:
            raise ObservationValidationError(f"Invalid URL: {url!r}")
        store = self.db.find_store_by_hostname(hostname)
        if store is None:
            logger.error(
                "Store not found for hostname %s. "
                "Create a Store entry first.",
                hostname,
            )
            raise StoreNotRegisteredError(hostname)
        return store

    async def scrape_and_insert_external_price(
        self,
        variant_id: str,
        url: str,
    ) -> ScrapeResult:
        """Scrape *url* for *variant_id* and record the observation.

        Raises:
            ObservationValidationError: missing arguments, bad URL or
                unknown variant.
            StoreNotRegisteredError: no store owns the URL's hostname.
            PageLoadError: the page could not be rendered.
            PriceNotFoundError: no price found; the sentinel row has
                already been written.
        """
        if not variant_id or not url:
            raise ObservationValidationError(
                "variant_id and url are required"
            )
        if not self.db.variant_exists(variant_id):
            raise ObservationValidationError(
                f"Variant not found: {variant_id}"
            )

        store = self.resolve_store(url)
        path = url_path_in_store(url)

        result = await self.scraper.scrape_price(url)

        currency = (
            result.currency
            or store.currency
            or self.settings.DEFAULT_CURRENCY
        )
        observed_price = (
            result.price
            if result.price is not None
            else self.settings.FAILED_PRICE_SENTINEL
        )
        self.db.insert_observation(PriceObservation(
            variant_id=variant_id,
            store_id=store.id,
            url_path_in_store=path,
            observed_price=observed_price,
            currency=currency,
            observed_at=datetime.now(),
        ))

        if result.price is None:
            logger.error(
                "Price not found for variant %s at %s, "
                "recorded sentinel %s",
                variant_id,
                url,
                self.settings.FAILED_PRICE_SENTINEL,
            )
            raise PriceNotFoundError(result)

        logger.info(
            "Recorded %s %s for variant %s at %s (%s)",
            result.price,
            currency,
            variant_id,
            store.name,
            result.method,
        )
        return result
