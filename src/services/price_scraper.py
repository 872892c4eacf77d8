# src/services/price_scraper.py

"""Extraction orchestrator: render once, then walk the tier chain."""

import logging
from urllib.parse import urlparse

from src.config.settings import Settings
from src.extraction.structured_data import extract_from_structured_data
from src.extraction.templates import (
    TemplateTable,
    extract_with_templates,
    load_templates,
)
from src.models.scrape_result import ScrapeResult
from src.scrapers.page_renderer import PageRenderer
from src.services.exceptions import ObservationValidationError

logger = logging.getLogger("price_observer.scraper")

METHOD_JSON_LD = "json-ld"
METHOD_NOT_FOUND = "not-found"
TEMPLATE_METHOD_PREFIX = "template:"


class PriceScraper:
    """Renders a product page and extracts its price.

    Tiers run strictly in priority order and the first hit wins:

    1. JSON-LD offer markup.
    2. Hostname-specific templates, then the shared defaults.

    A total miss is a normal result (``method == "not-found"``), not an
    exception. Retries are the caller's business.
    """

    def __init__(
        self,
        renderer: PageRenderer | None = None,
        templates: TemplateTable | None = None,
    ) -> None:
        self.settings = Settings()
        self.renderer = renderer or PageRenderer()
        self.templates = templates or load_templates()

    async def scrape_price(self, url: str) -> ScrapeResult:
        """Scrape *url* and report which tier produced the price.

        Raises:
            ObservationValidationError: *url* has no hostname.
            PageLoadError: the page never finished loading.
        """
        hostname = (urlparse(url).hostname or "").lower()
        if not hostname:
            raise ObservationValidationError(f"Invalid URL: {url!r}")

        async with self.renderer.render(url) as page:
            structured = extract_from_structured_data(page)
            if structured is not None:
                logger.info(
                    "[%s] JSON-LD price %s %s",
                    hostname,
                    structured.price,
                    structured.currency,
                )
                return ScrapeResult(
                    url=url,
                    hostname=hostname,
                    price=structured.price,
                    currency=(
                        structured.currency
                        or self.settings.DEFAULT_CURRENCY
                    ),
                    method=METHOD_JSON_LD,
                )

            from_template = extract_with_templates(
                page, hostname, self.templates
            )

        if from_template is not None:
            logger.info(
                "[%s] Template '%s' matched %r: %s %s",
                hostname,
                from_template.source,
                from_template.selector,
                from_template.price,
                from_template.currency,
            )
            return ScrapeResult(
                url=url,
                hostname=hostname,
                price=from_template.price,
                currency=from_template.currency,
                method=f"{TEMPLATE_METHOD_PREFIX}{from_template.source}",
                selector=from_template.selector,
            )

        logger.warning("[%s] No price found at %s", hostname, url)
        return ScrapeResult(
            url=url,
            hostname=hostname,
            price=None,
            currency=None,
            method=METHOD_NOT_FOUND,
        )
