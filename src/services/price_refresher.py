# src/services/price_refresher.py

"""Periodic re-scrape of every tracked (variant, store) pair."""

import logging
from dataclasses import dataclass, field

from src.services.exceptions import PriceNotFoundError
from src.services.external_price import ExternalPriceService
from src.storage.price_observation_db import PriceObservationDB

logger = logging.getLogger("price_observer.refresher")


@dataclass
class RefreshSummary:
    """Tally of one refresh run."""

    attempted: int = 0
    succeeded: int = 0
    not_found: int = 0
    errors: list[str] = field(
        default_factory=lambda: list[str]()
    )


class PriceRefresher:
    """Re-scrapes tracked targets one at a time.

    Targets are processed sequentially; the renderer's per-host rate
    limiter spaces out consecutive hits on the same storefront. A
    failing target is logged and counted, never fatal to the run.
    """

    def __init__(
        self,
        db: PriceObservationDB,
        service: ExternalPriceService | None = None,
    ) -> None:
        self.db = db
        self.service = service or ExternalPriceService(db)

    async def refresh_all(self) -> RefreshSummary:
        """Scrape every tracking target and record fresh observations."""
        summary = RefreshSummary()
        targets = self.db.list_tracking_targets()
        if not targets:
            logger.warning("No tracked store prices found in DB")
            return summary

        logger.info("Refreshing %d tracked prices", len(targets))
        for target in targets:
            summary.attempted += 1
            url = target.url
            try:
                result = await self.service.scrape_and_insert_external_price(
                    target.variant_id, url,
                )
            except PriceNotFoundError:
                summary.not_found += 1
                logger.warning(
                    "Price not found for %s (%s)",
                    target.variant_id,
                    url,
                )
                continue
            except Exception as exc:
                summary.errors.append(f"{url}: {exc}")
                logger.error(
                    "Error scraping %s: %s",
                    url,
                    exc,
                    exc_info=True,
                )
                continue

            summary.succeeded += 1
            logger.info(
                "%s %s: %s %s via %s",
                target.store.name,
                target.variant_id,
                result.price,
                result.currency,
                result.method,
            )

        logger.info(
            "Refresh complete: %d ok, %d not found, %d errors",
            summary.succeeded,
            summary.not_found,
            len(summary.errors),
        )
        return summary
