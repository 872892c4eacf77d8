# src/models/price_observation.py

"""Append-only price observation model."""

from dataclasses import dataclass
from datetime import datetime

from src.config.settings import Settings
from src.models.store import Store


@dataclass
class PriceObservation:
    """One timestamped extraction attempt for a variant at a store.

    ``observed_price`` holds the sentinel ``-1`` when the attempt
    reached the page but no price could be extracted.
    """

    variant_id: str
    store_id: int
    url_path_in_store: str
    observed_price: float
    currency: str
    observed_at: datetime
    id: int | None = None

    @property
    def is_failed(self) -> bool:
        """True when this row records a failed extraction."""
        return self.observed_price == Settings.FAILED_PRICE_SENTINEL


@dataclass
class TrackingTarget:
    """A (variant, store, path) triple the refresh job re-scrapes."""

    variant_id: str
    store: Store
    url_path_in_store: str

    @property
    def url(self) -> str:
        """Full product URL on the store."""
        return self.store.build_url(self.url_path_in_store)
