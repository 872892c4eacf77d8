# src/models/scrape_result.py

"""Extraction tier and orchestrator result models."""

from dataclasses import dataclass


@dataclass
class ExtractedPrice:
    """A price pulled from a page by one extraction tier."""

    price: float
    currency: str | None = None
    source: str = ""
    selector: str | None = None


@dataclass
class ScrapeResult:
    """Outcome of a single scrape; ``price`` is None on a total miss."""

    url: str
    hostname: str
    price: float | None
    currency: str | None
    method: str
    selector: str | None = None

    @property
    def found(self) -> bool:
        """True when some tier produced a price."""
        return self.price is not None

    def to_dict(self) -> dict[str, object]:
        """Serialise to a plain dict, omitting an unset selector."""
        data: dict[str, object] = {
            "url": self.url,
            "hostname": self.hostname,
            "price": self.price,
            "currency": self.currency,
            "method": self.method,
        }
        if self.selector is not None:
            data["selector"] = self.selector
        return data
