# src/models/rendered_page.py

"""Snapshot of a rendered storefront page."""

from dataclasses import dataclass, field

from bs4 import BeautifulSoup


@dataclass
class RenderedPage:
    """DOM snapshot taken once the page reached ``domcontentloaded``."""

    url: str
    html: str
    _soup: BeautifulSoup | None = field(
        default=None, init=False, repr=False, compare=False
    )

    @property
    def soup(self) -> BeautifulSoup:
        """Parsed DOM, built on first access."""
        if self._soup is None:
            self._soup = BeautifulSoup(self.html, "lxml")
        return self._soup
