# src/models/store.py

"""Registered retail storefront model."""

from dataclasses import dataclass
from urllib.parse import urlparse


def normalize_hostname(url_or_host: str) -> str:
    """Reduce a URL or bare hostname to its store-registry key.

    Lowercases, drops any port and trailing dot, and strips a leading
    ``www.`` so that ``https://www.Example.cl/`` and ``example.cl``
    resolve to the same store.
    """
    raw = url_or_host.strip()
    if not raw:
        return ""
    if "//" not in raw:
        raw = f"//{raw}"
    host = (urlparse(raw).hostname or "").lower().rstrip(".")
    if host.startswith("www."):
        host = host[4:]
    return host


@dataclass
class Store:
    """A known retail storefront tracked for price comparison."""

    id: int
    name: str
    url: str
    currency: str = "CLP"
    rating: float | None = None
    logo_url: str = ""

    @property
    def hostname(self) -> str:
        """Normalized hostname used as the registry key."""
        return normalize_hostname(self.url)

    def build_url(self, url_path_in_store: str) -> str:
        """Rebuild the full product URL from a store-relative path."""
        path = url_path_in_store or "/"
        if not path.startswith("/"):
            path = f"/{path}"
        return self.url.rstrip("/") + path
