# src/services/health_checker.py

"""Store homepage connectivity health checker."""

import asyncio
import logging
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.store import Store

logger = logging.getLogger("price_observer.health")


@dataclass
class HealthResult:
    """Result of a single store health check."""

    store_name: str
    url: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_store(
    store: Store,
    session: curl_requests.Session | None = None,
) -> HealthResult:
    """Fetch a store's base URL and classify its responsiveness.

    An injected *session* is left open; otherwise a one-off
    impersonating session is opened and closed around the request.
    """
    if session is not None:
        return _probe_with(session, store)
    with curl_requests.Session(
        impersonate=Settings.IMPERSONATE_BROWSER
    ) as owned:
        return _probe_with(owned, store)


def _probe_with(
    client: curl_requests.Session, store: Store,
) -> HealthResult:
    settings = Settings()
    headers = {
        **settings.DEFAULT_HEADERS,
        "User-Agent": settings.USER_AGENT,
    }

    start = time.monotonic()
    try:
        resp = client.get(
            store.url,
            headers=headers,
            timeout=settings.HEALTH_TIMEOUT,
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        if resp.status_code != 200:
            return HealthResult(
                store_name=store.name,
                url=store.url,
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )

        if elapsed_ms > settings.HEALTH_SLOW_MS:
            return HealthResult(
                store_name=store.name,
                url=store.url,
                status="slow",
                latency_ms=elapsed_ms,
                message="High latency",
            )

        return HealthResult(
            store_name=store.name,
            url=store.url,
            status="ok",
            latency_ms=elapsed_ms,
            message="",
        )

    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            store_name=store.name,
            url=store.url,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )


class HealthChecker:
    """Runs concurrent health probes against registered stores."""

    def __init__(self, stores: list[Store]) -> None:
        self.stores = stores

    async def check_all(self) -> list[HealthResult]:
        """Probe every store concurrently."""
        tasks = [
            asyncio.to_thread(probe_store, store)
            for store in self.stores
        ]
        results: list[HealthResult] = list(
            await asyncio.gather(*tasks)
        )
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.store_name,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
