# src/scrapers/rate_limiter.py

"""Per-hostname minimum inter-request delay."""

import asyncio
import logging
from time import monotonic

from src.config.settings import Settings

logger = logging.getLogger("price_observer.rate_limiter")


class HostRateLimiter:
    """Keeps at least ``min_interval`` seconds between hits on one host.

    Different hosts do not block each other. Concurrent callers for the
    same host queue on a per-host lock.
    """

    def __init__(self, min_interval: float | None = None) -> None:
        self._min_interval: float = (
            Settings.REQUEST_DELAY
            if min_interval is None
            else min_interval
        )
        self._last_hit: dict[str, float] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def min_interval(self) -> float:
        return self._min_interval

    async def wait(self, hostname: str) -> float:
        """Sleep until *hostname* may be hit again.

        Returns the number of seconds slept.
        """
        key = hostname.lower()
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            slept = 0.0
            last = self._last_hit.get(key)
            if last is not None:
                remaining = self._min_interval - (
                    monotonic() - last
                )
                if remaining > 0:
                    logger.debug(
                        "Throttling %s for %.2fs", key, remaining,
                    )
                    await asyncio.sleep(remaining)
                    slept = remaining
            self._last_hit[key] = monotonic()
            return slept
