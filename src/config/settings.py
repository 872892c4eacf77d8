# src/config/settings.py

"""Central configuration for the price_observer pipeline."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the price_observer pipeline."""

    # --- Politeness ---
    REQUEST_DELAY: float = 2.0          # Min seconds between hits on one host
    NAVIGATION_TIMEOUT_MS: int = 45_000  # Hard cap on page.goto()
    RENDER_SETTLE_MS: int = 1_500       # Grace period for JS price widgets
    HEADLESS: bool = os.getenv("PRICEBOT_HEADFUL", "") == ""

    # --- Bot identity ---
    BOT_CONTACT: str = os.getenv(
        "PRICEBOT_CONTACT", "prices@ludo2go.cl"
    )
    USER_AGENT: str = f"PriceBot/1.0 (+{BOT_CONTACT})"
    BROWSER_LOCALE: str = "es-CL"

    # --- Prices ---
    DEFAULT_LOCALE: str = "es-CL"
    DEFAULT_CURRENCY: str = "CLP"
    FAILED_PRICE_SENTINEL: float = -1.0

    # --- Health probe ---
    HEALTH_TIMEOUT: int = 10            # Seconds per store probe
    HEALTH_SLOW_MS: float = 5000.0
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "es-CL,es;q=0.9,en;q=0.8",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    TEMPLATES_PATH: Path = (
        BASE_DIR / "src" / "config" / "price_templates.json"
    )
    PRICE_DB_PATH: Path = Path(
        os.getenv(
            "PRICE_DB_PATH",
            str(BASE_DIR / "data" / "price_observations.db"),
        )
    )
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Templates ---
    DEFAULT_TEMPLATES_KEY: str = "__defaults__"
