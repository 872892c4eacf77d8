# tests/test_settings.py

"""Tests for the Settings configuration class."""

import unittest
from pathlib import Path

from src.config.settings import Settings


class TestSettings(unittest.TestCase):
    """Verify Settings constants."""

    def test_request_delay_is_positive_float(self) -> None:
        """REQUEST_DELAY must be a positive number."""
        self.assertIsInstance(Settings.REQUEST_DELAY, float)
        self.assertGreater(Settings.REQUEST_DELAY, 0)

    def test_navigation_timeout_tens_of_seconds(self) -> None:
        """Navigation timeout is bounded but generous."""
        self.assertGreaterEqual(Settings.NAVIGATION_TIMEOUT_MS, 10_000)
        self.assertLessEqual(Settings.NAVIGATION_TIMEOUT_MS, 120_000)

    def test_user_agent_identifies_bot_and_contact(self) -> None:
        """The user agent names the bot and a contact point."""
        self.assertTrue(Settings.USER_AGENT.startswith("PriceBot/"))
        self.assertIn(Settings.BOT_CONTACT, Settings.USER_AGENT)

    def test_locale_targets_chile(self) -> None:
        """Browser and price locale match the target market."""
        self.assertEqual(Settings.BROWSER_LOCALE, "es-CL")
        self.assertEqual(Settings.DEFAULT_CURRENCY, "CLP")

    def test_failed_sentinel_is_negative_one(self) -> None:
        """Failed attempts are recorded as -1."""
        self.assertEqual(Settings.FAILED_PRICE_SENTINEL, -1)

    def test_path_constants_are_paths(self) -> None:
        """Path-typed settings are Path instances."""
        self.assertIsInstance(Settings.BASE_DIR, Path)
        self.assertIsInstance(Settings.TEMPLATES_PATH, Path)
        self.assertIsInstance(Settings.PRICE_DB_PATH, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)

    def test_templates_path_exists(self) -> None:
        """The price_templates.json file must exist on disk."""
        self.assertTrue(Settings.TEMPLATES_PATH.exists())

    def test_impersonate_browser_is_string(self) -> None:
        """IMPERSONATE_BROWSER must be a non-empty string."""
        self.assertIsInstance(Settings.IMPERSONATE_BROWSER, str)
        self.assertTrue(len(Settings.IMPERSONATE_BROWSER) > 0)

    def test_default_headers_has_accept_language(self) -> None:
        """DEFAULT_HEADERS must include Accept-Language."""
        self.assertIn("Accept-Language", Settings.DEFAULT_HEADERS)


if __name__ == "__main__":
    unittest.main()
