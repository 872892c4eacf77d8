# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import unittest

from src.config.logging_config import setup_logging


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour."""

    def setUp(self) -> None:
        """Clean up the price_observer logger before each test."""
        root_logger = logging.getLogger("price_observer")
        for handler in root_logger.handlers:
            handler.close()
        root_logger.handlers.clear()

    def test_setup_creates_log_file(self) -> None:
        """setup_logging returns a path that exists on disk."""
        log_path = setup_logging()
        self.assertTrue(log_path.exists())

    def test_log_file_naming_convention(self) -> None:
        """Log file name matches run_YYYYMMDD_HHMMSS.log format."""
        log_path = setup_logging()
        pattern = r"^run_\d{8}_\d{6}\.log$"
        self.assertRegex(log_path.name, pattern)

    def test_root_logger_has_handlers(self) -> None:
        """After setup, the price_observer logger has at least 2 handlers."""
        setup_logging()
        root_logger = logging.getLogger("price_observer")
        self.assertGreaterEqual(len(root_logger.handlers), 2)

    def test_file_handler_level_debug(self) -> None:
        """File handler should be set to DEBUG level."""
        setup_logging()
        root_logger = logging.getLogger("price_observer")
        file_handlers = [
            h
            for h in root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        self.assertTrue(len(file_handlers) >= 1)
        self.assertEqual(
            file_handlers[0].level, logging.DEBUG
        )

    def test_console_handler_level_warning(self) -> None:
        """Console handler should be set to WARNING level."""
        setup_logging()
        root_logger = logging.getLogger("price_observer")
        stream_handlers: list[logging.Handler] = [
            h
            for h in root_logger.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        self.assertTrue(len(stream_handlers) >= 1)
        self.assertEqual(
            stream_handlers[0].level, logging.WARNING
        )

    def test_repeated_calls_no_duplicate_handlers(self) -> None:
        """Calling setup_logging twice does not duplicate handlers."""
        setup_logging()
        root_logger = logging.getLogger("price_observer")
        count_before = len(root_logger.handlers)
        setup_logging()
        count_after = len(root_logger.handlers)
        self.assertEqual(count_before, count_after)

    def test_root_logger_level_is_debug(self) -> None:
        """The root project logger is set to DEBUG."""
        setup_logging()
        root_logger = logging.getLogger("price_observer")
        self.assertEqual(root_logger.level, logging.DEBUG)

    def test_scraper_warning_reaches_run_file(self) -> None:
        """A price_observer.scraper warning lands in this run's file."""
        log_path = setup_logging()
        logging.getLogger("price_observer.scraper").warning(
            "No price found for %s", "https://area52.cl/p/catan",
        )
        for handler in logging.getLogger("price_observer").handlers:
            handler.flush()
        content = log_path.read_text(encoding="utf-8")
        self.assertIn("price_observer.scraper", content)
        self.assertIn("No price found for https://area52.cl/p/catan", content)

    def test_renderer_debug_reaches_file(self) -> None:
        """Renderer debug output is kept in the run file."""
        log_path = setup_logging()
        root_logger = logging.getLogger("price_observer")
        logging.getLogger("price_observer.renderer").debug(
            "Rendered %s (%d bytes)", "https://area52.cl/", 2048,
        )
        for handler in root_logger.handlers:
            handler.flush()
        self.assertIn(
            "Rendered https://area52.cl/ (2048 bytes)",
            log_path.read_text(encoding="utf-8"),
        )

    def test_log_file_inside_logs_dir(self) -> None:
        """Log file is created inside the logs/ directory."""
        log_path = setup_logging()
        self.assertEqual(log_path.parent.name, "logs")


if __name__ == "__main__":
    unittest.main()
