# main.py

"""Entry point for the price_observer command line."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging

logger = logging.getLogger("price_observer.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="price_observer",
        description="External store price observation pipeline.",
    )
    parser.add_argument(
        "--db",
        default=None,
        dest="db_path",
        help="SQLite database path (default: PRICE_DB_PATH or data/).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    scrape = sub.add_parser(
        "scrape", help="Scrape a product URL and record the price.",
    )
    scrape.add_argument("variant_id", help="Product variant id.")
    scrape.add_argument("url", help="Product page URL on a registered store.")

    probe = sub.add_parser(
        "probe", help="Scrape a URL without recording (dry run).",
    )
    probe.add_argument("url", help="Product page URL.")

    sub.add_parser(
        "refresh", help="Re-scrape every tracked variant/store pair.",
    )

    history = sub.add_parser(
        "history", help="Show a variant's price observations.",
    )
    history.add_argument("variant_id", help="Product variant id.")

    sub.add_parser("stores", help="List registered stores.")
    sub.add_parser("stats", help="Show per-store scrape failure rates.")
    sub.add_parser(
        "health", help="Run a connectivity check on every store.",
    )

    catalog = sub.add_parser(
        "import-catalog",
        help="Import stores and variants from a catalog JSON export.",
    )
    catalog.add_argument("path", help="Path to the catalog JSON file.")
    return parser


def _dispatch(args: argparse.Namespace) -> int:
    """Run the selected sub-command and return its exit code."""
    from src.cli import runner

    if args.command == "scrape":
        return asyncio.run(
            runner.run_scrape(args.variant_id, args.url, args.db_path)
        )
    if args.command == "probe":
        return asyncio.run(runner.run_probe(args.url))
    if args.command == "refresh":
        return asyncio.run(runner.run_refresh(args.db_path))
    if args.command == "history":
        return runner.run_history(args.variant_id, args.db_path)
    if args.command == "stores":
        return runner.run_list_stores(args.db_path)
    if args.command == "stats":
        return runner.run_stats(args.db_path)
    if args.command == "health":
        return asyncio.run(runner.run_health_check(args.db_path))
    return runner.run_import_catalog(args.path, args.db_path)


def main() -> None:
    """Parse arguments and route to the matching command."""
    log_file = setup_logging()
    logger.info("price_observer starting, log file: %s", log_file)

    args = _build_parser().parse_args()
    try:
        exit_code = _dispatch(args)
    except Exception:
        logger.critical("Fatal error during %s", args.command, exc_info=True)
        raise
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
