# src/cli/runner.py

"""Headless CLI commands for scraping and inspecting store prices."""

import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.models.price_observation import PriceObservation
from src.services.exceptions import PriceNotFoundError, PriceScrapingError
from src.services.external_price import ExternalPriceService
from src.services.price_refresher import PriceRefresher
from src.services.price_scraper import PriceScraper
from src.storage.price_observation_db import PriceObservationDB

logger = logging.getLogger("price_observer.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _open_db(db_path: str | None) -> PriceObservationDB:
    return PriceObservationDB(Path(db_path) if db_path else None)


def _format_price(obs: PriceObservation) -> str:
    if obs.is_failed:
        return "[red]failed[/red]"
    return f"{obs.currency} {obs.observed_price:,.2f}"


async def run_scrape(
    variant_id: str,
    url: str,
    db_path: str | None = None,
) -> int:
    """Scrape one URL for a variant and record the observation."""
    db = _open_db(db_path)
    try:
        service = ExternalPriceService(db)
        _err.print(f"[bold]Scraping:[/bold] {url}")
        try:
            result = await service.scrape_and_insert_external_price(
                variant_id, url,
            )
        except PriceNotFoundError as exc:
            _err.print(
                f"[yellow]{exc} (failed attempt recorded)[/yellow]"
            )
            return 1
        except PriceScrapingError as exc:
            logger.error("Scrape failed: %s", exc, exc_info=True)
            _err.print(f"[red]{exc}[/red]")
            return 1
    finally:
        db.close()

    _err.print(
        f"[green]✓ {result.currency} {result.price:,.2f}"
        f" via {result.method}[/green]"
    )
    json.dump(result.to_dict(), sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


async def run_probe(url: str) -> int:
    """Scrape a URL without recording anything (template debugging)."""
    scraper = PriceScraper()
    try:
        result = await scraper.scrape_price(url)
    except PriceScrapingError as exc:
        _err.print(f"[red]{exc}[/red]")
        return 1

    json.dump(result.to_dict(), sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0 if result.found else 1


async def run_refresh(db_path: str | None = None) -> int:
    """Re-scrape every tracked (variant, store) pair."""
    db = _open_db(db_path)
    try:
        _err.print("[bold]Refreshing tracked store prices...[/bold]")
        summary = await PriceRefresher(db).refresh_all()
    finally:
        db.close()

    for error_msg in summary.errors:
        _err.print(f"[red]Error: {error_msg}[/red]")
    _err.print(
        f"[green]✓ {summary.succeeded} of {summary.attempted} updated"
        f"[/green] [yellow]({summary.not_found} not found)[/yellow]"
    )
    return 1 if summary.errors else 0


def run_history(
    variant_id: str,
    db_path: str | None = None,
) -> int:
    """Print a variant's observation history as a Rich table."""
    db = _open_db(db_path)
    try:
        history = db.get_observation_history(variant_id)
        stores = {s.id: s for s in db.list_stores()}
    finally:
        db.close()

    if not history:
        _err.print(
            f"[yellow]No observations for variant {variant_id}.[/yellow]"
        )
        return 1

    table = Table(
        title=f"Price history: {variant_id}",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Observed", style="dim")
    table.add_column("Store", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Path", overflow="fold", style="dim")

    for obs in history:
        store = stores.get(obs.store_id)
        table.add_row(
            obs.observed_at.strftime("%Y-%m-%d %H:%M"),
            store.name if store else str(obs.store_id),
            _format_price(obs),
            obs.url_path_in_store,
        )

    Console().print(table)
    return 0


def run_list_stores(db_path: str | None = None) -> int:
    """Print the registered store registry."""
    db = _open_db(db_path)
    try:
        stores = db.list_stores()
    finally:
        db.close()

    if not stores:
        _err.print("[yellow]No stores registered.[/yellow]")
        return 1

    table = Table(title="Stores", show_lines=True, title_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", style="bold")
    table.add_column("Hostname")
    table.add_column("Currency", justify="center")
    table.add_column("URL", overflow="fold", style="dim")
    for store in stores:
        table.add_row(
            str(store.id),
            store.name,
            store.hostname,
            store.currency,
            store.url,
        )
    Console().print(table)
    return 0


def run_stats(db_path: str | None = None) -> int:
    """Print per-store attempt and failure counts."""
    db = _open_db(db_path)
    try:
        stats = db.get_failure_stats()
    finally:
        db.close()

    if not stats:
        _err.print("[yellow]No observations recorded yet.[/yellow]")
        return 1

    table = Table(
        title="Scrape failure rate",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Store", style="bold")
    table.add_column("Attempts", justify="right")
    table.add_column("Failures", justify="right", style="red")
    table.add_column("Rate", justify="right")
    table.add_column("Last attempt", style="dim")
    for row in stats:
        table.add_row(
            str(row["store"]),
            str(row["attempts"]),
            str(row["failures"]),
            f"{float(str(row['failure_rate'])):.0%}",
            str(row["last_attempt"])[:16],
        )
    Console().print(table)
    return 0


def run_import_catalog(
    catalog_path: str,
    db_path: str | None = None,
) -> int:
    """Import stores and variants from a catalog JSON export."""
    path = Path(catalog_path)
    if not path.exists():
        _err.print(f"[red]Catalog file not found: {path}[/red]")
        return 1

    db = _open_db(db_path)
    try:
        counts = db.import_catalog(path)
    finally:
        db.close()

    _err.print(
        f"[green]✓ Imported {counts['stores']} stores"
        f" and {counts['variants']} variants[/green]"
    )
    return 0


async def run_health_check(db_path: str | None = None) -> int:
    """Run connectivity health check on all registered stores."""
    from src.services.health_checker import HealthChecker

    db = _open_db(db_path)
    try:
        stores = db.list_stores()
    finally:
        db.close()

    _err.print("[bold]Running store health check...[/bold]")
    results = await HealthChecker(stores).check_all()

    table = Table(
        title="Store Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Store", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(
            r.store_name, status, latency, r.message,
        )

    Console().print(table)
    return 1 if any_down else 0
