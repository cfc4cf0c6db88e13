# bike_tracker/cli/runner.py

"""Headless CLI runner around the tracking pipeline."""

import logging
from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from bike_tracker.models.listing import Listing
from bike_tracker.services.pipeline import RunOptions, TrackerPipeline
from bike_tracker.storage.exporters import resolve_exporter_ids

logger = logging.getLogger("bike_tracker.cli")

# Stderr console for status messages so stdout stays clean for tables
_err = Console(stderr=True)


def parse_exporters(export_csv: str) -> list[str]:
    """Map ``--export`` to exporter ids.

    Raises ``SystemExit`` on unknown ids.
    """
    try:
        return resolve_exporter_ids(export_csv)
    except ValueError as exc:
        _err.print(f"[red]{exc}[/red]")
        raise SystemExit(1) from exc


def print_listings_table(listings: Sequence[Listing]) -> None:
    """Render a Rich table of listings to stdout."""
    table = Table(
        title="Listings",
        show_lines=False,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Year", width=5)
    table.add_column("Manufacturer", style="magenta")
    table.add_column("Model")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Review", style="yellow")

    for idx, lst in enumerate(listings, 1):
        table.add_row(
            str(idx),
            lst.year or "—",
            lst.manufacturer_label,
            lst.model_label,
            f"{lst.price} {lst.currency}".strip() or "N/A",
            lst.needs_review,
        )

    Console().print(table)


def run_tracker(options: RunOptions, show_table: bool = False) -> int:
    """Run one pass and return an exit code (0=ok, 1=fail)."""
    _err.print(
        f"[bold]Tracking:[/bold] {options.bike_type}  "
        f"[dim]input={options.input_mode} "
        f"export={','.join(options.exporter_ids)}[/dim]"
    )
    try:
        pipeline = TrackerPipeline(options)
    except ValueError as exc:
        _err.print(f"[red]{exc}[/red]")
        return 1

    result = pipeline.run()

    for error_msg in result.errors:
        _err.print(f"[red]Error: {error_msg}[/red]")

    if not result.listings:
        _err.print("[yellow]No listings found.[/yellow]")
        return 0 if result.ok else 1

    clean = sum(1 for lst in result.listings if lst.is_clean)
    parts: list[str] = [f"{len(result.listings) - clean} need review"]
    if result.scrape_failures:
        parts.append(f"{result.scrape_failures} scrape failures")
    _err.print(
        f"[green]✓ {len(result.listings)} listings"
        f" ({', '.join(parts)})[/green]"
    )
    for exporter_id, outcome in result.exported.items():
        _err.print(f"[dim]Exported {exporter_id} → {outcome}[/dim]")

    if show_table:
        print_listings_table(result.listings)

    return 0 if result.ok else 1
