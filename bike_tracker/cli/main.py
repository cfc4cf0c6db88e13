# bike_tracker/cli/main.py

"""Entry point for the bike_tracker command-line tool."""

import argparse
import logging
import sys
from pathlib import Path

from bike_tracker.config.logging_config import log_run_header, setup_logging
from bike_tracker.config.settings import Settings

logger = logging.getLogger("bike_tracker.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(e["id"] for e in Settings.AVAILABLE_EXPORTERS)

    parser = argparse.ArgumentParser(
        prog="bike_tracker",
        description="Pinkbike classifieds tracker.",
        epilog=f"Available exporters: {valid_ids}",
    )
    parser.add_argument(
        "--input",
        choices=["web", "file", "db"],
        default="web",
        dest="input_mode",
        help="Where listings come from (default: web).",
    )
    parser.add_argument(
        "--file-path",
        type=Path,
        default=None,
        help="Raw listings CSV, required with --input file.",
    )
    parser.add_argument(
        "--num-pages",
        type=int,
        default=Settings.MAX_PAGES,
        help=f"Listing pages to scrape (default: {Settings.MAX_PAGES}).",
    )
    parser.add_argument(
        "--bike-type",
        choices=sorted(Settings.BIKE_TYPES),
        default="enduro",
        help="Bike category to scrape (default: enduro).",
    )
    parser.add_argument(
        "--get-details",
        action="store_true",
        default=False,
        help="Also fetch each listing's detail page.",
    )
    parser.add_argument(
        "--export",
        default="csv",
        help="Comma-separated exporter IDs (default: csv).",
    )
    parser.add_argument(
        "--db-path",
        type=Path,
        default=None,
        help="SQLite database file (default: data/listings.db).",
    )
    parser.add_argument(
        "--sheets-creds",
        type=Path,
        default=None,
        help="Google service-account credentials JSON.",
    )
    parser.add_argument(
        "--spreadsheet-id",
        default=None,
        help="Target Google Sheets spreadsheet ID.",
    )
    parser.add_argument(
        "--exchange-rate",
        type=float,
        default=None,
        help="CAD to USD rate to use instead of querying the API.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show INFO messages on stderr, not just warnings.",
    )
    parser.add_argument(
        "--table",
        action="store_true",
        default=False,
        help="Print the listings as a table when done.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, run one tracking pass and exit."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.input_mode == "file" and args.file_path is None:
        parser.error("--file-path is required with --input file")

    from bike_tracker.cli.runner import parse_exporters, run_tracker
    from bike_tracker.services.pipeline import RunOptions

    options = RunOptions(
        input_mode=args.input_mode,
        file_path=args.file_path,
        num_pages=args.num_pages,
        bike_type=args.bike_type,
        get_details=args.get_details,
        exporter_ids=parse_exporters(args.export),
        db_path=args.db_path,
        sheets_credentials=args.sheets_creds,
        spreadsheet_id=args.spreadsheet_id,
        exchange_rate=args.exchange_rate,
    )
    log_file = setup_logging("INFO" if args.verbose else None)
    logger.info("bike_tracker starting, log file: %s", log_file)
    log_run_header(options)

    try:
        exit_code = run_tracker(options, show_table=args.table)
    except Exception:
        logger.critical("Fatal error during run", exc_info=True)
        raise
    finally:
        logger.info("bike_tracker shutting down")
    sys.exit(exit_code)

