# bike_tracker/services/pipeline.py

"""Runs one tracking pass: load listings, enrich them, export them."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bike_tracker.config.settings import Settings
from bike_tracker.models.listing import Listing
from bike_tracker.scrapers.pinkbike_scraper import PinkbikeScraper
from bike_tracker.services.exchange_rate import (
    ExchangeRateError,
    fetch_exchange_rate,
)
from bike_tracker.services.normalizer import normalize_all
from bike_tracker.storage.exporters import Exporter, build_exporter
from bike_tracker.storage.file_manager import FileManager
from bike_tracker.storage.listings_db import ListingsDB

logger = logging.getLogger("bike_tracker.pipeline")

INPUT_MODES: tuple[str, ...] = ("web", "file", "db")


@dataclass
class RunOptions:
    """Everything one pass needs to know, as chosen on the command line."""

    input_mode: str = "web"
    file_path: Path | None = None
    num_pages: int = Settings.MAX_PAGES
    bike_type: str = "enduro"
    get_details: bool = False
    exporter_ids: list[str] = field(default_factory=lambda: ["csv"])
    db_path: Path | None = None
    sheets_credentials: Path | None = None
    spreadsheet_id: str | None = None
    exchange_rate: float | None = None


@dataclass
class RunResult:
    """Outcome of one pass."""

    listings: list[Listing] = field(
        default_factory=lambda: list[Listing]()
    )
    scrape_failures: int = 0
    exported: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )
    errors: list[str] = field(default_factory=lambda: list[str]())

    @property
    def ok(self) -> bool:
        return not self.errors


class TrackerPipeline:
    """Wires an input mode, normalization, details and exporters."""

    def __init__(
        self,
        options: RunOptions,
        scraper: PinkbikeScraper | None = None,
        exporter_factory: Callable[..., Exporter] = build_exporter,
        rate_fetcher: Callable[[], float] = fetch_exchange_rate,
    ) -> None:
        if options.input_mode not in INPUT_MODES:
            msg = f"Unknown input mode: {options.input_mode}"
            raise ValueError(msg)
        if options.input_mode == "file" and options.file_path is None:
            msg = "File input needs a file path"
            raise ValueError(msg)
        self.options = options
        self._scraper = scraper
        self._exporter_factory = exporter_factory
        self._rate_fetcher = rate_fetcher

    @property
    def scraper(self) -> PinkbikeScraper:
        if self._scraper is None:
            self._scraper = PinkbikeScraper(self.options.bike_type)
        return self._scraper

    def _exchange_rate(self) -> float:
        if self.options.exchange_rate is not None:
            return self.options.exchange_rate
        return self._rate_fetcher()

    # ── Stages ───────────────────────────────────────────

    def load_listings(self, result: RunResult) -> list[Listing]:
        """Produce canonical listings from the configured input.

        Raises :class:`ExchangeRateError` when a rate is needed and
        cannot be fetched.
        """
        mode = self.options.input_mode
        if mode == "db":
            db = ListingsDB(self.options.db_path)
            try:
                return db.get_active_listings()
            finally:
                db.close()

        rate = self._exchange_rate()
        if mode == "file" and self.options.file_path is not None:
            raws = FileManager.read_raw_listings(self.options.file_path)
        else:
            report = self.scraper.scrape_listings(self.options.num_pages)
            result.scrape_failures += len(report.failures)
            raws = report.items
        return normalize_all(raws, rate)

    def attach_details(
        self, listings: Sequence[Listing], result: RunResult,
    ) -> list[Listing]:
        """Fetch detail pages, skipping listings the DB already covers."""
        store: ListingsDB | None = None
        if "db" in self.options.exporter_ids:
            store = ListingsDB(self.options.db_path)
        try:
            report = self.scraper.scrape_details(listings, store)
        finally:
            if store is not None:
                store.close()
        result.scrape_failures += len(report.failures)
        return report.items

    def export(
        self, listings: Sequence[Listing], result: RunResult,
    ) -> None:
        """Hand *listings* to each exporter; one failing never stops the rest."""
        for exporter_id in self.options.exporter_ids:
            try:
                exporter = self._exporter_factory(
                    exporter_id,
                    bike_type=self.options.bike_type,
                    db_path=self.options.db_path,
                    sheets_credentials=self.options.sheets_credentials,
                    spreadsheet_id=self.options.spreadsheet_id,
                )
            except Exception as exc:
                logger.error(
                    "Could not set up exporter %s: %s",
                    exporter_id,
                    exc,
                    exc_info=True,
                )
                result.errors.append(f"{exporter_id}: {exc}")
                continue
            try:
                result.exported[exporter_id] = exporter.export(listings)
                if isinstance(exporter, ListingsDB):
                    self._store_details(exporter, listings)
            except Exception as exc:
                logger.error(
                    "Exporter %s failed: %s", exporter_id, exc, exc_info=True,
                )
                result.errors.append(f"{exporter_id}: {exc}")
            finally:
                exporter.close()

    @staticmethod
    def _store_details(db: ListingsDB, listings: Sequence[Listing]) -> None:
        # Upserts never overwrite details, so rows seen before get them here
        for listing in listings:
            if not listing.details.is_empty:
                db.update_details(listing.hash, listing.details)

    # ── Entry point ──────────────────────────────────────

    def run(self) -> RunResult:
        """Execute the full pass and collect every error on the way."""
        result = RunResult()
        logger.info(
            "Run starting: input=%s bike_type=%s exporters=%s",
            self.options.input_mode,
            self.options.bike_type,
            ",".join(self.options.exporter_ids),
        )
        try:
            listings = self.load_listings(result)
        except (ExchangeRateError, OSError, ValueError) as exc:
            logger.error("Loading listings failed: %s", exc, exc_info=True)
            result.errors.append(str(exc))
            return result

        if self.options.get_details and self.options.input_mode != "db":
            listings = self.attach_details(listings, result)

        result.listings = listings
        if not listings:
            logger.warning("No listings to export")
            return result

        self.export(listings, result)
        logger.info(
            "Run finished: %d listings, %d scrape failures, %d errors",
            len(listings),
            result.scrape_failures,
            len(result.errors),
        )
        return result
