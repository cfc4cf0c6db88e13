# bike_tracker/storage/file_manager.py

"""Reads raw listing CSVs and writes clean / needs-review CSV exports."""

import csv
import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from bike_tracker.config.settings import Settings
from bike_tracker.filters.listing_validator import ListingValidator
from bike_tracker.models.listing import Listing, RawListing

logger = logging.getLogger("bike_tracker.storage")

CSV_HEADERS: list[str] = [
    "Title", "Year", "Manufacturer", "Model", "Price", "Currency",
    "Condition", "Frame Size", "Wheel Size", "Frame Material",
    "Front Travel", "Rear Travel", "Needs Review", "URL",
]

# Column order of raw listing CSVs used for offline runs
_RAW_FIELDS: tuple[str, ...] = (
    "title", "price", "condition", "frame_size", "wheel_size",
    "front_travel", "rear_travel", "frame_material",
)


def listing_to_row(listing: Listing) -> list[str]:
    """Flatten a listing into the exported column order."""
    return [
        listing.title,
        listing.year,
        listing.manufacturer_label,
        listing.model_label,
        listing.price,
        listing.currency,
        listing.condition,
        listing.frame_size,
        listing.wheel_size,
        listing.frame_material,
        listing.front_travel,
        listing.rear_travel,
        listing.needs_review,
        listing.url,
    ]


class FileManager:
    """Handles listing CSV files on disk."""

    def __init__(self, runs_dir: Path | None = None) -> None:
        self.runs_dir: Path = runs_dir or Settings.RUNS_DIR
        self.runs_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileManager initialised, runs_dir=%s", self.runs_dir)

    @staticmethod
    def read_raw_listings(filepath: Path) -> list[RawListing]:
        """Read raw listings from a headerless CSV file.

        Short rows are padded with empty fields rather than rejected.
        """
        listings: list[RawListing] = []
        with open(filepath, newline="", encoding="utf-8") as f:
            for row in csv.reader(f):
                if not row or not any(cell.strip() for cell in row):
                    continue
                padded = list(row) + [""] * (len(_RAW_FIELDS) - len(row))
                values = dict(zip(_RAW_FIELDS, padded))
                listings.append(RawListing(**values))

        logger.info(
            "Read %d raw listings from %s", len(listings), filepath,
        )
        return listings

    def export_csv(
        self, listings: Sequence[Listing], bike_type: str,
    ) -> tuple[Path, Path]:
        """Write clean and needs-review listings to two dated CSV files.

        Returns ``(clean_path, suspect_path)``.
        """
        date = datetime.now().strftime("%Y-%m-%d")
        filename = f"{bike_type}Listings{date}.csv"
        clean_path = self.runs_dir / filename
        suspect_path = self.runs_dir / f"suspect_{filename}"

        clean, suspect = ListingValidator.split(list(listings))
        self._write(clean_path, clean)
        self._write(suspect_path, suspect)

        logger.info(
            "Exported %d clean listings to %s and %d for review to %s",
            len(clean),
            clean_path,
            len(suspect),
            suspect_path,
        )
        return clean_path, suspect_path

    @staticmethod
    def _write(filepath: Path, listings: Sequence[Listing]) -> None:
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADERS)
            for listing in listings:
                writer.writerow(listing_to_row(listing))


class CsvExporter:
    """Exporter writing the clean / needs-review CSV pair per run."""

    def __init__(
        self, bike_type: str, runs_dir: Path | None = None,
    ) -> None:
        self.bike_type = bike_type
        self.file_manager = FileManager(runs_dir)

    def export(self, listings: Sequence[Listing]) -> tuple[Path, Path]:
        return self.file_manager.export_csv(listings, self.bike_type)

    def close(self) -> None:
        """Nothing to release; files are closed after each write."""
