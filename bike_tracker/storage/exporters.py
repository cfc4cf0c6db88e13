# bike_tracker/storage/exporters.py

"""Exporter interface and construction by id."""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from bike_tracker.config.settings import Settings
from bike_tracker.models.listing import Listing

logger = logging.getLogger("bike_tracker.exporters")


class Exporter(Protocol):
    """Anything that can take a batch of canonical listings."""

    def export(self, listings: Sequence[Listing]) -> Any: ...

    def close(self) -> None: ...


def resolve_exporter_ids(export_csv: str) -> list[str]:
    """Parse a comma-separated list of exporter ids.

    Raises ``ValueError`` on unknown ids.
    """
    available = {e["id"] for e in Settings.AVAILABLE_EXPORTERS}
    requested = [
        e.strip() for e in export_csv.split(",") if e.strip()
    ]
    unknown = [e for e in requested if e not in available]
    if unknown:
        msg = (
            f"Unknown exporter(s): {', '.join(unknown)} "
            f"(available: {', '.join(sorted(available))})"
        )
        raise ValueError(msg)
    return requested


def build_exporter(
    exporter_id: str,
    bike_type: str = "enduro",
    db_path: Path | None = None,
    sheets_credentials: Path | None = None,
    spreadsheet_id: str | None = None,
) -> Exporter:
    """Construct the exporter registered under *exporter_id*."""
    if exporter_id == "csv":
        from bike_tracker.storage.file_manager import CsvExporter

        return CsvExporter(bike_type)
    if exporter_id == "sheets":
        from bike_tracker.storage.sheets_exporter import SheetsExporter

        return SheetsExporter(sheets_credentials, spreadsheet_id)
    if exporter_id == "db":
        from bike_tracker.storage.listings_db import ListingsDB

        return ListingsDB(db_path)
    msg = f"Unknown exporter: {exporter_id}"
    raise ValueError(msg)
