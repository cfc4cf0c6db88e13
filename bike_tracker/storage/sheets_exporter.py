# bike_tracker/storage/sheets_exporter.py

"""Append listings to a Google Sheet and drop duplicate rows."""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import gspread
from google.oauth2.service_account import Credentials

from bike_tracker.config.settings import Settings
from bike_tracker.models.listing import Listing
from bike_tracker.storage.file_manager import CSV_HEADERS, listing_to_row

logger = logging.getLogger("bike_tracker.sheets")

# Columns compared when dropping duplicate rows (price, currency, review
# flag and URL excluded)
_IDENTITY_COLUMNS: tuple[str, ...] = (
    "Title", "Year", "Manufacturer", "Model",
    "Condition", "Frame Size", "Wheel Size", "Frame Material",
    "Front Travel", "Rear Travel",
)


def comparison_columns(sheet_id: int) -> list[dict[str, Any]]:
    """Return the identity columns as contiguous ``DimensionRange``s."""
    indexes = sorted(CSV_HEADERS.index(name) for name in _IDENTITY_COLUMNS)
    spans: list[list[int]] = []
    for idx in indexes:
        if spans and spans[-1][1] == idx:
            spans[-1][1] = idx + 1
        else:
            spans.append([idx, idx + 1])
    return [
        {
            "sheetId": sheet_id,
            "dimension": "COLUMNS",
            "startIndex": start,
            "endIndex": end,
        }
        for start, end in spans
    ]


class SheetsExporter:
    """Exporter appending listing rows to the first worksheet."""

    def __init__(
        self,
        credentials_path: Path | None = None,
        spreadsheet_id: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.spreadsheet_id = spreadsheet_id or Settings.SPREADSHEET_ID
        if not self.spreadsheet_id:
            msg = "No spreadsheet id configured (set SPREADSHEET_ID)"
            raise ValueError(msg)

        if client is None:
            creds = Credentials.from_service_account_file(
                str(credentials_path or Settings.SHEETS_CREDENTIALS_PATH),
                scopes=Settings.SHEETS_SCOPES,
            )
            client = gspread.authorize(creds)
        self._client: Any = client

    def export(self, listings: Sequence[Listing]) -> int:
        """Append *listings* and remove duplicates.  Returns rows sent."""
        spreadsheet = self._client.open_by_key(self.spreadsheet_id)
        worksheet = spreadsheet.get_worksheet(0)

        rows = [listing_to_row(listing) for listing in listings]
        if rows:
            worksheet.append_rows(
                rows,
                value_input_option="USER_ENTERED",
                insert_data_option="INSERT_ROWS",
            )

        spreadsheet.batch_update({
            "requests": [{
                "deleteDuplicates": {
                    "range": {"sheetId": worksheet.id},
                    "comparisonColumns": comparison_columns(worksheet.id),
                },
            }],
        })

        logger.info(
            "Appended %d rows to spreadsheet %s",
            len(rows),
            self.spreadsheet_id,
        )
        return len(rows)

    def close(self) -> None:
        """gspread holds no open resources between calls."""
