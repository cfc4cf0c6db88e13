# tests/test_sheets_exporter.py

"""Tests for the Google Sheets exporter with a mocked gspread client."""

import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from bike_tracker.models.listing import Listing
from bike_tracker.storage.file_manager import CSV_HEADERS, listing_to_row
from bike_tracker.storage.sheets_exporter import (
    SheetsExporter,
    comparison_columns,
)


class TestSheetsExporter(unittest.TestCase):

    def setUp(self) -> None:
        self.client = MagicMock()
        self.spreadsheet = self.client.open_by_key.return_value
        self.worksheet = self.spreadsheet.get_worksheet.return_value
        self.worksheet.id = 42

    def test_appends_rows_and_dedupes(self) -> None:
        listing = Listing(title="2021 Kona Process X", year="2021")
        exporter = SheetsExporter(spreadsheet_id="sheet-1", client=self.client)

        sent = exporter.export([listing])

        self.assertEqual(sent, 1)
        self.client.open_by_key.assert_called_once_with("sheet-1")
        self.spreadsheet.get_worksheet.assert_called_once_with(0)
        self.worksheet.append_rows.assert_called_once_with(
            [listing_to_row(listing)],
            value_input_option="USER_ENTERED",
            insert_data_option="INSERT_ROWS",
        )
        body = self.spreadsheet.batch_update.call_args.args[0]
        self.assertEqual(
            body["requests"][0]["deleteDuplicates"]["range"]["sheetId"], 42
        )

    def test_dedupe_ignores_price_and_url(self) -> None:
        exporter = SheetsExporter(spreadsheet_id="sheet-1", client=self.client)
        exporter.export([Listing(title="2021 Kona Process X", year="2021")])

        body = self.spreadsheet.batch_update.call_args.args[0]
        columns = body["requests"][0]["deleteDuplicates"]["comparisonColumns"]
        self.assertEqual(
            columns,
            [
                {"sheetId": 42, "dimension": "COLUMNS",
                 "startIndex": 0, "endIndex": 4},
                {"sheetId": 42, "dimension": "COLUMNS",
                 "startIndex": 6, "endIndex": 12},
            ],
        )

    def test_comparison_columns_skip_volatile_fields(self) -> None:
        compared: set[str] = set()
        for span in comparison_columns(7):
            compared.update(CSV_HEADERS[span["startIndex"]:span["endIndex"]])
        self.assertNotIn("Price", compared)
        self.assertNotIn("Currency", compared)
        self.assertNotIn("Needs Review", compared)
        self.assertNotIn("URL", compared)
        self.assertIn("Rear Travel", compared)

    def test_empty_batch_skips_append(self) -> None:
        exporter = SheetsExporter(spreadsheet_id="sheet-1", client=self.client)
        self.assertEqual(exporter.export([]), 0)
        self.worksheet.append_rows.assert_not_called()

    def test_missing_spreadsheet_id(self) -> None:
        with patch(
            "bike_tracker.storage.sheets_exporter.Settings.SPREADSHEET_ID", ""
        ):
            with self.assertRaises(ValueError):
                SheetsExporter(client=self.client)

    @patch("bike_tracker.storage.sheets_exporter.gspread.authorize")
    @patch(
        "bike_tracker.storage.sheets_exporter.Credentials"
        ".from_service_account_file"
    )
    def test_authorizes_with_service_account(
        self, mock_from_file: MagicMock, mock_authorize: MagicMock,
    ) -> None:
        SheetsExporter(Path("creds.json"), "sheet-1")

        mock_from_file.assert_called_once()
        self.assertEqual(mock_from_file.call_args.args[0], "creds.json")
        mock_authorize.assert_called_once_with(mock_from_file.return_value)


if __name__ == "__main__":
    unittest.main()
