# tests/test_exporters.py

"""Tests for exporter id parsing and construction."""

import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from bike_tracker.config.settings import Settings
from bike_tracker.storage.exporters import build_exporter, resolve_exporter_ids
from bike_tracker.storage.file_manager import CsvExporter
from bike_tracker.storage.listings_db import ListingsDB


class TestResolveExporterIds(unittest.TestCase):

    def test_parses_comma_list(self) -> None:
        self.assertEqual(
            resolve_exporter_ids("csv, db,sheets"), ["csv", "db", "sheets"]
        )

    def test_ignores_blanks(self) -> None:
        self.assertEqual(resolve_exporter_ids("csv,,"), ["csv"])
        self.assertEqual(resolve_exporter_ids(""), [])

    def test_unknown_id_rejected(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            resolve_exporter_ids("csv,xml")
        self.assertIn("xml", str(ctx.exception))


class TestBuildExporter(unittest.TestCase):

    def setUp(self) -> None:
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.tmp_dir)

    def test_csv(self) -> None:
        with patch.object(Settings, "RUNS_DIR", self.tmp_dir):
            exporter = build_exporter("csv", bike_type="xc")
        self.assertIsInstance(exporter, CsvExporter)
        assert isinstance(exporter, CsvExporter)
        self.assertEqual(exporter.bike_type, "xc")

    def test_db(self) -> None:
        exporter = build_exporter("db", db_path=self.tmp_dir / "x.db")
        self.addCleanup(exporter.close)
        self.assertIsInstance(exporter, ListingsDB)

    @patch("bike_tracker.storage.sheets_exporter.SheetsExporter")
    def test_sheets(self, mock_sheets: MagicMock) -> None:
        exporter = build_exporter(
            "sheets",
            sheets_credentials=Path("creds.json"),
            spreadsheet_id="sheet-1",
        )
        mock_sheets.assert_called_once_with(Path("creds.json"), "sheet-1")
        self.assertIs(exporter, mock_sheets.return_value)

    def test_unknown(self) -> None:
        with self.assertRaises(ValueError):
            build_exporter("xml")


if __name__ == "__main__":
    unittest.main()
