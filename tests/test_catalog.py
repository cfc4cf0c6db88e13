# tests/test_catalog.py

"""Tests for the manufacturer/model catalog lookups."""

import json
import tempfile
import unittest
from pathlib import Path

from bike_tracker.models.catalog import (
    BikeCatalog,
    BikeModel,
    Purpose,
    default_catalog,
)


class TestExtractManufacturer(unittest.TestCase):
    """Manufacturer lookup against the packaged catalog."""

    def setUp(self) -> None:
        self.catalog = default_catalog()

    def test_cases(self) -> None:
        cases = [
            ("2025 Marin Alpine Trail XR", "Marin"),
            ("2019 Fezzari La Sal Peak (Carbon, Medium, 170/150mm)", "Fezzari"),
            ("Evil Following", "Evil"),
            ("Yeti SB150", "Yeti"),
            ("Rocky Mountain Altitude", "Rocky Mountain"),
            ("GT Sensor", "GT"),
            ("YT Capra", "YT"),
            ("The Transition from hardtail to full suspension", "Transition"),
            ("This bike is a Giant", "Giant"),
            ("evil following", "Evil"),
            ("ROCKY MOUNTAIN ALTITUDE", "Rocky Mountain"),
            ("sAnTa CrUz Bronson", "Santa Cruz"),
        ]
        for title, expected in cases:
            with self.subTest(title=title):
                self.assertEqual(
                    self.catalog.extract_manufacturer(title), expected
                )

    def test_no_manufacturer(self) -> None:
        self.assertIsNone(self.catalog.extract_manufacturer("Bike Model"))

    def test_short_brand_inside_longer_word_loses(self) -> None:
        """"Ari" inside "Fezzari" must not win over Fezzari."""
        self.assertEqual(
            self.catalog.extract_manufacturer("Fezzari Signal Peak"),
            "Fezzari",
        )


class TestExtractModel(unittest.TestCase):
    """Model lookup, longest match and the electric suffix."""

    def setUp(self) -> None:
        self.catalog = default_catalog()

    def test_cases(self) -> None:
        cases = [
            ("Santa Cruz Bronson Carbon CC", "Bronson"),
            ("Trek Fuel eX", "Fuel EX"),
            ("Transition Sentinel GX", "Sentinel"),
            ("Specialized Turbo Levo", "Turbo Levo Electric"),
            ("Liv Embolden E+", "Embolden E+ Electric"),
            ("Kona Process X", "Process X"),
            ("Ibis Ripmo V2", "Ripmo V2"),
            ("Commencal Meta AM", "Meta AM"),
            ("Canyon Grand Canyon", "Grand Canyon"),
            ("Stumpjumper from Specialized", "Stumpjumper"),
        ]
        for title, expected in cases:
            with self.subTest(title=title):
                self.assertEqual(self.catalog.extract_model(title), expected)

    def test_unknown_model(self) -> None:
        self.assertIsNone(
            self.catalog.extract_model("Specialized Unknown")
        )

    def test_no_manufacturer_means_no_model(self) -> None:
        self.assertIsNone(self.catalog.extract_model("Mystery Enduro"))

    def test_explicit_manufacturer_restricts_models(self) -> None:
        """Only the given manufacturer's models are considered."""
        self.assertIsNone(
            self.catalog.extract_model("Bronson frame", "Trek")
        )
        self.assertEqual(
            self.catalog.extract_model("Bronson frame", "Santa Cruz"),
            "Bronson",
        )


class TestLongestMatchWins(unittest.TestCase):
    """Scan order never decides between overlapping names."""

    def test_longest_model_regardless_of_order(self) -> None:
        for order in (["Process", "Process X"], ["Process X", "Process"]):
            with self.subTest(order=order):
                catalog = BikeCatalog({
                    "Kona": [BikeModel(name) for name in order],
                })
                self.assertEqual(
                    catalog.extract_model("Kona Process X 2022"),
                    "Process X",
                )

    def test_longest_manufacturer_regardless_of_order(self) -> None:
        for order in (["Rocky", "Rocky Mountain"], ["Rocky Mountain", "Rocky"]):
            with self.subTest(order=order):
                catalog = BikeCatalog({name: [] for name in order})
                self.assertEqual(
                    catalog.extract_manufacturer("Rocky Mountain Slayer"),
                    "Rocky Mountain",
                )


class TestCatalogConstruction(unittest.TestCase):
    """Building catalogs from dicts and JSON files."""

    def test_from_dict_reads_purpose(self) -> None:
        catalog = BikeCatalog.from_dict({
            "Orbea": [
                {"name": "Occam"},
                {"name": "Rise", "purpose": "electric"},
            ],
        })
        models = catalog.models_for("Orbea")
        self.assertEqual([m.name for m in models], ["Occam", "Rise"])
        self.assertEqual(models[0].purpose, Purpose.STANDARD)
        self.assertTrue(models[1].is_electric)

    def test_from_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "catalog.json"
            path.write_text(
                json.dumps({"Norco": [{"name": "Sight"}]}),
                encoding="utf-8",
            )
            catalog = BikeCatalog.from_json(path)
        self.assertEqual(catalog.manufacturers, ("Norco",))
        self.assertEqual(catalog.extract_model("Norco Sight C2"), "Sight")

    def test_unknown_manufacturer_has_no_models(self) -> None:
        self.assertEqual(default_catalog().models_for("Nobody"), ())

    def test_default_catalog_is_cached(self) -> None:
        self.assertIs(default_catalog(), default_catalog())

    def test_catalog_is_read_only(self) -> None:
        catalog = BikeCatalog({"Kona": [BikeModel("Process")]})
        with self.assertRaises(TypeError):
            catalog._models["Trek"] = ()  # type: ignore[index]


if __name__ == "__main__":
    unittest.main()
