# tests/test_text_extraction.py

"""Tests for freeform text field extraction."""

import unittest
from datetime import datetime

from bike_tracker.filters.text_extraction import (
    clean_title,
    convert_price,
    extract_currency,
    extract_manufacturer,
    extract_model,
    extract_price,
    extract_year,
    parse_item_detail,
)

_NOW = datetime(2024, 6, 1)


class TestCleanTitle(unittest.TestCase):

    def test_strips_newlines_and_whitespace(self) -> None:
        self.assertEqual(
            clean_title("  2021 Norco\nSight\r\n "), "2021 NorcoSight"
        )

    def test_plain_title_unchanged(self) -> None:
        self.assertEqual(clean_title("Yeti SB150"), "Yeti SB150")


class TestParseItemDetail(unittest.TestCase):
    """Label stripping for the spec block fields."""

    def test_value_after_label(self) -> None:
        self.assertEqual(
            parse_item_detail("Condition : Excellent", "Condition :"),
            "Excellent",
        )

    def test_missing_label_gives_empty(self) -> None:
        self.assertEqual(
            parse_item_detail("Frame Size : L", "Condition :"), ""
        )

    def test_value_is_trimmed(self) -> None:
        self.assertEqual(
            parse_item_detail("Wheel Size :   29  ", "Wheel Size :"), "29"
        )


class TestExtractYear(unittest.TestCase):
    """Year window and digit-boundary rules."""

    def test_cases(self) -> None:
        cases = [
            ("2020 Santa Cruz Nomad", "2020"),
            ("Trek 8500", ""),
            ("The bike weighs 1234 grams", ""),
            ("2020 model upgraded to 2022 specs", "2020"),
            ("Vintage 1979 frame", ""),
            ("Future 2050 concept", ""),
            ("Kona Process (2023)", "2023"),
            ("No year here", ""),
        ]
        for title, expected in cases:
            with self.subTest(title=title):
                self.assertEqual(extract_year(title, _NOW), expected)

    def test_longer_number_is_not_a_year(self) -> None:
        self.assertEqual(extract_year("Serial 120213", _NOW), "")

    def test_upper_bound_follows_clock(self) -> None:
        self.assertEqual(extract_year("2026 Yeti SB160", _NOW), "2026")
        self.assertEqual(extract_year("2027 Yeti SB160", _NOW), "")


class TestExtractCurrency(unittest.TestCase):

    def test_cases(self) -> None:
        cases = [
            ("$1,804 CAD", "CAD"),
            ("$4500 USD", "USD"),
            ("3000 cad", "CAD"),
            ("$3000", ""),
        ]
        for text, expected in cases:
            with self.subTest(text=text):
                self.assertEqual(extract_currency(text), expected)


class TestExtractPrice(unittest.TestCase):

    def test_cases(self) -> None:
        cases = [
            ("1,000 CAD", "1000"),
            ("1000.00", "1000"),
            ("1000-1500", "1000"),
            ("1,000,000", "1000000"),
            ("$1,804 CAD", "1804"),
            ("Price on request", ""),
            ("", ""),
        ]
        for text, expected in cases:
            with self.subTest(text=text):
                self.assertEqual(extract_price(text), expected)


class TestConvertPrice(unittest.TestCase):
    """Foreign-currency conversion and rounding."""

    def test_cases(self) -> None:
        cases = [
            ("1000", "CAD", 0.75, "750"),
            ("1000", "USD", 0.75, "1000"),
            ("0", "CAD", 0.75, "0"),
            ("", "CAD", 0.75, ""),
            ("1000", "CAD", 0.01, "10"),
            ("1000", "CAD", 10.0, "10000"),
            ("$1,804 CAD", "CAD", 0.75, "1353"),
        ]
        for text, currency, rate, expected in cases:
            with self.subTest(text=text, currency=currency, rate=rate):
                self.assertEqual(
                    convert_price(text, currency, rate), expected
                )

    def test_half_rounds_away_from_zero(self) -> None:
        """2.5 rounds to 3, not to the even 2."""
        self.assertEqual(convert_price("5", "CAD", 0.5), "3")

    def test_unknown_currency_is_not_converted(self) -> None:
        self.assertEqual(convert_price("1200", "", 0.75), "1200")


class TestCatalogWrappers(unittest.TestCase):
    """Module-level helpers delegate to the packaged catalog."""

    def test_extract_manufacturer(self) -> None:
        self.assertEqual(extract_manufacturer("Evil Following"), "Evil")

    def test_extract_model(self) -> None:
        self.assertEqual(extract_model("Kona Process X"), "Process X")

    def test_extract_model_unknown(self) -> None:
        self.assertIsNone(extract_model("Bike Model"))


if __name__ == "__main__":
    unittest.main()
