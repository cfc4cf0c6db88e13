# tests/test_listing_validator.py

"""Tests for listing validation and the clean/suspect split."""

import unittest
from dataclasses import replace

from bike_tracker.filters.listing_validator import (
    REVIEW_REASONS,
    ListingValidator,
    validate_listing,
)
from bike_tracker.models.catalog import NO_MANUFACTURER, NO_MODEL
from bike_tracker.models.listing import Listing


def _clean() -> Listing:
    return Listing(
        title="2022 Norco Range C2",
        year="2022",
        manufacturer="Norco",
        model="Range",
        price="4200",
        currency="CAD",
        condition="Good",
        frame_size="M",
        wheel_size="29",
        frame_material="Carbon",
        front_travel="170",
        rear_travel="170",
    )


class TestValidateListing(unittest.TestCase):
    """Each field check and the order they are applied in."""

    def test_clean_listing(self) -> None:
        self.assertEqual(validate_listing(_clean()), "")

    def test_each_missing_field(self) -> None:
        cases = [
            ({"price": ""}, "price"),
            ({"price": "0"}, "price"),
            ({"year": ""}, "year"),
            ({"manufacturer": None}, "manufacturer"),
            ({"manufacturer": NO_MANUFACTURER}, "manufacturer"),
            ({"model": None}, "model"),
            ({"model": NO_MODEL}, "model"),
            ({"model": "Range VLT Electric"}, "model"),
            ({"currency": ""}, "currency"),
            ({"condition": ""}, "condition"),
            ({"frame_size": ""}, "frame size"),
            ({"wheel_size": ""}, "wheel size"),
            ({"front_travel": ""}, "front travel"),
            ({"rear_travel": ""}, "rear travel"),
            ({"frame_material": ""}, "frame material"),
        ]
        for overrides, expected in cases:
            with self.subTest(overrides=overrides):
                listing = replace(_clean(), **overrides)  # type: ignore[arg-type]
                self.assertEqual(validate_listing(listing), expected)

    def test_first_failure_wins(self) -> None:
        """Price is reported ahead of everything else."""
        listing = replace(
            _clean(), price="", year="", model=None, frame_material="",
        )
        self.assertEqual(validate_listing(listing), "price")

        listing = replace(_clean(), year="", frame_material="")
        self.assertEqual(validate_listing(listing), "year")

    def test_reason_order(self) -> None:
        self.assertEqual(
            REVIEW_REASONS,
            (
                "price", "year", "manufacturer", "model", "currency",
                "condition", "frame size", "wheel size",
                "front travel", "rear travel", "frame material",
            ),
        )


class TestListingValidatorSplit(unittest.TestCase):

    def test_split_preserves_order(self) -> None:
        a = _clean()
        b = replace(_clean(), title="2020 Norco Sight", year="")
        c = replace(_clean(), title="2019 Norco Optic", model="Optic")
        clean, suspect = ListingValidator.split([a, b, c])
        self.assertEqual(clean, [a, c])
        self.assertEqual(suspect, [b])

    def test_split_empty(self) -> None:
        self.assertEqual(ListingValidator.split([]), ([], []))


if __name__ == "__main__":
    unittest.main()
