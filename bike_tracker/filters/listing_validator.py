# bike_tracker/filters/listing_validator.py

"""Listing validation: classify listings as clean or needing review."""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from bike_tracker.models.catalog import (
    ELECTRIC_SUFFIX,
    NO_MANUFACTURER,
    NO_MODEL,
)

if TYPE_CHECKING:
    from bike_tracker.models.listing import Listing

logger = logging.getLogger("bike_tracker.filters")


def _bad_model(model: str | None) -> bool:
    # Electric bikes parse fine but always go to manual review
    return (
        not model
        or model == NO_MODEL
        or ELECTRIC_SUFFIX.strip() in model
    )


# Checked in order; the first failing field is the review reason.
_CHECKS: list[tuple[str, Callable[["Listing"], bool]]] = [
    ("price", lambda x: x.price in ("", "0")),
    ("year", lambda x: not x.year),
    (
        "manufacturer",
        lambda x: not x.manufacturer or x.manufacturer == NO_MANUFACTURER,
    ),
    ("model", lambda x: _bad_model(x.model)),
    ("currency", lambda x: not x.currency),
    ("condition", lambda x: not x.condition),
    ("frame size", lambda x: not x.frame_size),
    ("wheel size", lambda x: not x.wheel_size),
    ("front travel", lambda x: not x.front_travel),
    ("rear travel", lambda x: not x.rear_travel),
    ("frame material", lambda x: not x.frame_material),
]

REVIEW_REASONS: tuple[str, ...] = tuple(name for name, _ in _CHECKS)


def validate_listing(listing: "Listing") -> str:
    """Return the first failing field name, or ``""`` when clean."""
    for reason, failed in _CHECKS:
        if failed(listing):
            return reason
    return ""


class ListingValidator:
    """Split listings into clean and needs-review groups."""

    @staticmethod
    def split(
        listings: list["Listing"],
    ) -> tuple[list["Listing"], list["Listing"]]:
        """Return ``(clean, needs_review)`` preserving input order."""
        clean: list["Listing"] = []
        suspect: list["Listing"] = []

        for listing in listings:
            reason = listing.needs_review
            if reason:
                logger.debug(
                    "Listing needs review (reason=%s, title=%s)",
                    reason,
                    listing.title,
                )
                suspect.append(listing)
            else:
                clean.append(listing)

        if suspect:
            logger.info(
                "Validation flagged %d of %d listings for review",
                len(suspect),
                len(listings),
            )

        return clean, suspect
