# bike_tracker/models/listing.py

"""Listing data models for inter-module data flow."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from bike_tracker.filters.identity import compute_hash
from bike_tracker.filters.listing_validator import validate_listing
from bike_tracker.models.catalog import NO_MANUFACTURER, NO_MODEL


class SellerType(Enum):
    """Who is selling the bike."""

    PRIVATE = "private"
    BUSINESS = "business"


def parse_seller_type(text: str) -> SellerType:
    """Map a free-text seller label to a :class:`SellerType`.

    Anything mentioning "business" is a business seller; everything
    else, including an empty label, is treated as private.
    """
    if "business" in text.strip().lower():
        return SellerType.BUSINESS
    return SellerType.PRIVATE


@dataclass
class RawListing:
    """A scraped, unprocessed listing observation.

    Spec fields are expected to be label-stripped already
    (``"Condition : Good"`` → ``"Good"``).
    """

    title: str
    price: str = ""
    condition: str = ""
    frame_size: str = ""
    wheel_size: str = ""
    frame_material: str = ""
    front_travel: str = ""
    rear_travel: str = ""
    url: str = ""
    details_url: str = ""


@dataclass
class ListingDetails:
    """Extra fields filled in by the detail-page pass."""

    seller_type: SellerType = SellerType.PRIVATE
    original_post_date: datetime | None = None
    description: str = ""
    restrictions: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.description


@dataclass
class Listing:
    """A normalized, structured bike listing.

    ``hash`` and ``needs_review`` are always derived from the other
    fields; they cannot be set directly.
    """

    title: str
    year: str = ""
    manufacturer: str | None = None
    model: str | None = None
    price: str = ""
    currency: str = ""
    condition: str = ""
    frame_size: str = ""
    wheel_size: str = ""
    frame_material: str = ""
    front_travel: str = ""
    rear_travel: str = ""
    url: str = ""
    details: ListingDetails = field(default_factory=ListingDetails)
    first_seen: datetime | None = None
    last_seen: datetime | None = None
    active: bool = True

    @property
    def manufacturer_label(self) -> str:
        """Manufacturer for serialization, with the not-found sentinel."""
        return self.manufacturer or NO_MANUFACTURER

    @property
    def model_label(self) -> str:
        """Model for serialization, with the not-found sentinel."""
        return self.model or NO_MODEL

    @property
    def hash(self) -> str:
        return compute_hash(self)

    @property
    def needs_review(self) -> str:
        """Name of the first invalid field, or ``""`` when clean."""
        return validate_listing(self)

    @property
    def is_clean(self) -> bool:
        return self.needs_review == ""
