# bike_tracker/filters/identity.py

"""Content hash used as the listing deduplication key."""

import hashlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bike_tracker.models.listing import Listing

# ASCII unit separator, removed from field values before joining
FIELD_SEPARATOR = "\x1f"


def compute_hash(listing: "Listing") -> str:
    """Return the SHA-256 hex digest identifying *listing*.

    Manufacturer is left out because the model implies it.  Price and
    URL are left out so a repriced or relisted bike keeps its identity.
    """
    fields = [
        listing.title.lower(),
        listing.year,
        listing.model_label,
        listing.condition.lower(),
        listing.frame_size.lower(),
        listing.frame_material.lower(),
        listing.front_travel,
        listing.rear_travel,
    ]
    unique = FIELD_SEPARATOR.join(
        value.replace(FIELD_SEPARATOR, "") for value in fields
    )
    return hashlib.sha256(unique.encode("utf-8")).hexdigest()
