# bike_tracker/services/normalizer.py

"""Turn raw scraped listings into canonical listings."""

import logging
from collections.abc import Iterable

from bike_tracker.filters.text_extraction import (
    clean_title,
    convert_price,
    extract_currency,
    extract_year,
)
from bike_tracker.models.catalog import BikeCatalog, default_catalog
from bike_tracker.models.listing import Listing, RawListing

logger = logging.getLogger("bike_tracker.normalizer")


def post_process(
    raw: RawListing,
    exchange_rate: float,
    catalog: BikeCatalog | None = None,
) -> Listing:
    """Normalize one raw listing.  Pure: no I/O, never raises on bad text.

    The hash and review reason are properties of the returned listing,
    derived from the fields set here.
    """
    catalog = catalog or default_catalog()
    title = clean_title(raw.title)
    manufacturer = catalog.extract_manufacturer(title)
    currency = extract_currency(raw.price)

    return Listing(
        title=title,
        year=extract_year(title),
        manufacturer=manufacturer,
        model=catalog.extract_model(title, manufacturer),
        price=convert_price(raw.price, currency, exchange_rate),
        currency=currency,
        condition=raw.condition,
        frame_size=raw.frame_size,
        wheel_size=raw.wheel_size,
        frame_material=raw.frame_material,
        front_travel=raw.front_travel,
        rear_travel=raw.rear_travel,
        url=raw.url or raw.details_url,
    )


def normalize_all(
    raws: Iterable[RawListing],
    exchange_rate: float,
    catalog: BikeCatalog | None = None,
) -> list[Listing]:
    """Normalize a batch of raw listings, preserving order."""
    catalog = catalog or default_catalog()
    listings = [post_process(r, exchange_rate, catalog) for r in raws]
    flagged = sum(1 for lst in listings if lst.needs_review)
    logger.info(
        "Normalized %d listings (%d clean, %d need review)",
        len(listings),
        len(listings) - flagged,
        flagged,
    )
    return listings
