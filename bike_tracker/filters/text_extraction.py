# bike_tracker/filters/text_extraction.py

"""Pull structured fields out of freeform listing text.

Every helper degrades to ``""`` (or ``None`` for catalog lookups)
instead of raising, so one malformed listing never halts a run; the
gaps surface later as a review reason.
"""

import math
import re
from datetime import datetime

from bike_tracker.config.settings import Settings
from bike_tracker.models.catalog import BikeCatalog, default_catalog

# 4-digit runs that are not part of a longer number
_YEAR_RE = re.compile(r"(?<!\d)\d{4}(?!\d)")

_CURRENCY_RE = re.compile(
    "|".join(Settings.SUPPORTED_CURRENCIES), re.IGNORECASE,
)

# First number, allowing thousands separators ("1,804")
_PRICE_RE = re.compile(r"\d[\d,]*")


def clean_title(title: str) -> str:
    """Drop embedded newlines and surrounding whitespace."""
    return title.replace("\r", "").replace("\n", "").strip()


def parse_item_detail(detail: str, label: str) -> str:
    """Return the text after *label*, e.g. ``"Condition : Good"`` → ``"Good"``."""
    _, found, value = detail.partition(label)
    if not found:
        return ""
    return value.strip()


def extract_year(title: str, now: datetime | None = None) -> str:
    """Return the first plausible model year in *title*, or ``""``.

    Four-digit figures outside the window (weights, travel, model
    numbers like "Trek 8500") are skipped.
    """
    max_year = (now or datetime.now()).year + Settings.MAX_YEAR_AHEAD
    for match in _YEAR_RE.finditer(title):
        if Settings.MIN_YEAR <= int(match.group()) <= max_year:
            return match.group()
    return ""


def extract_currency(price_text: str) -> str:
    """Return the currency code in *price_text*, uppercased, or ``""``."""
    match = _CURRENCY_RE.search(price_text)
    return match.group().upper() if match else ""


def extract_price(price_text: str) -> str:
    """Return the first number in *price_text* without separators."""
    match = _PRICE_RE.search(price_text)
    if not match:
        return ""
    return match.group().replace(",", "")


def convert_price(
    price_text: str, currency: str, exchange_rate: float,
) -> str:
    """Return the whole-unit price, converted when in the foreign currency.

    Returns ``""`` when no number can be parsed so validation reports
    a missing price.
    """
    price = extract_price(price_text)
    try:
        value = float(price)
    except ValueError:
        return ""

    if currency == Settings.FOREIGN_CURRENCY:
        # Half away from zero, not banker's rounding
        return str(int(math.floor(value * exchange_rate + 0.5)))
    return price


def extract_manufacturer(
    title: str, catalog: BikeCatalog | None = None,
) -> str | None:
    """Return the manufacturer named in *title*, or ``None``."""
    return (catalog or default_catalog()).extract_manufacturer(title)


def extract_model(
    title: str,
    catalog: BikeCatalog | None = None,
    manufacturer: str | None = None,
) -> str | None:
    """Return the model named in *title*, or ``None``."""
    return (catalog or default_catalog()).extract_model(
        title, manufacturer,
    )
