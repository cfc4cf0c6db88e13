# bike_tracker/models/price_observation.py

"""Price observation model for the price-history ledger."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class PriceObservation:
    """A single recorded price for a listing at a point in time."""

    listing_hash: str
    price: str
    currency: str
    recorded_at: datetime
