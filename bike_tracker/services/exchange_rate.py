# bike_tracker/services/exchange_rate.py

"""Currency exchange-rate lookup."""

import logging
import time
from typing import Any

from curl_cffi import requests as curl_requests

from bike_tracker.config.settings import Settings

logger = logging.getLogger("bike_tracker.exchange_rate")


class ExchangeRateError(Exception):
    """The exchange rate could not be retrieved."""


def fetch_exchange_rate(
    base: str = "CAD",
    target: str = "USD",
    session: Any | None = None,
) -> float:
    """Return how many *target* units one *base* unit buys.

    Retries transient failures up to ``Settings.MAX_RETRIES`` times.
    Raises :class:`ExchangeRateError` when every attempt fails or the
    response has no rate for *target*.
    """
    session = session or curl_requests.Session(
        impersonate=Settings.IMPERSONATE_BROWSER,
    )
    url = Settings.EXCHANGE_RATE_URL.format(base=base)

    last_error = ""
    for attempt in range(Settings.MAX_RETRIES):
        try:
            resp = session.get(url, timeout=Settings.REQUEST_TIMEOUT)
            if resp.status_code == 200:
                data: dict[str, Any] = resp.json()
                rates: dict[str, Any] = data.get("rates") or {}
                if target not in rates:
                    msg = f"No {target} rate in response for {base}"
                    raise ExchangeRateError(msg)
                rate = float(rates[target])
                logger.info("%s to %s exchange rate: %f", base, target, rate)
                return rate
            last_error = f"HTTP {resp.status_code}"
            logger.warning(
                "[exchange_rate] HTTP %d on attempt %d",
                resp.status_code,
                attempt + 1,
            )
        except ExchangeRateError:
            raise
        except Exception as exc:
            last_error = str(exc)
            logger.warning(
                "[exchange_rate] Request error on attempt %d: %s",
                attempt + 1,
                exc,
                exc_info=True,
            )
        time.sleep(Settings.REQUEST_DELAY * (attempt + 1))

    msg = f"Could not fetch {base}->{target} rate: {last_error}"
    raise ExchangeRateError(msg)
