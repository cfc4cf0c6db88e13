# bike_tracker/scrapers/base_scraper.py

"""Abstract base class for classifieds scrapers.

Every page goes through the same path: a polite pause, up to
``MAX_RETRIES`` curl_cffi attempts with exponential backoff, then a
single cloudscraper attempt.  Once ``CIRCUIT_BREAKER_THRESHOLD`` pages
in a row have failed, the scraper stops contacting the site for the
rest of the run and every further page fails fast.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from bike_tracker.config.settings import Settings


class ScrapeError(Exception):
    """A page could not be fetched after every retry and fallback."""


class BaseScraper(ABC):
    """Shared fetch path for one classifieds site."""

    # Anti-bot interstitials are served with HTTP 200
    _CHALLENGE_MARKERS: tuple[str, ...] = (
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "cf-turnstile",
        "just a moment",
    )

    # Statuses that may clear on a later attempt
    _RETRY_STATUSES: frozenset[int] = frozenset({403, 429, 500, 502, 503, 504})

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(f"bike_tracker.{source_name}")
        self.settings = Settings()
        self.selectors: dict[str, str] = self._load_selectors()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self.failed_in_a_row: int = 0
        self.gave_up: bool = False

    def _load_selectors(self) -> dict[str, str]:
        """Load CSS selectors for this source from selectors.json."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        return dict(all_selectors.get(self.source_name, {}))

    def _looks_like_challenge(self, html: str) -> bool:
        lower = html.lower()
        return any(marker in lower for marker in self._CHALLENGE_MARKERS)

    def _retry_delay(self, attempt: int, resp: Any | None = None) -> float:
        """Seconds to wait after failed *attempt* (0-based).

        A numeric ``Retry-After`` header wins over the backoff curve.
        """
        if resp is not None:
            retry_after = resp.headers.get("Retry-After")
            if isinstance(retry_after, str) and retry_after.isdigit():
                return float(retry_after)
        return self.settings.REQUEST_DELAY * (
            self.settings.RETRY_BACKOFF ** attempt
        )

    def _fetch_html(self, url: str, headers: dict[str, str]) -> str | None:
        """GET *url* through curl_cffi.

        Returns ``None`` when every attempt failed in a way worth
        handing to the fallback transport.  Raises :class:`ScrapeError`
        for a status no retry will change (e.g. a removed listing).
        """
        attempts = self.settings.MAX_RETRIES
        for attempt in range(attempts):
            resp: Any | None = None
            try:
                resp = self.session.get(
                    url, headers=headers, timeout=self.settings.REQUEST_TIMEOUT,
                )
            except Exception as exc:
                self.logger.warning(
                    "[%s] Attempt %d/%d for %s raised: %s",
                    self.source_name, attempt + 1, attempts, url, exc,
                    exc_info=True,
                )
            else:
                status = resp.status_code
                if status == 200 and not self._looks_like_challenge(resp.text):
                    return str(resp.text)
                if status != 200 and status not in self._RETRY_STATUSES:
                    msg = f"HTTP {status} for {url}"
                    raise ScrapeError(msg)
                self.logger.warning(
                    "[%s] Attempt %d/%d for %s got %s",
                    self.source_name, attempt + 1, attempts, url,
                    "a challenge page" if status == 200 else f"HTTP {status}",
                )
            if attempt + 1 < attempts:
                time.sleep(self._retry_delay(attempt, resp))
        return None

    def _fetch_with_cloudscraper(
        self, url: str, headers: dict[str, str],
    ) -> str | None:
        self.logger.info(
            "[%s] curl_cffi exhausted, trying cloudscraper for %s",
            self.source_name, url,
        )
        try:
            _cs: Any = cloudscraper
            resp: Any = _cs.create_scraper().get(
                url, headers=headers, timeout=self.settings.REQUEST_TIMEOUT,
            )
        except Exception as exc:
            self.logger.warning(
                "[%s] cloudscraper failed for %s: %s",
                self.source_name, url, exc, exc_info=True,
            )
            return None
        if resp.status_code != 200:
            self.logger.warning(
                "[%s] cloudscraper got HTTP %d for %s",
                self.source_name, resp.status_code, url,
            )
            return None
        return str(resp.text)

    def _note_failure(self) -> None:
        self.failed_in_a_row += 1
        if self.failed_in_a_row >= self.settings.CIRCUIT_BREAKER_THRESHOLD:
            self.gave_up = True
            self.logger.error(
                "[%s] %d pages failed in a row, skipping the rest of the run",
                self.source_name, self.failed_in_a_row,
            )

    def _get_page(self, url: str) -> BeautifulSoup:
        """Fetch and parse *url*, or raise :class:`ScrapeError`."""
        if self.gave_up:
            msg = f"{self.source_name} unreachable, skipped {url}"
            raise ScrapeError(msg)
        headers = {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self._get_homepage(),
        }
        time.sleep(self.settings.REQUEST_DELAY)

        html = self._fetch_html(url, headers)
        if html is None:
            html = self._fetch_with_cloudscraper(url, headers)
        if html is None:
            self._note_failure()
            msg = f"Every transport failed for {url}"
            raise ScrapeError(msg)

        self.failed_in_a_row = 0
        return BeautifulSoup(html, "lxml")

    @abstractmethod
    def _get_homepage(self) -> str:
        """Return the homepage URL for the Referer header."""
        ...
