# bike_tracker/scrapers/pinkbike_scraper.py

"""Scraper for Pinkbike buy/sell listings and listing detail pages."""

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Generic, Protocol, TypeVar
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag

from bike_tracker.filters.text_extraction import parse_item_detail
from bike_tracker.models.listing import (
    Listing,
    ListingDetails,
    RawListing,
    parse_seller_type,
)
from bike_tracker.scrapers.base_scraper import BaseScraper, ScrapeError

T = TypeVar("T")

# Field → label as printed in each listing's spec block
_SPEC_LABELS: dict[str, str] = {
    "condition": "Condition :",
    "frame_size": "Frame Size :",
    "wheel_size": "Wheel Size :",
    "front_travel": "Front Travel :",
    "rear_travel": "Rear Travel :",
    "frame_material": "Material :",
}

_POST_DATE_FORMATS: tuple[str, ...] = ("%b-%d-%Y", "%Y-%m-%d", "%b %d, %Y")


@dataclass
class ScrapeFailure:
    """One item that could not be scraped, and why."""

    target: str
    reason: str


@dataclass
class ScrapeReport(Generic[T]):
    """Items scraped in one pass plus per-item failures."""

    items: list[T] = field(default_factory=lambda: list[T]())
    failures: list[ScrapeFailure] = field(
        default_factory=lambda: list[ScrapeFailure]()
    )
    pages_scraped: int = 0
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures


class DetailsLookup(Protocol):
    """Store able to tell whether a listing already has details."""

    def listing_has_details(self, listing_hash: str) -> bool: ...


def parse_post_date(text: str) -> datetime | None:
    """Parse Pinkbike's original-post-date text, or return ``None``."""
    cleaned = text.strip()
    for fmt in _POST_DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


def _labelled_value(container: Tag, label: str) -> str:
    """Return the text following a ``<b>label:</b>`` marker.

    Collects sibling text up to the next ``<b>`` or ``<br>``.
    """
    for bold in container.find_all("b"):
        if not bold.get_text(strip=True).startswith(label):
            continue
        parts: list[str] = []
        for sibling in bold.next_siblings:
            if isinstance(sibling, Tag) and sibling.name in ("b", "br"):
                break
            if isinstance(sibling, NavigableString):
                parts.append(str(sibling))
            elif isinstance(sibling, Tag):
                parts.append(sibling.get_text())
        return " ".join("".join(parts).split())
    return ""


class PinkbikeScraper(BaseScraper):
    """Scraper for pinkbike.com buy/sell classifieds."""

    def __init__(self, bike_type: str = "enduro") -> None:
        super().__init__("pinkbike")
        if bike_type not in self.settings.BIKE_TYPES:
            valid = ", ".join(sorted(self.settings.BIKE_TYPES))
            msg = f"Invalid bike type: {bike_type} (valid: {valid})"
            raise ValueError(msg)
        self.bike_type = bike_type

    def _get_homepage(self) -> str:
        return "https://www.pinkbike.com/"

    @property
    def start_url(self) -> str:
        category = self.settings.BIKE_TYPES[self.bike_type]
        return f"{self.settings.BASE_URL}?category={category}"

    # ── Listing pages ────────────────────────────────────

    def scrape_listings(
        self, num_pages: int | None = None,
    ) -> ScrapeReport[RawListing]:
        """Scrape up to *num_pages* listing pages, following "Next Page".

        A page that cannot be fetched ends pagination and is recorded
        as a failure; listings already collected are kept.
        """
        max_pages = num_pages or self.settings.MAX_PAGES
        report: ScrapeReport[RawListing] = ScrapeReport()
        url: str | None = self.start_url

        while url and report.pages_scraped < max_pages:
            self.logger.info(
                "[pinkbike] Scraping page %d: %s",
                report.pages_scraped + 1,
                url,
            )
            try:
                soup = self._get_page(url)
            except ScrapeError as exc:
                self.logger.error(
                    "[pinkbike] Page fetch failed: %s", exc, exc_info=True,
                )
                report.failures.append(ScrapeFailure(url, str(exc)))
                break

            self.parse_listing_page(soup, report)
            report.pages_scraped += 1
            url = self._next_page_url(soup)

        self.logger.info(
            "[pinkbike] Scraped %d listings from %d pages (%d failures)",
            len(report.items),
            report.pages_scraped,
            len(report.failures),
        )
        return report

    def parse_listing_page(
        self,
        soup: BeautifulSoup,
        report: ScrapeReport[RawListing],
    ) -> None:
        """Parse every listing row on a page into *report*."""
        rows = soup.select(self.selectors["listing_row"])
        for idx, row in enumerate(rows):
            try:
                report.items.append(self._parse_row(row))
            except (AttributeError, KeyError, ValueError) as exc:
                self.logger.warning(
                    "[pinkbike] Skipping row %d: %s", idx, exc,
                )
                report.failures.append(
                    ScrapeFailure(f"row {idx}", str(exc))
                )

    def _parse_row(self, row: Tag) -> RawListing:
        link = row.select_one(self.selectors["title_link"])
        if link is None:
            msg = "listing row has no title link"
            raise ValueError(msg)
        price_el = row.select_one(self.selectors["price"])

        href = link.get("href")
        url = urljoin(self.settings.BASE_URL, str(href)) if href else ""

        specs = {
            name: self._spec_value(row, label)
            for name, label in _SPEC_LABELS.items()
        }
        return RawListing(
            title=link.get_text().strip(),
            price=price_el.get_text().strip() if price_el else "",
            url=url,
            **specs,
        )

    def _spec_value(self, row: Tag, label: str) -> str:
        keyword = label.rstrip(" :")
        for div in row.select(self.selectors["spec_field"]):
            bold = div.find("b", recursive=False)
            if bold is not None and keyword in bold.get_text():
                return parse_item_detail(div.get_text(), label)
        return ""

    def _next_page_url(self, soup: BeautifulSoup) -> str | None:
        text = self.selectors["next_page_text"]
        for anchor in soup.find_all("a"):
            if anchor.get_text(strip=True) == text and anchor.get("href"):
                return urljoin(self.settings.BASE_URL, str(anchor["href"]))
        return None

    # ── Detail pages ─────────────────────────────────────

    def scrape_details(
        self,
        listings: Sequence[Listing],
        db: DetailsLookup | None = None,
    ) -> ScrapeReport[Listing]:
        """Return *listings* with their detail block filled in.

        Listings the *db* already holds details for are passed
        through untouched, as are listings whose page fails to load.
        """
        report: ScrapeReport[Listing] = ScrapeReport()
        for listing in listings:
            if not listing.url or (
                db is not None
                and db.listing_has_details(listing.hash)
            ):
                report.skipped += 1
                report.items.append(listing)
                continue
            try:
                soup = self._get_page(listing.url)
                details = self.parse_details_page(soup)
            except ScrapeError as exc:
                self.logger.warning(
                    "[pinkbike] Details failed for %s: %s",
                    listing.url,
                    exc,
                )
                report.failures.append(ScrapeFailure(listing.url, str(exc)))
                report.items.append(listing)
                continue
            report.pages_scraped += 1
            report.items.append(replace(listing, details=details))

        self.logger.info(
            "[pinkbike] Details: %d fetched, %d skipped, %d failed",
            report.pages_scraped,
            report.skipped,
            len(report.failures),
        )
        return report

    def parse_details_page(self, soup: BeautifulSoup) -> ListingDetails:
        """Extract seller type, post date, restrictions and description."""
        container = soup.select_one(self.selectors["details_container"])
        if container is None:
            msg = "details page has no listing container"
            raise ScrapeError(msg)

        description_el = soup.select_one(self.selectors["description"])
        description = (
            description_el.get_text().strip() if description_el else ""
        )
        return ListingDetails(
            seller_type=parse_seller_type(
                _labelled_value(container, "Seller Type")
            ),
            original_post_date=parse_post_date(
                _labelled_value(container, "Original Post Date")
            ),
            restrictions=_labelled_value(container, "Restrictions"),
            description=description,
        )
