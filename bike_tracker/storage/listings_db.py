# bike_tracker/storage/listings_db.py

"""SQLite-backed listing store with price history and staleness tracking."""

import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from bike_tracker.config.settings import Settings
from bike_tracker.models.catalog import NO_MANUFACTURER, NO_MODEL
from bike_tracker.models.listing import (
    Listing,
    ListingDetails,
    SellerType,
)
from bike_tracker.models.price_observation import PriceObservation

logger = logging.getLogger("bike_tracker.listings_db")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS listings (
    id                 INTEGER PRIMARY KEY AUTOINCREMENT,
    title              TEXT    NOT NULL,
    year               TEXT    NOT NULL DEFAULT '',
    manufacturer       TEXT    NOT NULL DEFAULT '',
    model              TEXT    NOT NULL DEFAULT '',
    price              TEXT    NOT NULL DEFAULT '',
    currency           TEXT    NOT NULL DEFAULT '',
    condition          TEXT    NOT NULL DEFAULT '',
    frame_size         TEXT    NOT NULL DEFAULT '',
    wheel_size         TEXT    NOT NULL DEFAULT '',
    front_travel       TEXT    NOT NULL DEFAULT '',
    rear_travel        TEXT    NOT NULL DEFAULT '',
    frame_material     TEXT    NOT NULL DEFAULT '',
    needs_review       TEXT    NOT NULL DEFAULT '',
    url                TEXT    NOT NULL DEFAULT '',
    hash               TEXT    NOT NULL UNIQUE,
    description        TEXT    NOT NULL DEFAULT '',
    restrictions       TEXT    NOT NULL DEFAULT '',
    seller_type        TEXT    NOT NULL DEFAULT 'private',
    original_post_date TEXT,
    first_seen         TEXT    NOT NULL,
    last_seen          TEXT    NOT NULL,
    active             INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS price_history (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    listing_hash TEXT    NOT NULL
                 REFERENCES listings(hash),
    price        TEXT    NOT NULL,
    currency     TEXT    NOT NULL,
    recorded_at  TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_listings_last_seen
    ON listings(last_seen);
CREATE INDEX IF NOT EXISTS idx_price_history_hash_date
    ON price_history(listing_hash, recorded_at);
"""

_UPSERT_SQL = """\
INSERT INTO listings (
    title, year, manufacturer, model, price, currency,
    condition, frame_size, wheel_size, frame_material,
    front_travel, rear_travel, needs_review, url, hash,
    description, restrictions, seller_type, original_post_date,
    first_seen, last_seen, active
)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1)
ON CONFLICT(hash) DO UPDATE SET
    last_seen = excluded.last_seen,
    active = 1,
    url = excluded.url,
    price = excluded.price,
    needs_review = excluded.needs_review
"""

_PRICE_HISTORY_SQL = """\
INSERT INTO price_history (listing_hash, price, currency, recorded_at)
SELECT ?, ?, ?, ?
WHERE NOT EXISTS (
    SELECT 1 FROM price_history
    WHERE listing_hash = ?
      AND price = ?
      AND currency = ?
      AND recorded_at > ?
)
"""

_SELECT_COLUMNS = """\
title, year, manufacturer, model, price, currency,
condition, frame_size, wheel_size, frame_material,
front_travel, rear_travel, url,
description, restrictions, seller_type, original_post_date,
first_seen, last_seen, active
"""


class ExportPhase(Enum):
    """Stage of a batch export, reported when it fails."""

    BEGIN = "begin transaction"
    UPSERT = "upsert listing"
    PRICE_HISTORY = "record price history"
    MARK_INACTIVE = "mark inactive listings"
    COMMIT = "commit transaction"


class ExportError(Exception):
    """A batch export failed and was rolled back."""

    def __init__(self, phase: ExportPhase, detail: str = "") -> None:
        self.phase = phase
        message = f"failed to {phase.value}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


@dataclass
class ExportSummary:
    """Counts produced by one committed batch export."""

    inserted: int = 0
    updated: int = 0
    price_changes: int = 0
    marked_inactive: int = 0


def _ts(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _from_label(value: str, sentinel: str) -> str | None:
    """Map a stored sentinel (or blank) back to ``None``."""
    return None if value in ("", sentinel) else value


class ListingsDB:
    """SQLite store reconciling scraped listings over time."""

    def __init__(
        self, db_path: Path | None = None,
    ) -> None:
        path = db_path or Settings.DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        # Transactions are issued explicitly, see transaction()
        self._conn = sqlite3.connect(
            str(path), check_same_thread=False, isolation_level=None,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.executescript(_SCHEMA)
        logger.debug("ListingsDB opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # ── Transactions ─────────────────────────────────────

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Run the block in one transaction; roll back on any exception."""
        try:
            self._conn.execute("BEGIN")
        except sqlite3.Error as exc:
            raise ExportError(ExportPhase.BEGIN, str(exc)) from exc

        cur = self._conn.cursor()
        try:
            yield cur
        except BaseException:
            self._rollback()
            raise

        try:
            self._conn.execute("COMMIT")
        except sqlite3.Error as exc:
            self._rollback()
            raise ExportError(ExportPhase.COMMIT, str(exc)) from exc

    def _rollback(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")
            logger.warning("Export transaction rolled back")

    # ── Export ───────────────────────────────────────────

    def export(
        self,
        listings: Sequence[Listing],
        now: datetime | None = None,
    ) -> ExportSummary:
        """Upsert a batch, track price changes and sweep stale rows.

        The whole batch runs in one transaction: either every listing
        is written and stale rows are deactivated, or nothing is.
        Raises :class:`ExportError` naming the failed phase.
        """
        now = now or datetime.now()
        summary = ExportSummary()

        with self.transaction() as cur:
            for listing in listings:
                try:
                    inserted = self._upsert_listing(cur, listing, now)
                except sqlite3.Error as exc:
                    raise ExportError(
                        ExportPhase.UPSERT, f"{listing.title!r}: {exc}",
                    ) from exc
                if inserted:
                    summary.inserted += 1
                else:
                    summary.updated += 1

                try:
                    if self._record_price(cur, listing, now):
                        summary.price_changes += 1
                except sqlite3.Error as exc:
                    raise ExportError(
                        ExportPhase.PRICE_HISTORY,
                        f"{listing.title!r}: {exc}",
                    ) from exc

            try:
                summary.marked_inactive = self._mark_inactive(cur, now)
            except sqlite3.Error as exc:
                raise ExportError(
                    ExportPhase.MARK_INACTIVE, str(exc),
                ) from exc

        logger.info(
            "Exported %d listings (%d new, %d seen again, "
            "%d price changes, %d marked inactive)",
            len(listings),
            summary.inserted,
            summary.updated,
            summary.price_changes,
            summary.marked_inactive,
        )
        return summary

    def _upsert_listing(
        self, cur: sqlite3.Cursor, listing: Listing, now: datetime,
    ) -> bool:
        """Insert or refresh one listing.  Returns True for a new row."""
        listing_hash = listing.hash
        existed = cur.execute(
            "SELECT 1 FROM listings WHERE hash = ?", (listing_hash,),
        ).fetchone() is not None

        details = listing.details
        ts = now.isoformat()
        cur.execute(_UPSERT_SQL, (
            listing.title, listing.year,
            listing.manufacturer_label, listing.model_label,
            listing.price, listing.currency,
            listing.condition, listing.frame_size,
            listing.wheel_size, listing.frame_material,
            listing.front_travel, listing.rear_travel,
            listing.needs_review, listing.url, listing_hash,
            details.description, details.restrictions,
            details.seller_type.value, _ts(details.original_post_date),
            ts, ts,
        ))
        return not existed

    def _record_price(
        self, cur: sqlite3.Cursor, listing: Listing, now: datetime,
    ) -> bool:
        """Append a price observation unless it repeats within the window."""
        listing_hash = listing.hash
        since = (now - Settings.PRICE_HISTORY_WINDOW).isoformat()
        cur.execute(_PRICE_HISTORY_SQL, (
            listing_hash, listing.price, listing.currency, now.isoformat(),
            listing_hash, listing.price, listing.currency, since,
        ))
        return cur.rowcount == 1

    def _mark_inactive(
        self, cur: sqlite3.Cursor, now: datetime,
    ) -> int:
        """Deactivate every listing not seen within the threshold."""
        cutoff = (now - Settings.INACTIVE_AFTER).isoformat()
        cur.execute(
            "UPDATE listings SET active = 0 "
            "WHERE active = 1 AND last_seen < ?",
            (cutoff,),
        )
        return cur.rowcount

    # ── Details ──────────────────────────────────────────

    def listing_has_details(self, listing_hash: str) -> bool:
        """Check whether a listing already has its detail block stored."""
        row = self._conn.execute(
            "SELECT EXISTS(SELECT 1 FROM listings "
            "WHERE hash = ? AND description != '')",
            (listing_hash,),
        ).fetchone()
        return bool(row[0])

    def update_details(
        self, listing_hash: str, details: ListingDetails,
    ) -> bool:
        """Store the detail block for an existing listing.

        Returns False when no listing has that hash.
        """
        with self.transaction() as cur:
            cur.execute(
                "UPDATE listings SET description = ?, restrictions = ?, "
                "seller_type = ?, original_post_date = ? "
                "WHERE hash = ?",
                (
                    details.description,
                    details.restrictions,
                    details.seller_type.value,
                    _ts(details.original_post_date),
                    listing_hash,
                ),
            )
            updated = cur.rowcount == 1
        if not updated:
            logger.debug(
                "No listing with hash %s to attach details to",
                listing_hash,
            )
        return updated

    # ── Querying ─────────────────────────────────────────

    def get_active_listings(self) -> list[Listing]:
        """Return every listing currently marked active."""
        rows = self._conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM listings "
            "WHERE active = 1 ORDER BY id",
        ).fetchall()
        return [self._row_to_listing(r) for r in rows]

    @staticmethod
    def _row_to_listing(r: Sequence[object]) -> Listing:
        return Listing(
            title=str(r[0]),
            year=str(r[1]),
            manufacturer=_from_label(str(r[2]), NO_MANUFACTURER),
            model=_from_label(str(r[3]), NO_MODEL),
            price=str(r[4]),
            currency=str(r[5]),
            condition=str(r[6]),
            frame_size=str(r[7]),
            wheel_size=str(r[8]),
            frame_material=str(r[9]),
            front_travel=str(r[10]),
            rear_travel=str(r[11]),
            url=str(r[12]),
            details=ListingDetails(
                description=str(r[13]),
                restrictions=str(r[14]),
                seller_type=SellerType(r[15] or SellerType.PRIVATE.value),
                original_post_date=_parse_ts(
                    r[16] if isinstance(r[16], str) else None
                ),
            ),
            first_seen=_parse_ts(str(r[17])),
            last_seen=_parse_ts(str(r[18])),
            active=bool(r[19]),
        )

    def get_price_history(
        self, listing_hash: str,
    ) -> list[PriceObservation]:
        """Return all price observations for a listing, oldest first."""
        rows = self._conn.execute(
            "SELECT listing_hash, price, currency, recorded_at "
            "FROM price_history WHERE listing_hash = ? "
            "ORDER BY recorded_at ASC, id ASC",
            (listing_hash,),
        ).fetchall()
        return [
            PriceObservation(
                listing_hash=r[0],
                price=r[1],
                currency=r[2],
                recorded_at=datetime.fromisoformat(r[3]),
            )
            for r in rows
        ]

    def count_listings(self, active_only: bool = False) -> int:
        """Return the number of stored listings."""
        sql = "SELECT COUNT(*) FROM listings"
        if active_only:
            sql += " WHERE active = 1"
        row = self._conn.execute(sql).fetchone()
        return int(row[0])
