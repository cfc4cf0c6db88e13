# bike_tracker/config/settings.py

"""Central configuration for the bike_tracker engine."""

import os
from datetime import timedelta
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the bike_tracker engine."""

    # --- Scraping ---
    BASE_URL: str = "https://www.pinkbike.com/buysell/list/"
    REQUEST_DELAY: float = 2.0          # Seconds between requests
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures
    MAX_PAGES: int = 5                  # Default pagination depth

    # --- Resilience ---
    RETRY_BACKOFF: float = 2.0          # Delay multiplier per failed attempt
    CIRCUIT_BREAKER_THRESHOLD: int = 3  # Failed pages in a row before giving up

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "Upgrade-Insecure-Requests": "1",
    }

    # Pinkbike buy/sell category ids per bike type
    BIKE_TYPES: dict[str, int] = {
        "enduro": 2,
        "trail": 102,
        "xc": 75,
        "dh": 6,
    }

    # --- Extraction ---
    SUPPORTED_CURRENCIES: list[str] = ["CAD", "USD"]
    FOREIGN_CURRENCY: str = "CAD"       # Converted with the exchange rate
    MIN_YEAR: int = 1980
    MAX_YEAR_AHEAD: int = 2             # Model years run ahead of the calendar

    # --- Persistence policy ---
    PRICE_HISTORY_WINDOW: timedelta = timedelta(hours=24)
    INACTIVE_AFTER: timedelta = timedelta(days=7)

    # --- Exchange rate ---
    EXCHANGE_RATE_URL: str = (
        "https://api.exchangerate-api.com/v4/latest/{base}"
    )

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "bike_tracker" / "config" / "selectors.json"
    CATALOG_PATH: Path = BASE_DIR / "bike_tracker" / "config" / "bike_catalog.json"
    DATA_DIR: Path = BASE_DIR / "data"
    DB_PATH: Path = DATA_DIR / "listings.db"
    RUNS_DIR: Path = BASE_DIR / "runs"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Logging ---
    LOG_CONSOLE_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING").upper()
    # Areas quieter than the DEBUG default in the run log
    LOG_LEVELS: dict[str, str] = {
        "bike_tracker.filters": "INFO",     # one line per suspect listing
        "bike_tracker.pinkbike": "INFO",
    }

    # --- Google Sheets ---
    SHEETS_CREDENTIALS_PATH: Path = Path(
        os.getenv("SHEETS_CREDENTIALS_PATH", "sheets-credentials.json")
    )
    SPREADSHEET_ID: str = os.getenv("SPREADSHEET_ID", "")
    SHEETS_SCOPES: list[str] = [
        "https://www.googleapis.com/auth/spreadsheets",
    ]

    # --- Exporters (registry) ---
    AVAILABLE_EXPORTERS: list[dict[str, str]] = [
        {
            "id": "csv",
            "label": "CSV files",
        },
        {
            "id": "sheets",
            "label": "Google Sheets",
        },
        {
            "id": "db",
            "label": "SQLite database",
        },
    ]
