# bike_tracker/config/logging_config.py

"""Run logging for bike_tracker.

Every run writes one file, ``logs/run_YYYYMMDD_HHMMSS.log``, holding
all ``bike_tracker.*`` records at DEBUG except the areas listed in
``Settings.LOG_LEVELS``.  Stderr only shows ``Settings.LOG_CONSOLE_LEVEL``
and above (``LOG_LEVEL`` in ``.env``; ``--verbose`` lowers it to INFO).
"""

import logging
import logging.config
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from bike_tracker.config.settings import Settings

if TYPE_CHECKING:
    from bike_tracker.services.pipeline import RunOptions

PROJECT_LOGGER = "bike_tracker"


def build_config(log_file: Path, console_level: str) -> dict[str, Any]:
    """Return the ``dictConfig`` schema for one run."""
    area_loggers: dict[str, Any] = {
        name: {"level": level} for name, level in Settings.LOG_LEVELS.items()
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "run_file": {
                "format": (
                    "%(asctime)s %(levelname)-8s %(name)s "
                    "%(funcName)s:%(lineno)d  %(message)s"
                ),
                "datefmt": "%H:%M:%S",
            },
            "console": {"format": "%(levelname)s %(name)s: %(message)s"},
        },
        "handlers": {
            "run_file": {
                "class": "logging.FileHandler",
                "filename": str(log_file),
                "encoding": "utf-8",
                "level": "DEBUG",
                "formatter": "run_file",
            },
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "level": console_level,
                "formatter": "console",
            },
        },
        "loggers": {
            PROJECT_LOGGER: {
                "level": "DEBUG",
                "handlers": ["run_file", "console"],
                "propagate": False,
            },
            **area_loggers,
        },
    }


def current_log_file() -> Path | None:
    """Path of the run log already configured, if any."""
    for handler in logging.getLogger(PROJECT_LOGGER).handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def setup_logging(console_level: str | None = None) -> Path:
    """Configure run logging once per process and return the log file."""
    existing = current_log_file()
    if existing is not None:
        return existing

    Settings.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    log_file = Settings.LOGS_DIR / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"
    logging.config.dictConfig(
        build_config(log_file, console_level or Settings.LOG_CONSOLE_LEVEL)
    )
    return log_file


def log_run_header(options: "RunOptions") -> None:
    """Record what this run was asked to do at the top of the log."""
    run_logger = logging.getLogger(f"{PROJECT_LOGGER}.run")
    source = {
        "web": f"pinkbike/{options.bike_type}, {options.num_pages} page(s)",
        "file": str(options.file_path),
        "db": str(options.db_path or Settings.DB_PATH),
    }.get(options.input_mode, options.input_mode)
    run_logger.info("Input: %s (%s)", options.input_mode, source)
    run_logger.info("Exporters: %s", ", ".join(options.exporter_ids) or "none")
    if options.get_details:
        run_logger.info("Detail pages will be fetched")
    if options.exchange_rate is not None:
        run_logger.info("Fixed CAD→USD rate: %s", options.exchange_rate)
