# bike_tracker/models/catalog.py

"""Manufacturer → model reference catalog used by title extraction."""

import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

from bike_tracker.config.settings import Settings

logger = logging.getLogger("bike_tracker.catalog")

ELECTRIC_SUFFIX = " Electric"
NO_MANUFACTURER = "no manufacturer found"
NO_MODEL = "no model found"


class Purpose(Enum):
    """What a catalog model is built for."""

    STANDARD = "standard"
    ELECTRIC = "electric"


@dataclass(frozen=True)
class BikeModel:
    """A single known model name and its purpose tag."""

    name: str
    purpose: Purpose = Purpose.STANDARD

    @property
    def is_electric(self) -> bool:
        return self.purpose is Purpose.ELECTRIC


def _word_pattern(name: str) -> re.Pattern[str]:
    """Case-insensitive match of *name* not glued to other word chars.

    ``\\b`` misbehaves next to names ending in punctuation
    (``Embolden E+``), so explicit look-arounds are used instead.
    """
    return re.compile(
        rf"(?<!\w){re.escape(name)}(?!\w)", re.IGNORECASE,
    )


def _longest(names: Iterable[str]) -> str | None:
    """Return the longest name, or ``None`` for an empty input."""
    return max(names, key=len, default=None)


class BikeCatalog:
    """Immutable manufacturer → models lookup.

    Matching rules shared by both lookups: when several catalog entries
    match a title, the one with the longest name wins regardless of
    scan order.  Word-anchored matches are preferred; unanchored
    substring matching is only a fallback.
    """

    def __init__(
        self,
        models: Mapping[str, Iterable[BikeModel]],
    ) -> None:
        self._models: Mapping[str, tuple[BikeModel, ...]] = (
            MappingProxyType({
                manufacturer: tuple(entries)
                for manufacturer, entries in models.items()
            })
        )
        self._manufacturer_patterns: dict[str, re.Pattern[str]] = {
            manufacturer: _word_pattern(manufacturer)
            for manufacturer in self._models
        }

    # ── Construction ─────────────────────────────────────

    @classmethod
    def from_dict(
        cls, data: Mapping[str, list[dict[str, Any]]],
    ) -> "BikeCatalog":
        """Build a catalog from ``{"Brand": [{"name": ..., "purpose": ...}]}``."""
        models: dict[str, list[BikeModel]] = {}
        for manufacturer, entries in data.items():
            models[manufacturer] = [
                BikeModel(
                    name=str(entry["name"]),
                    purpose=Purpose(
                        entry.get("purpose", Purpose.STANDARD.value)
                    ),
                )
                for entry in entries
            ]
        return cls(models)

    @classmethod
    def from_json(cls, path: Path) -> "BikeCatalog":
        """Load a catalog from a JSON file on disk."""
        with open(path, encoding="utf-8") as f:
            data: dict[str, list[dict[str, Any]]] = json.load(f)
        catalog = cls.from_dict(data)
        logger.debug(
            "Loaded catalog with %d manufacturers from %s",
            len(catalog.manufacturers),
            path,
        )
        return catalog

    # ── Lookup ───────────────────────────────────────────

    @property
    def manufacturers(self) -> tuple[str, ...]:
        return tuple(self._models)

    def models_for(self, manufacturer: str) -> tuple[BikeModel, ...]:
        """Return the known models for *manufacturer* (empty if unknown)."""
        return self._models.get(manufacturer, ())

    def extract_manufacturer(self, title: str) -> str | None:
        """Find the manufacturer named in *title*, or ``None``.

        A short brand must not match inside an unrelated longer word
        ("Ari" inside "Fezzari"), so word-anchored matches are tried
        first across every manufacturer and the longest one wins.
        """
        anchored = [
            manufacturer
            for manufacturer, pattern in self._manufacturer_patterns.items()
            if pattern.search(title)
        ]
        if anchored:
            return _longest(anchored)

        lowered = title.lower()
        return _longest(
            manufacturer
            for manufacturer in self._models
            if manufacturer.lower() in lowered
        )

    def extract_model(
        self, title: str, manufacturer: str | None = None,
    ) -> str | None:
        """Find the model named in *title*, or ``None``.

        Only the resolved manufacturer's models are considered.  Exact
        substring hits and case-insensitive word-anchored hits are
        pooled and the longest name wins, so "Process X" beats
        "Process".  Electric models carry the ``" Electric"`` suffix.
        """
        if manufacturer is None:
            manufacturer = self.extract_manufacturer(title)
        if manufacturer is None:
            return None

        candidates = self.models_for(manufacturer)
        matched = [
            m for m in candidates
            if m.name in title or _word_pattern(m.name).search(title)
        ]
        if not matched:
            lowered = title.lower()
            matched = [
                m for m in candidates if m.name.lower() in lowered
            ]
        if not matched:
            return None

        best = max(matched, key=lambda m: len(m.name))
        if best.is_electric:
            return best.name + ELECTRIC_SUFFIX
        return best.name


@lru_cache(maxsize=1)
def default_catalog() -> BikeCatalog:
    """Return the packaged catalog, loaded once on first use."""
    return BikeCatalog.from_json(Settings.CATALOG_PATH)
