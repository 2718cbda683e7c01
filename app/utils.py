"""Utility helpers for the Streamrated service."""

from __future__ import annotations

import unicodedata
from typing import Any

from .ratings import FALLBACK_IMAGE_URL, UNKNOWN_YEAR

POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"


def fold_text(value: str | None) -> str:
    """Return a case-insensitive, accent-preserving comparison key."""

    return unicodedata.normalize("NFKC", value or "").casefold()


def extract_year(details: dict[str, Any]) -> str:
    """Return the four digit release year of a TMDB movie or show."""

    date_value = details.get("release_date") or details.get("first_air_date") or ""
    if not isinstance(date_value, str):
        return UNKNOWN_YEAR
    return date_value[:4] or UNKNOWN_YEAR


def build_image_url(path: str | None) -> str:
    if not path:
        return FALLBACK_IMAGE_URL
    if path.startswith("http"):
        return path
    return f"{POSTER_BASE_URL}{path}"


def truncate_log_line(line: str, limit: int = 80) -> str:
    """Clip request log lines so large JSON bodies stay readable."""

    if len(line) <= limit:
        return line
    return line[: limit - 1] + "…"
