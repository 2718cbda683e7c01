"""Static lookup tables mapping TMDB vocabularies onto the browsing filters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class UKRating:
    """Describes a BBFC age rating offered as a filter."""

    code: str
    label: str


UK_RATINGS: tuple[UKRating, ...] = (
    UKRating(code="U", label="U - Universal"),
    UKRating(code="PG", label="PG - Parental Guidance"),
    UKRating(code="12", label="12 - Ages 12+"),
    UKRating(code="15", label="15 - Ages 15+"),
    UKRating(code="18", label="18 - Adults Only"),
)
UK_RATING_CODES: tuple[str, ...] = tuple(rating.code for rating in UK_RATINGS)

DEFAULT_RATING = "12"
DEFAULT_GENRE = "Drama"
DEFAULT_DESCRIPTION = "No description available"
UNKNOWN_YEAR = "Unknown"
OTHER_LANGUAGE = "Other"
FALLBACK_IMAGE_URL = (
    "https://images.unsplash.com/photo-1440404653325-ab127d49abc1"
    "?w=400&h=600&fit=crop"
)

_UK_CERTIFICATIONS: Mapping[str, str] = {
    "U": "U",
    "PG": "PG",
    "12A": "12",
    "12": "12",
    "15": "15",
    "18": "18",
    "R18": "18",
}

# "PG 13" has no BBFC equivalent and is not offered as a filter.
_US_RATINGS: Mapping[str, str] = {
    "G": "U",
    "TV-Y": "U",
    "TV-G": "U",
    "PG": "PG",
    "TV-PG": "PG",
    "TV-Y7": "PG",
    "Approved": "PG",
    "Passed": "PG",
    "PG-13": "PG 13",
    "TV-14": "PG 13",
    "R": "15",
    "TV-MA": "15",
    "M": "15",
    "NC-17": "18",
    "X": "18",
}

LANGUAGE_NAMES: Mapping[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "hi": "Hindi",
    "pt": "Portuguese",
    "ru": "Russian",
    "ar": "Arabic",
    "th": "Thai",
    "tr": "Turkish",
    "nl": "Dutch",
    "sv": "Swedish",
    "da": "Danish",
    "no": "Norwegian",
    "fi": "Finnish",
    "pl": "Polish",
    "cs": "Czech",
    "hu": "Hungarian",
    "ro": "Romanian",
    "bg": "Bulgarian",
    "hr": "Croatian",
    "sr": "Serbian",
    "sk": "Slovak",
    "sl": "Slovenian",
    "et": "Estonian",
    "lv": "Latvian",
    "lt": "Lithuanian",
    "mt": "Maltese",
    "ga": "Irish",
}

BROWSE_LANGUAGES: tuple[str, ...] = (
    "English",
    "Spanish",
    "French",
    "German",
    "Italian",
    "Japanese",
    "Korean",
    "Chinese",
    "Hindi",
    "Portuguese",
    "Russian",
    "Arabic",
)

BROWSE_GENRES: tuple[str, ...] = (
    "Drama",
    "Comedy",
    "Documentary",
    "Action",
    "Animation",
    "Crime",
    "Romance",
    "Thriller",
    "Horror",
    "Family",
    "Science Fiction",
    "Adventure",
    "Mystery",
    "Fantasy",
    "Music",
)


def map_uk_certification(certification: str | None) -> str:
    """Return the UK rating for a TMDB ``GB`` certification."""

    code = (certification or "").strip()
    return _UK_CERTIFICATIONS.get(code.upper(), DEFAULT_RATING)


def map_us_rating(rating: str | None) -> str:
    """Return the closest UK rating for a US film or TV rating."""

    code = (rating or "").strip()
    return _US_RATINGS.get(code, DEFAULT_RATING)


def language_name(code: str | None) -> str:
    return LANGUAGE_NAMES.get((code or "").strip().lower(), OTHER_LANGUAGE)
