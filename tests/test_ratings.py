"""Tests for the rating and language lookup tables."""

import pytest

from app.ratings import (
    DEFAULT_RATING,
    UK_RATING_CODES,
    language_name,
    map_uk_certification,
    map_us_rating,
)


@pytest.mark.parametrize(
    ("certification", "expected"),
    [
        ("U", "U"),
        ("PG", "PG"),
        ("12A", "12"),
        ("12", "12"),
        ("15", "15"),
        ("18", "18"),
        ("R18", "18"),
        ("12a", "12"),
        ("", DEFAULT_RATING),
        (None, DEFAULT_RATING),
        ("TBC", DEFAULT_RATING),
    ],
)
def test_map_uk_certification(certification: str | None, expected: str) -> None:
    assert map_uk_certification(certification) == expected


@pytest.mark.parametrize(
    ("rating", "expected"),
    [
        ("G", "U"),
        ("TV-Y", "U"),
        ("TV-PG", "PG"),
        ("TV-Y7", "PG"),
        ("PG-13", "PG 13"),
        ("TV-MA", "15"),
        ("R", "15"),
        ("NC-17", "18"),
        ("Unrated", DEFAULT_RATING),
        (None, DEFAULT_RATING),
    ],
)
def test_map_us_rating(rating: str | None, expected: str) -> None:
    assert map_us_rating(rating) == expected


def test_uk_certifications_stay_within_vocabulary() -> None:
    for code in ("U", "PG", "12A", "12", "15", "18", "R18", "X"):
        assert map_uk_certification(code) in UK_RATING_CODES


def test_language_name_lookup() -> None:
    assert language_name("ko") == "Korean"
    assert language_name("EN") == "English"
    assert language_name("ga") == "Irish"
    assert language_name("xx") == "Other"
    assert language_name(None) == "Other"
