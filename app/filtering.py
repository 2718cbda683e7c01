"""Predicate scans applied to the in-memory content table."""

from __future__ import annotations

from typing import Iterable

from .models import CatalogItem, ContentFilter
from .utils import fold_text


def title_sort_key(item: CatalogItem) -> tuple[str, str, int]:
    return (fold_text(item.title), item.title, item.id)


def sort_by_title(items: Iterable[CatalogItem]) -> list[CatalogItem]:
    """Return items ordered lexicographically by title."""

    return sorted(items, key=title_sort_key)


def matches_search(item: CatalogItem, query: str | None) -> bool:
    """Return whether the query occurs in the title, genre or description."""

    needle = fold_text((query or "").strip())
    if not needle:
        return True
    return any(
        needle in fold_text(field)
        for field in (item.title, item.genre, item.description)
    )


def filter_items(
    items: Iterable[CatalogItem], content_filter: ContentFilter
) -> list[CatalogItem]:
    """Return the items accepted by every active filter category.

    Values within a category are alternatives; categories are combined with
    logical AND. A filter with no active category accepts everything.
    """

    selected = list(items)
    if content_filter.is_empty():
        return sort_by_title(selected)

    if content_filter.ratings:
        selected = [item for item in selected if item.rating in content_filter.ratings]
    if content_filter.languages:
        selected = [
            item for item in selected if item.language in content_filter.languages
        ]
    if content_filter.genres:
        selected = [item for item in selected if item.genre in content_filter.genres]
    if content_filter.search:
        selected = [
            item for item in selected if matches_search(item, content_filter.search)
        ]
    return sort_by_title(selected)
