"""In-memory content table rebuilt wholesale on every refresh."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from ..filtering import filter_items, matches_search, sort_by_title
from ..models import CatalogEntry, CatalogItem, ContentFilter

logger = logging.getLogger(__name__)


class CatalogStore:
    """Unordered mapping of sequential ids to catalog items."""

    def __init__(self) -> None:
        self._items: dict[int, CatalogItem] = {}
        self._last_updated_at: datetime | None = None

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def last_updated_at(self) -> datetime | None:
        return self._last_updated_at

    def replace_all(self, entries: Iterable[CatalogEntry]) -> int:
        """Discard the current table and install ``entries`` with fresh ids."""

        table: dict[int, CatalogItem] = {}
        for item_id, entry in enumerate(entries, start=1):
            table[item_id] = CatalogItem.from_entry(entry, item_id)
        self._items = table
        self._last_updated_at = datetime.utcnow()
        logger.info("Content table replaced with %s titles", len(table))
        return len(table)

    def get(self, item_id: int) -> CatalogItem | None:
        return self._items.get(item_id)

    def all_items(self) -> list[CatalogItem]:
        return sort_by_title(self._items.values())

    def by_rating(self, rating: str) -> list[CatalogItem]:
        return sort_by_title(
            item for item in self._items.values() if item.rating == rating
        )

    def search(self, query: str) -> list[CatalogItem]:
        return sort_by_title(
            item for item in self._items.values() if matches_search(item, query)
        )

    def filter(self, content_filter: ContentFilter) -> list[CatalogItem]:
        results = filter_items(self._items.values(), content_filter)
        if content_filter.is_empty():
            logger.debug("No filters applied, returning %s titles", len(results))
        else:
            logger.debug("Applied filters returned %s titles", len(results))
        return results
