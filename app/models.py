"""Pydantic models describing catalog payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

ContentType = Literal["movie", "series"]


class CatalogEntry(BaseModel):
    """A catalog record built from TMDB before it is assigned an id."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    year: str
    rating: str
    genre: str
    description: str
    image_url: str = Field(alias="imageUrl")
    type: ContentType
    language: str
    tmdb_id: int | None = Field(default=None, alias="tmdbId")
    last_updated: datetime = Field(
        default_factory=datetime.utcnow, alias="lastUpdated"
    )


class CatalogItem(CatalogEntry):
    """Represents a single film or series held in the content table."""

    id: int

    @classmethod
    def from_entry(cls, entry: CatalogEntry, item_id: int) -> "CatalogItem":
        return cls(id=item_id, **entry.model_dump())

    def to_payload(self) -> dict[str, object]:
        """Return the camelCase JSON shape served by the API."""

        return self.model_dump(mode="json", by_alias=True)


def _split_values(raw: object) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        parts: Iterable[object] = raw.split(",")
    elif isinstance(raw, Iterable):
        parts = raw
    else:
        parts = [raw]

    values: list[str] = []
    for part in parts:
        for piece in str(part).split(","):
            cleaned = piece.strip()
            if cleaned and cleaned not in values:
                values.append(cleaned)
    return values


class ContentFilter(BaseModel):
    """Accepted values per filter category plus an optional search query."""

    ratings: frozenset[str] = Field(default_factory=frozenset)
    languages: frozenset[str] = Field(default_factory=frozenset)
    genres: frozenset[str] = Field(default_factory=frozenset)
    search: str | None = None

    @field_validator("ratings", "languages", "genres", mode="before")
    @classmethod
    def _parse_values(cls, value: object) -> frozenset[str]:
        return frozenset(_split_values(value))

    @field_validator("search", mode="before")
    @classmethod
    def _strip_search(cls, value: object) -> object:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @classmethod
    def from_query(cls, params: Mapping[str, object]) -> "ContentFilter":
        """Build a filter from query parameters.

        Starlette's ``QueryParams`` exposes repeated keys through
        ``getlist``; plain mappings may carry lists or comma separated
        strings.
        """

        getlist = getattr(params, "getlist", None)
        data: dict[str, object] = {}
        for key in ("ratings", "languages", "genres"):
            if callable(getlist):
                data[key] = getlist(key)
            else:
                data[key] = params.get(key)
        data["search"] = params.get("search")
        return cls.model_validate(data)

    def is_empty(self) -> bool:
        return not (self.ratings or self.languages or self.genres or self.search)


class CatalogStatus(BaseModel):
    """Runtime view of the content table and its refresh cycle."""

    ready: bool
    refreshing: bool
    count: int
    refresh_enabled: bool
    last_updated_at: datetime | None = None
    next_refresh_at: datetime | None = None

    def to_payload(self) -> dict[str, object]:
        return {
            "ready": self.ready,
            "refreshing": self.refreshing,
            "count": self.count,
            "refreshEnabled": self.refresh_enabled,
            "lastUpdatedAt": (
                self.last_updated_at.isoformat() if self.last_updated_at else None
            ),
            "nextRefreshAt": (
                self.next_refresh_at.isoformat() if self.next_refresh_at else None
            ),
        }
