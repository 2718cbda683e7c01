"""Utilities for building catalog entries from The Movie Database (TMDB)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Literal

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..models import CatalogEntry
from ..ratings import (
    DEFAULT_DESCRIPTION,
    DEFAULT_GENRE,
    DEFAULT_RATING,
    language_name,
    map_uk_certification,
    map_us_rating,
)
from ..utils import build_image_url, extract_year

logger = logging.getLogger(__name__)

MediaType = Literal["movie", "tv"]

CERTIFICATION_REGION = "GB"
FALLBACK_CERTIFICATION_REGION = "US"


MAX_RETRY_AFTER_SECONDS = 30.0


class TMDBError(RuntimeError):
    """Raised when TMDB cannot be reached or returns an unusable payload."""


def _retry_after_seconds(response: httpx.Response) -> float | None:
    """Return the delay requested by a ``Retry-After`` header, if any."""

    value = (response.headers.get("Retry-After") or "").strip()
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return max(0.0, min(seconds, MAX_RETRY_AFTER_SECONDS))


class TMDBClient:
    """Client for the TMDB discover and detail endpoints."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        *,
        max_retries: int = 3,
    ):
        if not settings.tmdb_api_key:
            raise ValueError("TMDB API key is required when initialising TMDBClient")
        self._settings = settings
        self._client = http_client
        self._max_retries = max_retries

    async def discover(self, media_type: MediaType, page: int) -> list[dict[str, Any]]:
        """Return one page of titles available on the configured provider."""

        params = {
            "with_watch_providers": self._settings.watch_provider_id,
            "watch_region": self._settings.watch_region,
            "sort_by": "popularity.desc",
            "page": page,
        }
        data = await self._get_json(f"/discover/{media_type}", params)
        results = data.get("results")
        if results is None:
            return []
        if not isinstance(results, list):
            raise TMDBError(f"Unexpected discover payload for {media_type} page {page}")
        return [
            {**result, "media_type": media_type}
            for result in results
            if isinstance(result, dict) and result.get("id") is not None
        ]

    async def discover_all(self, media_type: MediaType) -> list[dict[str, Any]]:
        """Walk discover pages until TMDB runs out of results.

        A failure on the first page means nothing can be built and is raised;
        later failures stop paging and keep what was collected.
        """

        collected: list[dict[str, Any]] = []
        for page in range(1, self._settings.discover_page_limit + 1):
            try:
                results = await self.discover(media_type, page)
            except TMDBError:
                if page == 1:
                    raise
                logger.warning(
                    "Stopping %s discovery at page %s after a TMDB error",
                    media_type,
                    page,
                    exc_info=True,
                )
                break
            if not results:
                break
            collected.extend(results)
            if self._settings.request_delay_seconds:
                await asyncio.sleep(self._settings.request_delay_seconds)
        logger.info("Discovered %s %s titles on TMDB", len(collected), media_type)
        return collected

    async def fetch_details(self, media_type: MediaType, tmdb_id: int) -> dict[str, Any]:
        params = {"append_to_response": "content_ratings,release_dates"}
        return await self._get_json(f"/{media_type}/{tmdb_id}", params)

    async def fetch_entry(self, summary: dict[str, Any]) -> CatalogEntry | None:
        """Fetch details for a discover result and map them to a catalog entry.

        Failures are logged and yield ``None`` so the title is skipped.
        """

        media_type: MediaType = "tv" if summary.get("media_type") == "tv" else "movie"
        label = summary.get("title") or summary.get("name") or summary.get("id")
        try:
            tmdb_id = int(summary["id"])
            details = await self.fetch_details(media_type, tmdb_id)
            return self.build_entry(details, media_type, tmdb_id)
        except (TMDBError, KeyError, TypeError, ValueError, ValidationError) as exc:
            logger.warning("Skipping %s (%s): %s", label, media_type, exc)
            return None

    def build_entry(
        self, details: dict[str, Any], media_type: MediaType, tmdb_id: int
    ) -> CatalogEntry:
        title = details.get("title") or details.get("name")
        if not title:
            raise ValueError(f"TMDB {media_type} {tmdb_id} has no title")

        genres = details.get("genres") or []
        genre = DEFAULT_GENRE
        if genres and isinstance(genres[0], dict) and genres[0].get("name"):
            genre = str(genres[0]["name"])

        return CatalogEntry(
            title=str(title),
            year=extract_year(details),
            rating=self._resolve_rating(details, media_type),
            genre=genre,
            description=details.get("overview") or DEFAULT_DESCRIPTION,
            image_url=build_image_url(details.get("poster_path")),
            type="movie" if media_type == "movie" else "series",
            language=language_name(details.get("original_language")),
            tmdb_id=tmdb_id,
        )

    def _resolve_rating(self, details: dict[str, Any], media_type: MediaType) -> str:
        certification = self._extract_certification(
            details, media_type, CERTIFICATION_REGION
        )
        if certification:
            return map_uk_certification(certification)
        if self._settings.us_rating_fallback:
            us_rating = self._extract_certification(
                details, media_type, FALLBACK_CERTIFICATION_REGION
            )
            if us_rating:
                return map_us_rating(us_rating)
        return DEFAULT_RATING

    @staticmethod
    def _extract_certification(
        details: dict[str, Any], media_type: MediaType, region: str
    ) -> str | None:
        if media_type == "movie":
            releases = (details.get("release_dates") or {}).get("results") or []
            for release in releases:
                if release.get("iso_3166_1") != region:
                    continue
                for release_date in release.get("release_dates") or []:
                    certification = (release_date.get("certification") or "").strip()
                    if certification:
                        return certification
                return None
            return None

        ratings = (details.get("content_ratings") or {}).get("results") or []
        for rating in ratings:
            if rating.get("iso_3166_1") == region:
                value = (rating.get("rating") or "").strip()
                return value or None
        return None

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        query = {**params, "api_key": self._settings.tmdb_api_key}
        attempt = 0
        while True:
            try:
                response = await self._client.get(path, params=query)
            except httpx.HTTPError as exc:
                attempt += 1
                if attempt <= self._max_retries:
                    backoff = min(2 ** (attempt - 1), 5) + (0.1 * attempt)
                    logger.info(
                        "Transient error talking to TMDB (%s). Retrying %s in %.1fs",
                        exc.__class__.__name__,
                        path,
                        backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue
                raise TMDBError(f"TMDB request to {path} failed: {exc}") from exc

            if response.status_code == 429 or 500 <= response.status_code < 600:
                attempt += 1
                if attempt <= self._max_retries:
                    backoff = _retry_after_seconds(response)
                    if backoff is None:
                        backoff = min(2 ** (attempt - 1), 5) + (0.1 * attempt)
                    logger.info(
                        "TMDB %s for %s. Retrying in %.1fs",
                        response.status_code,
                        path,
                        backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue
            break

        if response.status_code >= 400:
            raise TMDBError(
                f"TMDB API error for {path}: {response.status_code} {response.reason_phrase}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise TMDBError(f"Unexpected non-JSON TMDB response for {path}") from exc
        if not isinstance(data, dict):
            raise TMDBError(f"Unexpected TMDB response structure for {path}")
        return data
