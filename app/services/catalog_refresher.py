"""Periodic rebuild of the content table from TMDB."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Literal

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import Settings
from ..db_models import CatalogUpdate
from ..models import CatalogEntry, CatalogStatus
from .catalog_store import CatalogStore
from .tmdb import TMDBClient, TMDBError

logger = logging.getLogger(__name__)

RefreshTrigger = Literal["startup", "scheduled", "manual"]


class RefreshError(RuntimeError):
    """Raised when a refresh cycle is abandoned."""


@dataclass(slots=True)
class RefreshOutcome:
    """Result of a single refresh request."""

    status: Literal["completed", "skipped"]
    count: int


class CatalogRefresher:
    """Rebuilds the content table on startup and then on a fixed interval."""

    def __init__(
        self,
        settings: Settings,
        tmdb_client: TMDBClient | None,
        store: CatalogStore,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ):
        self._settings = settings
        self._tmdb = tmdb_client
        self._store = store
        self._session_factory = session_factory
        self._refreshing = False
        self._ready = False
        self._startup_task: asyncio.Task[None] | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._next_refresh_at: datetime | None = None

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    async def start(self) -> None:
        """Launch the initial build and the refresh loop in the background."""

        if self._startup_task is None:
            self._startup_task = asyncio.create_task(self._initialise())

    async def stop(self) -> None:
        """Cancel background work."""

        # The startup task schedules the loop, so it must be finished first.
        if self._startup_task is not None:
            self._startup_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._startup_task
            self._startup_task = None
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._refresh_task
            self._refresh_task = None

    async def _initialise(self) -> None:
        try:
            await self.refresh_with_retries(trigger="startup")
        except Exception:
            logger.exception("Unexpected error while building the initial catalog")
        if self._refresh_task is None:
            self._refresh_task = asyncio.create_task(self._refresh_loop())

    async def refresh_with_retries(
        self, *, trigger: RefreshTrigger = "startup"
    ) -> RefreshOutcome | None:
        """Refresh, retrying a fixed number of times after a failed cycle.

        Returns ``None`` when every attempt failed.
        """

        attempts = self._settings.refresh_retry_limit
        for attempt in range(1, attempts + 1):
            try:
                outcome = await self.refresh(trigger=trigger)
            except RefreshError as exc:
                remaining = attempts - attempt
                logger.error(
                    "Failed to build content catalog (%s retries left): %s",
                    remaining,
                    exc,
                )
                if remaining:
                    await asyncio.sleep(self._settings.refresh_retry_delay_seconds)
                continue
            logger.info(
                "Content catalog initialisation complete: %s titles loaded",
                self._store.count,
            )
            return outcome
        logger.error("Giving up on content catalog build after %s attempts", attempts)
        return None

    async def refresh(self, *, trigger: RefreshTrigger = "manual") -> RefreshOutcome:
        """Rebuild the content table unless a rebuild is already running."""

        if self._refreshing:
            logger.info("Catalog refresh already in progress, skipping %s request", trigger)
            return RefreshOutcome(status="skipped", count=self._store.count)

        self._refreshing = True
        try:
            update_id = await self._record_start(trigger)
            try:
                entries = await self._build_catalog()
            except (TMDBError, RefreshError) as exc:
                await self._record_finish(update_id, status="failed", error=str(exc))
                raise RefreshError(str(exc)) from exc
            except Exception as exc:
                await self._record_finish(
                    update_id,
                    status="failed",
                    error=str(exc) or exc.__class__.__name__,
                )
                raise

            count = self._store.replace_all(entries)
            self._ready = True
            await self._record_finish(update_id, status="completed", processed=count)
            logger.info(
                "Content catalog update complete: %s titles (%s refresh)", count, trigger
            )
            return RefreshOutcome(status="completed", count=count)
        finally:
            self._refreshing = False

    def status(self) -> CatalogStatus:
        return CatalogStatus(
            ready=self._ready,
            refreshing=self._refreshing,
            count=self._store.count,
            refresh_enabled=self._tmdb is not None,
            last_updated_at=self._store.last_updated_at,
            next_refresh_at=self._next_refresh_at,
        )

    async def list_updates(self, limit: int = 20) -> list[dict[str, Any]]:
        """Return the most recent refresh cycles, newest first."""

        if self._session_factory is None:
            return []
        async with self._session_factory() as session:
            stmt = select(CatalogUpdate).order_by(CatalogUpdate.id.desc()).limit(limit)
            result = await session.execute(stmt)
            return [record.to_payload() for record in result.scalars().all()]

    async def _refresh_loop(self) -> None:
        interval = self._settings.refresh_interval_seconds
        while True:
            self._next_refresh_at = datetime.utcnow() + timedelta(seconds=interval)
            await asyncio.sleep(interval)
            if self._refreshing:
                logger.info("Skipping scheduled refresh; a refresh is still running")
                continue
            logger.info("Performing scheduled content catalog update")
            try:
                await self.refresh(trigger="scheduled")
            except Exception as exc:  # pragma: no cover - background safety net
                logger.exception("Scheduled catalog refresh failed: %s", exc)

    async def _build_catalog(self) -> list[CatalogEntry]:
        if self._tmdb is None:
            raise RefreshError("TMDB API key is not configured")

        # One media type at a time; a failed discovery leaves no paging behind.
        movies = await self._tmdb.discover_all("movie")
        shows = await self._tmdb.discover_all("tv")
        summaries = self._unique_summaries([*movies, *shows])
        total = len(summaries)
        if not total:
            raise RefreshError("TMDB discovery returned no titles")
        logger.info(
            "TMDB discovery complete: %s titles found, fetching details", total
        )

        entries: list[CatalogEntry] = []
        batch_size = self._settings.detail_batch_size
        for batch_index, start in enumerate(range(0, total, batch_size)):
            batch = summaries[start : start + batch_size]
            results = await asyncio.gather(
                *(self._tmdb.fetch_entry(summary) for summary in batch)
            )
            entries.extend(entry for entry in results if entry is not None)
            if batch_index % 2 == 0:
                logger.info(
                    "Processed %s/%s titles, %s added",
                    min(start + batch_size, total),
                    total,
                    len(entries),
                )
            if self._settings.request_delay_seconds:
                await asyncio.sleep(self._settings.request_delay_seconds)

        if not entries:
            raise RefreshError("No TMDB titles could be processed")
        return entries

    @staticmethod
    def _unique_summaries(summaries: list[dict[str, Any]]) -> list[dict[str, Any]]:
        # Popularity ordering can shift between pages, repeating titles.
        seen: set[tuple[str, Any]] = set()
        unique: list[dict[str, Any]] = []
        for summary in summaries:
            key = (summary.get("media_type", "movie"), summary.get("id"))
            if key in seen:
                continue
            seen.add(key)
            unique.append(summary)
        return unique

    async def _record_start(self, trigger: RefreshTrigger) -> int | None:
        if self._session_factory is None:
            return None
        try:
            async with self._session_factory() as session:
                record = CatalogUpdate(
                    update_type="full",
                    trigger=trigger,
                    status="running",
                    titles_processed=0,
                    started_at=datetime.utcnow(),
                )
                session.add(record)
                await session.commit()
                return record.id
        except SQLAlchemyError:
            logger.exception("Failed to record the start of a %s refresh", trigger)
            return None

    async def _record_finish(
        self,
        update_id: int | None,
        *,
        status: str,
        processed: int = 0,
        error: str | None = None,
    ) -> None:
        if self._session_factory is None or update_id is None:
            return
        try:
            async with self._session_factory() as session:
                await session.execute(
                    update(CatalogUpdate)
                    .where(CatalogUpdate.id == update_id)
                    .values(
                        status=status,
                        titles_processed=processed,
                        finished_at=datetime.utcnow(),
                        error_message=error,
                    )
                )
                await session.commit()
        except SQLAlchemyError:
            logger.exception("Failed to record the result of refresh %s", update_id)
