"""Entry point for the FastAPI-powered catalog browser."""

from __future__ import annotations

import json
import logging
import time
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, Awaitable, Callable

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError

from .config import settings
from .database import Database
from .models import CatalogItem, ContentFilter
from .services.catalog_refresher import CatalogRefresher, RefreshError
from .services.catalog_store import CatalogStore
from .services.tmdb import TMDBClient
from .utils import truncate_log_line
from .web import render_browse_page

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(_: FastAPI):
    exit_stack = AsyncExitStack()
    tmdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.tmdb_api_url),
            timeout=httpx.Timeout(20.0, connect=10.0),
        )
    )
    database = Database(settings.database_url)
    await database.create_all()

    tmdb: TMDBClient | None = None
    if settings.refresh_enabled:
        tmdb = TMDBClient(settings, tmdb_http_client)
    else:
        logger.warning("TMDB_API_KEY is not set; the content catalog will stay empty")

    store = CatalogStore()
    refresher = CatalogRefresher(settings, tmdb, store, database.session_factory)

    app.state.catalog_store = store
    app.state.catalog_refresher = refresher
    app.state.database = database
    await refresher.start()

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await refresher.stop()
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Streaming catalog browser filtered by UK age rating, language and genre",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_request_logging(fastapi_app)
    register_routes(fastapi_app)
    return fastapi_app


def get_catalog_store(app: FastAPI) -> CatalogStore:
    store = getattr(app.state, "catalog_store", None)
    if not isinstance(store, CatalogStore):
        raise RuntimeError("Catalog store not initialised")
    return store


def get_catalog_refresher(app: FastAPI) -> CatalogRefresher:
    refresher = getattr(app.state, "catalog_refresher", None)
    if not isinstance(refresher, CatalogRefresher):
        raise RuntimeError("Catalog refresher not initialised")
    return refresher


def register_request_logging(fastapi_app: FastAPI) -> None:
    @fastapi_app.middleware("http")
    async def log_api_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                truncate_log_line(
                    f"{request.method} {request.url.path} "
                    f"{response.status_code} in {duration_ms:.0f}ms"
                )
            )
        return response


def _items_response(items: list[CatalogItem]) -> JSONResponse:
    return JSONResponse([item.to_payload() for item in items])


def _error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse({"message": message}, status_code=status_code)


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/", response_class=HTMLResponse)
    async def browse_page() -> HTMLResponse:
        return HTMLResponse(render_browse_page(settings))

    @fastapi_app.get("/api/content")
    async def all_content() -> JSONResponse:
        try:
            store = get_catalog_store(fastapi_app)
            return _items_response(store.all_items())
        except Exception:
            logger.exception("Failed to fetch content")
            return _error_response("Failed to fetch content")

    @fastapi_app.get("/api/content/filter")
    async def filter_content(request: Request) -> JSONResponse:
        try:
            content_filter = ContentFilter.from_query(request.query_params)
        except ValidationError as exc:
            return JSONResponse(
                {"message": "Invalid filter parameters", "errors": json.loads(exc.json())},
                status_code=400,
            )
        try:
            store = get_catalog_store(fastapi_app)
            return _items_response(store.filter(content_filter))
        except Exception:
            logger.exception("Filter error")
            return _error_response("Failed to filter content")

    @fastapi_app.get("/api/content/rating/{rating}")
    async def content_by_rating(rating: str) -> JSONResponse:
        try:
            store = get_catalog_store(fastapi_app)
            return _items_response(store.by_rating(rating))
        except Exception:
            logger.exception("Failed to fetch content by rating %s", rating)
            return _error_response("Failed to fetch content by rating")

    @fastapi_app.get("/api/content/search")
    async def search_content(q: str | None = None) -> JSONResponse:
        if not q or not q.strip():
            return _error_response("Search query is required", status_code=400)
        try:
            store = get_catalog_store(fastapi_app)
            return _items_response(store.search(q))
        except Exception:
            logger.exception("Failed to search content for %r", q)
            return _error_response("Failed to search content")

    @fastapi_app.post("/api/content/refresh")
    async def refresh_content() -> JSONResponse:
        try:
            refresher = get_catalog_refresher(fastapi_app)
            outcome = await refresher.refresh(trigger="manual")
        except RefreshError as exc:
            logger.error("Manual content refresh failed: %s", exc)
            return _error_response("Failed to refresh content")
        except Exception:
            logger.exception("Manual content refresh failed")
            return _error_response("Failed to refresh content")

        if outcome.status == "skipped":
            return JSONResponse(
                {"message": "Content refresh already in progress", "count": outcome.count},
                status_code=202,
            )
        return JSONResponse(
            {"message": "Content refreshed successfully", "count": outcome.count}
        )

    @fastapi_app.get("/api/content/status")
    async def content_status() -> JSONResponse:
        try:
            refresher = get_catalog_refresher(fastapi_app)
            return JSONResponse(refresher.status().to_payload())
        except Exception:
            logger.exception("Failed to read catalog status")
            return _error_response("Failed to fetch catalog status")

    @fastapi_app.get("/api/content/updates")
    async def content_updates(limit: int = 20) -> JSONResponse:
        limit = max(1, min(limit, 100))
        try:
            refresher = get_catalog_refresher(fastapi_app)
            updates: list[dict[str, Any]] = await refresher.list_updates(limit)
        except Exception:
            logger.exception("Failed to read refresh history")
            return _error_response("Failed to fetch refresh history")
        return JSONResponse(updates)


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
