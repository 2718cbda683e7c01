from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import register_request_logging, register_routes
from app.models import CatalogEntry, CatalogStatus
from app.services.catalog_refresher import CatalogRefresher, RefreshError, RefreshOutcome
from app.services.catalog_store import CatalogStore


def make_entry(title: str, **overrides: Any) -> CatalogEntry:
    data: dict[str, Any] = {
        "title": title,
        "year": "2019",
        "rating": "12",
        "genre": "Drama",
        "description": "No description available",
        "image_url": "https://example.com/poster.jpg",
        "type": "movie",
        "language": "English",
        "tmdb_id": 1,
    }
    data.update(overrides)
    return CatalogEntry(**data)


class DummyRefresher(CatalogRefresher):
    """Refresher stub that never talks to TMDB."""

    def __init__(self, store: CatalogStore, outcome: RefreshOutcome | Exception) -> None:
        super().__init__(Settings(_env_file=None), None, store)
        self.outcome = outcome
        self.calls: list[str] = []

    async def refresh(self, *, trigger: str = "manual") -> RefreshOutcome:  # type: ignore[override]
        self.calls.append(trigger)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome

    async def list_updates(self, limit: int = 20) -> list[dict[str, Any]]:
        return [{"id": 1, "status": "completed", "limit": limit}]


class BrokenStore(CatalogStore):
    def all_items(self):  # type: ignore[override]
        raise RuntimeError("boom")

    def filter(self, content_filter):  # type: ignore[override]
        raise RuntimeError("boom")


def build_app(
    store: CatalogStore | None = None,
    refresher: CatalogRefresher | None = None,
) -> FastAPI:
    app = FastAPI()
    register_request_logging(app)
    register_routes(app)
    store = store or CatalogStore()
    app.state.catalog_store = store
    app.state.catalog_refresher = refresher or DummyRefresher(
        store, RefreshOutcome(status="completed", count=store.count)
    )
    return app


def seeded_store() -> CatalogStore:
    store = CatalogStore()
    store.replace_all(
        [
            make_entry("The Witcher", rating="18", genre="Fantasy", type="series"),
            make_entry("Matilda", rating="PG", genre="Family"),
            make_entry("Lupin", rating="15", genre="Crime", language="French", type="series"),
            make_entry("Amélie", rating="15", genre="Comedy", language="French"),
        ]
    )
    return store


def test_all_content_sorted_by_title() -> None:
    with TestClient(build_app(seeded_store())) as client:
        response = client.get("/api/content")

    assert response.status_code == 200
    payload = response.json()
    assert [item["title"] for item in payload] == ["Amélie", "Lupin", "Matilda", "The Witcher"]
    assert set(payload[0]) == {
        "id",
        "title",
        "year",
        "rating",
        "genre",
        "description",
        "imageUrl",
        "type",
        "language",
        "tmdbId",
        "lastUpdated",
    }


def test_filter_endpoint_combines_query_params() -> None:
    with TestClient(build_app(seeded_store())) as client:
        response = client.get(
            "/api/content/filter",
            params=[("ratings", "15"), ("ratings", "18"), ("languages", "French")],
        )

    assert response.status_code == 200
    assert [item["title"] for item in response.json()] == ["Amélie", "Lupin"]


def test_filter_endpoint_without_params_returns_everything() -> None:
    with TestClient(build_app(seeded_store())) as client:
        response = client.get("/api/content/filter")

    assert len(response.json()) == 4


def test_filter_endpoint_search_and_comma_values() -> None:
    with TestClient(build_app(seeded_store())) as client:
        response = client.get(
            "/api/content/filter", params={"genres": "Crime,Family", "search": "mat"}
        )

    assert [item["title"] for item in response.json()] == ["Matilda"]


def test_content_by_rating() -> None:
    with TestClient(build_app(seeded_store())) as client:
        response = client.get("/api/content/rating/PG")

    assert [item["title"] for item in response.json()] == ["Matilda"]


def test_search_requires_query() -> None:
    with TestClient(build_app(seeded_store())) as client:
        missing = client.get("/api/content/search")
        blank = client.get("/api/content/search", params={"q": "  "})
        found = client.get("/api/content/search", params={"q": "witch"})

    assert missing.status_code == 400
    assert missing.json() == {"message": "Search query is required"}
    assert blank.status_code == 400
    assert [item["title"] for item in found.json()] == ["The Witcher"]


def test_manual_refresh_reports_count() -> None:
    store = seeded_store()
    refresher = DummyRefresher(store, RefreshOutcome(status="completed", count=4))
    with TestClient(build_app(store, refresher)) as client:
        response = client.post("/api/content/refresh")

    assert response.status_code == 200
    assert response.json() == {"message": "Content refreshed successfully", "count": 4}
    assert refresher.calls == ["manual"]


def test_manual_refresh_while_busy_is_accepted() -> None:
    store = seeded_store()
    refresher = DummyRefresher(store, RefreshOutcome(status="skipped", count=4))
    with TestClient(build_app(store, refresher)) as client:
        response = client.post("/api/content/refresh")

    assert response.status_code == 202
    assert response.json()["message"] == "Content refresh already in progress"


def test_manual_refresh_failure_returns_500() -> None:
    store = seeded_store()
    refresher = DummyRefresher(store, RefreshError("TMDB unavailable"))
    with TestClient(build_app(store, refresher)) as client:
        response = client.post("/api/content/refresh")

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to refresh content"}


def test_unexpected_errors_return_generic_500() -> None:
    with TestClient(build_app(BrokenStore())) as client:
        content = client.get("/api/content")
        filtered = client.get("/api/content/filter", params={"ratings": "U"})

    assert content.status_code == 500
    assert content.json() == {"message": "Failed to fetch content"}
    assert filtered.status_code == 500
    assert filtered.json() == {"message": "Failed to filter content"}


def test_missing_state_returns_500() -> None:
    app = FastAPI()
    register_routes(app)

    with TestClient(app) as client:
        response = client.get("/api/content/rating/U")

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to fetch content by rating"}


def test_status_and_update_history() -> None:
    store = seeded_store()
    with TestClient(build_app(store)) as client:
        status = client.get("/api/content/status")
        updates = client.get("/api/content/updates", params={"limit": 500})

    payload = status.json()
    expected = CatalogStatus(
        ready=False,
        refreshing=False,
        count=4,
        refresh_enabled=False,
        last_updated_at=store.last_updated_at,
    ).to_payload()
    assert payload == expected
    assert updates.json() == [{"id": 1, "status": "completed", "limit": 100}]


def test_browse_page_lists_filters() -> None:
    with TestClient(build_app()) as client:
        response = client.get("/")
        health = client.get("/healthz")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert '<option value="12A"' not in response.text
    assert '<option value="15">15 - Ages 15+</option>' in response.text
    assert '<option value="Korean">Korean</option>' in response.text
    assert "/api/content/filter" in response.text
    assert health.json() == {"status": "ok"}
