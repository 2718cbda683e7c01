"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


# ``app`` lives at the project root; make it importable without an editable
# install.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer credentials and overrides out of settings under test."""

    for name in (
        "TMDB_API_KEY",
        "WATCH_REGION",
        "WATCH_PROVIDER_ID",
        "REFRESH_INTERVAL",
        "US_RATING_FALLBACK",
        "DISCOVER_PAGE_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)
