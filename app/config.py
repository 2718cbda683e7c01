"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="Streamrated", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    watch_provider_id: int = Field(default=8, alias="WATCH_PROVIDER_ID", ge=1)
    watch_region: str = Field(default="GB", alias="WATCH_REGION")

    discover_page_limit: int = Field(
        default=300, alias="DISCOVER_PAGE_LIMIT", ge=1, le=500
    )
    detail_batch_size: int = Field(
        default=50, alias="DETAIL_BATCH_SIZE", ge=1, le=200
    )
    request_delay_seconds: float = Field(
        default=0.02, alias="REQUEST_DELAY", ge=0
    )

    refresh_interval_seconds: int = Field(
        default=86_400, alias="REFRESH_INTERVAL", ge=60
    )
    refresh_retry_limit: int = Field(
        default=3, alias="REFRESH_RETRY_LIMIT", ge=1, le=10
    )
    refresh_retry_delay_seconds: float = Field(
        default=10.0, alias="REFRESH_RETRY_DELAY", ge=0
    )
    us_rating_fallback: bool = Field(default=False, alias="US_RATING_FALLBACK")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./streamrated.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("tmdb_api_key", mode="before")
    @classmethod
    def _strip_blank_key(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("watch_region", mode="before")
    @classmethod
    def _normalise_region(cls, value: object) -> str:
        """Accept lower-case region codes such as ``gb``."""

        region = str(value or "").strip().upper()
        if len(region) != 2 or not region.isalpha():
            raise ValueError("WATCH_REGION must be a two letter country code")
        return region

    @property
    def refresh_enabled(self) -> bool:
        """Return whether the catalog can be rebuilt from TMDB."""

        return bool(self.tmdb_api_key)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
