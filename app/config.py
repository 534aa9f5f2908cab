"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.domain.models import ProviderDescriptor

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class HttpSettings(BaseModel):
    request_timeout_seconds: float = Field(default=8.0, gt=0, le=60)
    retry_attempts: int = Field(default=2, ge=1, le=5)
    retry_base_delay: float = Field(default=0.3, ge=0)
    user_agent: str = BROWSER_USER_AGENT


class CacheSettings(BaseModel):
    search_ttl_seconds: int = Field(default=600, ge=1)
    recommend_ttl_seconds: int = Field(default=3600, ge=1)
    max_entries: int = Field(default=2048, ge=1)


class HongguoSettings(BaseModel):
    url: str = "https://novelquickapp.com/category?sort_type=1"
    marker: str = "window._ROUTER_DATA = "
    detail_url_template: str = "https://novelquickapp.com/detail?series_id={series_id}"
    source_key: str = "hongguo"
    shared_max_age_seconds: int = Field(default=3600, ge=0)
    stale_while_revalidate_seconds: int = Field(default=86400, ge=0)

    def cache_control(self) -> str:
        """Header value advertised to shared caches for the recommendation feed."""

        return (
            f"public, s-maxage={self.shared_max_age_seconds}, "
            f"stale-while-revalidate={self.stale_while_revalidate_seconds}"
        )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VIDEO_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    default_language: str = "zh"
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    http: HttpSettings = Field(default_factory=HttpSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    hongguo: HongguoSettings = Field(default_factory=HongguoSettings)
    sources: list[ProviderDescriptor] = Field(default_factory=list)


@lru_cache
def get_settings() -> AppSettings:
    """Return cached settings instance."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "CacheSettings",
    "HongguoSettings",
    "HttpSettings",
    "get_settings",
]
