"""Application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
import uvicorn
from fastapi import FastAPI

from app.api.deps import Services
from app.api.routers import setup_routers
from app.config import AppSettings, get_settings
from app.domain.models import ProviderDescriptor
from app.i18n import I18nService
from app.logging import configure_logging, logger
from app.services.aggregator import SearchAggregator
from app.services.cache import ResultCache
from app.services.providers import CmsProvider, HongguoProvider
from app.services.recommendations import RecommendationService
from app.services.search import SearchService
from app.utils.http import build_async_client


def build_services(
    settings: AppSettings,
    http_client: httpx.AsyncClient,
    cache: ResultCache | None = None,
) -> Services:
    cache = cache or ResultCache(max_entries=settings.cache.max_entries)

    def provider_factory(descriptor: ProviderDescriptor) -> CmsProvider:
        return CmsProvider(descriptor, http_client, settings=settings.http)

    aggregator = SearchAggregator(
        cache,
        provider_factory,
        ttl_seconds=settings.cache.search_ttl_seconds,
    )
    hongguo = HongguoProvider(http_client, settings=settings.hongguo, http_settings=settings.http)
    return Services(
        settings=settings,
        cache=cache,
        search=SearchService(aggregator),
        recommendations=RecommendationService(
            hongguo,
            cache,
            ttl_seconds=settings.cache.recommend_ttl_seconds,
        ),
        i18n=I18nService(default_locale=settings.default_language),
    )


def create_app(
    settings: AppSettings | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    cache: ResultCache | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    owns_client = http_client is None
    client = http_client or build_async_client(settings.http)
    services = build_services(settings, client, cache)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "app_starting",
            environment=settings.environment,
            sources=[source.key for source in settings.sources],
        )
        try:
            yield
        finally:
            await services.cache.drain()
            if owns_client:
                await client.aclose()
            logger.info("app_stopped")

    app = FastAPI(title="video-discovery", lifespan=lifespan)
    app.state.services = services
    app.include_router(setup_routers())
    return app


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.environment != "dev")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
