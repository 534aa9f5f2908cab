"""Concurrent fan-out of a search query across the enabled video sources."""

from __future__ import annotations

import asyncio
from typing import Callable, Sequence

from app.domain.models import NormalizedRecord, ProviderDescriptor, ProviderPage, SearchResultSet
from app.logging import logger
from app.services.cache import ResultCache, make_cache_key
from app.services.exceptions import AggregationError, CacheProductionError, ProviderError
from app.services.providers.base import VideoProvider

ProviderFactory = Callable[[ProviderDescriptor], VideoProvider]

SEARCH_TAG = "search"


def provider_tag(key: str) -> str:
    return f"provider:{key}"


class SearchAggregator:
    """Query every provider for the same page and merge the answers.

    Providers paginate server-side, so page ``p`` of the merged result is the
    concatenation of each provider's own page ``p`` in provider-list order. The
    merged page count is the largest page count any provider reported.
    """

    def __init__(
        self,
        cache: ResultCache,
        provider_factory: ProviderFactory,
        *,
        ttl_seconds: int = 600,
    ) -> None:
        self._cache = cache
        self._provider_factory = provider_factory
        self._ttl_seconds = ttl_seconds

    async def search(
        self,
        query: str,
        providers: Sequence[ProviderDescriptor],
        page: int = 1,
    ) -> SearchResultSet:
        query = (query or "").strip()
        page = max(1, page)
        if not query or not providers:
            return SearchResultSet.empty(page)

        outcomes = await asyncio.gather(
            *(self._fetch_page(descriptor, query, page) for descriptor in providers),
            return_exceptions=True,
        )

        pages: list[ProviderPage] = []
        failures: list[BaseException] = []
        for descriptor, outcome in zip(providers, outcomes):
            if isinstance(outcome, BaseException):
                error = outcome.cause if isinstance(outcome, CacheProductionError) else outcome
                failures.append(error)
                _log_provider_failure(descriptor, error)
                continue
            pages.append(outcome)

        if not pages:
            logger.error("search_all_providers_failed", query=query, page=page, providers=len(failures))
            raise AggregationError(failures=failures)

        result = _merge(pages, page)
        logger.info(
            "search_completed",
            query=query,
            page=page,
            providers=len(providers),
            failed=len(failures),
            records=len(result.records),
            total_pages=result.total_pages,
        )
        return result

    async def _fetch_page(self, descriptor: ProviderDescriptor, query: str, page: int) -> ProviderPage:
        provider = self._provider_factory(descriptor)
        key = make_cache_key(SEARCH_TAG, descriptor.key, descriptor.api, query, page)
        return await self._cache.memoize(
            key,
            self._ttl_seconds,
            (SEARCH_TAG, provider_tag(descriptor.key)),
            lambda: provider.fetch(query, page),
        )


def _merge(pages: Sequence[ProviderPage], page: int) -> SearchResultSet:
    records: list[NormalizedRecord] = []
    seen: set[tuple[str, str]] = set()
    for provider_page in pages:
        for record in provider_page.records:
            if record.identity in seen:
                continue
            seen.add(record.identity)
            records.append(record)
    return SearchResultSet(
        records=records,
        page=page,
        page_size=sum(provider_page.page_size for provider_page in pages),
        total_pages=max(provider_page.page_count for provider_page in pages),
    )


def _log_provider_failure(descriptor: ProviderDescriptor, error: BaseException) -> None:
    if isinstance(error, ProviderError):
        logger.warning(
            "provider_failed",
            provider=descriptor.key,
            kind=error.kind.value,
            detail=error.detail,
        )
        return
    logger.warning(
        "provider_failed",
        provider=descriptor.key,
        kind="unexpected",
        error_type=type(error).__name__,
        detail=str(error),
    )


__all__ = ["ProviderFactory", "SearchAggregator", "provider_tag"]
