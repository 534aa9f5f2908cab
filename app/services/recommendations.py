"""Cached short-drama recommendation feed."""

from __future__ import annotations

from app.domain.models import NormalizedRecord, RecommendationPage
from app.services.cache import ResultCache, make_cache_key
from app.services.providers.hongguo import HongguoProvider

RECOMMEND_TAG = "hongguo"


class RecommendationService:
    def __init__(
        self,
        provider: HongguoProvider,
        cache: ResultCache,
        *,
        ttl_seconds: int = 3600,
        tag: str = RECOMMEND_TAG,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._ttl_seconds = ttl_seconds
        self._tag = tag
        self._key = make_cache_key("hongguo", provider.url)

    async def all_recommendations(self) -> list[NormalizedRecord]:
        return await self._cache.memoize(
            self._key,
            self._ttl_seconds,
            (self._tag,),
            self._provider.fetch_recommendations,
        )

    async def recommendation_entry(self, page_start: int = 0, page_limit: int = 12) -> RecommendationPage:
        """Slice the cached listing; out-of-range windows yield an empty list."""

        records = await self.all_recommendations()
        start = max(0, page_start)
        stop = start + max(0, page_limit)
        return RecommendationPage(items=records[start:stop], total=len(records))

    def invalidate(self) -> int:
        return self._cache.invalidate(self._tag)


__all__ = ["RECOMMEND_TAG", "RecommendationService"]
