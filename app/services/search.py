"""Search entry point: aggregation plus post-hoc display filters."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from app.domain.models import MediaType, NormalizedRecord, ProviderDescriptor, SearchResultSet
from app.i18n import I18nService
from app.logging import logger
from app.services.aggregator import SearchAggregator
from app.services.exceptions import ServiceError

ALL_SOURCES = "all"


class MediaFilter(str, Enum):
    all = "all"
    movie = "movie"
    tv = "tv"
    short = "short"


def parse_media_filter(raw: str | None) -> MediaFilter:
    try:
        return MediaFilter((raw or MediaFilter.all.value).strip().lower())
    except ValueError:
        return MediaFilter.all


def _matches(record: NormalizedRecord, media_type: MediaFilter, source: str) -> bool:
    if media_type is not MediaFilter.all and record.type != MediaType(media_type.value):
        return False
    if source != ALL_SOURCES and record.source != source:
        return False
    return True


def apply_filters(
    result: SearchResultSet,
    media_type: MediaFilter | str = MediaFilter.all,
    source: str = ALL_SOURCES,
) -> SearchResultSet:
    """Filter an already paginated page in memory.

    This never re-queries: the filtered page can hold fewer than ``page_size``
    records and ``total_pages`` is left as the providers reported it.
    """

    media_type = MediaFilter(media_type)
    source = source or ALL_SOURCES
    if media_type is MediaFilter.all and source == ALL_SOURCES:
        return result
    records = [record for record in result.records if _matches(record, media_type, source)]
    return result.model_copy(update={"records": records})


class SearchService:
    def __init__(self, aggregator: SearchAggregator) -> None:
        self._aggregator = aggregator

    async def search_entry(
        self,
        query: str,
        providers: Sequence[ProviderDescriptor],
        page: int = 1,
        *,
        media_type: MediaFilter | str = MediaFilter.all,
        source: str = ALL_SOURCES,
    ) -> SearchResultSet:
        result = await self._aggregator.search(query, providers, max(1, page))
        return apply_filters(result, media_type, source)


class SearchState(str, Enum):
    idle = "idle"
    loading = "loading"
    success = "success"
    empty = "empty"
    error = "error"


@dataclass(slots=True)
class SearchView:
    state: SearchState
    request_id: int
    query: str = ""
    page: int = 1
    result: SearchResultSet = field(default_factory=SearchResultSet.empty)
    message: str | None = None


class SearchSession:
    """Per-client search state where only the latest submitted request may land.

    Every :meth:`submit` takes a new monotonic request id. A completion whose id
    is no longer the latest is dropped, so a slow response for an abandoned
    query can never overwrite the state of a newer one.
    """

    def __init__(
        self,
        service: SearchService,
        *,
        i18n: I18nService | None = None,
        locale: str | None = None,
    ) -> None:
        self._service = service
        self._i18n = i18n or I18nService()
        self._locale = locale
        self._latest_request_id = 0
        self.media_type = MediaFilter.all
        self.source = ALL_SOURCES
        self.view = SearchView(state=SearchState.idle, request_id=0, message=self._text("search.prompt"))

    @property
    def latest_request_id(self) -> int:
        return self._latest_request_id

    @property
    def records(self) -> list[NormalizedRecord]:
        """Records of the current page after the display filters."""

        return apply_filters(self.view.result, self.media_type, self.source).records

    @property
    def summary(self) -> str | None:
        """Result count line for a successful search, counted after the display filters."""

        if self.view.state is not SearchState.success:
            return None
        return self._text("search.summary", count=len(self.records), query=self.view.query)

    def set_filters(
        self,
        media_type: MediaFilter | str | None = None,
        source: str | None = None,
    ) -> None:
        if media_type is not None:
            self.media_type = MediaFilter(media_type)
        if source is not None:
            self.source = source or ALL_SOURCES

    async def submit(
        self,
        query: str,
        providers: Sequence[ProviderDescriptor],
        page: int = 1,
    ) -> SearchView:
        self._latest_request_id += 1
        request_id = self._latest_request_id
        query = (query or "").strip()
        page = max(1, page)

        if not query:
            self.view = SearchView(
                state=SearchState.idle,
                request_id=request_id,
                page=page,
                message=self._text("search.prompt"),
            )
            return self.view

        previous = self.view
        self.view = SearchView(state=SearchState.loading, request_id=request_id, query=query, page=page)
        try:
            result = await self._service.search_entry(query, providers, page)
        except asyncio.CancelledError:
            if request_id == self._latest_request_id:
                self.view = previous
            raise
        except ServiceError as exc:
            logger.warning("search_request_failed", request_id=request_id, query=query, error=str(exc))
            outcome = SearchView(
                state=SearchState.error,
                request_id=request_id,
                query=query,
                page=page,
                message=self._text("search.failed"),
            )
        else:
            empty = not result.records
            outcome = SearchView(
                state=SearchState.empty if empty else SearchState.success,
                request_id=request_id,
                query=query,
                page=page,
                result=result,
                message=self._text("search.no_results") if empty else None,
            )

        if request_id != self._latest_request_id:
            logger.info(
                "search_result_discarded",
                request_id=request_id,
                latest_request_id=self._latest_request_id,
                query=query,
            )
            return outcome
        self.view = outcome
        return outcome

    def _text(self, key: str, **kwargs) -> str:
        return self._i18n.gettext(key, locale=self._locale, **kwargs)


__all__ = [
    "ALL_SOURCES",
    "MediaFilter",
    "SearchService",
    "SearchSession",
    "SearchState",
    "SearchView",
    "apply_filters",
    "parse_media_filter",
]
