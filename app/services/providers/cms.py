"""Client for MacCMS-compatible video source APIs (``?ac=detail&wd=...``)."""

from __future__ import annotations

import math
from urllib.parse import urlencode

import httpx

from app.config import HttpSettings
from app.domain.models import MediaType, NormalizedRecord, ProviderDescriptor, ProviderPage
from app.services.providers.base import _BaseProvider
from app.services.providers.schema import CmsItem, CmsResponse

_SHORT_HINTS = ("短剧", "short")
_MOVIE_HINTS = ("电影", "movie", "film")
_TV_HINTS = ("剧", "综艺", "动漫", "番", "series", "tv", "show", "anime")


def infer_media_type(type_name: str | None) -> MediaType:
    """Map a source's free-form category label onto :class:`MediaType`.

    Order matters: "短剧" must win over the generic "剧", and film genres such
    as "剧情片" end in "片" but contain "剧".
    """

    if not type_name:
        return MediaType.unknown
    label = type_name.strip().lower()
    if any(hint in label for hint in _SHORT_HINTS):
        return MediaType.short
    if label.endswith("片") or any(hint in label for hint in _MOVIE_HINTS):
        return MediaType.movie
    if any(hint in label for hint in _TV_HINTS):
        return MediaType.tv
    return MediaType.unknown


class CmsProvider(_BaseProvider):
    def __init__(
        self,
        descriptor: ProviderDescriptor,
        http_client: httpx.AsyncClient,
        settings: HttpSettings | None = None,
    ) -> None:
        super().__init__(descriptor.key, http_client, settings=settings)
        self.descriptor = descriptor

    @property
    def api(self) -> str:
        return self.descriptor.api.rstrip("?&")

    async def fetch(self, query: str, page: int) -> ProviderPage:
        params = {"ac": "detail", "wd": query, "pg": page}
        response = await self._get(self.api, params=params, operation=f"cms_search:{self.key}")
        data = self._validate(CmsResponse, self._json(response))

        records = [self._normalize(item) for item in data.items]
        page_size = _as_int(data.limit) or len(records)
        return ProviderPage(
            provider=self.key,
            records=records,
            page=page,
            page_count=_page_count(data, page_size),
            page_size=page_size,
        )

    def detail_url(self, vod_id: str) -> str:
        separator = "&" if "?" in self.api else "?"
        return f"{self.api}{separator}{urlencode({'ac': 'detail', 'ids': vod_id})}"

    def _normalize(self, item: CmsItem) -> NormalizedRecord:
        vod_id = str(item.vod_id)
        return NormalizedRecord(
            id=vod_id,
            source=self.key,
            title=item.vod_name.strip(),
            poster=(item.vod_pic or "").strip(),
            type=infer_media_type(item.type_name),
            detail_url=self.detail_url(vod_id),
        )


def _as_int(value: int | str | None) -> int:
    if value is None:
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def _page_count(data: CmsResponse, page_size: int) -> int:
    if data.pagecount is not None:
        return max(1, data.pagecount)
    if data.total is not None and page_size > 0:
        return max(1, math.ceil(data.total / page_size))
    return 1


__all__ = ["CmsProvider", "infer_media_type"]
