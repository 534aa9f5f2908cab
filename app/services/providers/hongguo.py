"""Scraper for the hongguo short-drama category page.

The page embeds its router state as ``window._ROUTER_DATA = {...};`` inside a
script tag. That contract is undocumented and brittle: any change in marker or
shape is treated as a hard failure instead of returning a partial list.
"""

from __future__ import annotations

import httpx

from app.config import HongguoSettings, HttpSettings
from app.domain.models import MediaType, NormalizedRecord
from app.services.providers.base import _BaseProvider
from app.services.providers.schema import HongguoRouterData, HongguoSeries
from app.utils.html_json import extract_embedded_json

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


class HongguoProvider(_BaseProvider):
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: HongguoSettings | None = None,
        http_settings: HttpSettings | None = None,
    ) -> None:
        self._hongguo = settings or HongguoSettings()
        super().__init__(self._hongguo.source_key, http_client, settings=http_settings)

    @property
    def url(self) -> str:
        return self._hongguo.url

    async def fetch_recommendations(self) -> list[NormalizedRecord]:
        response = await self._get(
            self._hongguo.url,
            headers={"Accept": HTML_ACCEPT},
            operation="hongguo_category_fetch",
        )
        router_data = extract_embedded_json(response.text, self._hongguo.marker)
        data = self._validate(HongguoRouterData, router_data)
        return [self._normalize(series) for series in data.loader_data.category_page.recommend_list]

    def _normalize(self, series: HongguoSeries) -> NormalizedRecord:
        series_id = str(series.series_id)
        return NormalizedRecord(
            id=series_id,
            source=self.key,
            title=series.series_name,
            poster=series.series_cover,
            type=MediaType.short,
            detail_url=self._hongguo.detail_url_template.format(series_id=series_id),
        )


__all__ = ["HongguoProvider"]
