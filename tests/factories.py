"""Builders for normalized records and upstream payloads."""

from __future__ import annotations

import json
from typing import Any

from app.domain.models import MediaType, NormalizedRecord

HONGGUO_MARKER = "window._ROUTER_DATA = "


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_record(
    source: str,
    record_id: str | int,
    media_type: MediaType = MediaType.unknown,
    title: str | None = None,
) -> NormalizedRecord:
    return NormalizedRecord(
        id=str(record_id),
        source=source,
        title=title or f"{source}-{record_id}",
        poster="",
        type=media_type,
        detail_url=f"https://{source}.example/detail/{record_id}",
    )


def cms_payload(
    items: list[dict[str, Any]],
    *,
    page: int = 1,
    pagecount: int | None = 1,
    limit: int | str = 20,
    total: int | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "code": 1,
        "msg": "数据列表",
        "page": page,
        "limit": limit,
        "total": total if total is not None else len(items),
        "list": items,
    }
    if pagecount is not None:
        payload["pagecount"] = pagecount
    return payload


def hongguo_series(count: int) -> list[dict[str, Any]]:
    return [
        {
            "series_id": f"7{index:03d}",
            "series_name": f"短剧 {index}",
            "series_cover": f"https://img.example/{index}.jpg",
        }
        for index in range(count)
    ]


def router_data(series: list[dict[str, Any]]) -> dict[str, Any]:
    return {"loaderData": {"category_page": {"recommendList": series, "title": "推荐"}}}


def hongguo_html(payload: Any, marker: str = HONGGUO_MARKER) -> str:
    return (
        "<!DOCTYPE html><html><head><title>红果短剧</title></head><body>"
        "<div id=\"root\"></div>"
        f"<script>{marker}{json.dumps(payload, ensure_ascii=False)};</script>"
        "<script src=\"/static/main.js\"></script>"
        "</body></html>"
    )
