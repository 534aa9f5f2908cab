"""Keyword search across the configured video sources."""

from __future__ import annotations

from typing import Sequence

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.api.deps import Services, get_services, request_locale
from app.domain.models import ProviderDescriptor
from app.logging import logger
from app.services.exceptions import AggregationError
from app.services.search import ALL_SOURCES, parse_media_filter
from app.utils.params import parse_int_param

router = APIRouter(prefix="/api", tags=["search"])


def select_sources(
    configured: Sequence[ProviderDescriptor], requested: str | None
) -> list[ProviderDescriptor]:
    """Restrict the configured sources to a comma-separated key list, keeping config order."""

    if not requested or not requested.strip():
        return list(configured)
    keys = {key.strip() for key in requested.split(",") if key.strip()}
    return [descriptor for descriptor in configured if descriptor.key in keys]


@router.get("/search")
async def search_videos(
    request: Request,
    q: str = Query(default=""),
    page: str | None = Query(default=None),
    media_type: str | None = Query(default=None, alias="type"),
    source: str | None = Query(default=None),
    sources: str | None = Query(default=None),
    services: Services = Depends(get_services),
) -> JSONResponse:
    page_number = parse_int_param(page, 1, minimum=1)
    providers = select_sources(services.settings.sources, sources)

    try:
        result = await services.search.search_entry(
            q,
            providers,
            page_number,
            media_type=parse_media_filter(media_type),
            source=(source or ALL_SOURCES).strip() or ALL_SOURCES,
        )
    except AggregationError as exc:
        logger.error(
            "search_failed",
            query=q,
            page=page_number,
            failures=[str(failure) for failure in exc.failures],
        )
        message = services.i18n.gettext("search.failed", locale=request_locale(request))
        return JSONResponse(status_code=500, content={"error": message, "results": [], "pageCount": 1})

    payload = result.to_payload()
    payload["page"] = result.page
    payload["pageSize"] = result.page_size
    return JSONResponse(content=payload)


__all__ = ["router", "select_sources"]
