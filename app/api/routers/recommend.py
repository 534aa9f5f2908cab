"""Short-drama recommendation endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.api.deps import Services, get_services, request_locale
from app.domain.models import RecommendationPage
from app.logging import logger
from app.services.exceptions import (
    CacheProductionError,
    ExtractionError,
    ProviderError,
    ServiceError,
)
from app.utils.params import parse_int_param

DEFAULT_PAGE_LIMIT = 12
DEFAULT_PAGE_START = 0

router = APIRouter(prefix="/api", tags=["recommendations"])


@router.get("/hongguo", response_model=RecommendationPage)
async def get_hongguo_recommendations(
    request: Request,
    page_limit: str | None = Query(default=None),
    page_start: str | None = Query(default=None),
    services: Services = Depends(get_services),
) -> JSONResponse:
    limit = parse_int_param(page_limit, DEFAULT_PAGE_LIMIT, minimum=1)
    start = parse_int_param(page_start, DEFAULT_PAGE_START, minimum=0)

    try:
        page = await services.recommendations.recommendation_entry(start, limit)
    except ServiceError as exc:
        logger.error("recommendations_failed", page_start=start, page_limit=limit, **_failure_fields(exc))
        message = services.i18n.gettext("recommend.failed", locale=request_locale(request))
        return JSONResponse(status_code=500, content={"error": message, "list": [], "total": 0})

    return JSONResponse(
        content=page.model_dump(mode="json", by_alias=True),
        headers={"Cache-Control": services.settings.hongguo.cache_control()},
    )


def _failure_fields(exc: ServiceError) -> dict[str, object]:
    cause = exc.cause if isinstance(exc, CacheProductionError) else exc
    fields: dict[str, object] = {"error_type": type(cause).__name__, "error": str(cause)}
    if isinstance(cause, ExtractionError):
        fields["reason"] = cause.reason.value
    elif isinstance(cause, ProviderError):
        fields["reason"] = cause.kind.value
        fields["detail"] = cause.detail
    return fields


__all__ = ["router"]
