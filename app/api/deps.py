"""Request-scoped access to the long-lived service objects."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from app.config import AppSettings
from app.i18n import I18nService
from app.services.cache import ResultCache
from app.services.recommendations import RecommendationService
from app.services.search import SearchService


@dataclass(slots=True)
class Services:
    settings: AppSettings
    cache: ResultCache
    search: SearchService
    recommendations: RecommendationService
    i18n: I18nService


def get_services(request: Request) -> Services:
    return request.app.state.services


def request_locale(request: Request) -> str | None:
    """First language tag of ``Accept-Language``, without its quality value."""

    header = request.headers.get("accept-language", "")
    first = header.split(",", 1)[0].split(";", 1)[0].strip()
    return first or None


__all__ = ["Services", "get_services", "request_locale"]
