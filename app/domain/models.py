"""Pydantic models shared across logic/application layers."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MediaType(str, Enum):
    movie = "movie"
    tv = "tv"
    short = "short"
    unknown = "unknown"


class NormalizedRecord(BaseModel):
    """Common shape every provider's records are coerced into.

    ``id`` is only unique within ``source``; callers that need a global
    identity should use :attr:`identity`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    source: str
    title: str
    poster: str = ""
    type: MediaType = MediaType.unknown
    detail_url: str = Field(default="", alias="detailUrl")

    @property
    def identity(self) -> tuple[str, str]:
        return (self.source, self.id)


class ProviderDescriptor(BaseModel):
    key: str = Field(min_length=1)
    name: str
    api: str = Field(min_length=1)


class ProviderPage(BaseModel):
    provider: str
    records: list[NormalizedRecord] = Field(default_factory=list)
    page: int = 1
    page_count: int = Field(default=1, ge=1)
    page_size: int = Field(default=0, ge=0)


class SearchResultSet(BaseModel):
    records: list[NormalizedRecord] = Field(default_factory=list)
    page: int = 1
    page_size: int = 0
    total_pages: int = 1

    @classmethod
    def empty(cls, page: int = 1) -> "SearchResultSet":
        return cls(records=[], page=page, page_size=0, total_pages=1)

    def to_payload(self) -> dict[str, Any]:
        return {
            "results": [record.model_dump(mode="json", by_alias=True) for record in self.records],
            "pageCount": self.total_pages,
        }


class RecommendationPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: list[NormalizedRecord] = Field(default_factory=list, alias="list")
    total: int = 0


__all__ = [
    "MediaType",
    "NormalizedRecord",
    "ProviderDescriptor",
    "ProviderPage",
    "RecommendationPage",
    "SearchResultSet",
]
