"""Upstream response shapes, validated before normalization."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CmsItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    vod_id: Union[int, str]
    vod_name: str
    vod_pic: Optional[str] = None
    type_name: Optional[str] = None
    vod_remarks: Optional[str] = None
    vod_year: Optional[Union[int, str]] = None


class CmsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    code: Optional[int] = None
    msg: Optional[str] = None
    page: Optional[Union[int, str]] = None
    pagecount: Optional[int] = None
    limit: Optional[Union[int, str]] = None
    total: Optional[int] = None
    items: List[CmsItem] = Field(alias="list")


class HongguoSeries(BaseModel):
    model_config = ConfigDict(extra="ignore")

    series_id: Union[int, str]
    series_name: str
    series_cover: str


class HongguoCategoryPage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    recommend_list: List[HongguoSeries] = Field(alias="recommendList")


class HongguoLoaderData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    category_page: HongguoCategoryPage


class HongguoRouterData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    loader_data: HongguoLoaderData = Field(alias="loaderData")


__all__ = [
    "CmsItem",
    "CmsResponse",
    "HongguoCategoryPage",
    "HongguoLoaderData",
    "HongguoRouterData",
    "HongguoSeries",
]
