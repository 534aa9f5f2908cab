"""Shared httpx client construction."""

from __future__ import annotations

import httpx

from app.config import HttpSettings


def default_headers(settings: HttpSettings) -> dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Accept": "application/json, text/html;q=0.9, */*;q=0.8",
        "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
    }


def build_async_client(settings: HttpSettings) -> httpx.AsyncClient:
    timeout = httpx.Timeout(settings.request_timeout_seconds)
    return httpx.AsyncClient(timeout=timeout, headers=default_headers(settings), follow_redirects=True)


__all__ = ["build_async_client", "default_headers"]
