"""Tests for the I18nService translation lookup and fallback."""

from __future__ import annotations

from pathlib import Path

import pytest

from app.i18n import I18nService


def test_gettext_returns_translated_string(tmp_path: Path):
    locale_dir = tmp_path / "locales"
    locale_dir.mkdir()
    (locale_dir / "en.json").write_text('{"greet": "Hello {name}"}', encoding="utf-8")
    service = I18nService(locales_path=locale_dir, default_locale="en")

    text = service.gettext("greet", name="World")
    assert text == "Hello World"


def test_gettext_falls_back_to_default(tmp_path: Path):
    locale_dir = tmp_path / "locales"
    locale_dir.mkdir()
    (locale_dir / "en.json").write_text('{"greet": "Hello"}', encoding="utf-8")
    service = I18nService(locales_path=locale_dir, default_locale="en")

    assert service.gettext("greet", locale="es") == "Hello"
    assert service.gettext("missing.key") == "missing.key"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("zh-CN", "zh"), ("en_US", "en"), ("EN", "en"), ("zh", "zh")],
)
def test_normalize_locale(raw, expected):
    assert I18nService.normalize_locale(raw) == expected


def test_bundled_locales_carry_search_messages():
    service = I18nService()

    assert service.gettext("search.prompt") == "请输入关键词开始搜索"
    assert service.gettext("search.no_results", locale="zh-CN") == "未找到相关结果，请尝试其他关键词"
    assert service.gettext("search.failed", locale="en-GB") == "Search failed, please try again later"
    assert service.gettext("search.summary", locale="en", count=3, query="三体") == 'Found 3 results for "三体"'
