"""Tests for configuration loading and site value resolution."""

from __future__ import annotations

import pytest

from notion_feed.config import AppConfig, get_notion_token, load_config, resolve_site


def test_load_config_without_path_returns_defaults():
    cfg = load_config(None)

    assert cfg.feed.limit == 10
    assert cfg.content.summary_max_chars == 200
    assert cfg.content.include_callout is False


def test_load_config_merges_sections(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "site:\n"
        "  link: https://blog.example.com/\n"
        "  unknown_key: ignored\n"
        "content:\n"
        "  include_toggle: true\n"
        "feed:\n"
        "  limit: 5\n"
        "unknown_section:\n"
        "  x: 1\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.site.link == "https://blog.example.com/"
    assert cfg.content.include_toggle is True
    assert cfg.content.include_callout is False
    assert cfg.feed.limit == 5
    assert cfg.feed.freshness_minutes == 10


def test_load_config_rejects_non_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(str(path))


def test_defaults_are_independent_between_loads():
    first = load_config(None)
    first.feed.limit = 99

    assert load_config(None).feed.limit == 10


def test_resolve_site_prefers_site_values_then_defaults():
    cfg = AppConfig()
    cfg.site.link = "https://blog.example.com/"
    cfg.site.author = ""
    cfg.defaults.author = "Global Author"
    cfg.site.lang = "zh-CN"
    cfg.defaults.sub_path = "/blog/"

    site = resolve_site(cfg)

    assert site.link == "https://blog.example.com"
    assert site.author == "Global Author"
    assert site.language == "zh-CN"
    assert site.sub_path == "blog"
    assert site.contact_email == ""


def test_notion_token_prefers_inline_value(monkeypatch):
    cfg = AppConfig()
    monkeypatch.setenv("NOTION_TOKEN_V2", "from-env")

    assert get_notion_token(cfg.fetch) == "from-env"

    cfg.fetch.token = "inline"
    assert get_notion_token(cfg.fetch) == "inline"
