"""Tests for item building and pipeline orchestration."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
import json
from pathlib import Path

from notion_feed import runner
from notion_feed.config import AppConfig, resolve_site
from notion_feed.core.items import build_item
from notion_feed.core.types import Document
from notion_feed.fetch.fetcher import FetchResult

BASE = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _config() -> AppConfig:
    cfg = AppConfig()
    cfg.site.link = "https://blog.example.com"
    cfg.site.title = "Example Blog"
    cfg.logging.console = False
    return cfg


def _documents(count: int) -> list[Document]:
    return [
        Document(
            id=f"page-{i}",
            title=f"Post {i}",
            slug=f"article/post-{i}",
            published_at=BASE - timedelta(days=i),
        )
        for i in range(count)
    ]


def _tree_for(document_id: str) -> dict:
    return {
        f"{document_id}-h": {"type": "header", "properties": {"title": [[f"Heading {document_id}"]]}},
        f"{document_id}-img": {"type": "image", "properties": {"title": [["photo.png"]]}},
        f"{document_id}-p": {"type": "text", "properties": {"title": [["Body text"]]}},
    }


def test_build_item_fields():
    cfg = _config()
    document = _documents(1)[0]

    item = build_item(document, _tree_for(document.id), resolve_site(cfg), cfg.content)

    assert item.title == "Post 0"
    assert item.link == "https://blog.example.com/article/post-0"
    assert item.content == "<h3>Heading page-0</h3><p>Body text</p>"
    assert item.description == "Heading page-0Body text"
    assert item.date == BASE
    assert item.status == "ok"


def test_build_item_with_fetch_error_uses_notice():
    cfg = _config()
    document = _documents(1)[0]

    item = build_item(
        document, _tree_for(document.id), resolve_site(cfg), cfg.content, fetch_error="HTTP 500"
    )

    assert item.status == "fallback"
    assert item.title and item.date
    assert f'href="{item.link}"' in item.content


def test_build_item_with_empty_tree_uses_notice():
    cfg = _config()
    document = _documents(1)[0]

    item = build_item(document, {}, resolve_site(cfg), cfg.content)

    assert item.status == "empty"
    assert "View the original post" in item.content


def test_collect_items_keeps_order_and_isolates_failures():
    cfg = _config()
    documents = _documents(10)

    async def provider(document_id: str):
        if document_id == "page-3":
            raise RuntimeError("backend down")
        if document_id == "page-5":
            return FetchResult(document_id=document_id, status_code=502, blocks=None, error="HTTP 502")
        # Finish in reverse order to make sure gather keeps input order.
        await asyncio.sleep(0.001 * (10 - int(document_id.split("-")[1])))
        return _tree_for(document_id)

    stats = runner.FetchStats(total=len(documents))
    items = asyncio.run(runner.collect_items(documents, cfg, provider, stats=stats))

    assert [item.title for item in items] == [d.title for d in documents]
    assert stats.success == 8
    assert stats.failed == 2
    for index in (3, 5):
        failed = items[index]
        assert failed.status == "fallback"
        assert failed.title == f"Post {index}"
        assert failed.link == f"https://blog.example.com/article/post-{index}"
        assert failed.date == documents[index].published_at
        assert f'href="{failed.link}"' in failed.content
    assert items[0].content == "<h3>Heading page-0</h3><p>Body text</p>"


def _write_input(tmp_path: Path, count: int) -> Path:
    posts = [
        {
            "id": f"page-{i}",
            "title": f"Post {i}",
            "slug": f"article/post-{i}",
            "publishDay": (BASE - timedelta(days=i)).strftime("%Y-%m-%d"),
            "summary": 123 if i == 0 else "",
        }
        for i in range(count)
    ]
    path = tmp_path / "posts.json"
    path.write_text(json.dumps({"posts": posts}), encoding="utf-8")
    return path


def test_run_pipeline_limits_to_first_ten(tmp_path):
    cfg = _config()
    input_path = _write_input(tmp_path, 15)
    output_dir = tmp_path / "rss"
    requested: list[str] = []

    async def provider(document_id: str):
        requested.append(document_id)
        return _tree_for(document_id)

    paths = runner.run_pipeline(
        input_path, output_dir, cfg, force=True, show_progress=False, provider=provider
    )

    assert paths is not None
    assert sorted(requested) == sorted(f"page-{i}" for i in range(10))
    feed = json.loads(paths.json.read_text(encoding="utf-8"))
    assert [item["title"] for item in feed["items"]] == [f"Post {i}" for i in range(10)]
    rss = paths.rss.read_text(encoding="utf-8")
    assert rss.index("Post 0") < rss.index("Post 9")
    assert "Post 10" not in rss
    assert paths.atom.exists()


def test_run_pipeline_survives_control_characters_in_titles(tmp_path):
    cfg = _config()
    posts = [
        {"id": "page-0", "title": "Good", "slug": "article/good", "publishDay": "2024-06-01"},
        {"id": "page-1", "title": "Bad\x0btitle", "slug": "article/b\x00ad", "publishDay": "2024-05-31"},
    ]
    input_path = tmp_path / "posts.json"
    input_path.write_text(json.dumps(posts), encoding="utf-8")

    async def provider(document_id: str):
        return _tree_for(document_id)

    paths = runner.run_pipeline(
        input_path, tmp_path / "rss", cfg, force=True, show_progress=False, provider=provider
    )

    assert paths is not None
    rss = paths.rss.read_text(encoding="utf-8")
    assert "Good" in rss
    assert "Badtitle" in rss
    assert "https://blog.example.com/article/bad" in rss


def test_run_pipeline_skips_when_feed_is_fresh(tmp_path):
    cfg = _config()
    input_path = _write_input(tmp_path, 2)
    output_dir = tmp_path / "rss"
    output_dir.mkdir()
    (output_dir / "feed.xml").write_text("<rss/>", encoding="utf-8")

    async def provider(document_id: str):
        raise AssertionError("should not fetch")

    assert runner.run_pipeline(input_path, output_dir, cfg, show_progress=False, provider=provider) is None
    assert (output_dir / "feed.xml").read_text(encoding="utf-8") == "<rss/>"


def test_run_pipeline_progress_mode(tmp_path):
    cfg = _config()
    input_path = _write_input(tmp_path, 3)

    async def provider(document_id: str):
        return _tree_for(document_id)

    paths = runner.run_pipeline(
        input_path, tmp_path / "out", cfg, force=True, show_progress=True, provider=provider
    )

    assert paths is not None
    assert "Heading page-2" in paths.json.read_text(encoding="utf-8")
