"""Tests for block tree fetching against a mocked Notion API."""

from __future__ import annotations

import asyncio
import json

import httpx

from notion_feed.fetch import fetcher
from notion_feed.fetch.fetcher import fetch_blocks

API = "https://notion.example.com/api/v3"


def _chunk(blocks: dict, stack: list) -> dict:
    return {"recordMap": {"block": blocks}, "cursor": {"stack": stack}}


def _run(handler, **kwargs):
    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_blocks(
                "page-1", api_url=API, timeout=5, client=client, **{"retries": 0, **kwargs}
            )

    return asyncio.run(_go())


def test_follows_cursor_and_merges_chunks_in_order():
    requests: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests.append(body)
        if body["chunkNumber"] == 0:
            return httpx.Response(
                200,
                json=_chunk(
                    {"p": {"value": {"type": "page"}}, "b1": {"value": {"type": "text"}}},
                    [[{"table": "block", "id": "b2", "index": 0}]],
                ),
            )
        return httpx.Response(200, json=_chunk({"b2": {"value": {"type": "header"}}}, []))

    result = _run(handler)

    assert result.error is None
    assert result.status_code == 200
    assert list(result.blocks) == ["p", "b1", "b2"]
    assert [r["chunkNumber"] for r in requests] == [0, 1]
    assert requests[0]["pageId"] == "page-1"
    assert requests[1]["cursor"] == {"stack": [[{"table": "block", "id": "b2", "index": 0}]]}


def test_max_chunks_bounds_requests():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, json=_chunk({f"b{calls}": {"value": {"type": "text"}}}, [["more"]]))

    result = _run(handler, max_chunks=3)

    assert calls == 3
    assert list(result.blocks) == ["b1", "b2", "b3"]


def test_http_error_is_reported_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "boom"})

    result = _run(handler)

    assert result.blocks is None
    assert result.status_code == 500
    assert "HTTP 500" in result.error


def test_retries_then_succeeds(monkeypatch):
    attempts = 0

    async def _no_sleep(_seconds):
        return None

    monkeypatch.setattr(fetcher.asyncio, "sleep", _no_sleep)

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=_chunk({"b1": {"value": {"type": "text"}}}, []))

    result = _run(handler, retries=2)

    assert attempts == 2
    assert result.error is None
    assert list(result.blocks) == ["b1"]


def test_invalid_payload_is_an_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"recordMap": {"block": ["not", "a", "map"]}})

    result = _run(handler)

    assert result.blocks is None
    assert "ValueError" in result.error
