"""
Block tree fetching from the Notion API.

Pages are loaded chunk by chunk through the ``loadPageChunk`` endpoint.
Each response carries a ``recordMap.block`` mapping and a cursor; chunks
are requested until the cursor stack is empty. Blocks are merged in the
order the API returns them, which is the reading order of the page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import asyncio
import httpx


@dataclass
class FetchResult:
    """Result of fetching one document's block tree.

    Either blocks will be populated (success) or error will be populated
    (failure), but never both. status_code may be None for network-level
    failures.

    Attributes:
        document_id: The page id that was fetched
        status_code: HTTP status code of the last response, if any
        blocks: Mapping of block id to block record, or None on error
        error: Error message if the fetch failed, None on success
    """
    document_id: str
    status_code: int | None
    blocks: dict[str, Any] | None
    error: str | None


async def fetch_blocks(
    document_id: str,
    *,
    api_url: str,
    timeout: float,
    retries: int,
    token: str | None = None,
    chunk_limit: int = 100,
    max_chunks: int = 10,
    trust_env: bool = True,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """Fetch the block tree of a page, retrying the whole page on failure.

    Args:
        document_id: Notion page id
        api_url: Base URL of the API (``.../api/v3``)
        timeout: Request timeout in seconds
        retries: Number of retry attempts after initial failure
        token: Optional ``token_v2`` cookie for private workspaces
        chunk_limit: Blocks requested per chunk
        max_chunks: Maximum number of chunks followed
        trust_env: Whether to respect system proxy settings
        client: Optional shared client (its own settings are used as is)

    Returns:
        FetchResult with blocks on success or error message on failure
    """
    endpoint = f"{api_url.rstrip('/')}/loadPageChunk"
    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    cookies = {"token_v2": token} if token else None

    last_error: str | None = None
    last_status: int | None = None

    for attempt in range(retries + 1):
        try:
            if client is not None:
                blocks, last_status = await _load_page(
                    client, endpoint, document_id, chunk_limit, max_chunks
                )
            else:
                async with httpx.AsyncClient(
                    timeout=timeout,
                    headers=headers,
                    cookies=cookies,
                    follow_redirects=True,
                    trust_env=trust_env,
                ) as own_client:
                    blocks, last_status = await _load_page(
                        own_client, endpoint, document_id, chunk_limit, max_chunks
                    )
            return FetchResult(
                document_id=document_id, status_code=last_status, blocks=blocks, error=None
            )
        except httpx.HTTPStatusError as exc:
            last_status = exc.response.status_code
            last_error = f"HTTP {last_status}: {exc.request.url}"
        except Exception as exc:  # noqa: BLE001
            last_error = f"{type(exc).__name__}: {exc}"
        if attempt < retries:
            await asyncio.sleep(0.5 * (attempt + 1))

    return FetchResult(document_id=document_id, status_code=last_status, blocks=None, error=last_error)


async def _load_page(
    client: httpx.AsyncClient,
    endpoint: str,
    document_id: str,
    chunk_limit: int,
    max_chunks: int,
) -> tuple[dict[str, Any], int]:
    blocks: dict[str, Any] = {}
    cursor: dict[str, Any] = {"stack": []}
    status_code = 0

    for chunk_number in range(max_chunks):
        payload = {
            "pageId": document_id,
            "limit": chunk_limit,
            "cursor": cursor,
            "chunkNumber": chunk_number,
            "verticalColumns": False,
        }
        resp = await client.post(endpoint, json=payload)
        status_code = resp.status_code
        resp.raise_for_status()
        data = resp.json()

        record_map = data.get("recordMap") or {}
        chunk_blocks = record_map.get("block") or {}
        if not isinstance(chunk_blocks, dict):
            raise ValueError("Invalid response: recordMap.block is not an object")
        for block_id, record in chunk_blocks.items():
            blocks.setdefault(block_id, record)

        cursor = data.get("cursor") or {"stack": []}
        if not cursor.get("stack"):
            break

    return blocks, status_code
