"""
Main pipeline orchestration for notion-feed.

This module coordinates the entire workflow:
1. Parse the exported document list
2. Keep the most recent documents (feed.limit)
3. Fetch each document's block tree
4. Extract and compose item content
5. Write RSS, Atom and JSON feeds

Block trees are fetched concurrently; item order always follows the
document list. A failed fetch only affects its own item.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Awaitable, Callable

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .config import AppConfig, get_notion_token, resolve_site
from .core.items import build_item
from .core.types import Document, FeedItem
from .fetch.fetcher import FetchResult, fetch_blocks
from .input.json_parser import parse_documents
from .logging_utils import log_event, setup_logging
from .output.feeds import RSS_FILENAME, FeedPaths, is_recently_updated, write_feeds

BlockProvider = Callable[[str], Awaitable[Any]]


@dataclass
class FetchStats:
    """Statistics collected during the fetch stage.

    Attributes:
        total: Number of documents to fetch
        success: Block trees fetched
        failed: Documents whose fetch failed
    """
    total: int = 0
    success: int = 0
    failed: int = 0


def run_pipeline(
    input_path: Path,
    output_dir: Path,
    cfg: AppConfig,
    *,
    force: bool = False,
    show_progress: bool = True,
    console: Console | None = None,
    provider: BlockProvider | None = None,
) -> FeedPaths | None:
    """Run the complete feed generation pipeline.

    Args:
        input_path: Path to the exported document list (JSON)
        output_dir: Directory receiving feed.xml, atom.xml and feed.json
        cfg: Application configuration
        force: Regenerate even if feed.xml was updated recently
        show_progress: Whether to display a progress bar
        console: Rich console for output (creates default if None)
        provider: Block tree provider (defaults to the Notion API)

    Returns:
        Paths of the written feeds, or None when generation was skipped
        or the output directory is not writable
    """
    logger = setup_logging(cfg.logging, output_dir)
    console = console or Console()

    rss_path = output_dir / RSS_FILENAME
    if not force and is_recently_updated(rss_path, cfg.feed.freshness_minutes):
        log_event(
            logger,
            "Feed is fresh, skipping",
            event="feed_fresh",
            output=str(rss_path),
            freshness_minutes=cfg.feed.freshness_minutes,
        )
        return None

    with open(input_path, encoding="utf-8") as f:
        data = json.load(f)
    documents = parse_documents(data)[: cfg.feed.limit]
    log_event(
        logger,
        "Pipeline start",
        event="pipeline_start",
        input=str(input_path),
        output=str(output_dir),
        documents=len(documents),
    )

    provider = provider or notion_provider(cfg)
    stats = FetchStats(total=len(documents))

    if show_progress:
        progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        )
        with progress:
            task = progress.add_task("Fetch + Compose", total=len(documents))
            items = asyncio.run(
                collect_items(
                    documents,
                    cfg,
                    provider,
                    stats=stats,
                    on_fetched=lambda: progress.advance(task, 1),
                )
            )
    else:
        items = asyncio.run(collect_items(documents, cfg, provider, stats=stats))

    _render_fetch_stats(stats, console)
    paths = write_feeds(items, resolve_site(cfg), output_dir)
    log_event(
        logger,
        "Pipeline complete",
        event="pipeline_complete",
        output=str(output_dir),
        total=len(items),
        fallback=sum(1 for item in items if item.status != "ok"),
        written=paths is not None,
    )
    return paths


async def collect_items(
    documents: list[Document],
    cfg: AppConfig,
    provider: BlockProvider,
    *,
    stats: FetchStats | None = None,
    on_fetched: Callable[[], None] | None = None,
) -> list[FeedItem]:
    """Fetch block trees and build one feed item per document.

    Fetches run concurrently (bounded by ``fetch.concurrency``); items
    are built afterwards, one document at a time, in document order.

    Args:
        documents: Documents in feed order
        cfg: Application configuration
        provider: Async callable returning a block tree (or FetchResult)
            for a document id; exceptions count as a failed fetch
        stats: Optional statistics object to update
        on_fetched: Optional callback invoked after each fetch

    Returns:
        Feed items in the same order as ``documents``
    """
    stats = stats or FetchStats(total=len(documents))
    semaphore = asyncio.Semaphore(max(1, cfg.fetch.concurrency))

    async def _fetch_single(document: Document) -> tuple[Any, str | None]:
        async with semaphore:
            try:
                result = await provider(document.id)
            except Exception as exc:  # noqa: BLE001
                tree, error = None, f"{type(exc).__name__}: {exc}"
            else:
                if isinstance(result, FetchResult):
                    tree, error = result.blocks, result.error
                else:
                    tree, error = result, None
        if error is None:
            stats.success += 1
        else:
            stats.failed += 1
        if on_fetched is not None:
            on_fetched()
        return tree, error

    fetched = await asyncio.gather(*(_fetch_single(document) for document in documents))

    site = resolve_site(cfg)
    return [
        build_item(document, tree, site, cfg.content, fetch_error=error)
        for document, (tree, error) in zip(documents, fetched)
    ]


def notion_provider(cfg: AppConfig) -> BlockProvider:
    """Block tree provider backed by the Notion API."""
    token = get_notion_token(cfg.fetch)

    async def _provide(document_id: str) -> FetchResult:
        return await fetch_blocks(
            document_id,
            api_url=cfg.fetch.api_url,
            timeout=cfg.fetch.timeout_seconds,
            retries=cfg.fetch.retries,
            token=token,
            chunk_limit=cfg.fetch.chunk_limit,
            max_chunks=cfg.fetch.max_chunks,
            trust_env=cfg.fetch.trust_env,
        )

    return _provide


def _render_fetch_stats(stats: FetchStats, console: Console) -> None:
    console.print(
        "[bold]Fetch summary[/bold]: "
        f"total={stats.total}, success={stats.success}, failed={stats.failed}"
    )
