"""Per-document feed item building: extract, compose, attach metadata."""

from __future__ import annotations

import logging
from typing import Any

from ..config import ContentConfig, SiteSettings
from .blocks import extract
from .compose import compose
from .types import Document, FeedItem

logger = logging.getLogger(__name__)


def item_link(site: SiteSettings, document: Document) -> str:
    return f"{site.link}/{document.slug.lstrip('/')}"


def build_item(
    document: Document,
    block_tree: Any,
    site: SiteSettings,
    content_cfg: ContentConfig,
    *,
    fetch_error: str | None = None,
) -> FeedItem:
    """Build the feed item for one document.

    A fetch failure is treated like a missing tree: the item still
    appears, with a notice linking to the post instead of its content.

    Args:
        document: The document being published
        block_tree: Block tree returned by the provider (None on failure)
        site: Resolved site settings
        content_cfg: Content composition settings
        fetch_error: Error reported by the provider, if any

    Returns:
        FeedItem with status "ok", "empty" or "fallback"
    """
    link = item_link(site, document)
    if fetch_error is not None:
        logger.warning(
            "Using notice for %r: %s",
            document.title,
            fetch_error,
            extra={"event": "fetch_failed", "title": document.title, "link": link},
        )
        block_tree = None

    extraction = extract(
        block_tree,
        title=document.title,
        include_callout=content_cfg.include_callout,
        include_toggle=content_cfg.include_toggle,
    )
    composed = compose(
        extraction.units,
        link=link,
        wrap_container=content_cfg.wrap_container,
        summary_max_chars=content_cfg.summary_max_chars,
    )

    status = composed.status
    if extraction.status == "fallback" or fetch_error is not None:
        status = "fallback"

    return FeedItem(
        id=document.id or link,
        title=document.title,
        link=link,
        description=composed.summary,
        content=composed.content,
        date=document.published_at,
        status=status,
    )
