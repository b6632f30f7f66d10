"""JSON parser for the published document list.

The document list is exported by the site build (one entry per published
post, most recent first). Accepted shapes:
- ``{"posts": [...]}`` or ``{"documents": [...]}``
- a bare list of entries
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any

from ..core.compose import strip_control_chars
from ..core.types import Document

logger = logging.getLogger(__name__)

_DATE_KEYS = ("publishDay", "publishDate", "date", "publishedAt")


def parse_documents(data: Any) -> list[Document]:
    """Parse the exported document list into Document objects.

    The entry structure:
        {
            "id": "6c1c3b0e-8a1f-4c1e-9a55-2f0f5e1e7a10",
            "title": "Post Title",
            "slug": "article/post-title",
            "publishDay": "2024-1-5",
            "summary": "Optional, ignored"
        }

    ``publishDay`` may also be given as ``publishDate`` (epoch
    milliseconds), ``date`` or ``publishedAt`` (ISO 8601).

    Args:
        data: The parsed JSON content

    Returns:
        Documents in input order. Entries missing ``title`` or ``slug``
        are skipped with a warning.

    Raises:
        ValueError: If no document list can be found in the data
    """
    entries = _document_entries(data)
    documents: list[Document] = []

    for item in entries:
        if not isinstance(item, dict):
            logger.warning(f"Skipping document entry of type {type(item).__name__}")
            continue

        title = _clean(item.get("title"))
        slug = _clean(item.get("slug"))
        doc_id = item.get("id")
        if not title or not slug:
            logger.warning(f"Skipping document {doc_id or 'unknown'}: missing required fields (title or slug)")
            continue

        documents.append(
            Document(
                id=strip_control_chars(str(doc_id)) if doc_id else "",
                title=title,
                slug=slug,
                published_at=_published_at(item),
            )
        )

    return documents


def _clean(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return strip_control_chars(value).strip()


def _document_entries(data: Any) -> list[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("posts", "documents"):
            if isinstance(data.get(key), list):
                return data[key]
    raise ValueError("Invalid JSON format: expected a list or a 'posts'/'documents' key")


def _published_at(item: dict[str, Any]) -> datetime:
    for key in _DATE_KEYS:
        value = item.get(key)
        if value in (None, ""):
            continue
        parsed = parse_timestamp(value)
        if parsed is not None:
            return parsed
        logger.warning(f"Unparseable {key} {value!r} for {item.get('title')!r}")
    logger.warning(f"No publish date for {item.get('title')!r}; using current time")
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse epoch milliseconds, ISO 8601 or ``YYYY-M-D`` into an aware datetime.

    Naive values are taken as UTC.

    Examples:
        >>> parse_timestamp("2024-1-5")
        datetime.datetime(2024, 1, 5, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.isdigit():
        return parse_timestamp(int(text))
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y-%m-%d %H:%M"):
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
