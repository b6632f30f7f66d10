"""
Core data types for notion-feed.

This module defines the values passed between pipeline stages:
- Document: One published post as listed by the content store
- BlockType: Closed set of block tags the extractor knows about
- ExtractedUnit: One piece of text pulled out of a block
- ExtractionResult / CompositionResult: Stage outputs with an explicit status
- FeedItem: The record handed to the feed encoder
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass
class Document:
    """A published document as listed by the content store.

    Attributes:
        id: Page identifier used to fetch the block tree
        title: Document title, used verbatim as the item title
        slug: Path segment appended to the site link
        published_at: Publish timestamp (timezone aware)
    """
    id: str
    title: str
    slug: str
    published_at: datetime


class BlockType(str, Enum):
    """Block tags understood by the extractor.

    ``OTHER`` covers tags that are neither known text blocks nor known
    decorative blocks; they still contribute text when they carry a title.
    ``IGNORED`` covers decorative and structural blocks. ``NOTICE`` marks
    the fallback unit emitted when extraction fails.
    """

    HEADER = "header"
    SUB_HEADER = "sub_header"
    SUB_SUB_HEADER = "sub_sub_header"
    TEXT = "text"
    QUOTE = "quote"
    CALLOUT = "callout"
    TOGGLE = "toggle"
    TO_DO = "to_do"
    BULLETED_LIST = "bulleted_list"
    NUMBERED_LIST = "numbered_list"
    CODE = "code"
    OTHER = "other"
    IGNORED = "ignored"
    NOTICE = "notice"

    @classmethod
    def from_tag(cls, tag: str) -> "BlockType":
        if tag in IGNORED_TAGS:
            return cls.IGNORED
        if tag in _TEXT_TAGS:
            return cls(tag)
        return cls.OTHER


# Decorative or structural tags that never contribute text. Callout and
# toggle are listed here and re-admitted by the extractor's inclusion policy.
IGNORED_TAGS = frozenset(
    {
        "image",
        "page",
        "page_icon",
        "file",
        "video",
        "embed",
        "bookmark",
        "audio",
        "table_of_contents",
        "callout",
        "toggle",
        "divider",
        "collection_view",
        "collection_view_page",
        "collection_row",
    }
)

_TEXT_TAGS = frozenset(
    member.value
    for member in BlockType
    if member.name not in {"OTHER", "IGNORED", "NOTICE", "CALLOUT", "TOGGLE"}
)


@dataclass
class ExtractedUnit:
    """Text extracted from one block.

    Attributes:
        block_type: Classified block type
        text: Normalized plain text, never empty for non-notice units
        tag: The raw tag string as stored in the block record
    """
    block_type: BlockType
    text: str
    tag: str = ""


@dataclass
class ExtractionResult:
    """Output of the block extractor.

    Attributes:
        units: Extracted units in tree order
        status: "ok", "empty" (no tree or no blocks) or "fallback" (internal failure)
        error: Error message when status is "fallback"
    """
    units: list[ExtractedUnit] = field(default_factory=list)
    status: str = "ok"
    error: str | None = None


@dataclass
class CompositionResult:
    """Output of the composer.

    Attributes:
        content: HTML fragment for the item body
        summary: Plain-text description derived from the content
        status: "ok", "empty" (nothing to show, notice used) or "fallback" (internal failure)
        error: Error message when status is "fallback"
    """
    content: str
    summary: str
    status: str = "ok"
    error: str | None = None


@dataclass
class FeedItem:
    """One entry handed to the feed encoder.

    ``content`` is raw HTML; the encoder escapes or CDATA-wraps it.
    """
    id: str
    title: str
    link: str
    description: str
    content: str
    date: datetime
    status: str = "ok"
