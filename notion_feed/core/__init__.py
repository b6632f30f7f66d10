"""
Core domain models and content pipeline.

This package contains the block extractor, the content composer and the
data types passed between them, independent of fetching and output.
"""

from .types import (
    BlockType,
    CompositionResult,
    Document,
    ExtractedUnit,
    ExtractionResult,
    FeedItem,
)
from .blocks import extract
from .compose import compose, normalize_text, strip_tags, summarize, wrap_content
from .items import build_item

__all__ = [
    "BlockType",
    "CompositionResult",
    "Document",
    "ExtractedUnit",
    "ExtractionResult",
    "FeedItem",
    "extract",
    "compose",
    "normalize_text",
    "strip_tags",
    "summarize",
    "wrap_content",
    "build_item",
]
