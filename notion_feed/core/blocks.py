"""
Block tree text extraction.

A block tree maps block ids to block records. Records are either the
block itself or a Notion record-map envelope (``{"role": ..., "value":
{...}}``). Each block has a ``type`` tag and, for text blocks, a
``properties.title`` list of rich-text runs whose first element is the
plain text.

The extractor walks the tree in its own key order and returns one
ExtractedUnit per block that carries text. Decorative and structural
blocks are skipped, as are blocks without a title.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from .compose import normalize_text
from .types import BlockType, ExtractedUnit, ExtractionResult

logger = logging.getLogger(__name__)


def extract(
    block_tree: Any,
    *,
    title: str | None = None,
    include_callout: bool = False,
    include_toggle: bool = False,
) -> ExtractionResult:
    """Extract text units from a block tree.

    Args:
        block_tree: Mapping of block id to block record; None or anything
            else that is not a mapping counts as a missing tree
        title: Document title, used only for logging
        include_callout: Emit callout blocks as paragraphs
        include_toggle: Emit toggle blocks as paragraphs

    Returns:
        ExtractionResult. ``status`` is "empty" for a missing or empty
        tree and "fallback" (with a single NOTICE unit) when traversal
        failed unexpectedly.
    """
    if not isinstance(block_tree, Mapping) or not block_tree:
        return ExtractionResult(units=[], status="empty")

    included = set()
    if include_callout:
        included.add(BlockType.CALLOUT)
    if include_toggle:
        included.add(BlockType.TOGGLE)

    try:
        units: list[ExtractedUnit] = []
        for block_id in block_tree:
            block = _resolve_block(block_tree[block_id])
            if block is None:
                continue
            unit = _extract_block(block, included)
            if unit is not None:
                units.append(unit)
        return ExtractionResult(units=units, status="ok")
    except Exception as exc:  # noqa: BLE001
        error = f"{type(exc).__name__}: {exc}"
        logger.warning(
            "Extraction failed for %r: %s",
            title,
            error,
            extra={"event": "extract_failed", "title": title},
        )
        return ExtractionResult(
            units=[ExtractedUnit(block_type=BlockType.NOTICE, text="", tag="notice")],
            status="fallback",
            error=error,
        )


def classify(tag: str, included: set[BlockType] | frozenset[BlockType] = frozenset()) -> BlockType:
    """Map a raw block tag to its BlockType, applying the inclusion policy."""
    if tag == BlockType.CALLOUT.value and BlockType.CALLOUT in included:
        return BlockType.CALLOUT
    if tag == BlockType.TOGGLE.value and BlockType.TOGGLE in included:
        return BlockType.TOGGLE
    return BlockType.from_tag(tag)


def rich_text(runs: Any) -> str:
    """Join the plain-text element of each rich-text run.

    Runs that are not lists, or whose first element is not a string,
    contribute nothing.

    Examples:
        >>> rich_text([["Hello "], ["world", [["b"]]]])
        'Hello world'
    """
    if not isinstance(runs, list):
        return ""
    parts = []
    for run in runs:
        if isinstance(run, (list, tuple)) and run and isinstance(run[0], str):
            parts.append(run[0])
    return "".join(parts)


def _resolve_block(record: Any) -> Mapping[str, Any] | None:
    if not isinstance(record, Mapping):
        return None
    value = record.get("value")
    if isinstance(value, Mapping) and "type" not in record:
        record = value
    if record.get("alive") is False:
        return None
    if not isinstance(record.get("type"), str):
        return None
    return record


def _extract_block(block: Mapping[str, Any], included: set[BlockType]) -> ExtractedUnit | None:
    tag = block["type"]
    block_type = classify(tag, included)
    if block_type is BlockType.IGNORED:
        return None

    properties = block.get("properties")
    if not isinstance(properties, Mapping):
        return None
    text = normalize_text(rich_text(properties.get("title")))
    if not text:
        return None
    return ExtractedUnit(block_type=block_type, text=text, tag=tag)
