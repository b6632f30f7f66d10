"""
Text sanitization and content composition.

Extracted units are normalized (pictographs removed, whitespace trimmed),
wrapped in a fixed tag per block type and joined into one HTML fragment.
The item description is derived from that fragment by stripping tags and
cutting it to a fixed number of characters.

Text is inserted into the wrapper tags without HTML escaping. Feed
encoders must escape or CDATA-wrap the fragment before writing XML.
"""

from __future__ import annotations

from functools import lru_cache
import logging
import re
from typing import Iterable

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup, escape

from .types import BlockType, CompositionResult, ExtractedUnit

logger = logging.getLogger(__name__)

# Emoji presentation and extended pictographic forms, the Miscellaneous
# Symbols and Dingbats blocks, plus the sequence glue left behind once a
# pictograph is gone: VARIATION SELECTOR-16, ZERO WIDTH JOINER, the
# combining keycap and the tag characters of subdivision flags.
_PICTOGRAPH_RE = re.compile(
    "["
    "\U000000a9\U000000ae\U0000203c\U00002049\U00002122\U00002139"
    "\U00002194-\U00002199\U000021a9-\U000021aa"
    "\U0000231a-\U0000231b\U00002328\U000023cf\U000023e9-\U000023f3\U000023f8-\U000023fa"
    "\U000024c2\U000025aa-\U000025ab\U000025b6\U000025c0\U000025fb-\U000025fe"
    "\U00002600-\U000027bf"
    "\U00002934-\U00002935\U00002b05-\U00002b07\U00002b1b-\U00002b1c\U00002b50\U00002b55"
    "\U00003030\U0000303d\U00003297\U00003299"
    "\U0000fe0f\U0000200d\U000020e3"
    "\U0001f000-\U0001faff"
    "\U0001fc00-\U0001fffd"
    "\U000e0020-\U000e007f"
    "]"
)

# Characters XML 1.0 does not allow; lxml refuses to serialize them.
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_TAG_RE = re.compile(r"<[^>]*>")

WRAPPERS: dict[BlockType, str | None] = {
    BlockType.HEADER: "h3",
    BlockType.SUB_HEADER: "h4",
    BlockType.SUB_SUB_HEADER: "h5",
    BlockType.TEXT: "p",
    BlockType.QUOTE: "p",
    BlockType.CALLOUT: "p",
    BlockType.TOGGLE: "p",
    BlockType.TO_DO: "p",
    BlockType.BULLETED_LIST: "p",
    BlockType.NUMBERED_LIST: "p",
    BlockType.CODE: "p",
    BlockType.OTHER: "p",
    BlockType.IGNORED: None,
    BlockType.NOTICE: None,
}

CONTAINER_CLASS = "notion-feed"


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("notion_feed", "templates"),
        autoescape=select_autoescape(["html"]),
    )


def strip_pictographs(text: str) -> str:
    """Remove emoji and pictographic symbols, leaving everything else intact."""
    return _PICTOGRAPH_RE.sub("", text)


def strip_control_chars(text: str) -> str:
    """Remove characters XML 1.0 cannot carry."""
    return _CONTROL_RE.sub("", text)


def normalize_text(text: object) -> str:
    """Return trimmed text without pictographs or XML-invalid control characters.

    Non-string input yields "".
    """
    if not isinstance(text, str):
        return ""
    return strip_control_chars(strip_pictographs(text)).strip()


def strip_tags(html: str) -> str:
    return _TAG_RE.sub("", html)


def summarize(fragment: str, max_chars: int = 200) -> str:
    """Plain-text description: tags removed, hard cut at ``max_chars``."""
    return strip_tags(fragment)[:max_chars]


def render_notice(link: str) -> str:
    """Fallback fragment pointing the reader at the original post."""
    return _environment().get_template("notice.html").render(link=link).strip()


def wrap_content(fragment: str) -> str:
    """Wrap a fragment in the styled container. Already wrapped input is returned as is."""
    if is_wrapped(fragment):
        return fragment
    template = _environment().get_template("content.html")
    return template.render(container_class=CONTAINER_CLASS, body=Markup(fragment)).strip()


def is_wrapped(fragment: str) -> bool:
    return fragment.startswith(f'<div class="{CONTAINER_CLASS}">')


def compose(
    units: Iterable[ExtractedUnit],
    *,
    link: str,
    wrap_container: bool = False,
    summary_max_chars: int = 200,
) -> CompositionResult:
    """Compose extracted units into an HTML fragment and a plain-text summary.

    Units are joined in order, each inside the tag given by ``WRAPPERS``.
    Units whose text normalizes to nothing are dropped. A ``NOTICE`` unit
    renders the fallback notice for ``link``.

    Never raises: an internal failure returns the notice with
    ``status="fallback"``.

    Args:
        units: Extracted units in reading order
        link: Canonical link of the document, used by the notice
        wrap_container: Wrap the fragment in the styled container
        summary_max_chars: Character limit of the summary

    Returns:
        CompositionResult with content, summary and status
    """
    try:
        parts: list[str] = []
        for unit in units:
            if unit.block_type is BlockType.NOTICE:
                parts.append(render_notice(link))
                continue
            tag = WRAPPERS[unit.block_type]
            if tag is None:
                continue
            text = normalize_text(unit.text)
            if not text:
                continue
            parts.append(f"<{tag}>{text}</{tag}>")

        status = "ok"
        body = "".join(parts)
        if not body:
            body = render_notice(link)
            status = "empty"

        summary = summarize(body, summary_max_chars)
        content = wrap_content(body) if wrap_container else body
        return CompositionResult(content=content, summary=summary, status=status)
    except Exception as exc:  # noqa: BLE001
        error = f"{type(exc).__name__}: {exc}"
        logger.warning(
            "Composition failed for %s: %s",
            link,
            error,
            extra={"event": "compose_failed", "link": link},
        )
        notice = _fallback_notice(link)
        return CompositionResult(
            content=notice,
            summary=summarize(notice, summary_max_chars),
            status="fallback",
            error=error,
        )


def _fallback_notice(link: str) -> str:
    try:
        return render_notice(link)
    except Exception:  # noqa: BLE001
        safe = escape(link)
        return f'<p>View the original post: <a href="{safe}">{safe}</a></p>'
