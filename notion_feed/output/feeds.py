"""
Feed encoding and persistence.

RSS 2.0 and Atom 1.0 are produced with feedgen; JSON Feed 1.1 is built
directly. Item content is raw HTML: feedgen escapes it when it is set
with ``type="html"``, and JSON encoding needs no escaping.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any

from feedgen.feed import FeedGenerator

from ..config import SiteSettings
from ..core.types import FeedItem

logger = logging.getLogger(__name__)

RSS_FILENAME = "feed.xml"
ATOM_FILENAME = "atom.xml"
JSON_FILENAME = "feed.json"


@dataclass
class FeedPaths:
    """Locations of the written feed files."""
    rss: Path
    atom: Path
    json: Path


def channel_link(site: SiteSettings) -> str:
    if site.sub_path:
        return f"{site.link}/{site.sub_path}"
    return site.link


def build_feed(items: list[FeedItem], site: SiteSettings, now: datetime | None = None) -> FeedGenerator:
    """Build a feedgen FeedGenerator with one entry per item, in item order.

    Args:
        items: Feed items, most recent first
        site: Resolved site settings
        now: Timestamp used for the copyright year and feed update time

    Returns:
        FeedGenerator ready for ``rss_str`` / ``atom_str``
    """
    now = now or datetime.now(timezone.utc)
    link = channel_link(site)

    fg = FeedGenerator()
    fg.id(link)
    fg.title(site.title)
    fg.description(site.description or site.title)
    fg.link(href=link, rel="alternate")
    fg.language(site.language)
    fg.icon(f"{site.link}/favicon.png")
    fg.copyright(f"All rights reserved {now.year}, {site.author}")
    author: dict[str, str] = {"name": site.author}
    if site.contact_email:
        author["email"] = site.contact_email
    fg.author(author)
    fg.updated(max((_aware(item.date) for item in items), default=now))

    for item in items:
        fe = fg.add_entry(order="append")
        fe.id(item.link)
        fe.guid(item.link, permalink=True)
        fe.title(item.title)
        fe.link(href=item.link)
        fe.summary(item.description)
        fe.content(item.content, type="html")
        fe.published(_aware(item.date))
        fe.updated(_aware(item.date))

    return fg


def render_json_feed(items: list[FeedItem], site: SiteSettings) -> str:
    """Serialize items as a JSON Feed 1.1 document."""
    author: dict[str, Any] = {"name": site.author, "url": site.link}
    payload: dict[str, Any] = {
        "version": "https://jsonfeed.org/version/1.1",
        "title": site.title,
        "home_page_url": channel_link(site),
        "feed_url": f"{site.link}/rss/{JSON_FILENAME}",
        "description": site.description,
        "language": site.language,
        "favicon": f"{site.link}/favicon.png",
        "authors": [author],
        "items": [
            {
                "id": item.link,
                "url": item.link,
                "title": item.title,
                "summary": item.description,
                "content_html": item.content,
                "date_published": _aware(item.date).isoformat(),
            }
            for item in items
        ],
    }
    return json.dumps(payload, ensure_ascii=False, indent=2)


def write_feeds(items: list[FeedItem], site: SiteSettings, output_dir: Path) -> FeedPaths | None:
    """Write RSS, Atom and JSON feeds into ``output_dir``.

    Returns None (after logging a warning) when the feeds cannot be
    serialized, e.g. text lxml rejects, or the files cannot be written,
    e.g. on a read-only file system.
    """
    try:
        fg = build_feed(items, site)
        rss = fg.rss_str(pretty=True)
        atom = fg.atom_str(pretty=True)
        json_feed = render_json_feed(items, site)
    except ValueError as exc:
        logger.warning(
            "Feed serialization failed: %s",
            exc,
            extra={"event": "serialize_failed", "output": str(output_dir)},
        )
        return None

    paths = FeedPaths(
        rss=output_dir / RSS_FILENAME,
        atom=output_dir / ATOM_FILENAME,
        json=output_dir / JSON_FILENAME,
    )
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        paths.rss.write_bytes(rss)
        paths.atom.write_bytes(atom)
        paths.json.write_text(json_feed, encoding="utf-8")
    except OSError as exc:
        logger.warning(
            "Feed write skipped, output directory not writable: %s",
            exc,
            extra={"event": "write_failed", "output": str(output_dir)},
        )
        return None
    return paths


def is_recently_updated(path: Path, interval_minutes: float = 60) -> bool:
    """True when ``path`` exists and was modified within the interval."""
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return False
    age_seconds = datetime.now().timestamp() - mtime
    return age_seconds < interval_minutes * 60


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
