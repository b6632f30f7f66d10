"""
Feed output.

This package encodes feed items as RSS 2.0, Atom 1.0 and JSON Feed and
writes them to disk.
"""

from .feeds import FeedPaths, build_feed, is_recently_updated, render_json_feed, write_feeds

__all__ = ["FeedPaths", "build_feed", "is_recently_updated", "render_json_feed", "write_feeds"]
