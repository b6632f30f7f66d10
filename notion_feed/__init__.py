"""
notion-feed - syndication feeds from Notion block trees.

This package turns the published documents of a Notion-backed site into
RSS 2.0, Atom 1.0 and JSON Feed files. Each document's block tree is
reduced to a small HTML fragment of its headings and paragraphs, plus a
plain-text summary.

Main entry point is the CLI via `notion-feed run` command.

Example:
    $ notion-feed run -i posts.json -o public/rss
"""

__all__ = ["__version__", "extract", "compose", "build_item", "parse_documents"]
__version__ = "0.1.0"

from .core.blocks import extract
from .core.compose import compose
from .core.items import build_item
from .input.json_parser import parse_documents
