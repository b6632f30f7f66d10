"""
Block tree fetching.

This package talks to the content backend and returns raw block trees
for the extractor.
"""

from .fetcher import FetchResult, fetch_blocks

__all__ = ["FetchResult", "fetch_blocks"]
