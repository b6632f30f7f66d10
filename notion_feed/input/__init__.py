"""
Input parsing.

This package reads the exported list of published documents.
"""

from .json_parser import parse_documents, parse_timestamp

__all__ = ["parse_documents", "parse_timestamp"]
