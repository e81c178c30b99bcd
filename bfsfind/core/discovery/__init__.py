# bfsfind/core/discovery/__init__.py
"""
Tree walking and filtering for bfsfind.

This package holds the breadth-first walker, the root .gitignore matcher and
the name/extension/hidden filters the walker applies to every entry.
"""
from .filters import file_matches, is_hidden, match_extension, match_name
from .ignore_matcher import IgnoreMatcher
from .walker import crawl_bfs, run

__all__ = [
    "IgnoreMatcher",
    "crawl_bfs",
    "file_matches",
    "is_hidden",
    "match_extension",
    "match_name",
    "run",
]
