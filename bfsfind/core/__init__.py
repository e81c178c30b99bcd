# bfsfind/core/__init__.py
from .results import Failure, FailureStage, Match, ResultMessage, SearchResults
from .search import SearchStream, collect_search, start_search

__all__ = [
    "Failure",
    "FailureStage",
    "Match",
    "ResultMessage",
    "SearchResults",
    "SearchStream",
    "collect_search",
    "start_search",
]
