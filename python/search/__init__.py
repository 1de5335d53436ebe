"""
Blog Search Module

Provides the in-memory post index and weighted free-text search over the
loaded corpus.

Key Components:
- PostRepository: corpus snapshot with lookups, listings and related posts
- SearchEngine: weighted substring scoring with category/tag/date filters
- SearchSession: query, filter and result state for a search page
"""

from .repository import PostRepository
from .search_engine import (
    FIELD_WEIGHTS,
    DateRange,
    SearchEngine,
    SearchFilters,
    SearchResult,
    tokenize,
)
from .search_session import SearchSession

__all__ = [
    "PostRepository",
    "FIELD_WEIGHTS",
    "DateRange",
    "SearchEngine",
    "SearchFilters",
    "SearchResult",
    "tokenize",
    "SearchSession",
]
