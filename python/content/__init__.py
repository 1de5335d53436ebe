"""
Blog content loading.

Key Components:
- Post, PostMetadata, PostStats: immutable post records
- ContentLoader: fetches and parses posts listed in a manifest
- parse_document: front-matter parser producing validated metadata
"""

from .exceptions import (
    BlogIndexError,
    LoadError,
    SourceFetchError,
    SourceParseError,
    FrontMatterError,
    CacheRebuildError,
    ScoringError,
)
from .models import (
    CATEGORY_FOLDERS,
    Post,
    PostMetadata,
    PostStats,
    parse_post_path,
    post_path,
    parse_published_at,
)
from .front_matter import parse_document
from .loader import ContentLoader

__all__ = [
    "BlogIndexError",
    "LoadError",
    "SourceFetchError",
    "SourceParseError",
    "FrontMatterError",
    "CacheRebuildError",
    "ScoringError",
    "CATEGORY_FOLDERS",
    "Post",
    "PostMetadata",
    "PostStats",
    "parse_post_path",
    "post_path",
    "parse_published_at",
    "parse_document",
    "ContentLoader",
]
