import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from colored_logger import get_colored_logger
from content.exceptions import CacheRebuildError
from content.models import Post

logger = get_colored_logger(__name__)

FRESHNESS_WINDOW_SECONDS = 300


@dataclass(frozen=True)
class CacheEntry:
    """A loaded corpus and the time (epoch seconds) it was loaded."""

    key: str
    posts: Tuple[Post, ...]
    timestamp: float

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return now - self.timestamp < ttl_seconds


class PostCache:
    """
    Read-through cache of loaded corpora, one entry per namespace key.

    Entries are replaced wholesale on rebuild and never mutated, so a
    reader holding an old corpus keeps a consistent snapshot.
    """

    def __init__(self, ttl_seconds: float = FRESHNESS_WINDOW_SECONDS):
        self.ttl_seconds = (
            ttl_seconds
            if isinstance(ttl_seconds, (int, float)) and ttl_seconds >= 0
            else FRESHNESS_WINDOW_SECONDS
        )
        self._entries: Dict[str, CacheEntry] = {}

    def get_or_load(
        self, key: str, loader_fn: Callable[[], Sequence[Post]]
    ) -> Tuple[Post, ...]:
        """
        Return the fresh corpus for key, calling loader_fn only when the
        entry is missing or stale.

        Raises:
            CacheRebuildError: loader_fn raised; no stale entry is returned
        """
        entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(time.time(), self.ttl_seconds):
            logger.debug("Using cached posts for '%s'", key)
            return entry.posts

        try:
            posts = tuple(loader_fn())
        except Exception as e:
            logger.error("Failed to rebuild posts for '%s': %s", key, e)
            raise CacheRebuildError(key, str(e)) from e

        self._entries[key] = CacheEntry(key=key, posts=posts, timestamp=time.time())
        logger.debug("Cached %d posts under '%s'", len(posts), key)
        return posts

    def peek(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key if it is still fresh, without loading."""
        entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(time.time(), self.ttl_seconds):
            return entry
        return None

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)


class Cache:
    """Small TTL cache for arbitrary values (used for stats responses)."""

    def __init__(self, ttl_seconds: int = FRESHNESS_WINDOW_SECONDS, max_entries: int = 1000):
        self.ttl_seconds = ttl_seconds if isinstance(ttl_seconds, int) else 300
        self.max_entries = max_entries if isinstance(max_entries, int) else 1000
        self._values: Dict[str, Any] = {}
        self._timestamps: Dict[str, float] = {}

    def get(self, key: str) -> Optional[Any]:
        if key not in self._values:
            return None

        if time.time() - self._timestamps[key] >= self.ttl_seconds:
            del self._values[key]
            del self._timestamps[key]
            return None

        return self._values[key]

    def set(self, key: str, value: Any) -> None:
        if key not in self._values and len(self._values) >= self.max_entries:
            oldest_key = min(self._timestamps, key=self._timestamps.get)
            del self._values[oldest_key]
            del self._timestamps[oldest_key]

        self._values[key] = value
        self._timestamps[key] = time.time()

    def delete(self, key: str) -> None:
        self._values.pop(key, None)
        self._timestamps.pop(key, None)

    def clear(self) -> None:
        self._values.clear()
        self._timestamps.clear()

    def size(self) -> int:
        return len(self._values)
