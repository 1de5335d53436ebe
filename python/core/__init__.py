from .cache import Cache, CacheEntry, PostCache, FRESHNESS_WINDOW_SECONDS

__all__ = ["Cache", "CacheEntry", "PostCache", "FRESHNESS_WINDOW_SECONDS"]
