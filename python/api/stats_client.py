import json
from typing import Any, Dict, Optional

import requests

from colored_logger import get_colored_logger
from content.models import PostStats
from core.cache import Cache

logger = get_colored_logger(__name__)


class StatsClient:
    """
    Client for the optional view/like/comment counter service.

    Every failure is logged and reported as None/False; callers fall back
    to the counts in the post's own metadata.
    """

    USER_AGENT = "BlogSearch/1.0 (stats client)"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 5,
        cache: Optional[Cache] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.cache = cache or Cache(ttl_seconds=300, max_entries=1000)
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"User-Agent": self.USER_AGENT}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def get_stats(self, firebase_id: str) -> Optional[PostStats]:
        if not firebase_id:
            return None

        cached = self.cache.get(firebase_id)
        if cached is not None:
            logger.debug("Using cached stats for %s", firebase_id)
            return cached

        url = f"{self.base_url}/posts/{firebase_id}"
        try:
            response = self.session.get(url, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.warning("Failed to fetch stats for %s: %s", firebase_id, e)
            return None
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Invalid stats response for %s: %s", firebase_id, e)
            return None

        stats = self._parse_stats(firebase_id, data)
        if stats is not None:
            self.cache.set(firebase_id, stats)
        return stats

    def increment_view_count(self, firebase_id: str) -> bool:
        if not firebase_id:
            return False

        url = f"{self.base_url}/posts/{firebase_id}/views"
        try:
            response = self.session.post(url, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning("Failed to record view for %s: %s", firebase_id, e)
            return False

        self.cache.delete(firebase_id)
        return True

    def _parse_stats(self, firebase_id: str, data: Any) -> Optional[PostStats]:
        if not isinstance(data, dict):
            logger.warning("Unexpected stats payload for %s: %r", firebase_id, data)
            return None

        comments = data.get("comments", 0)
        # The service may return the comment list instead of a count
        if isinstance(comments, list):
            comments = len(comments)

        try:
            return PostStats(
                firebase_id=firebase_id,
                view_count=int(data.get("viewCount", 0) or 0),
                likes=int(data.get("likes", 0) or 0),
                comments=int(comments or 0),
            )
        except (TypeError, ValueError) as e:
            logger.warning("Malformed stats for %s: %s", firebase_id, e)
            return None
