from typing import Iterable, List, Optional

from colored_logger import get_colored_logger
from content.models import Post
from .search_engine import SearchEngine, SearchFilters, SearchResult

logger = get_colored_logger(__name__)

STATUS_IDLE = "idle"
STATUS_RESULTS = "results"
STATUS_NO_RESULTS = "no_results"


class SearchSession:
    """
    Query state for a search page: the current query, filters and results.

    The status distinguishes "not yet searched" (idle) from a search that
    found nothing (no_results).
    """

    def __init__(self, engine: Optional[SearchEngine] = None):
        self.engine = engine or SearchEngine()
        self.query = ""
        self.filters = SearchFilters()
        self.results: List[SearchResult] = []
        self.status = STATUS_IDLE

    def set_query(self, query: str) -> None:
        self.query = query or ""

    def set_filters(self, filters: Optional[SearchFilters] = None, **kwargs) -> None:
        """Replace the filters, either with a SearchFilters or with keyword fields."""
        if filters is None:
            filters = SearchFilters(
                category=kwargs.get("category"),
                tags=list(kwargs.get("tags") or []),
                date_range=kwargs.get("date_range"),
            )
        self.filters = filters

    def search(self, posts: Iterable[Post]) -> List[SearchResult]:
        if not self.query.strip():
            self.results = []
            self.status = STATUS_IDLE
            return self.results

        self.results = self.engine.search(self.query, posts, self.filters)
        self.status = STATUS_RESULTS if self.results else STATUS_NO_RESULTS
        return self.results

    def clear_search(self) -> None:
        self.query = ""
        self.filters = SearchFilters()
        self.results = []
        self.status = STATUS_IDLE

    def message(self) -> str:
        if self.status == STATUS_NO_RESULTS:
            return f'No results for "{self.query}".'
        if self.status == STATUS_RESULTS:
            return f'{len(self.results)} result(s) for "{self.query}".'
        return ""
