from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from colored_logger import get_colored_logger
from content.exceptions import ScoringError
from content.models import Post, parse_published_at

logger = get_colored_logger(__name__)

# Points per matching query term, by field
FIELD_WEIGHTS = {
    "title": 10,
    "description": 5,
    "tags": 8,
    "category": 6,
    "content": 2,
}


@dataclass(frozen=True)
class SearchResult:
    """A post that matched a query, with its score and the fields that matched."""

    post: Post
    score: int
    matched_fields: FrozenSet[str] = frozenset()


def _as_datetime(value: date, default_time) -> datetime:
    # Aware bounds are compared in UTC, like parsed publishedAt values
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)
    return datetime.combine(value, default_time)


@dataclass(frozen=True)
class DateRange:
    """Inclusive publication date range."""

    start: date
    end: date

    def contains(self, published: datetime) -> bool:
        # A plain date as the end bound covers that whole day
        start = _as_datetime(self.start, datetime.min.time())
        end = _as_datetime(self.end, datetime.max.time())
        return start <= published <= end


@dataclass
class SearchFilters:
    """
    Post-filters applied after scoring, in order: category, tags, date range.

    category: substring of the post's category path
    tags: the post must carry at least one of these tags (exact match)
    date_range: publishedAt must fall inside the inclusive range
    """

    category: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    date_range: Optional[DateRange] = None

    def is_empty(self) -> bool:
        return not self.category and not self.tags and self.date_range is None


def tokenize(query: str) -> List[str]:
    """Lowercase and split on whitespace. Repeated terms are kept."""
    return [term for term in query.lower().split() if term]


def _count_matches(terms: Sequence[str], matches: Callable[[str], bool]) -> int:
    return sum(1 for term in terms if matches(term))


class SearchEngine:
    """
    Weighted substring search over an in-memory post corpus.

    Each field contributes (number of query terms found in it) times the
    field's weight. A query term that appears twice counts twice. Posts
    with a total score of zero are dropped, the rest are sorted by score
    with ties kept in corpus order.
    """

    def __init__(self, weights: Optional[dict] = None):
        self.weights = dict(FIELD_WEIGHTS)
        if weights:
            self.weights.update(weights)

    def search(
        self,
        query: str,
        posts: Iterable[Post],
        filters: Optional[SearchFilters] = None,
    ) -> List[SearchResult]:
        """
        Score every post against the query and apply filters.

        Args:
            query: Free text; an empty or blank query yields no results
            posts: The corpus, in materialized order
            filters: Optional post-filters

        Returns:
            Results sorted by score, highest first; [] on any unexpected failure
        """
        try:
            if not query or not query.strip():
                return []

            terms = tokenize(query)
            results: List[SearchResult] = []

            for post in posts:
                try:
                    result = self.score_post(post, terms)
                except ScoringError as e:
                    logger.debug("Skipping post during search: %s", e)
                    continue
                if result.score > 0:
                    results.append(result)

            # sorted() is stable, so equal scores keep corpus order
            results = sorted(results, key=lambda r: r.score, reverse=True)

            if filters is not None:
                results = self.apply_filters(results, filters)

            logger.debug("Search for %r returned %d results", query, len(results))
            return results

        except Exception as e:
            logger.error("Search failed: %s", e)
            return []

    def score_post(self, post: Post, terms: Sequence[str]) -> SearchResult:
        """
        Compute the weighted score of one post.

        Raises:
            ScoringError: the post's fields are not usable text
        """
        try:
            metadata = post.metadata
            title = metadata.title.lower()
            excerpt = metadata.excerpt.lower() if metadata.excerpt else ""
            tags = [tag.lower() for tag in metadata.tags or ()]
            category_path = post.category_path.lower()
            content = post.content.lower()
        except (AttributeError, TypeError) as e:
            raise ScoringError(
                f"post {getattr(post, 'slug', '?')!r} has malformed fields: {e}"
            ) from e

        counts: List[Tuple[str, int]] = [
            ("title", _count_matches(terms, lambda t: t in title)),
            ("description", _count_matches(terms, lambda t: t in excerpt) if excerpt else 0),
            ("tags", _count_matches(terms, lambda t: any(t in tag for tag in tags))),
            ("category", _count_matches(terms, lambda t: t in category_path)),
            ("content", _count_matches(terms, lambda t: t in content)),
        ]

        score = 0
        matched = []
        for field_name, count in counts:
            if count > 0:
                score += count * self.weights[field_name]
                matched.append(field_name)
                logger.trace("%s: %d term(s) in %s", post.slug, count, field_name)

        return SearchResult(post=post, score=score, matched_fields=frozenset(matched))

    def apply_filters(
        self, results: Sequence[SearchResult], filters: SearchFilters
    ) -> List[SearchResult]:
        filtered = list(results)

        if filters.category:
            filtered = [
                r for r in filtered if filters.category in r.post.category_path
            ]

        if filters.tags:
            wanted = set(filters.tags)
            filtered = [
                r
                for r in filtered
                if any(tag in wanted for tag in r.post.metadata.tags or ())
            ]

        if filters.date_range is not None:
            kept = []
            for r in filtered:
                published = parse_published_at(r.post.metadata.published_at)
                if published is not None and filters.date_range.contains(published):
                    kept.append(r)
            filtered = kept

        return filtered
