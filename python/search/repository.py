from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from colored_logger import get_colored_logger
from content.exceptions import CacheRebuildError
from content.models import Post, PostStats
from core.cache import PostCache

logger = get_colored_logger(__name__)

# Relatedness points
SAME_CATEGORY_WEIGHT = 2
SHARED_TAG_WEIGHT = 1


class PostRepository:
    """
    In-memory post corpus with derived views.

    The corpus is an immutable tuple that is swapped as a whole whenever it
    is reloaded, so views computed from an older snapshot stay consistent.

    Features:
    - Lookup by slug, category and tag (case-insensitive)
    - Recent and popular listings
    - Category and tag listings with counts
    - Related posts by shared category and tags
    - Optional live stats with fallback to front-matter counts
    """

    def __init__(
        self,
        loader_fn: Optional[Callable[[], Sequence[Post]]] = None,
        cache: Optional[PostCache] = None,
        cache_key: str = "default",
        stats_client=None,
    ):
        """
        Args:
            loader_fn: Callable returning the corpus (usually ContentLoader.load_all)
            cache: PostCache shared between repositories; a private one if omitted
            cache_key: Namespace of this repository's corpus inside the cache
            stats_client: Optional StatsClient for live view/like/comment counts
        """
        self.loader_fn = loader_fn
        self.cache = cache or PostCache()
        self.cache_key = cache_key
        self.stats_client = stats_client
        self.error: Optional[str] = None
        self._posts: Tuple[Post, ...] = ()

    @classmethod
    def from_posts(cls, posts: Iterable[Post], stats_client=None) -> "PostRepository":
        """Build a repository over a fixed corpus, without a loader."""
        repository = cls(stats_client=stats_client)
        repository._posts = tuple(posts)
        return repository

    @property
    def posts(self) -> Tuple[Post, ...]:
        return self._posts

    def __len__(self) -> int:
        return len(self._posts)

    def load(self) -> Tuple[Post, ...]:
        """
        Materialize the corpus through the cache.

        Raises:
            CacheRebuildError: the loader failed; the previous corpus is kept
        """
        if self.loader_fn is None:
            return self._posts

        try:
            posts = self.cache.get_or_load(self.cache_key, self.loader_fn)
        except CacheRebuildError as e:
            self.error = str(e)
            raise

        self.error = None
        self._posts = posts
        return posts

    def refetch(self) -> Tuple[Post, ...]:
        """Drop the cached corpus for this key and load it again."""
        self.cache.invalidate(self.cache_key)
        return self.load()

    # Lookups

    def by_id(self, slug: str) -> Optional[Post]:
        for post in self._posts:
            if post.slug == slug:
                return post
        return None

    def by_slug(self, slug: str, category: Optional[str] = None) -> Optional[Post]:
        """Lookup by slug, optionally requiring an exact display category."""
        for post in self._posts:
            if post.slug == slug and (category is None or post.metadata.category == category):
                return post
        return None

    def by_category(self, name: str) -> List[Post]:
        wanted = name.lower()
        return [post for post in self._posts if post.metadata.category.lower() == wanted]

    def by_tag(self, tag: str) -> List[Post]:
        wanted = tag.lower()
        return [
            post
            for post in self._posts
            if any(t.lower() == wanted for t in post.metadata.tags)
        ]

    # Listings

    def recent(self, n: int = 5) -> List[Post]:
        """Newest first by publishedAt; undated posts sort last."""
        ordered = sorted(
            self._posts,
            key=lambda post: post.metadata.published_datetime or datetime.min,
            reverse=True,
        )
        return ordered[: max(n, 0)]

    def popular(self, n: int = 5) -> List[Post]:
        ordered = sorted(
            self._posts, key=lambda post: post.metadata.view_count or 0, reverse=True
        )
        return ordered[: max(n, 0)]

    def featured(self) -> Optional[Post]:
        """
        The first post of the corpus as materialized.

        This is an arbitrary but stable choice. With ContentLoader it is the
        most recently published post, because the loader sorts by date.
        """
        return self._posts[0] if self._posts else None

    def categories(self) -> List[str]:
        return sorted({post.metadata.category for post in self._posts})

    def tags(self) -> List[str]:
        """Distinct tags, trimmed, without blanks, sorted."""
        return sorted(
            {tag.strip() for post in self._posts for tag in post.metadata.tags if tag.strip()}
        )

    def category_counts(self) -> List[Tuple[str, int]]:
        counts = {}
        for post in self._posts:
            counts[post.metadata.category] = counts.get(post.metadata.category, 0) + 1
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))

    def tag_counts(self) -> List[Tuple[str, int]]:
        counts = {}
        for post in self._posts:
            for tag in {t.strip() for t in post.metadata.tags if t.strip()}:
                counts[tag] = counts.get(tag, 0) + 1
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))

    def related_to(self, post: Post, n: int = 3) -> List[Post]:
        """
        Rank other posts by relatedness to post.

        Same category scores 2 and each shared tag scores 1. Ties keep
        corpus order and zero-score posts are still returned to fill n.
        """
        own_tags = set(post.metadata.tags)
        scored = []
        for other in self._posts:
            if other.slug == post.slug:
                continue
            score = 0
            if other.metadata.category == post.metadata.category:
                score += SAME_CATEGORY_WEIGHT
            score += SHARED_TAG_WEIGHT * sum(1 for tag in other.metadata.tags if tag in own_tags)
            scored.append((score, other))

        scored = sorted(scored, key=lambda item: item[0], reverse=True)
        return [other for _, other in scored[: max(n, 0)]]

    def quick_search(self, query: str) -> List[Post]:
        """
        Cheap filter used for as-you-type suggestions.

        Returns posts where any term appears in the title, excerpt, tags or
        category. An empty query returns the whole corpus.
        """
        terms = [term for term in query.lower().split() if term]
        if not terms:
            return list(self._posts)

        matches = []
        for post in self._posts:
            metadata = post.metadata
            haystacks = (
                metadata.title.lower(),
                metadata.excerpt.lower(),
                " ".join(metadata.tags).lower(),
                metadata.category.lower(),
            )
            if any(term in text for term in terms for text in haystacks):
                matches.append(post)
        return matches

    # Stats

    def stats_for(self, post: Post) -> PostStats:
        """Live counts from the stats service, or the post's own counts."""
        if self.stats_client is not None:
            try:
                stats = self.stats_client.get_stats(post.metadata.firebase_id)
            except Exception as e:
                logger.warning("Stats lookup failed for %s: %s", post.slug, e)
                stats = None
            if stats is not None:
                return stats
        return PostStats.from_metadata(post)

    def record_view(self, post: Post) -> bool:
        if self.stats_client is None:
            return False
        try:
            return bool(self.stats_client.increment_view_count(post.metadata.firebase_id))
        except Exception as e:
            logger.warning("Could not record view for %s: %s", post.slug, e)
            return False
