#!/usr/bin/env python3

import argparse
import json
import sys
from datetime import date, datetime
from typing import List, Optional, Sequence

from api import StatsClient
from colored_logger import setup_colored_logging, get_colored_logger
from content import ContentLoader, Post
from content.exceptions import CacheRebuildError
from core import PostCache
from search import DateRange, PostRepository, SearchFilters, SearchSession
from settings import Settings

logger = get_colored_logger(__name__)


def create_repository(settings: Settings, cache: Optional[PostCache] = None) -> PostRepository:
    """Wire a ContentLoader, PostCache and optional StatsClient from settings."""
    loader = ContentLoader(
        manifest=settings.manifest,
        content_root=settings.content_root,
        extension=settings.content_extension,
        timeout=settings.fetch_timeout_seconds,
        manifest_file=settings.manifest_file,
    )
    stats_client = None
    if settings.stats_enabled:
        stats_client = StatsClient(
            settings.stats_base_url,
            api_key=settings.stats_api_key,
            timeout=settings.fetch_timeout_seconds,
        )
    return PostRepository(
        loader_fn=loader.load_all,
        cache=cache or PostCache(ttl_seconds=settings.cache_ttl_seconds),
        cache_key=settings.cache_key,
        stats_client=stats_client,
    )


class SearchCLI:
    """
    Command-line interface for browsing and searching blog posts.

    Provides commands for:
    - Searching posts with category, tag and date filters
    - Listing recent, popular and featured posts
    - Showing a post and its related posts
    - Listing categories and tags with counts
    """

    def __init__(self, repository: Optional[PostRepository] = None):
        self.repository = repository
        self.session = SearchSession()

    def run(self, args: List[str] = None) -> int:
        """
        Run the CLI with the given arguments.

        Args:
            args: Command line arguments. If None, uses sys.argv.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        try:
            parser = self._create_parser()
            parsed_args = parser.parse_args(args)

            settings = Settings(parsed_args.settings)
            if parsed_args.verbose:
                setup_colored_logging(level="DEBUG")
            else:
                setup_colored_logging(level=settings.log_level)

            if not hasattr(parsed_args, "func"):
                parser.print_help()
                return 1

            if self.repository is None:
                self.repository = create_repository(settings)

            try:
                self.repository.load()
            except CacheRebuildError as e:
                logger.failure("Could not load posts: %s", e)
                return 1

            return parsed_args.func(parsed_args)

        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 1

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser with all subcommands."""
        parser = argparse.ArgumentParser(
            prog="blog-search",
            description="Browse and search blog posts",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  %(prog)s search "react hooks"                 # Ranked search
  %(prog)s search hooks --category react        # Only posts under react/
  %(prog)s search hooks --tag React --tag Hooks # Posts tagged React or Hooks
  %(prog)s recent -n 3                          # Three newest posts
  %(prog)s related react-hooks-complete-guide   # Posts related to one post
  %(prog)s tags                                 # Tags with post counts
            """,
        )

        parser.add_argument(
            "-v", "--verbose", action="store_true", help="Enable verbose logging"
        )
        parser.add_argument(
            "--settings", default=None, help="Path to settings.json (default: ./settings.json)"
        )

        subparsers = parser.add_subparsers(dest="command", help="Available commands")

        self._add_search_parser(subparsers)
        self._add_listing_parsers(subparsers)
        self._add_post_parsers(subparsers)

        return parser

    def _add_search_parser(self, subparsers):
        search_parser = subparsers.add_parser("search", help="Search posts")
        search_parser.add_argument("query", help="Search text")
        search_parser.add_argument(
            "-c", "--category", help="Keep posts whose category path contains this text"
        )
        search_parser.add_argument(
            "-t",
            "--tag",
            action="append",
            help="Keep posts carrying this tag (can be used multiple times; any tag matches)",
        )
        search_parser.add_argument("--date-from", type=str, help="Earliest date (YYYY-MM-DD)")
        search_parser.add_argument("--date-to", type=str, help="Latest date (YYYY-MM-DD)")
        search_parser.add_argument(
            "--format",
            choices=["table", "list", "json"],
            default="table",
            help="Output format (default: table)",
        )
        search_parser.set_defaults(func=self._cmd_search)

    def _add_listing_parsers(self, subparsers):
        for name, help_text in (("recent", "Newest posts"), ("popular", "Most viewed posts")):
            listing_parser = subparsers.add_parser(name, help=help_text)
            listing_parser.add_argument(
                "-n", "--limit", type=int, default=5, help="Number of posts (default: 5)"
            )
            listing_parser.set_defaults(func=getattr(self, f"_cmd_{name}"))

        featured_parser = subparsers.add_parser("featured", help="Show the featured post")
        featured_parser.set_defaults(func=self._cmd_featured)

        categories_parser = subparsers.add_parser("categories", help="List categories")
        categories_parser.set_defaults(func=self._cmd_categories)

        tags_parser = subparsers.add_parser("tags", help="List tags")
        tags_parser.set_defaults(func=self._cmd_tags)

    def _add_post_parsers(self, subparsers):
        show_parser = subparsers.add_parser("show", help="Show one post")
        show_parser.add_argument("slug", help="Post slug")
        show_parser.set_defaults(func=self._cmd_show)

        related_parser = subparsers.add_parser("related", help="Posts related to a post")
        related_parser.add_argument("slug", help="Post slug")
        related_parser.add_argument(
            "-n", "--limit", type=int, default=3, help="Number of posts (default: 3)"
        )
        related_parser.set_defaults(func=self._cmd_related)

    # Command implementations

    def _cmd_search(self, args) -> int:
        date_range = None
        if args.date_from or args.date_to:
            try:
                start = _parse_date(args.date_from) if args.date_from else date.min
                end = _parse_date(args.date_to) if args.date_to else date.max
            except ValueError as e:
                logger.error("%s (use YYYY-MM-DD)", e)
                return 1
            date_range = DateRange(start=start, end=end)

        self.session.set_query(args.query)
        self.session.set_filters(
            SearchFilters(category=args.category, tags=args.tag or [], date_range=date_range)
        )
        results = self.session.search(self.repository.posts)

        if not results:
            print(self.session.message() or "Enter a search query.")
            return 0

        self._display_search_results(results, args.format)
        return 0

    def _cmd_recent(self, args) -> int:
        self._print_posts(self.repository.recent(args.limit))
        return 0

    def _cmd_popular(self, args) -> int:
        self._print_posts(self.repository.popular(args.limit))
        return 0

    def _cmd_featured(self, args) -> int:
        post = self.repository.featured()
        if post is None:
            print("No posts found.")
            return 0
        self._print_posts([post])
        return 0

    def _cmd_categories(self, args) -> int:
        counts = self.repository.category_counts()
        if not counts:
            print("No categories found.")
            return 0
        print(f"{'Category':<25} {'Posts':<6}")
        print("-" * 32)
        for name, count in counts:
            print(f"{name:<25} {count:<6}")
        return 0

    def _cmd_tags(self, args) -> int:
        counts = self.repository.tag_counts()
        if not counts:
            print("No tags found.")
            return 0
        print(f"{'Tag':<25} {'Posts':<6}")
        print("-" * 32)
        for name, count in counts:
            print(f"{name:<25} {count:<6}")
        return 0

    def _cmd_show(self, args) -> int:
        post = self.repository.by_id(args.slug)
        if post is None:
            logger.error("No post with slug '%s'", args.slug)
            return 1

        metadata = post.metadata
        stats = self.repository.stats_for(post)
        self.repository.record_view(post)

        print(metadata.title)
        print(f"  {metadata.category} | {metadata.published_at} | by {metadata.author or 'unknown'}")
        print(f"  {metadata.reading_time} min read | {stats.view_count} views | "
              f"{stats.likes} likes | {stats.comments} comments")
        tags = _display_tags(metadata.tags)
        if tags:
            print(f"  Tags: {', '.join(tags)}")
        if metadata.excerpt:
            print(f"\n{metadata.excerpt}")
        print(f"\n{post.content.strip()}")
        return 0

    def _cmd_related(self, args) -> int:
        post = self.repository.by_id(args.slug)
        if post is None:
            logger.error("No post with slug '%s'", args.slug)
            return 1
        self._print_posts(self.repository.related_to(post, args.limit))
        return 0

    # Output helpers

    def _print_posts(self, posts: Sequence[Post]) -> None:
        if not posts:
            print("No posts found.")
            return
        for i, post in enumerate(posts, 1):
            metadata = post.metadata
            print(f"{i}. {metadata.title}")
            print(
                f"   {metadata.category} | {metadata.published_at} | "
                f"{metadata.view_count} views | {post.slug}"
            )

    def _display_search_results(self, results, format_type: str) -> None:
        """Display search results in the specified format."""
        if format_type == "json":
            output = []
            for result in results:
                metadata = result.post.metadata
                output.append(
                    {
                        "slug": result.post.slug,
                        "title": metadata.title,
                        "category": metadata.category,
                        "categoryPath": result.post.category_path,
                        "publishedAt": metadata.published_at,
                        "tags": _display_tags(metadata.tags),
                        "score": result.score,
                        "matchedFields": sorted(result.matched_fields),
                    }
                )
            print(json.dumps(output, indent=2, ensure_ascii=False))

        elif format_type == "list":
            for i, result in enumerate(results, 1):
                metadata = result.post.metadata
                print(f"{i}. {metadata.title} (score {result.score})")
                print(f"   Matched: {', '.join(sorted(result.matched_fields))}")
                tags = _display_tags(metadata.tags)
                if tags:
                    print(f"   Tags: {', '.join(tags)}")
                if metadata.excerpt:
                    print(f"   {metadata.excerpt}")
                print(f"   Slug: {result.post.slug}")
                print()

        else:  # table format
            print(f"\nFound {len(results)} result(s):")
            print(f"{'#':<3} {'Title':<40} {'Category':<15} {'Date':<12} {'Score':<6}")
            print("-" * 80)

            for i, result in enumerate(results, 1):
                metadata = result.post.metadata
                title = (
                    metadata.title[:37] + "..."
                    if len(metadata.title) > 40
                    else metadata.title
                )
                category = (
                    metadata.category[:12] + "..."
                    if len(metadata.category) > 15
                    else metadata.category
                )
                print(
                    f"{i:<3} {title:<40} {category:<15} {metadata.published_at:<12} {result.score:<6}"
                )


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid date: {value}") from None


def _display_tags(tags: Sequence[str]) -> List[str]:
    """Trimmed, non-blank tags without duplicates, in authored order."""
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def main():
    """Main entry point for the blog search CLI."""
    cli = SearchCLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
