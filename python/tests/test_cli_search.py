import io
import json
import unittest
from unittest.mock import Mock, patch

from cli_search import SearchCLI, _display_tags, _parse_date, create_repository
from search.repository import PostRepository

from .test_utils import PostFactory, TempDirTestCase


class TestSearchCLI(TempDirTestCase):
    """Test cases for the blog-search command line."""

    def setUp(self):
        super().setUp()
        self.settings_path = self.write_file("settings.json", "{}")
        self.hooks = PostFactory.create(
            slug="react-hooks",
            title="React Hooks Guide",
            category="React",
            category_path="tutorial/first-post",
            tags=["React", "Hooks"],
            published_at="2024-01-10",
            view_count=300,
            excerpt="Learn hooks",
        )
        self.generics = PostFactory.create(
            slug="ts-generics",
            title="TypeScript Generics",
            category="TypeScript",
            category_path="typescript/ts-generics",
            tags=["TypeScript"],
            published_at="2024-01-15",
            view_count=900,
        )
        self.repository = PostRepository.from_posts([self.generics, self.hooks])

        patcher = patch("cli_search.setup_colored_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    def _run(self, *args, repository=None):
        cli = SearchCLI(repository=repository if repository is not None else self.repository)
        with patch("sys.stdout", new_callable=io.StringIO) as stdout:
            code = cli.run(["--settings", self.settings_path] + list(args))
        return code, stdout.getvalue()

    def test_search_prints_table(self):
        code, output = self._run("search", "react")

        self.assertEqual(code, 0)
        self.assertIn("Found 1 result(s)", output)
        self.assertIn("React Hooks Guide", output)

    def test_search_json_output(self):
        code, output = self._run("search", "react", "--format", "json")

        data = json.loads(output)
        self.assertEqual(code, 0)
        self.assertEqual(data[0]["slug"], "react-hooks")
        self.assertEqual(data[0]["score"], 18)
        self.assertEqual(data[0]["matchedFields"], ["tags", "title"])

    def test_search_with_tag_filter(self):
        code, output = self._run("search", "guide generics", "--tag", "TypeScript", "--format", "list")

        self.assertEqual(code, 0)
        self.assertIn("TypeScript Generics", output)
        self.assertNotIn("React Hooks Guide", output)

    def test_search_without_matches_prints_no_results(self):
        code, output = self._run("search", "nonexistent")

        self.assertEqual(code, 0)
        self.assertIn('No results for "nonexistent".', output)

    def test_search_with_bad_date_fails(self):
        code, _ = self._run("search", "react", "--date-from", "01/02/2024")
        self.assertEqual(code, 1)

    def test_search_with_date_range(self):
        code, output = self._run(
            "search", "guide generics", "--date-from", "2024-01-12", "--format", "list"
        )
        self.assertEqual(code, 0)
        self.assertNotIn("React Hooks Guide", output)
        self.assertIn("TypeScript Generics", output)

    def test_recent_and_popular(self):
        _, recent = self._run("recent", "-n", "1")
        _, popular = self._run("popular")

        self.assertIn("TypeScript Generics", recent)
        self.assertNotIn("React Hooks Guide", recent)
        self.assertLess(popular.index("TypeScript"), popular.index("React Hooks"))

    def test_featured_is_first_post(self):
        _, output = self._run("featured")
        self.assertIn("1. TypeScript Generics", output)

    def test_categories_and_tags(self):
        _, categories = self._run("categories")
        _, tags = self._run("tags")

        self.assertIn("React", categories)
        self.assertIn("TypeScript", categories)
        self.assertIn("Hooks", tags)

    def test_show_prints_post_and_falls_back_to_metadata_stats(self):
        code, output = self._run("show", "react-hooks")

        self.assertEqual(code, 0)
        self.assertIn("React Hooks Guide", output)
        self.assertIn("300 views", output)
        self.assertIn("Tags: React, Hooks", output)

    def test_show_unknown_slug_fails(self):
        code, _ = self._run("show", "missing")
        self.assertEqual(code, 1)

    def test_related(self):
        code, output = self._run("related", "react-hooks")
        self.assertEqual(code, 0)
        self.assertIn("TypeScript Generics", output)

    def test_no_command_prints_help(self):
        code, output = self._run()
        self.assertEqual(code, 1)
        self.assertIn("usage", output)

    def test_load_failure_exits_with_error(self):
        repository = PostRepository(loader_fn=Mock(side_effect=OSError("disk gone")))

        code, _ = self._run("recent", repository=repository)

        self.assertEqual(code, 1)
        self.assertIn("disk gone", repository.error)


class TestCreateRepository(TempDirTestCase):
    def test_repository_loads_from_configured_root(self):
        self.write_file(
            "react/hooks.mdx", "---\ntitle: Hooks\npublishedAt: 2024-01-01\n---\nBody"
        )
        settings = Mock(
            manifest=["react/hooks"],
            content_root=self.temp_dir,
            content_extension=".mdx",
            fetch_timeout_seconds=5,
            manifest_file=None,
            stats_enabled=False,
            cache_ttl_seconds=300,
            cache_key="default",
        )

        repository = create_repository(settings)
        repository.load()

        self.assertEqual([p.slug for p in repository.posts], ["hooks"])
        self.assertEqual(repository.posts[0].metadata.category, "React")
        self.assertIsNone(repository.stats_client)

    def test_stats_client_is_created_when_enabled(self):
        settings = Mock(
            manifest=[],
            content_root=self.temp_dir,
            content_extension=".mdx",
            fetch_timeout_seconds=5,
            manifest_file=None,
            stats_enabled=True,
            stats_base_url="https://stats.example.com",
            stats_api_key="",
            cache_ttl_seconds=300,
            cache_key="default",
        )

        repository = create_repository(settings)

        self.assertEqual(repository.stats_client.base_url, "https://stats.example.com")


class TestHelpers(unittest.TestCase):
    def test_parse_date(self):
        self.assertEqual(str(_parse_date("2024-01-15")), "2024-01-15")
        with self.assertRaises(ValueError):
            _parse_date("tomorrow")

    def test_display_tags_trims_and_deduplicates(self):
        self.assertEqual(_display_tags(["React", " React ", "", "Hooks"]), ["React", "Hooks"])


if __name__ == "__main__":
    unittest.main()
