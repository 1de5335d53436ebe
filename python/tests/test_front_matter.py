import unittest

from content.exceptions import FrontMatterError, SourceParseError
from content.front_matter import (
    BoolValue,
    NumberValue,
    StringListValue,
    StringValue,
    parse_document,
    parse_header,
    parse_value,
    split_front_matter,
)

from .test_utils import BaseTestCase, front_matter_document


class TestParseValue(unittest.TestCase):
    """Test cases for front-matter value coercion."""

    def test_bracketed_value_becomes_trimmed_string_list(self):
        value = parse_value(' [React, "Hooks" ,  TypeScript]')
        self.assertEqual(value, StringListValue(("React", "Hooks", "TypeScript")))

    def test_empty_brackets_become_empty_list(self):
        self.assertEqual(parse_value("[]"), StringListValue(()))

    def test_list_keeps_blank_and_duplicate_entries(self):
        value = parse_value("[React, , React]")
        self.assertEqual(value.value, ("React", "", "React"))

    def test_true_and_false_become_booleans(self):
        self.assertEqual(parse_value("true"), BoolValue(True))
        self.assertEqual(parse_value("false"), BoolValue(False))

    def test_integer_and_float_become_numbers(self):
        self.assertEqual(parse_value("42"), NumberValue(42))
        self.assertIsInstance(parse_value("42").value, int)
        self.assertEqual(parse_value("3.5"), NumberValue(3.5))

    def test_date_stays_a_string(self):
        self.assertEqual(parse_value("2024-01-15"), StringValue("2024-01-15"))

    def test_surrounding_quotes_are_stripped(self):
        self.assertEqual(parse_value('"Hello: World"'), StringValue("Hello: World"))
        self.assertEqual(parse_value("'single'"), StringValue("single"))

    def test_quoted_number_stays_a_string(self):
        self.assertEqual(parse_value('"42"'), StringValue("42"))


class TestSplitFrontMatter(BaseTestCase):
    """Test cases for locating the header block."""

    def test_split_returns_header_and_body(self):
        header, body = split_front_matter("---\ntitle: Hi\n---\n# Heading\nText")
        self.assertEqual(header, "title: Hi")
        self.assertEqual(body, "# Heading\nText")

    def test_windows_line_endings_are_accepted(self):
        header, body = split_front_matter("---\r\ntitle: Hi\r\n---\r\nBody")
        self.assertEqual(header, "title: Hi")
        self.assertEqual(body, "Body")

    def test_missing_opening_delimiter_raises(self):
        with self.assertRaises(SourceParseError):
            split_front_matter("title: Hi\n---\nBody", "react/x")

    def test_missing_closing_delimiter_raises(self):
        with self.assertRaises(SourceParseError) as ctx:
            split_front_matter("---\ntitle: Hi\nBody", "react/x")
        self.assertIn("closing", str(ctx.exception))
        self.assertEqual(ctx.exception.address, "react/x")


class TestParseHeader(unittest.TestCase):
    def test_value_containing_colons_is_kept_whole(self):
        fields = parse_header("title: React: The Good Parts\nurl: https://example.com")
        self.assertEqual(fields["title"], StringValue("React: The Good Parts"))
        self.assertEqual(fields["url"], StringValue("https://example.com"))

    def test_lines_without_colon_are_ignored(self):
        fields = parse_header("title: A\njust some text\n\n")
        self.assertEqual(list(fields), ["title"])


class TestParseDocument(BaseTestCase):
    """Test cases for schema validation of a whole document."""

    def test_full_document_builds_metadata(self):
        text = front_matter_document(
            body="# Hooks\nContent here",
            title='"React Hooks Complete Guide"',
            excerpt="Everything about hooks",
            author="moomookcow",
            publishedAt="2024-01-15",
            readingTime=8,
            viewCount=1247,
            likes=89,
            comments=12,
            category="React",
            tags=["React", "Hooks"],
            isPublished=True,
            series="hooks",
        )

        metadata, body = parse_document(text, "react/hooks")

        self.assertEqual(metadata.title, "React Hooks Complete Guide")
        self.assertEqual(metadata.excerpt, "Everything about hooks")
        self.assertEqual(metadata.published_at, "2024-01-15")
        self.assertEqual(metadata.reading_time, 8)
        self.assertEqual(metadata.view_count, 1247)
        self.assertEqual(metadata.likes, 89)
        self.assertEqual(metadata.comments, 12)
        self.assertEqual(metadata.category, "React")
        self.assertEqual(metadata.tags, ("React", "Hooks"))
        self.assertTrue(metadata.is_published)
        self.assertEqual(metadata.extra, {"series": "hooks"})
        self.assertEqual(body, "# Hooks\nContent here")

    def test_missing_category_uses_default_category(self):
        text = front_matter_document(title="T", publishedAt="2024-01-01")
        metadata, _ = parse_document(text, default_category="JavaScript")
        self.assertEqual(metadata.category, "JavaScript")
        self.assertEqual(metadata.view_count, 0)
        self.assertEqual(metadata.tags, ())

    def test_missing_title_raises_front_matter_error(self):
        text = front_matter_document(publishedAt="2024-01-01")
        with self.assertRaises(FrontMatterError) as ctx:
            parse_document(text, "react/no-title")
        self.assertEqual(ctx.exception.field, "title")

    def test_non_integer_view_count_raises(self):
        text = front_matter_document(title="T", publishedAt="2024-01-01", viewCount="lots")
        with self.assertRaises(FrontMatterError) as ctx:
            parse_document(text)
        self.assertEqual(ctx.exception.field, "viewCount")

    def test_fractional_reading_time_raises(self):
        text = front_matter_document(title="T", publishedAt="2024-01-01", readingTime="2.5")
        with self.assertRaises(FrontMatterError):
            parse_document(text)

    def test_scalar_tags_raise(self):
        text = front_matter_document(title="T", publishedAt="2024-01-01", tags="React")
        with self.assertRaises(FrontMatterError) as ctx:
            parse_document(text)
        self.assertEqual(ctx.exception.field, "tags")

    def test_non_boolean_is_published_raises(self):
        text = front_matter_document(title="T", publishedAt="2024-01-01", isPublished="yes")
        with self.assertRaises(FrontMatterError):
            parse_document(text)

    def test_numeric_title_is_accepted_as_string(self):
        text = front_matter_document(title="2024", publishedAt="2024-01-01")
        metadata, _ = parse_document(text)
        self.assertEqual(metadata.title, "2024")

    def test_numeric_text_fields_keep_authored_text(self):
        text = front_matter_document(
            title="007", publishedAt="2024-01-15", excerpt="1.50", author="1e3"
        )

        metadata, _ = parse_document(text)

        self.assertEqual(metadata.title, "007")
        self.assertEqual(metadata.excerpt, "1.50")
        self.assertEqual(metadata.author, "1e3")

    def test_number_value_remembers_raw_text(self):
        self.assertEqual(parse_value(" 007 ").raw, "007")
        self.assertEqual(parse_value("007").value, 7)

    def test_front_matter_error_is_a_source_parse_error(self):
        self.assertTrue(issubclass(FrontMatterError, SourceParseError))

    def test_non_text_input_raises(self):
        with self.assertRaises(SourceParseError):
            parse_document(None)


if __name__ == "__main__":
    unittest.main()
