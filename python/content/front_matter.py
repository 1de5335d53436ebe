import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Union

from colored_logger import get_colored_logger
from .exceptions import FrontMatterError, SourceParseError
from .models import DEFAULT_CATEGORY, PostMetadata

logger = get_colored_logger(__name__)

DELIMITER = "---"

_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class StringListValue:
    value: Tuple[str, ...]


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class NumberValue:
    value: Union[int, float]
    # Authored text, e.g. "007" for value 7
    raw: str = field(default="", compare=False)


FieldValue = Union[StringValue, StringListValue, BoolValue, NumberValue]


def _strip_quotes(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text


def parse_value(raw: str) -> FieldValue:
    """
    Coerce a raw front-matter value.

    "[a, b]" becomes a StringListValue, "true"/"false" a BoolValue, anything
    numeric a NumberValue and everything else a StringValue with surrounding
    quotes removed.
    """
    value = raw.strip()

    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1]
        if not inner.strip():
            return StringListValue(())
        return StringListValue(tuple(_strip_quotes(item) for item in inner.split(",")))

    if value == "true":
        return BoolValue(True)
    if value == "false":
        return BoolValue(False)

    if _NUMBER_PATTERN.match(value):
        number = float(value)
        if math.isfinite(number):
            if number.is_integer() and re.match(r"^[+-]?\d+$", value):
                return NumberValue(int(value), value)
            return NumberValue(number, value)

    return StringValue(_strip_quotes(value))


def split_front_matter(text: str, address: str = "<unknown>") -> Tuple[str, str]:
    """
    Split a raw article into (header, body).

    The header is the block between a leading "---" line and the next
    "---" line. A missing opening or closing delimiter is a parse error.
    """
    normalized = text.replace("\r\n", "\n").lstrip("\ufeff")
    lines = normalized.split("\n")

    if not lines or lines[0].strip() != DELIMITER:
        raise SourceParseError(address, "missing front-matter opening delimiter")

    for index in range(1, len(lines)):
        if lines[index].strip() == DELIMITER:
            header = "\n".join(lines[1:index])
            body = "\n".join(lines[index + 1 :])
            return header, body

    raise SourceParseError(address, "missing front-matter closing delimiter")


def parse_header(header: str) -> Dict[str, FieldValue]:
    """Parse "key: value" lines; lines without a colon or key are ignored."""
    fields: Dict[str, FieldValue] = {}
    for line in header.split("\n"):
        if ":" not in line:
            continue
        key, raw_value = line.split(":", 1)
        key = key.strip()
        if not key or key.startswith("#"):
            continue
        fields[key] = parse_value(raw_value)
    return fields


class MetadataSchema:
    """Validates parsed front-matter fields against the PostMetadata shape."""

    REQUIRED_STRINGS = ("title", "publishedAt")
    OPTIONAL_STRINGS = ("excerpt", "author", "category")
    INTEGERS = ("readingTime", "viewCount", "likes", "comments")

    def __init__(self, address: str = "<unknown>"):
        self.address = address

    def build(
        self, fields: Dict[str, FieldValue], default_category: str = DEFAULT_CATEGORY
    ) -> PostMetadata:
        values: Dict[str, Any] = {}

        for name in self.REQUIRED_STRINGS:
            if name not in fields:
                raise FrontMatterError(name, "is required", self.address)
            values[name] = self._string(name, fields[name])

        for name in self.OPTIONAL_STRINGS:
            if name in fields:
                values[name] = self._string(name, fields[name])

        for name in self.INTEGERS:
            values[name] = self._integer(name, fields[name]) if name in fields else 0

        tags: Tuple[str, ...] = ()
        if "tags" in fields:
            tags = self._string_list("tags", fields["tags"])

        is_published = True
        if "isPublished" in fields:
            is_published = self._boolean("isPublished", fields["isPublished"])

        known = set(self.REQUIRED_STRINGS + self.OPTIONAL_STRINGS + self.INTEGERS)
        known.update(("tags", "isPublished"))
        extra = {
            name: value.value for name, value in fields.items() if name not in known
        }

        return PostMetadata(
            title=values["title"],
            published_at=values["publishedAt"],
            excerpt=values.get("excerpt", ""),
            author=values.get("author", ""),
            reading_time=values["readingTime"],
            view_count=values["viewCount"],
            likes=values["likes"],
            comments=values["comments"],
            category=values.get("category") or default_category,
            tags=tags,
            is_published=is_published,
            extra=extra,
        )

    def _string(self, name: str, value: FieldValue) -> str:
        # Numeric titles such as 007 keep their authored text
        if isinstance(value, StringValue):
            return value.value
        if isinstance(value, NumberValue):
            return value.raw or str(value.value)
        raise FrontMatterError(name, f"must be a string, got {_kind(value)}", self.address)

    def _integer(self, name: str, value: FieldValue) -> int:
        if isinstance(value, NumberValue) and float(value.value).is_integer():
            return int(value.value)
        raise FrontMatterError(name, f"must be an integer, got {_kind(value)}", self.address)

    def _string_list(self, name: str, value: FieldValue) -> Tuple[str, ...]:
        if isinstance(value, StringListValue):
            return value.value
        raise FrontMatterError(name, f"must be a list, got {_kind(value)}", self.address)

    def _boolean(self, name: str, value: FieldValue) -> bool:
        if isinstance(value, BoolValue):
            return value.value
        raise FrontMatterError(name, f"must be true or false, got {_kind(value)}", self.address)


def _kind(value: FieldValue) -> str:
    kinds = {
        StringValue: "string",
        StringListValue: "list",
        BoolValue: "boolean",
        NumberValue: "number",
    }
    return f"{kinds.get(type(value), 'value')} {value.value!r}"


def parse_document(
    text: str, address: str = "<unknown>", default_category: str = DEFAULT_CATEGORY
) -> Tuple[PostMetadata, str]:
    """
    Parse a full article into validated metadata and body.

    Raises:
        SourceParseError: missing delimiters or an invalid field
    """
    if not isinstance(text, str):
        raise SourceParseError(address, f"expected text, got {type(text).__name__}")

    header, body = split_front_matter(text, address)
    fields = parse_header(header)
    logger.trace("Parsed %d front-matter fields from %s", len(fields), address)
    metadata = MetadataSchema(address).build(fields, default_category)
    return metadata, body

