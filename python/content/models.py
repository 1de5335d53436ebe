from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

# Folder name -> display name
CATEGORY_FOLDERS = {
    "react": "React",
    "typescript": "TypeScript",
    "javascript": "JavaScript",
    "css": "CSS",
    "performance": "Performance",
    "tools": "Tools",
    "tutorial": "Tutorial",
}

DEFAULT_CATEGORY = "General"

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M")


def category_display_name(folder: str) -> str:
    """Map a category folder to its display name; unknown folders pass through."""
    return CATEGORY_FOLDERS.get(folder, folder)


def parse_post_path(category_path: str) -> Tuple[str, str]:
    """
    Split a content path such as "javascript/react-hooks-guide" into
    (category display name, slug).

    A path with a single segment has no category folder and falls back to
    "General".
    """
    parts = [part for part in category_path.strip("/").split("/") if part]
    if not parts:
        return DEFAULT_CATEGORY, ""
    if len(parts) == 1:
        return DEFAULT_CATEGORY, parts[0]
    return category_display_name(parts[0]), parts[-1]


def post_path(category: str, slug: str) -> str:
    """Inverse of parse_post_path for categories known to CATEGORY_FOLDERS."""
    for folder, display_name in CATEGORY_FOLDERS.items():
        if display_name == category:
            return f"{folder}/{slug}"
    return slug


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)


def parse_published_at(value: Any) -> Optional[datetime]:
    """
    Parse a publishedAt value into a naive datetime.

    Returns None when the value is not a recognisable date.
    """
    if isinstance(value, datetime):
        return _to_naive_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return _to_naive_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


@dataclass(frozen=True)
class PostMetadata:
    """
    Front-matter block of a post.

    Tags are stored exactly as authored; blank or duplicate entries are
    only filtered when presented.
    """

    title: str
    published_at: str
    excerpt: str = ""
    author: str = ""
    reading_time: int = 0
    view_count: int = 0
    likes: int = 0
    comments: int = 0
    category: str = DEFAULT_CATEGORY
    tags: Tuple[str, ...] = ()
    is_published: bool = True
    firebase_id: str = ""
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def published_datetime(self) -> Optional[datetime]:
        return parse_published_at(self.published_at)


@dataclass(frozen=True)
class Post:
    slug: str
    category_path: str
    metadata: PostMetadata
    content: str

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def category(self) -> str:
        return self.metadata.category

    @property
    def tags(self) -> Tuple[str, ...]:
        return self.metadata.tags

    @property
    def firebase_id(self) -> str:
        return self.metadata.firebase_id


@dataclass(frozen=True)
class PostStats:
    """View/like/comment counters reported by the external stats service."""

    firebase_id: str
    view_count: int = 0
    likes: int = 0
    comments: int = 0

    @classmethod
    def from_metadata(cls, post: Post) -> "PostStats":
        metadata = post.metadata
        return cls(
            firebase_id=metadata.firebase_id,
            view_count=metadata.view_count,
            likes=metadata.likes,
            comments=metadata.comments,
        )
