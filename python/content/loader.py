import json
import os
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Sequence
from urllib.parse import urlparse

import requests

from colored_logger import get_colored_logger
from .exceptions import LoadError, SourceFetchError, SourceParseError
from .front_matter import parse_document
from .models import Post, parse_post_path

logger = get_colored_logger(__name__)


class ContentLoader:
    """
    Loads blog posts from a fixed manifest of content addresses.

    Each address is a "category/slug" path relative to the content root.
    The root is either a local directory or an HTTP(S) base URL. Sources
    that cannot be fetched or parsed are logged and skipped; the rest of
    the batch still loads.
    """

    USER_AGENT = "BlogSearch/1.0 (content loader)"

    def __init__(
        self,
        manifest: Optional[Sequence[str]] = None,
        content_root: str = "content/posts",
        extension: str = ".mdx",
        timeout: float = 10,
        manifest_file: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            manifest: Content addresses to load, in order
            content_root: Directory or base URL the addresses are relative to
            extension: File extension appended to each address
            timeout: Per-source fetch timeout in seconds
            manifest_file: JSON file holding a list of addresses, read on every load
            session: requests session for HTTP roots (created lazily if omitted)
        """
        self.manifest = list(manifest or [])
        self.content_root = content_root
        self.extension = extension
        self.timeout = timeout
        self.manifest_file = manifest_file
        self._session = session

        self.stats = {"loaded": 0, "skipped": 0, "failed_fetch": 0, "failed_parse": 0}

    @property
    def is_remote(self) -> bool:
        return self.content_root.startswith(("http://", "https://"))

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"User-Agent": self.USER_AGENT})
        return self._session

    def load_all(self) -> List[Post]:
        """
        Load every post named by the manifest.

        Returns:
            Published posts sorted by publishedAt, newest first

        Raises:
            LoadError: the manifest file itself could not be read
        """
        addresses = self.addresses()
        self.stats = {"loaded": 0, "skipped": 0, "failed_fetch": 0, "failed_parse": 0}

        posts: List[Post] = []
        seen_slugs = set()

        for address in addresses:
            logger.progress("Loading %s", address)
            try:
                post = self.load_source(address)
            except SourceFetchError as e:
                self.stats["failed_fetch"] += 1
                logger.warning("Skipping source: %s", e)
                continue
            except SourceParseError as e:
                self.stats["failed_parse"] += 1
                logger.warning("Skipping source: %s", e)
                continue

            if not post.metadata.is_published:
                self.stats["skipped"] += 1
                logger.info("Skipping unpublished post %s", address)
                continue

            if post.slug in seen_slugs:
                self.stats["skipped"] += 1
                logger.warning(
                    "Skipping %s: slug '%s' is already used by another post",
                    address,
                    post.slug,
                )
                continue

            seen_slugs.add(post.slug)
            posts.append(post)

        self.stats["loaded"] = len(posts)
        logger.success("Loaded %d of %d posts", len(posts), len(addresses))

        # Stable; undated posts go last
        return sorted(
            posts,
            key=lambda post: post.metadata.published_datetime or datetime.min,
            reverse=True,
        )

    def addresses(self) -> List[str]:
        """Return the manifest, reading manifest_file when one is configured."""
        if not self.manifest_file:
            return list(self.manifest)

        try:
            with open(self.manifest_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError, OSError) as e:
            raise LoadError(f"Could not read manifest '{self.manifest_file}': {e}") from e

        if not isinstance(data, list) or not all(isinstance(x, str) for x in data):
            raise LoadError(
                f"Manifest '{self.manifest_file}' must be a JSON list of strings"
            )
        return list(self.manifest) + data

    def load_source(self, address: str) -> Post:
        """
        Fetch and parse one source.

        Raises:
            SourceFetchError: the source could not be retrieved
            SourceParseError: the source has malformed front-matter
        """
        category_path = self.category_path(address)
        if not category_path:
            raise SourceParseError(address, "address has no path segments")

        raw_text = self.fetch(address)
        category, slug = parse_post_path(category_path)
        metadata, body = parse_document(raw_text, address, default_category=category)

        # Opaque key for the stats service, never used for uniqueness
        firebase_id = f"{category.lower()}-{slug}"
        metadata = replace(metadata, firebase_id=firebase_id)

        return Post(
            slug=slug, category_path=category_path, metadata=metadata, content=body
        )

    def category_path(self, address: str) -> str:
        """Normalise an address to "category/slug" (no root, no extension)."""
        path = address.strip().replace("\\", "/")

        base = self.content_root.rstrip("/")
        if self.is_remote and path.startswith(base + "/"):
            path = path[len(base) + 1 :]
        path = path.lstrip("/")

        root = urlparse(base).path if self.is_remote else base
        root = root.strip("/")
        if root and path.startswith(root + "/"):
            path = path[len(root) + 1 :]

        path = path.strip("/")
        if self.extension and path.endswith(self.extension):
            path = path[: -len(self.extension)]
        return path

    def location(self, address: str) -> str:
        relative = self.category_path(address) + self.extension
        if self.is_remote:
            return f"{self.content_root.rstrip('/')}/{relative}"
        return os.path.join(self.content_root, *relative.split("/"))

    def fetch(self, address: str) -> str:
        """Retrieve the raw text of one source."""
        location = self.location(address)

        if not self.is_remote:
            try:
                with open(location, "r", encoding="utf-8") as f:
                    return f.read()
            except (OSError, UnicodeDecodeError) as e:
                raise SourceFetchError(address, str(e)) from e

        try:
            logger.debug("Fetching %s", location)
            response = self.session.get(location, timeout=self.timeout)
            response.raise_for_status()
            if not response.encoding:
                response.encoding = "utf-8"
            return response.text
        except requests.exceptions.Timeout as e:
            raise SourceFetchError(
                address, f"timed out after {self.timeout} seconds"
            ) from e
        except requests.exceptions.RequestException as e:
            raise SourceFetchError(address, str(e)) from e

