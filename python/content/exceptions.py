class BlogIndexError(Exception):
    """Base class for every error raised by the content and indexing layers."""

    pass


class LoadError(BlogIndexError):
    """Raised when the content corpus cannot be loaded at all."""

    pass


class SourceFetchError(LoadError):
    """A single content source could not be retrieved (includes timeouts)."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Could not fetch '{address}': {reason}")


class SourceParseError(LoadError):
    """A single content source has malformed front-matter."""

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Could not parse '{address}': {reason}")


class FrontMatterError(SourceParseError):
    """A front-matter field is missing or has the wrong type."""

    def __init__(self, field: str, reason: str, address: str = "<unknown>"):
        self.field = field
        super().__init__(address, f"field '{field}' {reason}")


class CacheRebuildError(BlogIndexError):
    """The loader behind a cache key failed while rebuilding the entry."""

    def __init__(self, key: str, reason: str = ""):
        self.key = key
        message = f"Failed to rebuild cache entry '{key}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ScoringError(BlogIndexError):
    """A post could not be scored against a query."""

    pass
