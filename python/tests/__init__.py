"""
Test suite for blog-search.

Test Categories:
- Unit tests: front-matter parsing, loader, cache, repository, search engine
- Integration tests: CLI wired to a real loader over a temporary content tree
"""
