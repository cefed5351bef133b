"""Reference document parsing."""

from .parser import DocumentParser, find_bare_urls

__all__ = ["DocumentParser", "find_bare_urls"]
