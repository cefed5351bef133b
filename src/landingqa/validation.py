"""
Input validation for comparison requests.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Optional
from urllib.parse import urlparse

from landingqa.exceptions import InputError

MAX_URL_LENGTH = 2048

_PATH_TRAVERSAL_PATTERNS = [
    r"\.\./",
    r"\.\.\\",
    r"%2e%2e/",
    r"\.\.%2f",
    r"\.\.%5c",
]


def validate_url(url: Optional[str]) -> str:
    """
    Validate the landing-page URL of a request.

    Returns:
        The URL with surrounding whitespace removed.

    Raises:
        InputError: If the URL is missing, too long or not absolute http(s).
    """
    url = (url or "").strip()
    if not url:
        raise InputError("A landing page URL is required")

    if len(url) > MAX_URL_LENGTH:
        raise InputError(f"URL exceeds maximum length of {MAX_URL_LENGTH}")

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InputError(f"Invalid URL format: {e}") from e

    if parsed.scheme not in ("http", "https"):
        raise InputError(f"Invalid URL scheme: {parsed.scheme or 'none'}")
    if not parsed.netloc:
        raise InputError("URL has no host")

    return url


def validate_document_name(
    filename: Optional[str],
    allowed_extensions: Iterable[str],
    size: Optional[int] = None,
    max_size_mb: Optional[int] = None,
) -> str:
    """
    Validate an uploaded reference document's name and size.

    Raises:
        InputError: If the file is missing, too large, of a type that is not
            allowed or its name tries to escape the upload directory.
    """
    if not filename:
        raise InputError("A reference document is required")

    if any(re.search(pattern, filename, re.IGNORECASE) for pattern in _PATH_TRAVERSAL_PATTERNS):
        raise InputError("Potential path traversal detected")

    suffix = Path(filename).suffix.lower()
    allowed = {ext.lower() for ext in allowed_extensions}
    if suffix not in allowed:
        raise InputError(f"File type not allowed: {suffix or 'no extension'}")

    if size is not None and max_size_mb is not None and size > max_size_mb * 1024 * 1024:
        raise InputError(f"File size exceeds {max_size_mb}MB limit")

    if size == 0:
        raise InputError("Uploaded document is empty")

    return Path(filename).name
