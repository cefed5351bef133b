"""
Redirect signal detection and per-request cookie accumulation.

Body scanning is best-effort pattern matching, not a script interpreter.
When several pattern types match different targets, the first type in
``SCRIPT_REDIRECT_PATTERNS`` wins, which is not necessarily what a browser
would do.
"""

from __future__ import annotations

import html
import re
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import urljoin

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

_QUOTED = r"""(["'])(?P<target>.+?)\1"""

# Priority order matters.
SCRIPT_REDIRECT_PATTERNS: Tuple[Tuple[str, re.Pattern[str]], ...] = (
    ("redirecturl", re.compile(r"\bredirecturl\s*=\s*" + _QUOTED, re.IGNORECASE)),
    (
        "window.location",
        re.compile(r"\bwindow\.location(?:\.href)?\s*=\s*" + _QUOTED, re.IGNORECASE),
    ),
    (
        "window.location.replace",
        re.compile(r"\bwindow\.location\.replace\(\s*" + _QUOTED + r"\s*\)", re.IGNORECASE),
    ),
    (
        "meta-refresh",
        re.compile(
            r"""<meta[^>]*http-equiv\s*=\s*["']?refresh["']?[^>]*?content\s*=\s*["'][^"']*?url\s*=\s*'?(?P<target>[^"'>\s]+)""",
            re.IGNORECASE,
        ),
    ),
)


def find_script_redirect(body: str) -> Optional[Tuple[str, str]]:
    """
    Look for a client-side redirect in an HTML body.

    Returns:
        ``(pattern_name, raw_target)`` for the first pattern type that
        matches, or None.
    """
    if not body:
        return None
    for name, pattern in SCRIPT_REDIRECT_PATTERNS:
        match = pattern.search(body)
        if match:
            target = html.unescape(match.group("target")).strip()
            if target:
                return name, target
    return None


def resolve_redirect(
    current_url: str,
    status: int,
    headers: Mapping[str, str],
    body: str,
    *,
    scan_success_bodies: bool = False,
) -> Optional[str]:
    """
    Decide where one hop leads.

    Resolution order: the ``Location`` header of a redirect status, then a
    script or meta-refresh redirect in the body of a redirect status without
    one. Relative targets resolve against ``current_url``.

    Returns:
        The absolute next URL, or None when the response is final.
    """
    is_redirect = status in REDIRECT_STATUSES
    if is_redirect:
        location = headers.get("Location") or headers.get("location")
        if location:
            return urljoin(current_url, location.strip())

    if is_redirect or (scan_success_bodies and 200 <= status < 300):
        found = find_script_redirect(body)
        if found:
            return urljoin(current_url, found[1])

    return None


class CookieJar:
    """
    Cookies accumulated across the hops of one fetch.

    Only the leading ``name=value`` of each ``Set-Cookie`` is kept; attributes
    are ignored. Cookies are never dropped, and a later hop overrides the
    value of a cookie with the same name.
    """

    def __init__(self) -> None:
        self._cookies: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._cookies)

    def update(self, set_cookie_values: Iterable[str]) -> None:
        for raw in set_cookie_values:
            pair = raw.split(";", 1)[0].strip()
            if "=" not in pair:
                continue
            name, value = pair.split("=", 1)
            name = name.strip()
            if name:
                self._cookies[name] = value.strip()

    def header(self) -> Optional[str]:
        """Value for a single ``Cookie`` request header, or None when empty."""
        if not self._cookies:
            return None
        return "; ".join(f"{name}={value}" for name, value in self._cookies.items())

    def names(self) -> List[str]:
        return list(self._cookies)
