"""
Link presence audit: every reference-document link must appear on the page.

Campaign tracking parameters are added or rewritten by the email platform,
so links are compared with ``utm*`` query parameters removed.
"""

from __future__ import annotations

import re
from typing import Iterable, Set
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import structlog

from landingqa.protocols import Link, LinkAudit, LinkCheck

logger = structlog.get_logger(__name__)

_UTM_MARKER = re.compile(r"utm[_=-]", re.IGNORECASE)


def strip_utm(href: str) -> str:
    """
    Canonical form of ``href`` without ``utm*`` query parameters.

    Scheme and host are lowercased and an empty path becomes ``/``. When the
    URL cannot be parsed, the whole query string is dropped instead.
    """
    href = (href or "").strip()
    try:
        parts = urlsplit(href)
        query = [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if not key.lower().startswith("utm")
        ]
        netloc = parts.netloc.lower()
        path = parts.path or ("/" if netloc else "")
        return urlunsplit((parts.scheme.lower(), netloc, path, urlencode(query, doseq=True), parts.fragment))
    except ValueError:
        return href.split("?", 1)[0].strip()


def has_utm(href: str) -> bool:
    return bool(_UTM_MARKER.search(href or ""))


def audit_links(doc_links: Iterable[Link], page_links: Iterable[Link]) -> LinkAudit:
    """Check each reference link against the page's links by exact match of stripped targets."""
    page_hrefs = [link.href for link in page_links]
    stripped_page: Set[str] = {strip_utm(href) for href in page_hrefs}
    page_with_utm: Set[str] = {strip_utm(href) for href in page_hrefs if has_utm(href)}

    audit = LinkAudit()
    for link in doc_links:
        stripped = strip_utm(link.href)
        found = stripped in stripped_page
        audit.checks.append(
            LinkCheck(
                text=link.text,
                doc_href=link.href,
                stripped_href=stripped,
                found=found,
                utm_in_doc=has_utm(link.href),
                utm_in_page=stripped in page_with_utm,
            )
        )
        if not found:
            audit.missing.append(link)

    logger.info("Link audit complete", total=len(audit.checks), found=audit.found_count, missing=len(audit.missing))
    return audit
