"""
Heuristic responsiveness check on the final page HTML.

No rendering happens here: the check looks for a device-width viewport,
width-based media queries and fixed pixel widths wider than a phone.
"""

from __future__ import annotations

import asyncio
import re
from typing import Optional

import structlog
from selectolax.parser import HTMLParser

from landingqa.config.config import ResponsiveConfig
from landingqa.exceptions import AuxiliaryCheckError
from landingqa.protocols import CheckStatus, ResponsiveReport

logger = structlog.get_logger(__name__)

_MEDIA_QUERY = re.compile(r"@media[^{]*\(\s*(?:max|min)-(?:device-)?width", re.IGNORECASE)
_INLINE_WIDTH = re.compile(r"(?<![-\w])width\s*:\s*(\d+)px", re.IGNORECASE)


class ResponsiveChecker:
    def __init__(self, config: Optional[ResponsiveConfig] = None):
        self.config = config or ResponsiveConfig()

    def check(self, html: str) -> ResponsiveReport:
        if not html or not html.strip():
            raise AuxiliaryCheckError("responsive", "page has no HTML")

        try:
            tree = HTMLParser(html)
        except Exception as e:
            raise AuxiliaryCheckError("responsive", str(e)) from e

        viewport = tree.css_first('meta[name="viewport"]')
        viewport_content = (viewport.attributes.get("content") or "") if viewport is not None else ""
        has_viewport = "width=device-width" in viewport_content.replace(" ", "").lower()

        media_queries = sum(len(_MEDIA_QUERY.findall(style.text() or "")) for style in tree.css("style"))
        for link in tree.css('link[rel="stylesheet"]'):
            if "width" in (link.attributes.get("media") or "").lower():
                media_queries += 1

        limit = self.config.fixed_width_limit
        fixed = 0
        for node in tree.css("[width], [style]"):
            width = (node.attributes.get("width") or "").strip().rstrip("px")
            if width.isdigit() and int(width) > limit:
                fixed += 1
                continue
            style = node.attributes.get("style") or ""
            if any(int(value) > limit for value in _INLINE_WIDTH.findall(style)):
                fixed += 1

        responsive = has_viewport and (media_queries > 0 or fixed == 0)
        verdict = (
            "YES - layout adapts to small screens" if responsive else "NO - layout likely stays fixed-width on mobile"
        )
        return ResponsiveReport(
            status=CheckStatus.OK,
            responsive=responsive,
            has_viewport_meta=has_viewport,
            media_query_count=media_queries,
            fixed_width_elements=fixed,
            verdict=verdict,
        )

    async def run(self, html: str) -> ResponsiveReport:
        """Run the check off the event loop; never raises."""
        if not self.config.enabled:
            return ResponsiveReport(status=CheckStatus.SKIPPED)
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, self.check, html)
        except AuxiliaryCheckError as e:
            logger.warning("Responsiveness check unavailable", error=str(e))
            return ResponsiveReport(status=CheckStatus.UNAVAILABLE, error=str(e))
