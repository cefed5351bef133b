"""
BeautifulSoup-based extraction of comparable content from a rendered page.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, Tag

from landingqa.matching.normalizer import collapse_whitespace
from landingqa.protocols import FetchResult, Image, Link, PageParagraph

logger = structlog.get_logger(__name__)

# Elements that never render text.
NON_RENDERED_TAGS = ["script", "style", "noscript", "template"]

PARAGRAPH_TAGS = ["p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "td", "th", "blockquote", "caption"]

# A table cell holding any of these is a layout container, not a paragraph.
NESTED_BLOCK_TAGS = PARAGRAPH_TAGS + ["div", "table", "ul", "ol"]


def deduplicate_paragraphs(candidates: List[str]) -> List[PageParagraph]:
    """
    Drop paragraphs already contained in a retained one.

    A new paragraph that contains retained ones takes the place of the first
    of them; the others are removed. Page order is otherwise preserved.
    """
    retained: List[str] = []
    for text in candidates:
        if any(text in kept for kept in retained):
            continue

        contained = [index for index, kept in enumerate(retained) if kept in text]
        if contained:
            retained[contained[0]] = text
            for index in reversed(contained[1:]):
                del retained[index]
        else:
            retained.append(text)
    return retained


class PageExtractor:
    """Turns final page HTML into flat text, paragraphs, links and images."""

    name = "page"

    def __init__(self, parser: str = "html.parser", min_paragraph_length: int = 10) -> None:
        self.parser = parser
        self.min_paragraph_length = min_paragraph_length

    async def extract(self, html: str, *, url: str = "") -> FetchResult:
        """Extract page content off the event loop; BeautifulSoup parsing is CPU-bound."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.extract_sync, html, url)

    def extract_sync(self, html: str, url: str = "") -> FetchResult:
        soup = BeautifulSoup(html or "", self.parser)

        for tag in soup.find_all(NON_RENDERED_TAGS):
            tag.decompose()

        root = soup.body or soup
        flat_text = collapse_whitespace(root.get_text(separator=" "))

        result = FetchResult(
            final_url=url,
            html=html,
            flat_text=flat_text,
            paragraphs=self._paragraphs(soup),
            links=self._links(soup, url),
            images=self._images(soup, url),
        )
        logger.debug(
            "Extracted page content",
            url=url,
            chars=len(flat_text),
            paragraphs=len(result.paragraphs),
            links=len(result.links),
            images=len(result.images),
        )
        return result

    def _paragraphs(self, soup: BeautifulSoup) -> List[PageParagraph]:
        candidates: List[str] = []
        for element in soup.find_all(PARAGRAPH_TAGS):
            if element.name in ("td", "th") and element.find(NESTED_BLOCK_TAGS) is not None:
                continue
            text = collapse_whitespace(element.get_text(separator=" "))
            if len(text) > self.min_paragraph_length:
                candidates.append(text)
        return deduplicate_paragraphs(candidates)

    @staticmethod
    def _absolute(url: str, value: str) -> str:
        if not url:
            return value
        try:
            return urljoin(url, value)
        except ValueError:
            # Malformed targets such as "http://[broken" are kept as written.
            return value

    def _links(self, soup: BeautifulSoup, url: str) -> List[Link]:
        links: List[Link] = []
        for anchor in soup.find_all("a", href=True):
            href = str(anchor.get("href", "")).strip()
            if not href:
                continue
            text = collapse_whitespace(anchor.get_text(separator=" "))
            links.append(Link(text=text, href=self._absolute(url, href)))
        return links

    def _images(self, soup: BeautifulSoup, url: str) -> List[Image]:
        images: List[Image] = []
        for img in soup.find_all("img"):
            src = str(img.get("src") or "").strip()
            if not src:
                continue
            images.append(
                Image(
                    src=self._absolute(url, src),
                    alt=_attribute(img, "alt"),
                    width=_attribute(img, "width"),
                    height=_attribute(img, "height"),
                )
            )
        return images


def _attribute(tag: Tag, name: str) -> Optional[str]:
    """Attribute value; None when the attribute is absent, "" when present but empty."""
    if not tag.has_attr(name):
        return None
    value = tag.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        value = " ".join(value)
    return str(value)
