"""
Reference document parsing: raw text blocks and hyperlinks from .docx or plain text.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterator, List

import structlog
from docx import Document as DocxDocument
from docx.table import Table
from docx.text.paragraph import Paragraph

from landingqa.exceptions import ParseError
from landingqa.protocols import Link, ReferenceDocument

logger = structlog.get_logger(__name__)

TEXT_SUFFIXES = {".txt", ".md"}
SUPPORTED_SUFFIXES = {".docx"} | TEXT_SUFFIXES

_BARE_URL = re.compile(r"https?://[^\s\"'<>)]+", re.IGNORECASE)
_TRAILING_PUNCTUATION = ".,;:!?"


def find_bare_urls(text: str) -> List[str]:
    """URLs typed directly into the text, in order of first appearance."""
    urls: Dict[str, None] = {}
    for match in _BARE_URL.finditer(text or ""):
        url = match.group(0).rstrip(_TRAILING_PUNCTUATION)
        if url:
            urls.setdefault(url, None)
    return list(urls)


class DocumentParser:
    """Parses the reference document into text (paragraphs separated by blank lines) and links."""

    def parse(self, path: Path, source_name: str | None = None) -> ReferenceDocument:
        path = Path(path)
        suffix = Path(source_name or path.name).suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            raise ParseError(f"Unsupported document type: {suffix or 'no extension'}")

        try:
            if suffix == ".docx":
                text, links = self._parse_docx(path)
            else:
                text, links = path.read_text(encoding="utf-8", errors="replace"), []
        except ParseError:
            raise
        except Exception as e:
            logger.warning("Document parsing failed", path=str(path), error=str(e))
            raise ParseError(f"Could not read document {source_name or path.name}: {e}") from e

        anchored = {link.href for link in links}
        for url in find_bare_urls(text):
            if url not in anchored:
                links.append(Link(text=url, href=url))

        logger.info("Parsed reference document", source=source_name or path.name, chars=len(text), links=len(links))
        return ReferenceDocument(text=text, links=links, source_name=source_name or path.name)

    def _parse_docx(self, path: Path) -> tuple[str, List[Link]]:
        doc = DocxDocument(str(path))
        parts: List[str] = []
        links: List[Link] = []

        for paragraph in self._iter_paragraphs(doc):
            if paragraph.text.strip():
                parts.append(paragraph.text)
            for hyperlink in paragraph.hyperlinks:
                href = (hyperlink.url or "").strip()
                if href:
                    links.append(Link(text=hyperlink.text.strip(), href=href))

        return "\n\n".join(parts), links

    def _iter_paragraphs(self, doc) -> Iterator[Paragraph]:
        """Body paragraphs and table-cell paragraphs in document order."""
        for item in doc.iter_inner_content():
            if isinstance(item, Table):
                yield from self._iter_table(item)
            else:
                yield item

    def _iter_table(self, table: Table) -> Iterator[Paragraph]:
        # Merged cells are repeated once per spanned grid position.
        seen = set()
        for row in table.rows:
            for cell in row.cells:
                if cell._tc in seen:
                    continue
                seen.add(cell._tc)
                for item in cell.iter_inner_content():
                    if isinstance(item, Table):
                        yield from self._iter_table(item)
                    else:
                        yield item
