"""
Paragraph alignment between reference-document blocks and page paragraphs.

A reference block rarely maps one-to-one onto a page element: designers
split copy across headings and paragraphs, merge short lines, or wrap text in
layout tables. The aligner therefore runs a greedy local search:

1. every single paragraph,
2. every run of 2..N consecutive paragraphs joined by a space,
3. when nothing scores above the contextual floor, a character window of the
   flat page text centred on the first shared word.

Candidates only replace the current best on a strictly greater F1, so the
first candidate found wins ties.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

import structlog

from landingqa.config.config import MatchingConfig
from landingqa.matching.similarity import score
from landingqa.protocols import (
    AlignmentResult,
    BlockResult,
    FetchResult,
    MatchVerdict,
    MetadataItem,
    PageParagraph,
    SimilarityResult,
    TextBlock,
    TextComparison,
)

logger = structlog.get_logger(__name__)

_BLANK_LINE = re.compile(r"\n\s*\n")


def split_blocks(text: str, min_length: int = 10) -> Tuple[List[TextBlock], List[MetadataItem]]:
    """
    Split reference text into blocks on blank-line boundaries.

    Blocks that are not longer than ``min_length`` characters are dropped.
    Subject lines and preheaders are envelope metadata and are returned
    separately instead of as blocks.
    """
    blocks: List[TextBlock] = []
    metadata: List[MetadataItem] = []

    for raw in _BLANK_LINE.split((text or "").replace("\r\n", "\n")):
        content = raw.strip()
        if len(content) <= min_length:
            continue

        lower = content.lower()
        if lower.startswith(("subject", "preheader")) or "subject:" in lower or "preheader:" in lower:
            kind = "Subject Line" if "subject" in lower else "Preheader"
            metadata.append(MetadataItem(type=kind, content=content))
            continue

        blocks.append(TextBlock(content=content))

    return blocks, metadata


class ParagraphAligner:
    """Finds the best-matching page segment for each reference block."""

    def __init__(self, config: Optional[MatchingConfig] = None):
        self.config = config or MatchingConfig()

    def align(self, block: TextBlock, paragraphs: Sequence[PageParagraph], flat_text: str) -> AlignmentResult:
        """
        Find the page segment that best matches ``block``.

        Args:
            block: Reference-document block.
            paragraphs: Deduplicated page paragraphs in page order.
            flat_text: All visible page text, whitespace-collapsed.

        Returns:
            AlignmentResult with the best segment; an empty segment with
            F1 = 0 when nothing on the page shares a word with the block.
        """
        best = AlignmentResult(segment="", similarity=SimilarityResult.zero())

        for paragraph in paragraphs:
            candidate = score(block.content, paragraph)
            if candidate.f1 > best.f1:
                best = AlignmentResult(segment=paragraph, similarity=candidate, source="paragraph")

        for size in range(2, self.config.max_combination + 1):
            for start in range(len(paragraphs) - size + 1):
                segment = " ".join(paragraphs[start : start + size])
                candidate = score(block.content, segment)
                if candidate.f1 > best.f1:
                    best = AlignmentResult(segment=segment, similarity=candidate, source="combination")

        if best.f1 < self.config.contextual_floor:
            contextual = self._contextual_window(block, flat_text)
            if contextual is not None and contextual.f1 > best.f1:
                best = contextual

        return best

    def _contextual_window(self, block: TextBlock, flat_text: str) -> Optional[AlignmentResult]:
        """Score a window of the flat text around the first word the block shares with it."""
        if not flat_text:
            return None

        shared = score(block.content, flat_text).matched_words
        if not shared:
            return None

        haystack = flat_text.lower()
        position = -1
        for word in shared:
            match = re.search(rf"(?<!\w){re.escape(word)}(?!\w)", haystack)
            if match:
                position = match.start()
                break
        if position < 0:
            return None

        padding = self.config.window_padding
        start = max(0, position - padding)
        end = position + len(block.content) + padding
        segment = flat_text[start:end].strip()

        return AlignmentResult(segment=segment, similarity=score(block.content, segment), source="context")

    def classify(self, f1: float) -> MatchVerdict:
        if f1 >= self.config.full_match_threshold:
            return MatchVerdict.FULL_MATCH
        if f1 >= self.config.partial_match_threshold:
            return MatchVerdict.PARTIAL_MATCH
        return MatchVerdict.NOT_FOUND

    def compare(self, reference_text: str, page: FetchResult) -> TextComparison:
        """Align every reference block against the page and bucket the verdicts."""
        blocks, metadata = split_blocks(reference_text, self.config.min_block_length)
        comparison = TextComparison(metadata=metadata)

        for block in blocks:
            alignment = self.align(block, page.paragraphs, page.flat_text)
            verdict = self.classify(alignment.f1)
            comparison.add(BlockResult(block=block, alignment=alignment, verdict=verdict))

        logger.info(
            "Text comparison complete",
            blocks=comparison.total_blocks,
            full=len(comparison.matched),
            partial=len(comparison.partial_match),
            not_found=len(comparison.not_found),
            metadata=len(metadata),
        )
        return comparison
