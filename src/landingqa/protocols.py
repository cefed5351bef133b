"""
Core dataclasses and enums shared across LandingQA.

Every entity here is request-scoped: created while one comparison request
runs and discarded when it ends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

# A page paragraph is the text of one block-level element.
PageParagraph = str


# ============================================================================
# Enums
# ============================================================================


class MatchVerdict(Enum):
    """Classification of one reference block against the page."""

    FULL_MATCH = "FULL MATCH"
    PARTIAL_MATCH = "PARTIAL MATCH"
    NOT_FOUND = "NOT FOUND"


class OverallStatus(Enum):
    PASS = "PASS"
    FAIL = "FAIL"


class Severity(Enum):
    """Severity of an audit or grammar finding."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ImageStatus(Enum):
    """Alt-text classification for one image."""

    OK = "OK"
    MISSING = "MISSING"
    EMPTY = "EMPTY"
    GENERIC = "GENERIC"


class CheckStatus(Enum):
    """Outcome of a best-effort auxiliary check."""

    OK = "ok"
    SKIPPED = "skipped"
    UNAVAILABLE = "unavailable"


# ============================================================================
# Reference document
# ============================================================================


@dataclass(frozen=True)
class TextBlock:
    """A contiguous unit of reference-document text."""

    content: str


@dataclass(frozen=True)
class MetadataItem:
    """Email envelope text (subject line, preheader) found in the reference document."""

    type: str
    content: str
    note: str = "Not expected in email body (metadata only)"


@dataclass(frozen=True)
class Link:
    text: str
    href: str


@dataclass
class ReferenceDocument:
    """Raw text and hyperlinks extracted from the reference document."""

    text: str
    links: List[Link] = field(default_factory=list)
    source_name: Optional[str] = None


# ============================================================================
# Fetched page
# ============================================================================


@dataclass(frozen=True)
class Image:
    """An image on the page. ``alt is None`` means the attribute is absent."""

    src: str
    alt: Optional[str]
    width: Optional[str] = None
    height: Optional[str] = None


@dataclass
class FetchResult:
    """Final rendered page after redirects, split into comparable parts."""

    final_url: str
    html: str
    flat_text: str
    paragraphs: List[PageParagraph] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    images: List[Image] = field(default_factory=list)
    status: int = 200
    attempts: int = 1
    redirect_chain: List[str] = field(default_factory=list)


# ============================================================================
# Text matching
# ============================================================================


@dataclass(frozen=True)
class SimilarityResult:
    """Bidirectional word-overlap between two spans of text."""

    precision: float
    recall: float
    f1: float
    matched_words: Tuple[str, ...] = ()
    unmatched_words: Tuple[str, ...] = ()
    extra_words: Tuple[str, ...] = ()

    @classmethod
    def zero(cls) -> SimilarityResult:
        return cls(precision=0.0, recall=0.0, f1=0.0)

    @property
    def total_words(self) -> int:
        return len(self.matched_words) + len(self.unmatched_words)


@dataclass(frozen=True)
class AlignmentResult:
    """Best page segment found for one reference block."""

    segment: str
    similarity: SimilarityResult
    source: str = "none"  # paragraph, combination, context or none

    @property
    def f1(self) -> float:
        return self.similarity.f1

    @property
    def precision(self) -> float:
        return self.similarity.precision

    @property
    def recall(self) -> float:
        return self.similarity.recall


@dataclass(frozen=True)
class BlockResult:
    block: TextBlock
    alignment: AlignmentResult
    verdict: MatchVerdict


@dataclass
class TextComparison:
    """Per-block verdicts. The three verdict buckets partition the blocks."""

    matched: List[BlockResult] = field(default_factory=list)
    partial_match: List[BlockResult] = field(default_factory=list)
    not_found: List[BlockResult] = field(default_factory=list)
    metadata: List[MetadataItem] = field(default_factory=list)

    def add(self, result: BlockResult) -> None:
        if result.verdict is MatchVerdict.FULL_MATCH:
            self.matched.append(result)
        elif result.verdict is MatchVerdict.PARTIAL_MATCH:
            self.partial_match.append(result)
        else:
            self.not_found.append(result)

    @property
    def total_blocks(self) -> int:
        return len(self.matched) + len(self.partial_match) + len(self.not_found)

    @property
    def overall_score(self) -> int:
        if self.total_blocks == 0:
            return 100
        return round((len(self.matched) + len(self.partial_match) * 0.5) / self.total_blocks * 100)


# ============================================================================
# Audits
# ============================================================================


@dataclass(frozen=True)
class LinkCheck:
    text: str
    doc_href: str
    stripped_href: str
    found: bool
    utm_in_doc: bool
    utm_in_page: bool = False


@dataclass
class LinkAudit:
    checks: List[LinkCheck] = field(default_factory=list)
    missing: List[Link] = field(default_factory=list)

    @property
    def found_count(self) -> int:
        return sum(1 for check in self.checks if check.found)


@dataclass(frozen=True)
class ImageFinding:
    src: str
    alt: Optional[str]
    status: ImageStatus
    severity: Optional[Severity]
    decorative: bool
    message: str


@dataclass
class ImageAudit:
    findings: List[ImageFinding] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in ImageStatus}
        for finding in self.findings:
            counts[finding.status.value] += 1
        return counts

    @property
    def has_missing_alt(self) -> bool:
        return any(finding.status is ImageStatus.MISSING for finding in self.findings)


# ============================================================================
# Auxiliary checks
# ============================================================================


@dataclass(frozen=True)
class GrammarFinding:
    message: str
    category: str
    rule_id: str
    offset: int
    length: int
    flagged_text: str
    context: str
    replacements: Tuple[str, ...]
    severity: Severity


@dataclass
class GrammarReport:
    status: CheckStatus
    document: List[GrammarFinding] = field(default_factory=list)
    page: List[GrammarFinding] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class ResponsiveReport:
    status: CheckStatus
    responsive: Optional[bool] = None
    has_viewport_meta: bool = False
    media_query_count: int = 0
    fixed_width_elements: int = 0
    verdict: str = ""
    error: Optional[str] = None
