"""
Report assembly: aggregates every check into one verdict and its JSON wire form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from landingqa.protocols import (
    BlockResult,
    FetchResult,
    GrammarFinding,
    GrammarReport,
    ImageAudit,
    LinkAudit,
    OverallStatus,
    ResponsiveReport,
    TextComparison,
)


@dataclass
class ComparisonReport:
    overall_status: OverallStatus
    page: FetchResult
    text: TextComparison
    links: LinkAudit
    images: ImageAudit
    grammar: GrammarReport
    responsive: ResponsiveReport
    detail_word_limit: int = 10

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallStatus": self.overall_status.value,
            "finalUrl": self.page.final_url,
            "fetch": {
                "status": self.page.status,
                "attempts": self.page.attempts,
                "redirectChain": list(self.page.redirect_chain),
            },
            "textComparison": _text_to_dict(self.text, self.detail_word_limit),
            "linkComparison": _links_to_dict(self.links),
            "imageAudit": _images_to_dict(self.images),
            "grammar": _grammar_to_dict(self.grammar),
            "responsive": _responsive_to_dict(self.responsive),
        }


def overall_status(text: TextComparison, links: LinkAudit, images: ImageAudit) -> OverallStatus:
    """FAIL on any unmatched block, missing link or image without an alt attribute."""
    if text.not_found or links.missing or images.has_missing_alt:
        return OverallStatus.FAIL
    return OverallStatus.PASS


def assemble_report(
    page: FetchResult,
    text: TextComparison,
    links: LinkAudit,
    images: ImageAudit,
    grammar: GrammarReport,
    responsive: ResponsiveReport,
    *,
    detail_word_limit: int = 10,
) -> ComparisonReport:
    return ComparisonReport(
        overall_status=overall_status(text, links, images),
        page=page,
        text=text,
        links=links,
        images=images,
        grammar=grammar,
        responsive=responsive,
        detail_word_limit=detail_word_limit,
    )


# --- Wire form helpers ---


def _block_to_dict(result: BlockResult, limit: int) -> Dict[str, Any]:
    similarity = result.alignment.similarity
    return {
        "originalText": result.block.content,
        "status": result.verdict.value,
        "matchPercentage": round(similarity.f1 * 100),
        "f1": round(similarity.f1, 4),
        "precision": round(similarity.precision, 4),
        "recall": round(similarity.recall, 4),
        "bestSegment": result.alignment.segment,
        "segmentSource": result.alignment.source,
        "matchedWords": list(similarity.matched_words[:limit]),
        "unmatchedWords": list(similarity.unmatched_words[:limit]),
        "extraWords": list(similarity.extra_words[:limit]),
        "totalWords": similarity.total_words,
    }


def _text_to_dict(text: TextComparison, limit: int) -> Dict[str, Any]:
    return {
        "summary": {
            "totalBlocks": text.total_blocks,
            "fullMatches": len(text.matched),
            "partialMatches": len(text.partial_match),
            "notFound": len(text.not_found),
            "metadataItems": len(text.metadata),
            "overallScore": text.overall_score,
        },
        "details": {
            "matched": [_block_to_dict(r, limit) for r in text.matched],
            "partialMatch": [_block_to_dict(r, limit) for r in text.partial_match],
            "notFound": [_block_to_dict(r, limit) for r in text.not_found],
            "metadata": [{"type": m.type, "content": m.content, "note": m.note} for m in text.metadata],
        },
    }


def _links_to_dict(audit: LinkAudit) -> Dict[str, Any]:
    return {
        "summary": {
            "totalLinks": len(audit.checks),
            "foundOnPage": audit.found_count,
            "missing": len(audit.missing),
        },
        "details": [
            {
                "text": check.text,
                "docHref": check.doc_href,
                "strippedHref": check.stripped_href,
                "foundOnPage": "YES" if check.found else "NO",
                "utmInDoc": "YES" if check.utm_in_doc else "NO",
                "utmOnPage": "YES" if check.utm_in_page else "NO",
            }
            for check in audit.checks
        ],
        "missingLinks": [{"text": link.text, "href": link.href} for link in audit.missing],
    }


def _images_to_dict(audit: ImageAudit) -> Dict[str, Any]:
    return {
        "summary": {"totalImages": len(audit.findings), **audit.counts()},
        "details": [
            {
                "src": finding.src,
                "alt": finding.alt,
                "status": finding.status.value,
                "severity": finding.severity.value if finding.severity else None,
                "decorative": finding.decorative,
                "message": finding.message,
            }
            for finding in audit.findings
        ],
    }


def _findings_to_list(findings: List[GrammarFinding]) -> List[Dict[str, Any]]:
    return [
        {
            "message": f.message,
            "category": f.category,
            "ruleId": f.rule_id,
            "offset": f.offset,
            "length": f.length,
            "text": f.flagged_text,
            "context": f.context,
            "replacements": list(f.replacements),
            "severity": f.severity.value,
        }
        for f in findings
    ]


def _grammar_to_dict(report: GrammarReport) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "status": report.status.value,
        "document": _findings_to_list(report.document),
        "page": _findings_to_list(report.page),
    }
    if report.error:
        data["error"] = report.error
    return data


def _responsive_to_dict(report: ResponsiveReport) -> Dict[str, Any]:
    data: Dict[str, Optional[Any]] = {
        "status": report.status.value,
        "responsive": report.responsive,
        "verdict": report.verdict,
        "hasViewportMeta": report.has_viewport_meta,
        "mediaQueryCount": report.media_query_count,
        "fixedWidthElements": report.fixed_width_elements,
    }
    if report.error:
        data["error"] = report.error
    return data
