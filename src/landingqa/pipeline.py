"""
Request-scoped comparison pipeline.

One run parses the reference document, fetches the landing page, aligns and
audits the two, then runs the best-effort grammar and responsiveness checks
concurrently. Core failures propagate; auxiliary failures are folded into the
report as ``unavailable``.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Optional

import structlog

from landingqa.audit import ImageAuditor, audit_links
from landingqa.config.config import Config
from landingqa.crawler import HttpClient
from landingqa.document import DocumentParser
from landingqa.matching import ParagraphAligner
from landingqa.observability import increment, observe
from landingqa.protocols import CheckStatus, FetchResult, GrammarReport, ReferenceDocument, ResponsiveReport
from landingqa.quality import GrammarChecker, ResponsiveChecker
from landingqa.report import ComparisonReport, assemble_report
from landingqa.validation import validate_url

logger = structlog.get_logger(__name__)


class ComparisonPipeline:
    """Compares one reference document against one landing page per call to ``run``."""

    def __init__(self, config: Optional[Config] = None, http_client: Optional[HttpClient] = None):
        self.config = config or Config()
        self._http_client = http_client
        self.parser = DocumentParser()
        self.aligner = ParagraphAligner(self.config.matching)
        self.image_auditor = ImageAuditor(self.config.images)
        self.grammar = GrammarChecker(self.config.grammar)
        self.responsive = ResponsiveChecker(self.config.responsive)

    async def run(self, document_path: Path, url: str, *, source_name: Optional[str] = None) -> ComparisonReport:
        """
        Run a full comparison.

        Args:
            document_path: Reference document on disk (.docx, .txt or .md).
            url: Landing page URL, usually a tracked email link.
            source_name: Original file name when ``document_path`` is a
                temporary upload.

        Raises:
            InputError: If the URL is invalid.
            ParseError: If the document cannot be parsed.
            FetchError: If the page cannot be retrieved.
        """
        url = validate_url(url)
        start_time = time.time()
        log = logger.bind(url=url, document=source_name or Path(document_path).name)
        log.info("Starting comparison")

        try:
            document = await asyncio.to_thread(self.parser.parse, Path(document_path), source_name)
            page = await self._fetch(url)

            text = await asyncio.to_thread(self.aligner.compare, document.text, page)
            links = audit_links(document.links, page.links)
            images = self.image_auditor.audit(page.images)

            grammar, responsive = await asyncio.gather(
                self._check_grammar(document, page),
                self._check_responsive(page),
            )
        except Exception as e:
            increment("comparisons_total", labels={"status": "error"})
            log.warning("Comparison aborted", error=str(e), error_type=type(e).__name__)
            raise

        report = assemble_report(
            page,
            text,
            links,
            images,
            grammar,
            responsive,
            detail_word_limit=self.config.matching.detail_word_limit,
        )

        duration = time.time() - start_time
        increment("comparisons_total", labels={"status": report.overall_status.value})
        observe("comparison_duration_seconds", duration)
        log.info(
            "Comparison complete",
            overall_status=report.overall_status.value,
            final_url=page.final_url,
            score=text.overall_score,
            duration=round(duration, 3),
        )
        return report

    async def _fetch(self, url: str) -> FetchResult:
        if self._http_client is not None:
            return await self._http_client.fetch_page(url)
        async with HttpClient(self.config) as client:
            return await client.fetch_page(url)

    async def _check_grammar(self, document: ReferenceDocument, page: FetchResult) -> GrammarReport:
        try:
            report = await self.grammar.run(document.text, page.flat_text)
        except Exception as e:
            logger.warning("Grammar check failed", error=str(e), error_type=type(e).__name__)
            report = GrammarReport(status=CheckStatus.UNAVAILABLE, error=str(e) or type(e).__name__)
        if report.status is CheckStatus.UNAVAILABLE:
            increment("auxiliary_failures_total", labels={"check": "grammar"})
        return report

    async def _check_responsive(self, page: FetchResult) -> ResponsiveReport:
        try:
            report = await self.responsive.run(page.html)
        except Exception as e:
            logger.warning("Responsiveness check failed", error=str(e), error_type=type(e).__name__)
            report = ResponsiveReport(status=CheckStatus.UNAVAILABLE, error=str(e) or type(e).__name__)
        if report.status is CheckStatus.UNAVAILABLE:
            increment("auxiliary_failures_total", labels={"check": "responsive"})
        return report
