from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from landingqa.config.config import GrammarConfig
from landingqa.exceptions import AuxiliaryCheckError
from landingqa.protocols import CheckStatus, GrammarFinding, GrammarReport, Severity

logger = structlog.get_logger(__name__)


class GrammarChecker:
    """
    Checks document and page text against a LanguageTool HTTP service.

    The service is treated as unreliable: timeouts, HTTP errors and
    malformed payloads degrade the whole check to "unavailable".
    """

    def __init__(self, config: Optional[GrammarConfig] = None):
        self.config = config or GrammarConfig()

    @property
    def check_url(self) -> str:
        return self.config.endpoint.rstrip("/") + "/v2/check"

    async def check(self, session: aiohttp.ClientSession, text: str) -> List[GrammarFinding]:
        """
        Submit one text and return its findings.

        Raises:
            AuxiliaryCheckError: on any transport or payload failure.
        """
        text = (text or "")[: self.config.max_chars]
        if not text.strip():
            return []

        try:
            async with asyncio.timeout(self.config.timeout):
                async with session.post(
                    self.check_url, data={"text": text, "language": self.config.language}
                ) as response:
                    if response.status != 200:
                        raise AuxiliaryCheckError("grammar", f"service returned HTTP {response.status}")
                    payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise AuxiliaryCheckError("grammar", str(e) or type(e).__name__) from e

        if not isinstance(payload, dict) or not isinstance(payload.get("matches"), list):
            raise AuxiliaryCheckError("grammar", "unexpected response payload")

        return [self._to_finding(match, text) for match in payload["matches"] if isinstance(match, dict)]

    def _to_finding(self, match: Dict[str, Any], text: str) -> GrammarFinding:
        rule = match.get("rule") or {}
        category = rule.get("category") or {}
        offset = int(match.get("offset", 0))
        length = int(match.get("length", 0))
        flagged = text[offset : offset + length]

        return GrammarFinding(
            message=match.get("message", ""),
            category=category.get("name") or category.get("id", ""),
            rule_id=rule.get("id", ""),
            offset=offset,
            length=length,
            flagged_text=flagged,
            context=(match.get("context") or {}).get("text", ""),
            replacements=tuple(r.get("value", "") for r in (match.get("replacements") or [])[:5]),
            severity=self._severity(rule, category, flagged),
        )

    def _severity(self, rule: Dict[str, Any], category: Dict[str, Any], flagged: str) -> Severity:
        issue_type = (rule.get("issueType") or "").lower()
        category_id = (category.get("id") or "").upper()

        if category_id == "TYPOS" or issue_type == "misspelling":
            # Capitalized "misspellings" are mostly brand and product names.
            if self.config.downgrade_capitalized and flagged[:1].isupper():
                return Severity.LOW
            return Severity.MEDIUM
        if category_id == "GRAMMAR" or issue_type == "grammar":
            return Severity.HIGH
        return Severity.LOW

    async def run(self, document_text: str, page_text: str) -> GrammarReport:
        """Check both texts concurrently; never raises."""
        if not self.config.enabled:
            return GrammarReport(status=CheckStatus.SKIPPED)

        try:
            async with aiohttp.ClientSession() as session:
                results = await asyncio.gather(
                    self.check(session, document_text),
                    self.check(session, page_text),
                    return_exceptions=True,
                )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            document, page = results
        except AuxiliaryCheckError as e:
            logger.warning("Grammar check unavailable", error=str(e))
            return GrammarReport(status=CheckStatus.UNAVAILABLE, error=str(e))

        logger.info("Grammar check complete", document_findings=len(document), page_findings=len(page))
        return GrammarReport(status=CheckStatus.OK, document=document, page=page)
