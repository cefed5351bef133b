"""
Image alt-text audit.

Tracking pixels and spacers are decorative: an empty ``alt`` is correct for
them, and a missing one is only a low-severity finding. Content images need
meaningful alt text.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Pattern

import structlog

from landingqa.config.config import ImageAuditConfig
from landingqa.protocols import Image, ImageAudit, ImageFinding, ImageStatus, Severity

logger = structlog.get_logger(__name__)


class ImageAuditor:
    """Classifies page images by decorativeness and alt-text quality."""

    def __init__(self, config: Optional[ImageAuditConfig] = None):
        self.config = config or ImageAuditConfig()
        self._decorative: List[Pattern[str]] = [re.compile(p, re.IGNORECASE) for p in self.config.decorative_patterns]
        self._placeholders: List[Pattern[str]] = [
            re.compile(p, re.IGNORECASE) for p in self.config.placeholder_patterns
        ]

    def is_decorative(self, image: Image) -> bool:
        if any(pattern.search(image.src) for pattern in self._decorative):
            return True
        return _pixel_size(image.width) == 1 and _pixel_size(image.height) == 1

    def is_placeholder(self, alt: str) -> bool:
        text = alt.strip()
        return any(pattern.search(text) for pattern in self._placeholders)

    def classify(self, image: Image) -> ImageFinding:
        decorative = self.is_decorative(image)

        if image.alt is None:
            return ImageFinding(
                src=image.src,
                alt=None,
                status=ImageStatus.MISSING,
                severity=Severity.LOW if decorative else Severity.HIGH,
                decorative=decorative,
                message="alt attribute is missing",
            )

        if not image.alt.strip():
            if decorative:
                return ImageFinding(
                    src=image.src,
                    alt=image.alt,
                    status=ImageStatus.OK,
                    severity=None,
                    decorative=True,
                    message="empty alt on decorative image",
                )
            return ImageFinding(
                src=image.src,
                alt=image.alt,
                status=ImageStatus.EMPTY,
                severity=Severity.MEDIUM,
                decorative=False,
                message="empty alt on content image",
            )

        if self.is_placeholder(image.alt):
            return ImageFinding(
                src=image.src,
                alt=image.alt,
                status=ImageStatus.GENERIC,
                severity=Severity.MEDIUM,
                decorative=decorative,
                message="alt text is a generic placeholder",
            )

        return ImageFinding(
            src=image.src,
            alt=image.alt,
            status=ImageStatus.OK,
            severity=None,
            decorative=decorative,
            message="alt text present",
        )

    def audit(self, images: Iterable[Image]) -> ImageAudit:
        result = ImageAudit(findings=[self.classify(image) for image in images])
        logger.info("Image audit complete", images=len(result.findings), **result.counts())
        return result


def _pixel_size(value: Optional[str]) -> Optional[int]:
    """Parse an HTML width/height attribute such as ``1`` or ``1px``."""
    if value is None:
        return None
    match = re.fullmatch(r"\s*(\d+)\s*(px)?\s*", value)
    return int(match.group(1)) if match else None
