"""
Error taxonomy for LandingQA.

Core-path errors (input, fetch, document parse) abort a comparison request.
Auxiliary-path errors are always recovered locally by the pipeline.
"""

from __future__ import annotations

from typing import Optional


class LandingQAError(Exception):
    """Base class for all LandingQA errors."""


class InputError(LandingQAError, ValueError):
    """Raised when the request is missing the document or target URL, or either is invalid."""

    pass


class ParseError(LandingQAError):
    """Raised when the reference document cannot be parsed."""

    pass


class FetchError(LandingQAError):
    """Raised when the target page cannot be retrieved."""

    def __init__(
        self,
        url: str,
        *,
        attempts: int,
        cause: Optional[BaseException] = None,
        status: Optional[int] = None,
    ) -> None:
        self.url = url
        self.attempts = attempts
        self.cause = cause
        self.status = status

        reason = str(cause) if cause is not None else f"HTTP {status}"
        if not reason:
            reason = type(cause).__name__
        super().__init__(f"Failed to fetch {url} after {attempts} attempt(s): {reason}")

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "attempts": self.attempts,
            "status": self.status,
            "cause": type(self.cause).__name__ if self.cause is not None else None,
        }


class AuxiliaryCheckError(LandingQAError):
    """Raised by best-effort checks (grammar, responsiveness); never fails a comparison."""

    def __init__(self, check: str, message: str) -> None:
        self.check = check
        super().__init__(f"{check} check unavailable: {message}")
