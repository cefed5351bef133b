"""Best-effort auxiliary checks: grammar and responsiveness."""

from .grammar import GrammarChecker
from .responsive import ResponsiveChecker

__all__ = ["GrammarChecker", "ResponsiveChecker"]
