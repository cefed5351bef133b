"""
Text canonicalization for word-overlap comparison.

Marketing copy is reflowed, re-quoted and re-punctuated between the reference
document and the page, so both sides are reduced to lowercase word tokens
before they are compared.
"""

from __future__ import annotations

import re
from typing import List

_TAG_PATTERN = re.compile(r"<[^>]+>")
_SINGLE_QUOTES = re.compile("[‘’‚‛]")
_DOUBLE_QUOTES = re.compile("[“”„‟]")
_ASIDE_PATTERN = re.compile(r"[\(\[].*?[\)\]]", re.DOTALL)
_PUNCTUATION_PATTERN = re.compile(r"[^\w\s]")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize(text: str) -> str:
    """
    Canonicalize text for comparison.

    Markup is replaced by a space, curly quotes become straight quotes,
    parenthetical and bracketed asides are dropped, the text is lowercased,
    everything that is neither a word character nor whitespace is removed and
    whitespace runs collapse to one space. ``normalize`` is idempotent.

    Args:
        text: Arbitrary text, possibly containing markup.

    Returns:
        The normalized string; empty for empty input.
    """
    if not text:
        return ""

    text = _TAG_PATTERN.sub(" ", text)
    text = _SINGLE_QUOTES.sub("'", text)
    text = _DOUBLE_QUOTES.sub('"', text)
    text = _ASIDE_PATTERN.sub(" ", text)
    # Lowercase before stripping punctuation: some case mappings emit
    # combining marks that the punctuation pass removes.
    text = text.lower()
    text = _PUNCTUATION_PATTERN.sub("", text)
    text = _WHITESPACE_PATTERN.sub(" ", text)
    return text.strip()


def tokenize(text: str) -> List[str]:
    """Split normalized text into word tokens, dropping empty tokens."""
    return [token for token in normalize(text).split(" ") if token]


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces without any other change."""
    return _WHITESPACE_PATTERN.sub(" ", text or "").strip()
