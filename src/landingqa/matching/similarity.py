"""
Bidirectional word-overlap scoring between two spans of text.
"""

from __future__ import annotations

from landingqa.matching.normalizer import tokenize
from landingqa.protocols import SimilarityResult


def score(text_a: str, text_b: str) -> SimilarityResult:
    """
    Score how well ``text_a`` is covered by ``text_b``.

    Matching is set membership: a token of A counts as matched when it occurs
    anywhere in B, however many times it appears in A. Precision is measured
    against A and recall against B, so ``score(a, b)`` and ``score(b, a)``
    differ and callers pick the direction they need.

    Args:
        text_a: The reference span (usually a document block).
        text_b: The candidate span (a page paragraph or window).

    Returns:
        SimilarityResult; all-zero when ``text_a`` has no words.
    """
    tokens_a = tokenize(text_a)
    if not tokens_a:
        return SimilarityResult.zero()

    tokens_b = tokenize(text_b)
    set_a = set(tokens_a)
    set_b = set(tokens_b)

    matched = [token for token in tokens_a if token in set_b]
    unmatched = [token for token in tokens_a if token not in set_b]
    extra = [token for token in tokens_b if token not in set_a]

    precision = len(matched) / len(tokens_a)
    # Repeated words in A can otherwise push recall past 1.0.
    recall = min(1.0, len(matched) / len(tokens_b)) if tokens_b else 0.0
    f1 = 2 * precision * recall / (precision + recall) if (precision + recall) > 0 else 0.0

    return SimilarityResult(
        precision=precision,
        recall=recall,
        f1=f1,
        matched_words=tuple(matched),
        unmatched_words=tuple(unmatched),
        extra_words=tuple(extra),
    )
