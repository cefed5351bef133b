"""
Fuzzy text matching: normalization, word-overlap scoring and paragraph alignment.
"""

from .aligner import ParagraphAligner, split_blocks
from .normalizer import normalize, tokenize
from .similarity import score

__all__ = ["ParagraphAligner", "split_blocks", "normalize", "tokenize", "score"]
