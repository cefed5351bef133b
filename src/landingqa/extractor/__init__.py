"""
Page content extraction: flat text, structural paragraphs, links and images.
"""

from .page_extractor import PageExtractor, deduplicate_paragraphs

__all__ = ["PageExtractor", "deduplicate_paragraphs"]
