"""
LandingQA - content fidelity checks between a reference document and a live email landing page.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .pipeline import ComparisonPipeline
from .report import ComparisonReport

__all__ = ["__version__", "Config", "ComparisonPipeline", "ComparisonReport"]
