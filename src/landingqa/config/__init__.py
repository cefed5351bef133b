"""Configuration models and the lazily-loaded global settings."""

from __future__ import annotations

from .config import (
    Config,
    CrawlerConfig,
    GrammarConfig,
    ImageAuditConfig,
    LazyConfig,
    MatchingConfig,
    MonitoringConfig,
    ResponsiveConfig,
    WebConfig,
    settings,
)

__all__ = [
    "Config",
    "CrawlerConfig",
    "GrammarConfig",
    "ImageAuditConfig",
    "LazyConfig",
    "MatchingConfig",
    "MonitoringConfig",
    "ResponsiveConfig",
    "WebConfig",
    "settings",
]
