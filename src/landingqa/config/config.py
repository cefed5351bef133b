"""
Configuration management for LandingQA using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, List, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class CrawlerConfig(BaseModel):
    """Resilient fetcher configuration."""

    timeout: float = Field(default=30.0, description="Per-request timeout in seconds.")
    max_attempts: int = Field(default=3, ge=1, description="Total attempts for one page fetch, hops included.")
    max_redirects: int = Field(default=10, ge=1, description="Maximum requests in one redirect chain.")
    backoff_base_seconds: float = Field(default=1.0, ge=0, description="Delay before the first retry; doubles after.")
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; LandingQA/0.1; +https://github.com/landingqa/landingqa)",
        description="User-Agent string for HTTP requests.",
    )
    scan_success_bodies: bool = Field(
        default=False,
        description="Also look for script and meta-refresh redirects in 2xx response bodies.",
    )


class MatchingConfig(BaseModel):
    """Thresholds for the paragraph aligner."""

    full_match_threshold: float = Field(default=0.9, ge=0, le=1)
    partial_match_threshold: float = Field(default=0.7, ge=0, le=1)
    contextual_floor: float = Field(
        default=0.3, ge=0, le=1, description="Below this F1 the aligner falls back to a flat-text window."
    )
    window_padding: int = Field(default=100, ge=0, description="Characters on each side of the contextual window.")
    min_block_length: int = Field(default=10, ge=0, description="Reference blocks must be longer than this.")
    min_paragraph_length: int = Field(default=10, ge=0, description="Page paragraphs must be longer than this.")
    max_combination: int = Field(default=3, ge=1, description="Largest run of consecutive paragraphs to combine.")
    detail_word_limit: int = Field(default=10, ge=0, description="Words listed per block in the report.")

    @model_validator(mode="after")
    def validate_threshold_order(self) -> MatchingConfig:
        if self.partial_match_threshold > self.full_match_threshold:
            raise ValueError("partial_match_threshold must not exceed full_match_threshold")
        return self


class ImageAuditConfig(BaseModel):
    """Patterns for the image alt-text audit."""

    decorative_patterns: List[str] = Field(
        default_factory=lambda: [
            r"(^|[/_.-])(tracking|spacer|beacon)([/_.-]|$)",
            r"(^|[/_.-])(tracking[_-]?)?pixel\.(gif|png)(\?|$)",
            r"/(track|pixel)(/|\?|$)",
            r"blank\.gif",
            r"transparent\.(gif|png)",
            r"(^|[/_.-])1x1([/_.-]|$)",
            r"/open(\.|/|$)",
        ],
        description="Regexes (case-insensitive) matched against src to mark an image decorative.",
    )
    placeholder_patterns: List[str] = Field(
        default_factory=lambda: [
            r"^(image|img|photo|picture|pic|graphic|banner|icon|logo|untitled|placeholder|spacer)\s*\d*$",
            r"^(an?\s+)?(image|photo|picture)\s+of\b",
            r"^(img|dsc|image)[_-]?\d+(\.\w+)?$",
            r"\.(jpe?g|png|gif|webp|svg)$",
            r"^alt( text)?$",
        ],
        description="Regexes (case-insensitive) marking alt text as a generic placeholder.",
    )


class GrammarConfig(BaseModel):
    """LanguageTool HTTP service configuration."""

    enabled: bool = Field(default=True, description="Run the grammar check on document and page text.")
    endpoint: str = Field(default="https://api.languagetool.org", description="LanguageTool base URL.")
    language: str = Field(default="en-US")
    timeout: float = Field(default=15.0, description="Timeout for one grammar request in seconds.")
    max_chars: int = Field(default=20000, ge=1, description="Texts are truncated to this length before checking.")
    downgrade_capitalized: bool = Field(
        default=True, description="Downgrade capitalized misspellings (likely brand names) to low severity."
    )


class ResponsiveConfig(BaseModel):
    enabled: bool = True
    fixed_width_limit: int = Field(default=640, description="Widths above this many pixels count as fixed layout.")


class WebConfig(BaseModel):
    """Configuration for the HTTP API."""

    host: str = Field(default="127.0.0.1", description="Host for the web server.")
    port: int = Field(default=5000, description="Port for the web server.")
    upload_dir: Path = Field(default=Path("uploads"), description="Directory for temporary uploads.")
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])
    allowed_extensions: List[str] = Field(default_factory=lambda: [".docx", ".txt", ".md"])
    max_upload_mb: int = Field(default=20, ge=1)

    @field_validator("upload_dir", mode="before")
    @classmethod
    def create_upload_dir(cls, v: str | Path) -> Path:
        path = Path(v)
        path.mkdir(parents=True, exist_ok=True)
        return path


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")
    json_logs: bool = Field(default=False, description="Render console logs as JSON.")

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "LandingQA"
    version: str = "0.1.0"
    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    images: ImageAuditConfig = Field(default_factory=ImageAuditConfig)
    grammar: GrammarConfig = Field(default_factory=GrammarConfig)
    responsive: ResponsiveConfig = Field(default_factory=ResponsiveConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="LANDINGQA_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "config.yaml", current_dir / "config.yml"):
        if path.exists():
            return path
    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed, so that configuration errors do
    not surface at import time.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded configuration; the next access reloads it."""
        with cls._lock:
            cls._config = None

    def _load_config_with_fallback(self) -> Config:
        """Load configuration from file or fall back to defaults."""
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except (ValidationError, FileNotFoundError, yaml.YAMLError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. "
                    "Falling back to default settings. Please check your config file.",
                    config_path,
                    e,
                    exc_info=log.getEffectiveLevel() <= logging.DEBUG,
                )
        else:
            log.info("No config file found. Using default settings for lazy load.")

        try:
            return Config()
        except ValidationError as e:
            log.critical("FATAL: Default configuration is invalid: %s", e, exc_info=True)
            raise RuntimeError(f"Default configuration is invalid, cannot start: {e}") from e


# --- Global Settings Instance ---
# Typed as Config for type checkers; the actual instance is the LazyConfig proxy.
settings: "Config" = cast("Config", LazyConfig())
