"""
Configuration management for SchemaCore using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, cast

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class ExtractionSettings(BaseModel):
    """Thresholds used by the content extractors and classifier."""

    transcript_max_length: int = Field(default=5000, ge=10, description="Maximum transcript length in characters.")
    transcript_min_length: int = Field(
        default=50, ge=0, description="A cleaned transcript must be longer than this to be accepted."
    )
    step_text_max_length: int = Field(
        default=500, ge=10, description="Cap for step text taken from generic heading sections."
    )
    min_chapter_matches: int = Field(
        default=2, ge=1, description="Minimum valid timestamp lines before chapters are emitted."
    )
    reading_words_per_minute: int = Field(default=200, gt=0, description="Average web reading speed.")
    video_dominance_ratio: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Share of total time a video must exceed to classify content as Video.",
    )

    @model_validator(mode="after")
    def validate_transcript_bounds(self) -> ExtractionSettings:
        """Ensure an accepted transcript can fit inside the length cap."""
        if self.transcript_min_length >= self.transcript_max_length:
            raise ValueError("transcript_min_length must be smaller than transcript_max_length")
        return self


class ProviderSettings(BaseModel):
    """Configuration for the external video lookups."""

    youtube_api_key: Optional[SecretStr] = Field(
        default=None, description="YouTube Data API v3 key. Duration lookups are disabled without it."
    )
    youtube_api_endpoint: str = Field(
        default="https://www.googleapis.com/youtube/v3/videos",
        description="YouTube Data API videos endpoint.",
    )
    oembed_endpoints: Dict[str, str] = Field(
        default_factory=lambda: {
            "youtube.com": "https://www.youtube.com/oembed",
            "youtu.be": "https://www.youtube.com/oembed",
            "vimeo.com": "https://vimeo.com/api/oembed.json",
        },
        description="Media host suffix to oEmbed endpoint.",
    )
    timeout_seconds: float = Field(default=5.0, gt=0, description="Per-request timeout for provider lookups.")
    user_agent: str = Field(
        default="SchemaCore/0.1.0 (+https://github.com/schemacore/schemacore)",
        description="User-Agent string for provider requests.",
    )
    enable_oembed: bool = Field(default=True, description="Whether to query oEmbed endpoints at all.")


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(
        default=None,
        description="Path to log file. If None, logs to console.",
    )
    metrics_enabled: bool = Field(default=True, description="Record Prometheus extraction metrics.")

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

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
    project_name: str = "SchemaCore"
    version: str = "0.1.0"
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="SCHEMACORE_", env_nested_delimiter="__", case_sensitive=False)

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
    paths_to_check = [
        current_dir / "schemacore.yaml",
        current_dir / "schemacore.yml",
    ]
    for path in paths_to_check:
        if path.exists():
            return path
    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed. This keeps configuration errors
    from breaking imports of the extraction library.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

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
settings: "Config" = cast("Config", LazyConfig())
