"""Configuration models and the lazily loaded global settings."""

from .config import Config, ExtractionSettings, MonitoringConfig, ProviderSettings, find_config_file, settings

__all__ = ["Config", "ExtractionSettings", "MonitoringConfig", "ProviderSettings", "find_config_file", "settings"]
