"""
SchemaCore - Content extraction and classification engine for structured metadata.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .extractor import ExtractionEngine, ExtractionReport

__all__ = ["__version__", "Config", "ExtractionEngine", "ExtractionReport"]
