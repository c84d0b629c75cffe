"""
SchemaCore Content Extraction Module

Heuristic extractors that derive structured facts from loosely structured
rich-text content:
- Steps via a four-strategy cascade (block markup, ordered lists, numbered
  headings, generic heading sections)
- Embedded videos (YouTube, Vimeo, generic embeds) with provider enrichment
- Timestamped video chapters and spoken transcripts
- Normalized ISO-8601 durations and sanitized item lists
- Resource-type and interactivity classification
"""

from .chapters import extract_chapters, normalize_chapters
from .classifier import ContentClassifier
from .durations import (
    extract_duration_from_text,
    format_iso_duration,
    iso_duration_to_seconds,
    normalize_duration,
    parse_time_to_seconds,
)
from .engine import ExtractionEngine
from .hooks import HookRegistry
from .models import (
    Chapter,
    ClassificationSignals,
    ContentDocument,
    DurationUnit,
    ExtractionReport,
    InteractivityType,
    ResourceType,
    Step,
    VideoPlatform,
    VideoReference,
)
from .sanitizer import sanitize, sanitize_skills
from .steps import StepExtractor, extract_steps, normalize_steps
from .transcript import TranscriptExtractor, extract_transcript, select_transcript
from .video import VideoEmbedResolver, extract_video

__all__ = [
    "ExtractionEngine",
    "HookRegistry",
    "StepExtractor",
    "TranscriptExtractor",
    "VideoEmbedResolver",
    "ContentClassifier",
    "extract_steps",
    "normalize_steps",
    "extract_video",
    "extract_chapters",
    "normalize_chapters",
    "extract_transcript",
    "select_transcript",
    "normalize_duration",
    "format_iso_duration",
    "iso_duration_to_seconds",
    "parse_time_to_seconds",
    "extract_duration_from_text",
    "sanitize",
    "sanitize_skills",
    "ContentDocument",
    "Step",
    "VideoReference",
    "Chapter",
    "ClassificationSignals",
    "ExtractionReport",
    "VideoPlatform",
    "ResourceType",
    "InteractivityType",
    "DurationUnit",
]
