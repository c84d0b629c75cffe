"""
Data models for extraction results.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any, Dict, List, Optional

from ..utils.text import count_words, strip_tags

HEADING_TAG_PATTERN = re.compile(r"<h[2-4][^>]*>", re.IGNORECASE)
LIST_TAG_PATTERN = re.compile(r"<[ou]l[^>]*>", re.IGNORECASE)
CODE_BLOCK_PATTERN = re.compile(r"```|<pre[^>]*>|<code[^>]*>|<!-- wp:code", re.IGNORECASE)
SHORTCODE_PATTERN = re.compile(r"\[/?[a-zA-Z][\w-]*(?:\s[^\]]*)?\]")


class VideoPlatform(str, Enum):
    """Video hosting platforms recognised in content."""

    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    GENERIC = "generic"


class ResourceType(str, Enum):
    """Pedagogical shape of a piece of content. LESSON is the fallback."""

    QUIZ = "Quiz"
    VIDEO = "Video"
    EXERCISE = "Exercise"
    TUTORIAL = "Tutorial"
    LECTURE = "Lecture"
    READING = "Reading"
    LESSON = "Lesson"


class InteractivityType(str, Enum):
    """How the learner engages with content."""

    ACTIVE = "active"
    EXPOSITIVE = "expositive"
    MIXED = "mixed"


class DurationUnit(str, Enum):
    """Unit assumed for bare numbers handed to the duration normalizer."""

    MINUTES = "minutes"
    HOURS = "hours"
    SECONDS = "seconds"


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class ContentDocument:
    """Immutable wrapper around raw markup with lazily derived counts."""

    raw: str

    @classmethod
    def of(cls, content: "ContentDocument | str | None") -> ContentDocument:
        if isinstance(content, ContentDocument):
            return content
        return cls(content if isinstance(content, str) else "")

    @cached_property
    def text(self) -> str:
        """Plain text with shortcodes, block comments and tags removed."""
        return strip_tags(SHORTCODE_PATTERN.sub(" ", self.raw))

    @cached_property
    def word_count(self) -> int:
        return count_words(self.text)

    @cached_property
    def heading_count(self) -> int:
        return len(HEADING_TAG_PATTERN.findall(self.raw))

    @cached_property
    def list_count(self) -> int:
        return len(LIST_TAG_PATTERN.findall(self.raw))

    @cached_property
    def code_block_count(self) -> int:
        return len(CODE_BLOCK_PATTERN.findall(self.raw))

    def __len__(self) -> int:
        return len(self.raw)


@dataclass(frozen=True, slots=True)
class Step:
    """One instructional step. Positions are 1-based and contiguous."""

    position: int
    text: str
    name: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.position < 1:
            raise ValueError("Step position must be a positive integer")

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {"position": self.position, "name": self.name, "text": self.text, "image": self.image, "url": self.url}
        )


@dataclass(frozen=True, slots=True)
class VideoReference:
    """A video embedded in content, optionally enriched by provider lookups."""

    platform: VideoPlatform
    external_id: Optional[str] = None
    embed_url: Optional[str] = None
    content_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration_seconds: Optional[int] = None
    author_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.duration_seconds is not None and self.duration_seconds < 0:
            raise ValueError("Video duration cannot be negative")

    @property
    def has_duration(self) -> bool:
        return bool(self.duration_seconds)

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "platform": self.platform.value,
                "externalId": self.external_id,
                "embedUrl": self.embed_url,
                "contentUrl": self.content_url,
                "thumbnailUrl": self.thumbnail_url,
                "durationSeconds": self.duration_seconds,
                "authorName": self.author_name,
            }
        )


@dataclass(frozen=True, slots=True)
class Chapter:
    """A named, timestamped segment of a video."""

    name: str
    start_offset_seconds: int
    position: int
    end_offset_seconds: Optional[int] = None
    url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.start_offset_seconds < 0:
            raise ValueError("Chapter start offset cannot be negative")
        if self.end_offset_seconds is not None and self.end_offset_seconds < self.start_offset_seconds:
            raise ValueError("Chapter end offset must not precede its start offset")
        if self.position < 1:
            raise ValueError("Chapter position must be a positive integer")

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "name": self.name,
                "startOffsetSeconds": self.start_offset_seconds,
                "endOffsetSeconds": self.end_offset_seconds,
                "url": self.url,
                "position": self.position,
            }
        )


@dataclass(frozen=True, slots=True)
class ClassificationSignals:
    """Content signals derived once per document for both classifiers."""

    has_quiz: bool = False
    has_tutorial_structure: bool = False
    has_interactive_elements: bool = False
    word_count: int = 0
    heading_count: int = 0
    list_count: int = 0
    code_block_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasQuiz": self.has_quiz,
            "hasTutorialStructure": self.has_tutorial_structure,
            "hasInteractiveElements": self.has_interactive_elements,
            "wordCount": self.word_count,
            "headingCount": self.heading_count,
            "listCount": self.list_count,
            "codeBlockCount": self.code_block_count,
        }


@dataclass(frozen=True)
class ExtractionReport:
    """Everything the engine derived from one document."""

    steps: List[Step] = field(default_factory=list)
    video: Optional[VideoReference] = None
    chapters: List[Chapter] = field(default_factory=list)
    transcript: Optional[str] = None
    signals: ClassificationSignals = field(default_factory=ClassificationSignals)
    resource_type: ResourceType = ResourceType.LESSON
    interactivity_type: InteractivityType = InteractivityType.EXPOSITIVE
    time_required: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "steps": [step.to_dict() for step in self.steps],
            "video": self.video.to_dict() if self.video else None,
            "chapters": [chapter.to_dict() for chapter in self.chapters],
            "transcript": self.transcript,
            "signals": self.signals.to_dict(),
            "resourceType": self.resource_type.value,
            "interactivityType": self.interactivity_type.value,
            "timeRequired": self.time_required,
        }
