"""
Content Classifier - derives content signals and categorical labels.
"""

from __future__ import annotations

import math
import re
from typing import Optional, Union

import structlog

from .models import ClassificationSignals, ContentDocument, InteractivityType, ResourceType, VideoReference

logger = structlog.get_logger(__name__)

QUIZ_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        # Quiz plugin shortcodes
        r"\[quiz[^\]]*\]",
        r"\[qmn_quiz[^\]]*\]",
        r"\[ld_quiz[^\]]*\]",
        r"\[watu[^\]]*\]",
        r"\[qsm[^\]]*\]",
        r"\[question[^\]]*\]",
        # Form plugins used for assessments
        r"\[gravityform[^\]]*\]",
        r"\[wpforms[^\]]*\]",
        r"\[formidable[^\]]*\]",
        r"\[ninja_form[^\]]*\]",
        # Quiz blocks
        r"<!-- wp:quiz",
        r"<!-- wp:learndash/ld-quiz",
        r"<!-- wp:wpforms",
        r"<!-- wp:gravityforms",
        r"<!-- wp:mpcs-quiz",
        r"\[mpcs-quiz[^\]]*\]",
    )
)

INTERACTIVE_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"<form[^>]*>",
        r"<!-- wp:button",
        r"<!-- wp:file",
        r"<!-- wp:accordion",
        r"<!-- wp:tabs",
        r"\[download[^\]]*\]",
        r"\[file[^\]]*\]",
        r"data-interactive",
        r"class=\"[^\"]*interactive",
    )
)

STEP_MARKER_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"step\s*[0-9]+",
        r"fase\s*[0-9]+",
        r"passo\s*[0-9]+",
        r"parte\s*[0-9]+",
        r"part\s*[0-9]+",
        r"#[0-9]+[:.\s]",
    )
)
HOW_TO_PATTERN = re.compile(r"how\s+to|come\s+fare|guida\s+a|tutorial", re.IGNORECASE)
ORDERED_LIST_PATTERN = re.compile(r"<ol[^>]*>", re.IGNORECASE)
TUTORIAL_CODE_PATTERN = re.compile(r"```|<pre[^>]*>|<!-- wp:code", re.IGNORECASE)
NUMBERED_HEADING_PATTERN = re.compile(r"<h[23][^>]*>\s*[0-9]+[.)]", re.IGNORECASE)

TUTORIAL_THRESHOLD = 3


def has_quiz(content: str) -> bool:
    return any(pattern.search(content) for pattern in QUIZ_PATTERNS)


def has_interactive_elements(content: str) -> bool:
    return any(pattern.search(content) for pattern in INTERACTIVE_PATTERNS)


def tutorial_score(content: str) -> int:
    """
    Weighted evidence that content is a step-by-step tutorial.

    Repeated step numbering +2, "how to"/"tutorial" wording +1, two or more
    ordered lists +1, three or more code blocks +1, three or more numbered
    h2/h3 headings +2.
    """
    score = 0
    if any(len(pattern.findall(content)) >= 2 for pattern in STEP_MARKER_PATTERNS):
        score += 2
    if HOW_TO_PATTERN.search(content):
        score += 1
    if len(ORDERED_LIST_PATTERN.findall(content)) >= 2:
        score += 1
    if len(TUTORIAL_CODE_PATTERN.findall(content)) >= 3:
        score += 1
    if len(NUMBERED_HEADING_PATTERN.findall(content)) >= 3:
        score += 2
    return score


class ContentClassifier:
    """
    Labels content by pedagogical shape.

    Signals are computed once per document with compute_signals and passed to
    both classify_resource_type and classify_interactivity.
    """

    def __init__(self, reading_wpm: int = 200, video_dominance_ratio: float = 0.8) -> None:
        if reading_wpm <= 0:
            raise ValueError("reading_wpm must be positive")
        self.reading_wpm = reading_wpm
        self.video_dominance_ratio = video_dominance_ratio

    def compute_signals(self, content: Union[ContentDocument, str, None]) -> ClassificationSignals:
        document = ContentDocument.of(content)
        raw = document.raw
        return ClassificationSignals(
            has_quiz=has_quiz(raw),
            has_tutorial_structure=tutorial_score(raw) >= TUTORIAL_THRESHOLD,
            has_interactive_elements=has_interactive_elements(raw),
            word_count=document.word_count,
            heading_count=document.heading_count,
            list_count=document.list_count,
            code_block_count=document.code_block_count,
        )

    def is_video_dominant(self, video_ref: Optional[VideoReference], signals: ClassificationSignals) -> bool:
        """True when the video accounts for more than the dominance ratio of total consumption time."""
        if video_ref is None or not video_ref.duration_seconds:
            return False
        video_seconds = video_ref.duration_seconds
        reading_seconds = signals.word_count / self.reading_wpm * 60
        return video_seconds / (video_seconds + reading_seconds) > self.video_dominance_ratio

    def classify_resource_type(
        self, video_ref: Optional[VideoReference], signals: ClassificationSignals
    ) -> ResourceType:
        has_video = video_ref is not None

        if signals.has_quiz:
            return ResourceType.QUIZ
        if self.is_video_dominant(video_ref, signals):
            return ResourceType.VIDEO
        if signals.has_interactive_elements and signals.code_block_count >= 2:
            return ResourceType.EXERCISE
        if signals.has_tutorial_structure:
            return ResourceType.TUTORIAL
        if has_video and signals.word_count > 300:
            return ResourceType.LECTURE
        if not has_video and signals.word_count > 500 and signals.heading_count >= 2:
            return ResourceType.READING
        return ResourceType.LESSON

    def classify_interactivity(
        self, video_ref: Optional[VideoReference], signals: ClassificationSignals
    ) -> InteractivityType:
        active = signals.has_quiz or signals.has_interactive_elements or signals.code_block_count >= 2
        expositive = video_ref is not None or signals.word_count > 200

        if active and expositive:
            return InteractivityType.MIXED
        if active:
            return InteractivityType.ACTIVE
        return InteractivityType.EXPOSITIVE

    def estimate_time_required(
        self, content: Union[ContentDocument, str, None], video_ref: Optional[VideoReference] = None
    ) -> int:
        """Reading time plus video time, each rounded up to whole minutes."""
        document = ContentDocument.of(content)
        minutes = 0
        if document.word_count > 0:
            minutes += math.ceil(document.word_count / self.reading_wpm)
        if video_ref is not None and video_ref.duration_seconds:
            minutes += math.ceil(video_ref.duration_seconds / 60)
        return minutes
