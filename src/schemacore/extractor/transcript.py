"""
Transcript Extractor - recovers spoken-text transcripts from content.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, List, Optional, Tuple

import structlog

from ..utils.text import normalize_whitespace, parse_html, strip_tags

logger = structlog.get_logger(__name__)

DEFAULT_MAX_LENGTH = 5000
DEFAULT_MIN_LENGTH = 50
ELLIPSIS = "..."
MIN_DIALOGUE_MATCHES = 3

TRANSCRIPT_HEADING_PATTERN = re.compile(
    r"<h[2-6][^>]*>.*?(?:Video\s+)?(?:Transcript(?:ion)?|Trascrizione|Full\s+Text).*?</h[2-6]>",
    re.IGNORECASE | re.DOTALL,
)
NEXT_HEADING_PATTERN = re.compile(r"<h[2-6][^>]*>", re.IGNORECASE)
DIALOGUE_PATTERN = re.compile(
    r"\[(\d{2}:\d{2}:\d{2}(?:\.\d{2})?)\]\s*(?:-\s*(?:Speaker\s*\d+|[A-Za-z]+)\s*)?(.+?)(?=\[\d{2}:\d{2}:\d{2}|\Z)",
    re.DOTALL,
)
TRANSCRIPT_CLASS_PATTERN = re.compile(r"lesson-transcription|video-transcript|transcript(?:ion)?", re.IGNORECASE)
TIMESTAMP_MARKER_PATTERN = re.compile(r"\[\d{2}:\d{2}:\d{2}(?:\.\d{2})?\]")
SPEAKER_LABEL_PATTERN = re.compile(r"^\s*-?\s*Speaker\s*\d+\s*:?\s*", re.IGNORECASE | re.MULTILINE)


def clean_transcript_text(text: str) -> str:
    """Strip markup, ``[HH:MM:SS]`` markers and ``Speaker N:`` labels; collapse whitespace."""
    if not text:
        return ""
    text = strip_tags(text, keep_lines=True)
    text = TIMESTAMP_MARKER_PATTERN.sub("", text)
    text = SPEAKER_LABEL_PATTERN.sub(" ", text)
    return normalize_whitespace(text)


def truncate_transcript(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """
    Bound text to max_length characters, marker included.

    The cut lands on the last space before the limit when there is one, and
    ``...`` is appended.
    """
    if len(text) <= max_length:
        return text

    budget = max(max_length - len(ELLIPSIS), 0)
    truncated = text[:budget]
    if not text[budget].isspace():
        last_space = truncated.rfind(" ")
        if last_space > 0:
            truncated = truncated[:last_space]
    return truncated.rstrip() + ELLIPSIS


class TranscriptExtractor:
    """Tries heading-delimited, timestamp-dialogue and class-marked transcripts in turn."""

    def __init__(self, max_length: int = DEFAULT_MAX_LENGTH, min_length: int = DEFAULT_MIN_LENGTH) -> None:
        if min_length >= max_length:
            raise ValueError("min_length must be smaller than max_length")
        self.max_length = max_length
        self.min_length = min_length
        self.strategies: List[Tuple[str, Callable[[str], Optional[str]]]] = [
            ("heading", self._from_heading),
            ("timestamp_dialogue", self._from_dialogue),
            ("class_block", self._from_class_block),
        ]

    def extract(self, content: str) -> Optional[str]:
        if not content:
            return None

        for name, strategy in self.strategies:
            candidate = strategy(content)
            if not candidate:
                continue
            accepted = self._accept(candidate)
            if accepted:
                logger.debug("Transcript found", strategy=name, length=len(accepted))
                return accepted
        return None

    def select(self, candidates: Iterable[Optional[str]], content: str = "") -> Optional[str]:
        """
        Return the first usable author-supplied transcript, else extract from content.

        Candidates are raw field values in priority order; non-strings and
        values too short after cleaning are skipped.
        """
        for candidate in candidates:
            if not isinstance(candidate, str) or not candidate.strip():
                continue
            accepted = self._accept(candidate)
            if accepted:
                return accepted
        return self.extract(content)

    def _accept(self, candidate: str) -> Optional[str]:
        cleaned = clean_transcript_text(candidate)
        if len(cleaned) <= self.min_length:
            return None
        return truncate_transcript(cleaned, self.max_length)

    def _from_heading(self, content: str) -> Optional[str]:
        match = TRANSCRIPT_HEADING_PATTERN.search(content)
        if not match:
            return None
        remaining = content[match.end():]
        next_heading = NEXT_HEADING_PATTERN.search(remaining)
        return remaining[: next_heading.start()] if next_heading else remaining

    def _from_dialogue(self, content: str) -> Optional[str]:
        matches = DIALOGUE_PATTERN.findall(content)
        if len(matches) < MIN_DIALOGUE_MATCHES:
            return None
        parts = [SPEAKER_LABEL_PATTERN.sub("", text).strip() for _, text in matches]
        parts = [part for part in parts if part]
        return " ".join(parts) or None

    def _from_class_block(self, content: str) -> Optional[str]:
        if "transcri" not in content.lower():
            return None
        soup = parse_html(content)
        block = soup.find(
            ["div", "section", "details"],
            attrs={"class": lambda value: bool(value) and bool(TRANSCRIPT_CLASS_PATTERN.search(value))},
        )
        if block is None:
            return None
        return block.decode_contents()


def extract_transcript(
    content: str, max_length: int = DEFAULT_MAX_LENGTH, min_length: int = DEFAULT_MIN_LENGTH
) -> Optional[str]:
    return TranscriptExtractor(max_length=max_length, min_length=min_length).extract(content)


def select_transcript(
    candidates: Iterable[Optional[str]],
    content: str = "",
    max_length: int = DEFAULT_MAX_LENGTH,
    min_length: int = DEFAULT_MIN_LENGTH,
) -> Optional[str]:
    return TranscriptExtractor(max_length=max_length, min_length=min_length).select(candidates, content)
