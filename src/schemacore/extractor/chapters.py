"""
Chapter Extractor - turns runs of timestamped lines into video chapters.

Content is searched in narrowing-to-widening scopes: an element marked with a
``video-chapters`` class, then a section under a "Chapters"/"Timestamps"
heading, then the whole document. Within a scope, timestamps wrapped in
inline emphasis (``<strong>01:30</strong> - Title``) are tried before plain
line-leading timestamps.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import structlog

from ..utils.text import strip_tags
from .durations import parse_time_to_seconds
from .models import Chapter, VideoPlatform, VideoReference

logger = structlog.get_logger(__name__)

MIN_TITLE_LENGTH = 3
MAX_SECONDS_ONLY_OFFSET = 86400

CLASS_BLOCK_PATTERN = re.compile(
    r"<(?:p|div|ul|ol)[^>]*class=[\"'][^\"']*video-chapters[^\"']*[\"'][^>]*>(.*?)</(?:p|div|ul|ol)>",
    re.IGNORECASE | re.DOTALL,
)
SECTION_PATTERN = re.compile(
    r"<h[2-6][^>]*>.*?(?:Video\s+)?(?:Chapters?|Timestamps?|Indice|Capitoli|Key\s+Moments?).*?</h[2-6]>(.*?)(?=<h[2-6]|$)",
    re.IGNORECASE | re.DOTALL,
)
TAGGED_TIMESTAMP_PATTERN = re.compile(
    r"<(?:strong|b|span)[^>]*>\s*(?:(\d{1,2}):)?(\d{1,2}):(\d{2})\s*</(?:strong|b|span)>\s*[-–—:]*\s*([^<\n]+)",
    re.IGNORECASE,
)
PLAIN_TIMESTAMP_PATTERN = re.compile(
    r"(?:^|\n|<br\s*/?>\s*|<li[^>]*>|<(?:p|div)\b[^>]*>)\s*(?:(\d{1,2}):)?(\d{1,2}):(\d{2})\s*[-–—:]?\s*([^\n<]+)",
    re.IGNORECASE | re.MULTILINE,
)
LEADING_TIMESTAMP_PATTERN = re.compile(r"^\d+:\d+")

LINE_PATTERN = re.compile(r"^(?:(\d{1,2}):)?(\d{1,2}):(\d{2})\s*[-–—:]?\s*(.+)$")
SECONDS_LINE_PATTERN = re.compile(r"^(\d+)\s+(.+)$")


def chapter_url(offset: int, video_ref: Optional[VideoReference] = None, permalink: Optional[str] = None) -> Optional[str]:
    """Deep link for a chapter: the page anchor if known, else the YouTube watch URL."""
    if permalink:
        return f"{permalink}#t={offset}"
    if video_ref is not None and video_ref.platform is VideoPlatform.YOUTUBE and video_ref.content_url:
        return f"{video_ref.content_url}&t={offset}"
    return None


def _candidates(pattern: re.Pattern, markup: str) -> List[Tuple[str, int]]:
    found = []
    for match in pattern.finditer(markup):
        hours = int(match.group(1)) if match.group(1) else 0
        title = strip_tags(match.group(4))
        if len(title) < MIN_TITLE_LENGTH or LEADING_TIMESTAMP_PATTERN.match(title):
            continue
        found.append((title, hours * 3600 + int(match.group(2)) * 60 + int(match.group(3))))
    return found


def _scan(markup: str, min_matches: int) -> List[Tuple[str, int]]:
    for pattern in (TAGGED_TIMESTAMP_PATTERN, PLAIN_TIMESTAMP_PATTERN):
        found = _candidates(pattern, markup)
        if len(found) >= min_matches:
            return found
    return []


def extract_chapters(
    content: str,
    video_ref: Optional[VideoReference] = None,
    permalink: Optional[str] = None,
    min_matches: int = 2,
) -> List[Chapter]:
    """
    Extract chapters from timestamp-prefixed lines in content.

    Args:
        content: Raw markup or plain text
        video_ref: Resolved video, used for URLs when no permalink is known
        permalink: Page URL; chapter URLs become ``permalink#t=<offset>``
        min_matches: Fewest surviving timestamp lines that count as chapters

    Returns:
        Chapters positioned 1..N in match order, or an empty list
    """
    if not content:
        return []

    scopes: List[str] = []
    class_match = CLASS_BLOCK_PATTERN.search(content)
    if class_match:
        scopes.append(class_match.group(1))
    section_match = SECTION_PATTERN.search(content)
    if section_match:
        scopes.append(section_match.group(1))
    scopes.append(content)

    for scope in scopes:
        found = _scan(scope, min_matches)
        if found:
            logger.debug("Extracted chapters", count=len(found))
            return [
                Chapter(
                    name=title,
                    start_offset_seconds=offset,
                    position=index,
                    url=chapter_url(offset, video_ref, permalink),
                )
                for index, (title, offset) in enumerate(found, start=1)
            ]
    return []


def _parse_line(line: str) -> Optional[Tuple[str, int]]:
    line = line.strip()
    match = LINE_PATTERN.match(line)
    if match:
        hours = int(match.group(1)) if match.group(1) else 0
        title = match.group(4).strip()
        if len(title) < MIN_TITLE_LENGTH:
            return None
        return title, hours * 3600 + int(match.group(2)) * 60 + int(match.group(3))

    # "80 Crypto becoming investable": offset in seconds
    match = SECONDS_LINE_PATTERN.match(line)
    if match:
        offset, title = int(match.group(1)), match.group(2).strip()
        if len(title) < MIN_TITLE_LENGTH or offset > MAX_SECONDS_ONLY_OFFSET:
            return None
        return title, offset
    return None


def _first_present(entry: dict, keys: Sequence[str]) -> Any:
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


def _parse_entry(entry: Any, video_ref: Optional[VideoReference], permalink: Optional[str]) -> Optional[dict]:
    if isinstance(entry, str):
        parsed = _parse_line(entry)
        if parsed is None:
            return None
        title, offset = parsed
        return {"name": title, "start": offset, "end": None, "url": chapter_url(offset, video_ref, permalink)}

    if not isinstance(entry, dict):
        return None

    name = _first_present(entry, ("name", "title", "label"))
    if not isinstance(name, str) or len(name.strip()) < MIN_TITLE_LENGTH:
        return None

    raw_start = _first_present(entry, ("startOffset", "start_offset", "time", "start", "seconds"))
    if raw_start is None:
        return None
    start = parse_time_to_seconds(raw_start)

    raw_end = _first_present(entry, ("endOffset", "end_offset", "end"))
    end = parse_time_to_seconds(raw_end) if raw_end is not None else None
    if end is not None and end < start:
        end = None

    return {
        "name": name.strip(),
        "start": start,
        "end": end,
        "url": entry.get("url") or chapter_url(start, video_ref, permalink),
    }


def normalize_chapters(
    entries: Any,
    video_ref: Optional[VideoReference] = None,
    permalink: Optional[str] = None,
) -> List[Chapter]:
    """
    Convert an author-supplied chapter list into Chapters.

    Accepts a JSON string, a newline/comma separated string of
    ``"0:00 Title"`` lines, or a list of such strings and mappings
    (``name|title|label``, ``startOffset|time|start|seconds``, ``endOffset|end``,
    ``url``). Invalid entries are skipped; positions stay contiguous.
    """
    if entries is None:
        return []

    if isinstance(entries, str):
        stripped = entries.strip()
        if stripped.startswith(("[", "{")):
            try:
                entries = json.loads(stripped)
            except ValueError:
                logger.debug("Chapter value is not valid JSON, parsing as text")
        if isinstance(entries, str):
            entries = re.split(r"[\n,]", entries)

    if isinstance(entries, dict):
        entries = [entries]
    if not isinstance(entries, Iterable):
        return []

    chapters: List[Chapter] = []
    for entry in entries:
        parsed = _parse_entry(entry, video_ref, permalink)
        if parsed is None:
            continue
        chapters.append(
            Chapter(
                name=parsed["name"],
                start_offset_seconds=parsed["start"],
                end_offset_seconds=parsed["end"],
                position=len(chapters) + 1,
                url=parsed["url"],
            )
        )
    return chapters
