"""
Step Extractor with Multi-Strategy Cascade

Converts instructional content into ordered steps. Strategies run in
priority order and the first non-empty result wins:
1. Block markup: ordered list blocks and step-like heading blocks
2. Ordered HTML lists: one step per top-level <li>
3. Numbered headings: "Step 1", "Passo 2", "3.", "#4" ...
4. Fallback: every non-generic h2-h4 section
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import structlog

from ..utils.text import first_image_src, normalize_whitespace, parse_html, strip_tags
from .models import Step

logger = structlog.get_logger(__name__)

DEFAULT_TEXT_MAX_LENGTH = 500
MIN_HEADING_LENGTH = 3

BLOCK_TOKEN_PATTERN = re.compile(
    r"<!--\s+(/)?wp:([a-z][a-z0-9_-]*(?:/[a-z][a-z0-9_-]*)?)\s+(\{.*?\}\s+)?(/)?-->",
    re.DOTALL,
)

STEP_HEADING_PATTERNS = (
    re.compile(r"^(?:step|passo|fase|punto)\s*\d", re.IGNORECASE),
    re.compile(r"^\d+\s*[:\-.)]"),
    re.compile(r"^#\d+"),
)
STEP_PREFIX_PATTERNS = (
    re.compile(r"^(?:step|passo|fase|punto)\s*\d+\s*[:\-.)]?\s*", re.IGNORECASE),
    re.compile(r"^\d+\s*[:\-.)]\s*"),
    re.compile(r"^#\d+\s*[:\-.)]?\s*"),
)

NUMBERED_HEADING_PATTERN = re.compile(
    r"""
    <h([2-4])[^>]*>
    \s*
    (?:
        (?:step|passo|fase|punto)\s*[:\-]?\s*(\d+)\s*[:\-.)]?\s*(.*?)
        |
        (\d+)\s*[:\-.)]\s*(.*?)
        |
        \#(\d+)\s*[:\-.)]?\s*(.*?)
    )
    </h\1>
    \s*
    (.*?)
    (?=<h[2-4]|\Z)
    """,
    re.IGNORECASE | re.DOTALL | re.VERBOSE,
)
HEADING_SECTION_PATTERN = re.compile(
    r"<h([2-4])[^>]*>(.*?)</h\1>(.*?)(?=<h[2-4][^>]*>|\Z)",
    re.IGNORECASE | re.DOTALL,
)

GENERIC_HEADINGS = frozenset(
    {
        "introduction", "introduzione",
        "conclusion", "conclusione", "conclusioni",
        "summary", "sommario", "riepilogo",
        "overview", "panoramica",
        "prerequisites", "prerequisiti", "requisiti",
        "materials", "materiali",
        "tools", "strumenti", "attrezzi",
        "supplies", "forniture",
        "tips", "consigli", "suggerimenti",
        "notes", "note",
        "warnings", "avvertenze", "attenzione",
        "faq", "domande frequenti",
        "related", "correlati",
    }
)


@dataclass
class StepStrategy:
    """A named step-extraction strategy in the cascade."""

    name: str
    priority: int
    handler: Callable[[str], List[Dict[str, Any]]]
    enabled: bool = True


@dataclass(frozen=True)
class Block:
    """A top-level block parsed from block-editor comment delimiters."""

    name: str
    attrs: Dict[str, Any]
    inner_html: str


def parse_blocks(content: str) -> List[Block]:
    """
    Split block-editor markup into its top-level blocks.

    Names without a namespace are reported under ``core/``. Nested blocks stay
    inside their parent's inner HTML. Unbalanced delimiters are ignored.
    """
    blocks: List[Block] = []
    stack: List[Tuple[str, Dict[str, Any], int]] = []

    for match in BLOCK_TOKEN_PATTERN.finditer(content):
        closing, raw_name, raw_attrs, self_closing = match.groups()
        name = raw_name if "/" in raw_name else f"core/{raw_name}"

        if closing:
            if not stack or stack[-1][0] != name:
                continue
            _, attrs, start = stack.pop()
            if not stack:
                blocks.append(Block(name=name, attrs=attrs, inner_html=content[start:match.start()]))
            continue

        attrs: Dict[str, Any] = {}
        if raw_attrs:
            try:
                decoded = json.loads(raw_attrs)
            except ValueError:
                decoded = {}
            attrs = decoded if isinstance(decoded, dict) else {}

        if self_closing:
            if not stack:
                blocks.append(Block(name=name, attrs=attrs, inner_html=""))
            continue
        stack.append((name, attrs, match.end()))

    return blocks


def looks_like_step_heading(heading: str) -> bool:
    return any(pattern.match(heading) for pattern in STEP_HEADING_PATTERNS)


def clean_step_heading(heading: str) -> str:
    """Remove a "Step 3:", "2)" or "#1" prefix from a heading."""
    cleaned = heading
    for pattern in STEP_PREFIX_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return cleaned.strip() or heading


def is_generic_heading(heading: str) -> bool:
    """Whether a heading names a generic section (introduction, FAQ ...) rather than a step."""
    lowered = heading.strip().lower()
    if lowered in GENERIC_HEADINGS:
        return True
    prefix, sep, _ = lowered.partition(":")
    return bool(sep) and prefix.strip() in GENERIC_HEADINGS


def _cap(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def _top_level_items(markup: str) -> List[Any]:
    soup = parse_html(markup)
    items = []
    for ordered_list in soup.find_all("ol"):
        if ordered_list.find_parent("ol") is not None:
            continue
        items.extend(ordered_list.find_all("li", recursive=False))
    return items


class StepExtractor:
    """
    Cascading step extractor.

    Each strategy returns plain step dicts without positions; positions are
    assigned once the winning strategy is known, so they are always 1..N in
    document order.
    """

    def __init__(self, text_max_length: int = DEFAULT_TEXT_MAX_LENGTH) -> None:
        self.text_max_length = text_max_length
        self.strategies: List[StepStrategy] = [
            StepStrategy("block_markup", priority=1, handler=self._from_blocks),
            StepStrategy("ordered_lists", priority=2, handler=self._from_ordered_lists),
            StepStrategy("numbered_headings", priority=3, handler=self._from_numbered_headings),
            StepStrategy("heading_sections", priority=4, handler=self._from_heading_sections),
        ]

    def extract(self, content: str) -> List[Step]:
        if not content or not content.strip():
            return []

        for strategy in sorted(self.strategies, key=lambda s: s.priority):
            if not strategy.enabled:
                continue
            found = strategy.handler(content)
            if found:
                logger.debug("Steps extracted", strategy=strategy.name, count=len(found))
                return [Step(position=index, **fields) for index, fields in enumerate(found, start=1)]

        return []

    def _from_blocks(self, content: str) -> List[Dict[str, Any]]:
        if "<!-- wp:" not in content:
            return []

        found: List[Dict[str, Any]] = []
        for block in parse_blocks(content):
            if block.name == "core/list" and block.attrs.get("ordered") is True:
                soup = parse_html(block.inner_html)
                top = soup.find(["ol", "ul"])
                items = top.find_all("li", recursive=False) if top is not None else soup.find_all("li")
                for item in items:
                    text = strip_tags(item.decode_contents())
                    if text:
                        found.append({"text": text})

            elif block.name == "core/heading":
                heading = strip_tags(block.inner_html)
                if heading and looks_like_step_heading(heading):
                    name = clean_step_heading(heading)
                    found.append({"name": name, "text": name})

        return found

    def _from_ordered_lists(self, content: str) -> List[Dict[str, Any]]:
        if "<ol" not in content.lower():
            return []

        found: List[Dict[str, Any]] = []
        for item in _top_level_items(content):
            inner = item.decode_contents()
            text = strip_tags(inner)
            if not text:
                continue

            name: Optional[str] = None
            emphasis = item.find(["strong", "b"])
            if emphasis is not None:
                name = strip_tags(emphasis.decode_contents()) or None
                text = strip_tags(inner.replace(str(emphasis), "", 1))

            step: Dict[str, Any] = {"text": text or name or ""}
            if name and name != step["text"]:
                step["name"] = name

            image = item.find("img", src=True)
            if image is not None:
                step["image"] = image["src"]

            found.append(step)
        return found

    def _from_numbered_headings(self, content: str) -> List[Dict[str, Any]]:
        found: List[Dict[str, Any]] = []
        for match in NUMBERED_HEADING_PATTERN.finditer(content):
            raw_name = match.group(3) or match.group(5) or match.group(7) or ""
            name = strip_tags(raw_name)
            section = match.group(8) or ""
            body = strip_tags(section)

            if not name and not body:
                continue

            step: Dict[str, Any] = {"text": _cap(body, self.text_max_length) if body else name}
            if name:
                step["name"] = name
            image = first_image_src(section)
            if image:
                step["image"] = image
            found.append(step)
        return found

    def _from_heading_sections(self, content: str) -> List[Dict[str, Any]]:
        found: List[Dict[str, Any]] = []
        for match in HEADING_SECTION_PATTERN.finditer(content):
            name = strip_tags(match.group(2))
            if not name or is_generic_heading(name) or len(name) < MIN_HEADING_LENGTH:
                continue

            section = match.group(3)
            body = strip_tags(section)
            step: Dict[str, Any] = {
                "name": name,
                "text": _cap(body, self.text_max_length) if body else name,
            }
            image = first_image_src(section)
            if image:
                step["image"] = image
            found.append(step)
        return found


def extract_steps(content: str, text_max_length: int = DEFAULT_TEXT_MAX_LENGTH) -> List[Step]:
    return StepExtractor(text_max_length=text_max_length).extract(content)


def normalize_steps(entries: Optional[Iterable[Any]]) -> List[Step]:
    """
    Convert an author-supplied step list into Steps positioned 1..N.

    Entries may be plain strings or mappings with ``name|title``,
    ``text|description``, ``image`` and ``url``. Entries with neither a name
    nor a text are skipped.
    """
    if not entries or isinstance(entries, (str, bytes)):
        return []

    steps: List[Step] = []
    for entry in entries:
        if isinstance(entry, str):
            text = normalize_whitespace(entry)
            if text:
                steps.append(Step(position=len(steps) + 1, text=text))
            continue

        if not isinstance(entry, dict):
            continue

        name = entry.get("name") or entry.get("title") or None
        text = entry.get("text") or entry.get("description") or ""
        name = normalize_whitespace(str(name)) if name else None
        text = normalize_whitespace(str(text)) or name or ""
        if not text:
            continue

        steps.append(
            Step(
                position=len(steps) + 1,
                text=text,
                name=name,
                image=entry.get("image") or None,
                url=entry.get("url") or None,
            )
        )
    return steps
