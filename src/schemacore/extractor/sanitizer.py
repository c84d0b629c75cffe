"""
Item List Sanitizer - filters auto-populated tool/supply/skill lists.

Custom-field plugins happily hand back row IDs, placeholder keys and whole
paragraphs where a short label is expected. These filters keep the labels.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, List, Optional

NUMERIC_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
ID_PAIR_PATTERN = re.compile(r"^\d+:\d+$")
FIELD_KEY_PATTERN = re.compile(r"^field_[a-f0-9]+$", re.IGNORECASE)
HTML_TAG_PATTERN = re.compile(r"<[^>]+>")

MIN_ITEM_LENGTH = 2
MAX_ITEM_LENGTH = 200
MAX_PERIODS = 2
MAX_COMMAS = 3
MIN_SKILL_LENGTH = 3


def item_name(item: Any) -> Optional[str]:
    """Return the label of a list item: the string itself, a mapping's name, or a row's first cell."""
    if isinstance(item, str):
        return item
    if isinstance(item, Mapping):
        name = item.get("name")
        if name is None:
            name = item.get(0)
        return name if isinstance(name, str) else None
    if isinstance(item, Sequence) and item:
        first = item[0]
        return first if isinstance(first, str) else None
    return None


def is_valid_label(name: str) -> bool:
    """Heuristic check that a string is a short item label and not an ID or prose."""
    if not name:
        return False
    if NUMERIC_PATTERN.match(name):
        return False
    if ID_PAIR_PATTERN.match(name):
        return False
    if FIELD_KEY_PATTERN.match(name):
        return False
    if name.lower() == "default":
        return False
    if HTML_TAG_PATTERN.search(name):
        return False
    if not MIN_ITEM_LENGTH <= len(name) <= MAX_ITEM_LENGTH:
        return False
    # More than a couple of sentences or clauses reads as a description
    if name.count(".") > MAX_PERIODS or name.count(",") > MAX_COMMAS:
        return False
    return True


def sanitize(items: Optional[Sequence[Any]]) -> List[Any]:
    """
    Drop invalid entries from a candidate list, preserving order.

    Strings come back trimmed; mappings and rows come back untouched.
    """
    if not items or isinstance(items, (str, bytes)):
        return []

    valid: List[Any] = []
    for item in items:
        name = item_name(item)
        if name is None:
            continue
        name = name.strip()
        if not is_valid_label(name):
            continue
        valid.append(name if isinstance(item, str) else item)
    return valid


def sanitize_skills(value: Any) -> List[str]:
    """
    Turn a skills/competencies value into a clean list of strings.

    Accepts a comma-separated string or a list of strings.
    """
    if value is None or value == "":
        return []

    if isinstance(value, str):
        items = [part.strip() for part in value.split(",")] if "," in value else [value.strip()]
    elif isinstance(value, Sequence):
        items = [item.strip() for item in value if isinstance(item, str) and item.strip()]
    else:
        return []

    return [
        item
        for item in items
        if len(item) >= MIN_SKILL_LENGTH and not FIELD_KEY_PATTERN.match(item) and not ID_PAIR_PATTERN.match(item)
    ]
