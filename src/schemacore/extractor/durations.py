"""
Duration Normalizer - ISO-8601 duration formatting and parsing

Converts the heterogeneous duration values authors type into canonical
ISO-8601 strings (PT1H30M) and back into total seconds for arithmetic.
Bare numbers are interpreted according to the caller's DurationUnit.
"""

from __future__ import annotations

import math
import re
from typing import Optional, Union

import structlog

from .models import DurationUnit

logger = structlog.get_logger(__name__)

NUMERIC_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
CLOCK_PATTERN = re.compile(r"^(?:(\d+):)?(\d+):(\d+)$")
ISO_LIKE_PATTERN = re.compile(r"^P[\dYMWDTHS.,]*$", re.IGNORECASE)
ISO_DAY_PATTERN = re.compile(r"(\d+)D")
ISO_TIME_PATTERNS = (
    (re.compile(r"(\d+)H"), 3600),
    (re.compile(r"(\d+)M"), 60),
    (re.compile(r"(\d+)S"), 1),
)

# Unit vocabulary (Italian/English)
HOUR_UNITS = r"ore|ora|hours?|hrs?|h"
MINUTE_UNITS = r"minuti|minuto|minutes?|mins?|m"
HOUR_UNIT_PATTERN = re.compile(rf"^(?:{HOUR_UNITS})$", re.IGNORECASE)

# Ordered by specificity: ranges first, then hours (+ minutes), then a keyword
# ("takes", "circa", ...) followed by a single value, then any value + unit.
FREE_TEXT_PATTERNS = (
    (
        "range",
        re.compile(
            rf"\b(\d+)\s*(?:-|–|to|a)\s*(\d+)\s*({HOUR_UNITS}|{MINUTE_UNITS})\b",
            re.IGNORECASE,
        ),
    ),
    (
        "hours_minutes",
        re.compile(
            rf"\b(\d+)\s*(?:{HOUR_UNITS})\b(?:\s*(?:,|and|e)?\s*(\d+)\s*(?:{MINUTE_UNITS})\b)?",
            re.IGNORECASE,
        ),
    ),
    (
        "keyword",
        re.compile(
            r"\b(?:tempo|durata|richiede|necessita|circa|time|duration|takes|requires|about|approximately)"
            rf"\s*[:\-]?\s*(\d+)\s*({HOUR_UNITS}|{MINUTE_UNITS})\b",
            re.IGNORECASE,
        ),
    ),
    (
        "minutes",
        re.compile(rf"\b(\d+)\s*(?:minuti|minuto|minutes?|mins?)\b", re.IGNORECASE),
    ),
)

DurationValue = Union[str, int, float]


def format_iso_duration(seconds: Union[int, float]) -> str:
    """
    Format a number of seconds as an ISO-8601 duration, omitting zero components.

    Examples:
        5400 -> "PT1H30M"
        45 -> "PT45S"
        0 -> "PT0S"
    """
    total = max(int(seconds), 0)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if hours:
        parts.append(f"{hours}H")
    if minutes:
        parts.append(f"{minutes}M")
    if secs:
        parts.append(f"{secs}S")
    return "PT" + ("".join(parts) or "0S")


def _unit_multiplier(unit: DurationUnit) -> int:
    if unit is DurationUnit.HOURS:
        return 3600
    if unit is DurationUnit.MINUTES:
        return 60
    return 1


def _number_to_iso(number: float, unit: DurationUnit) -> str:
    if not math.isfinite(number):
        return format_iso_duration(0)
    if unit is DurationUnit.HOURS:
        # Hour-based call sites keep whole hours
        return f"PT{max(int(number), 0)}H"
    return format_iso_duration(round(number * _unit_multiplier(unit)))


def normalize_duration(value: Optional[DurationValue], unit: DurationUnit = DurationUnit.MINUTES) -> str:
    """
    Convert a duration in any supported shape to an ISO-8601 string.

    Args:
        value: An ISO string (returned as-is, uppercased), a number, a numeric
            string, a clock value (HH:MM:SS or MM:SS), or free text such as
            "2 hours 30 minutes" or "20-30 minuti"
        unit: How bare numbers are interpreted at this call site

    Returns:
        ISO-8601 duration. Unparseable input degrades to "PT" + the raw value.
    """
    if value is None:
        return format_iso_duration(0)

    if isinstance(value, bool):
        value = str(value)

    if isinstance(value, (int, float)):
        return _number_to_iso(value, unit)

    raw = str(value).strip()
    if not raw:
        return format_iso_duration(0)

    if ISO_LIKE_PATTERN.match(raw):
        return raw.upper()

    if NUMERIC_PATTERN.match(raw):
        return _number_to_iso(float(raw), unit)

    if CLOCK_PATTERN.match(raw):
        return format_iso_duration(parse_time_to_seconds(raw))

    extracted = extract_duration_from_text(raw)
    if extracted:
        return extracted

    logger.debug("Unparseable duration, using degenerate form", value=raw)
    return f"PT{raw}"


def iso_duration_to_seconds(iso: Optional[str]) -> int:
    """
    Sum the day, hour, minute and second components of an ISO-8601 duration.

    Non-"P" input returns 0. Year/month/week components are ignored.
    """
    if not iso or not isinstance(iso, str):
        return 0

    duration = iso.strip().upper()
    if not duration.startswith("P"):
        return 0

    date_part, _, time_part = duration[1:].partition("T")
    seconds = 0

    day_match = ISO_DAY_PATTERN.search(date_part)
    if day_match:
        seconds += int(day_match.group(1)) * 86400

    for pattern, multiplier in ISO_TIME_PATTERNS:
        match = pattern.search(time_part)
        if match:
            seconds += int(match.group(1)) * multiplier

    return seconds


def parse_time_to_seconds(value: Optional[DurationValue]) -> int:
    """Parse a number of seconds or a [H:]M:S clock value. Anything else is 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0) if math.isfinite(value) else 0

    raw = str(value).strip()
    if NUMERIC_PATTERN.match(raw):
        number = float(raw)
        return max(int(number), 0) if math.isfinite(number) else 0

    match = CLOCK_PATTERN.match(raw)
    if not match:
        return 0
    hours = int(match.group(1)) if match.group(1) else 0
    return hours * 3600 + int(match.group(2)) * 60 + int(match.group(3))


def _hours_minutes_to_iso(hours: int, minutes: int) -> Optional[str]:
    if hours == 0 and minutes == 0:
        return None
    return format_iso_duration(hours * 3600 + minutes * 60)


def extract_duration_from_text(text: str) -> Optional[str]:
    """
    Find a time mention in free text and convert it to ISO-8601.

    Handles "2 hours 15 minutes", "circa 30 minuti", "takes 2 hrs" and ranges
    like "20-30 minuti" (the arithmetic mean, fractional hours split into
    minutes). Returns None when no mention is found.
    """
    if not text:
        return None

    for name, pattern in FREE_TEXT_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue

        if name == "range":
            low, high, unit = int(match.group(1)), int(match.group(2)), match.group(3)
            average = (low + high) / 2
            if HOUR_UNIT_PATTERN.match(unit):
                hours = int(average)
                return _hours_minutes_to_iso(hours, int(round((average - hours) * 60)))
            return _hours_minutes_to_iso(0, int(average))

        if name == "hours_minutes":
            minutes = int(match.group(2)) if match.group(2) else 0
            return _hours_minutes_to_iso(int(match.group(1)), minutes)

        if name == "keyword":
            amount, unit = int(match.group(1)), match.group(2)
            if HOUR_UNIT_PATTERN.match(unit):
                return _hours_minutes_to_iso(amount, 0)
            return _hours_minutes_to_iso(0, amount)

        return _hours_minutes_to_iso(0, int(match.group(1)))

    return None
