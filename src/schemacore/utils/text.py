"""
HTML-to-text helpers shared by the extractors.

BeautifulSoup does the tag stripping; block-level boundaries are turned into
whitespace first so that adjacent paragraphs do not run together.
"""

from __future__ import annotations

import re
import warnings

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

BLOCK_TAG_PATTERN = re.compile(
    r"(<(?:/?(?:p|div|li|ul|ol|h[1-6]|section|article|details|summary|tr|td|th|blockquote|pre|figure)\b[^>]*|br\s*/?)>)",
    re.IGNORECASE,
)
BLOCK_COMMENT_PATTERN = re.compile(r"<!--.*?-->", re.DOTALL)
WHITESPACE_PATTERN = re.compile(r"\s+")
WORD_PATTERN = re.compile(r"[^\W\d_]+(?:['’\-][^\W\d_]+)*")
IMAGE_SRC_PATTERN = re.compile(r"<img[^>]+src=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)


def parse_html(markup: str) -> BeautifulSoup:
    """Parse a fragment with html.parser, silencing bs4's looks-like-a-URL warning for this call only."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        return BeautifulSoup(markup, "html.parser")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def strip_tags(markup: str, *, keep_lines: bool = False) -> str:
    """
    Remove all markup from a fragment, dropping script/style bodies and
    decoding entities.

    Args:
        markup: HTML fragment (may be malformed or plain text)
        keep_lines: Preserve line breaks instead of collapsing all whitespace

    Returns:
        Plain text
    """
    if not markup:
        return ""
    if "<" not in markup and "&" not in markup:
        return markup.strip() if keep_lines else normalize_whitespace(markup)

    spaced = BLOCK_COMMENT_PATTERN.sub(" ", markup)
    spaced = BLOCK_TAG_PATTERN.sub(r"\n\1", spaced)

    soup = parse_html(spaced)
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = soup.get_text()

    if keep_lines:
        lines = (normalize_whitespace(line) for line in text.splitlines())
        return "\n".join(line for line in lines if line)
    return normalize_whitespace(text)


def count_words(text: str) -> int:
    """Count alphabetic words, ignoring digits and punctuation."""
    return len(WORD_PATTERN.findall(text))


def first_image_src(markup: str) -> str | None:
    """Return the src of the first <img> tag in a fragment."""
    match = IMAGE_SRC_PATTERN.search(markup)
    return match.group(1) if match else None
