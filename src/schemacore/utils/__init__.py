"""Utility modules for SchemaCore."""

from .text import count_words, first_image_src, normalize_whitespace, strip_tags

__all__ = ["count_words", "first_image_src", "normalize_whitespace", "strip_tags"]
