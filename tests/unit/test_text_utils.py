"""
Tests for the shared HTML-to-text helpers.
"""

from __future__ import annotations

import warnings

from hypothesis import given
from hypothesis import strategies as st
from schemacore.utils.text import count_words, first_image_src, normalize_whitespace, parse_html, strip_tags


class TestStripTags:
    def test_block_boundaries_become_spaces(self):
        assert strip_tags("<p>One</p><p>Two</p><ul><li>Three</li></ul>") == "One Two Three"

    def test_inline_tags_do_not_split_words(self):
        assert strip_tags("<p>re<em>think</em>ing</p>") == "rethinking"

    def test_drops_scripts_styles_and_comments(self):
        markup = "<!-- wp:paragraph --><p>Kept</p><script>var x = 1;</script><style>p {}</style><!-- /wp:paragraph -->"
        assert strip_tags(markup) == "Kept"

    def test_entities(self):
        assert strip_tags("Fish &amp; chips&nbsp;today") == "Fish & chips today"

    def test_entities_are_decoded_once(self):
        assert strip_tags("<p>&amp;lt;b&amp;gt; is a tag</p>") == "&lt;b&gt; is a tag"

    def test_keep_lines(self):
        assert strip_tags("<p>One</p>\n\n<p>Two  words</p>", keep_lines=True) == "One\nTwo words"

    def test_plain_text_passthrough(self):
        assert strip_tags("  no   markup ") == "no markup"
        assert strip_tags("") == ""

    @given(st.lists(st.text(alphabet="abcdefghij ", min_size=1), min_size=1))
    def test_paragraph_text_survives(self, paragraphs):
        markup = "".join(f"<p>{text}</p>" for text in paragraphs)
        assert strip_tags(markup) == normalize_whitespace(" ".join(paragraphs))


def test_normalize_whitespace():
    assert normalize_whitespace("\t a \n\n b  ") == "a b"


def test_count_words():
    assert count_words("It's 2024, and well-known facts still matter!") == 6
    assert count_words("") == 0
    assert count_words("123 456") == 0


def test_first_image_src():
    assert first_image_src('<p>x</p><img alt="a" src="https://example.com/a.jpg"><img src="b.jpg">') == (
        "https://example.com/a.jpg"
    )
    assert first_image_src("<p>no image</p>") is None


def test_parse_html_leaves_global_warning_filters_alone():
    before = list(warnings.filters)

    soup = parse_html("https://example.com/lesson")

    assert soup.get_text() == "https://example.com/lesson"
    assert warnings.filters == before
