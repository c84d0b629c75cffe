"""
Unit tests for extraction result models.
"""

from __future__ import annotations

import pytest
from schemacore.extractor.models import (
    Chapter,
    ContentDocument,
    ExtractionReport,
    Step,
    VideoPlatform,
    VideoReference,
)


class TestContentDocument:
    def test_counts(self):
        doc = ContentDocument(
            "<!-- wp:heading --><h2>One</h2><!-- /wp:heading -->[caption id=1]<ol><li>two words</li></ol>"
            "<pre><code>x</code></pre>"
        )

        assert doc.text == "One two words x"
        assert doc.word_count == 4
        assert doc.heading_count == 1
        assert doc.list_count == 1
        assert doc.code_block_count == 2

    def test_of_reuses_documents(self):
        doc = ContentDocument("<p>x</p>")

        assert ContentDocument.of(doc) is doc
        assert ContentDocument.of(None).raw == ""
        assert ContentDocument.of(42).raw == ""
        assert len(ContentDocument.of("abc")) == 3


class TestInvariants:
    def test_step_position_positive(self):
        with pytest.raises(ValueError):
            Step(position=0, text="x")

    def test_chapter_offsets(self):
        with pytest.raises(ValueError):
            Chapter(name="Intro", start_offset_seconds=-1, position=1)
        with pytest.raises(ValueError):
            Chapter(name="Intro", start_offset_seconds=10, end_offset_seconds=5, position=1)

    def test_video_duration_non_negative(self):
        with pytest.raises(ValueError):
            VideoReference(platform=VideoPlatform.VIMEO, duration_seconds=-5)


class TestSerialization:
    def test_step_omits_missing_fields(self):
        assert Step(position=1, text="Cut").to_dict() == {"position": 1, "text": "Cut"}

    def test_video_keys(self):
        ref = VideoReference(
            platform=VideoPlatform.VIMEO,
            external_id="76979871",
            embed_url="https://player.vimeo.com/video/76979871",
            duration_seconds=300,
        )

        assert ref.to_dict() == {
            "platform": "vimeo",
            "externalId": "76979871",
            "embedUrl": "https://player.vimeo.com/video/76979871",
            "durationSeconds": 300,
        }
        assert ref.has_duration

    def test_empty_report(self):
        data = ExtractionReport().to_dict()

        assert data["steps"] == []
        assert data["video"] is None
        assert data["resourceType"] == "Lesson"
        assert data["interactivityType"] == "expositive"
        assert data["timeRequired"] is None
        assert data["signals"]["wordCount"] == 0
