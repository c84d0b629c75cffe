"""
Tests for the oEmbed metadata provider.
"""

from __future__ import annotations

import httpx
import pytest
from schemacore.observability import METRICS
from schemacore.providers import OEmbedProvider

from tests.helpers.metric_delta import metric_delta

VIMEO_URL = "https://vimeo.com/76979871"


def provider_returning(response: httpx.Response, seen=None) -> OEmbedProvider:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return response

    return OEmbedProvider(client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestEndpointFor:
    @pytest.mark.parametrize(
        "url, endpoint",
        [
            ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "https://www.youtube.com/oembed"),
            ("https://youtu.be/dQw4w9WgXcQ", "https://www.youtube.com/oembed"),
            (VIMEO_URL, "https://vimeo.com/api/oembed.json"),
            ("https://player.vimeo.com/video/76979871", "https://vimeo.com/api/oembed.json"),
        ],
    )
    def test_known_hosts(self, url, endpoint):
        assert OEmbedProvider().endpoint_for(url) == endpoint

    @pytest.mark.parametrize("url", ["https://example.com/video.mp4", "https://notvimeo.com/1", "not a url"])
    def test_unknown_hosts(self, url):
        assert OEmbedProvider().endpoint_for(url) is None

    def test_custom_endpoints(self):
        provider = OEmbedProvider(endpoints={"example.com": "https://example.com/oembed"})

        assert provider.endpoint_for("https://media.example.com/v/1") == "https://example.com/oembed"
        assert provider.endpoint_for(VIMEO_URL) is None


class TestFetch:
    def test_metadata(self):
        seen = []
        payload = {
            "type": "video",
            "title": "Moments",
            "duration": 300,
            "thumbnail_url": "https://i.vimeocdn.com/video/1.jpg",
            "author_name": "Jane Doe",
        }
        provider = provider_returning(httpx.Response(200, json=payload), seen)

        with metric_delta(METRICS["provider_lookups_total"], 1, provider="oembed", outcome="hit"):
            data = provider.fetch(VIMEO_URL)

        assert data == {
            "duration": 300,
            "thumbnail_url": "https://i.vimeocdn.com/video/1.jpg",
            "author_name": "Jane Doe",
        }
        assert str(seen[0].url).startswith("https://vimeo.com/api/oembed.json")
        assert seen[0].url.params["url"] == VIMEO_URL
        assert seen[0].url.params["format"] == "json"

    def test_unusable_fields_are_ignored(self):
        payload = {"duration": True, "thumbnail_url": "", "author_name": 7}
        provider = provider_returning(httpx.Response(200, json=payload))

        with metric_delta(METRICS["provider_lookups_total"], 1, provider="oembed", outcome="miss"):
            assert provider.fetch(VIMEO_URL) is None

    def test_negative_duration_is_dropped(self):
        provider = provider_returning(httpx.Response(200, json={"duration": -4, "author_name": "Jane"}))
        assert provider.fetch(VIMEO_URL) == {"author_name": "Jane"}

    @pytest.mark.parametrize("status", [401, 404, 503])
    def test_error_status(self, status):
        provider = provider_returning(httpx.Response(status))

        with metric_delta(METRICS["provider_lookups_total"], 1, provider="oembed", outcome="error"):
            assert provider.fetch(VIMEO_URL) is None

    def test_invalid_json(self):
        assert provider_returning(httpx.Response(200, content=b"{broken")).fetch(VIMEO_URL) is None

    def test_non_object_payload(self):
        assert provider_returning(httpx.Response(200, json=["a", "b"])).fetch(VIMEO_URL) is None

    def test_unknown_host_is_skipped(self):
        seen = []
        provider = provider_returning(httpx.Response(200, json={"duration": 1}), seen)

        with metric_delta(METRICS["provider_lookups_total"], 1, provider="oembed", outcome="skipped"):
            assert provider.fetch("https://example.com/clip") is None
        assert seen == []
