"""
Tests for the YouTube Data API duration provider.
"""

from __future__ import annotations

from typing import List

import httpx
import pytest
from schemacore.observability import METRICS
from schemacore.providers import YouTubeDataProvider, extract_youtube_id

from tests.helpers.metric_delta import metric_delta

VIDEO_ID = "dQw4w9WgXcQ"
PROVIDER = YouTubeDataProvider.name


class Recorder:
    """MockTransport handler that records requests and replays a canned response."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response


def provider_for(handler, api_key="test-key") -> YouTubeDataProvider:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return YouTubeDataProvider(api_key=api_key, client=client)


def items(duration="PT3M32S", **extra):
    return {"items": [{"contentDetails": {"duration": duration}, **extra}]}


class TestDuration:
    def test_lookup(self):
        handler = Recorder(httpx.Response(200, json=items()))
        provider = provider_for(handler)

        with metric_delta(METRICS["provider_lookups_total"], 1, provider=PROVIDER, outcome="hit"):
            assert provider.get_video_duration(VIDEO_ID) == 212

        params = handler.requests[0].url.params
        assert params["id"] == VIDEO_ID
        assert params["part"] == "contentDetails"
        assert params["key"] == "test-key"

    def test_results_are_memoised(self):
        handler = Recorder(httpx.Response(200, json=items()))
        provider = provider_for(handler)

        provider.get_video_duration(VIDEO_ID)
        provider.get_video_duration(f"https://youtu.be/{VIDEO_ID}")

        assert len(handler.requests) == 1

    def test_unavailable_without_key(self):
        handler = Recorder(httpx.Response(200, json=items()))
        provider = provider_for(handler, api_key=None)

        assert not provider.is_available()
        with metric_delta(METRICS["provider_lookups_total"], 1, provider=PROVIDER, outcome="skipped"):
            assert provider.get_video_duration(VIDEO_ID) == 0
        assert handler.requests == []

    @pytest.mark.parametrize("status", [400, 403, 404, 500])
    def test_error_status(self, status):
        handler = Recorder(httpx.Response(status, json={"error": {"code": status}}))
        provider = provider_for(handler)

        with metric_delta(METRICS["provider_lookups_total"], 1, provider=PROVIDER, outcome="error"):
            assert provider.get_video_duration(VIDEO_ID) == 0

        provider.get_video_duration(VIDEO_ID)
        assert len(handler.requests) == 1

    def test_invalid_json(self):
        provider = provider_for(Recorder(httpx.Response(200, content=b"<html>not json</html>")))
        assert provider.get_video_duration(VIDEO_ID) == 0

    def test_no_items(self):
        provider = provider_for(Recorder(httpx.Response(200, json={"items": []})))

        with metric_delta(METRICS["provider_lookups_total"], 1, provider=PROVIDER, outcome="miss"):
            assert provider.get_video_duration(VIDEO_ID) == 0

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("network down", request=request)

        assert provider_for(handler).get_video_duration(VIDEO_ID) == 0

    def test_unrecognised_id_skips_request(self):
        handler = Recorder(httpx.Response(200, json=items()))

        assert provider_for(handler).get_video_duration("nope") == 0
        assert handler.requests == []


def test_video_details():
    snippet = {
        "title": "Never Gonna Give You Up",
        "channelTitle": "Rick Astley",
        "thumbnails": {"high": {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/hqdefault.jpg"}},
    }
    handler = Recorder(httpx.Response(200, json=items(snippet=snippet)))
    details = provider_for(handler).get_video_details(VIDEO_ID)

    assert details["title"] == "Never Gonna Give You Up"
    assert details["channel"] == "Rick Astley"
    assert details["duration_seconds"] == 212
    assert details["thumbnail"].endswith("hqdefault.jpg")
    assert handler.requests[0].url.params["part"] == "contentDetails,snippet"


def test_close_respects_injected_client():
    client = httpx.Client(transport=httpx.MockTransport(Recorder(httpx.Response(200))))
    YouTubeDataProvider(api_key="k", client=client).close()
    assert not client.is_closed

    owned = YouTubeDataProvider(api_key="k")
    owned.close()
    assert owned._client.is_closed


@pytest.mark.parametrize(
    "value",
    [
        VIDEO_ID,
        f"https://www.youtube.com/watch?v={VIDEO_ID}",
        f"https://www.youtube.com/watch?feature=share&v={VIDEO_ID}",
        f"https://youtu.be/{VIDEO_ID}",
        f"https://www.youtube.com/embed/{VIDEO_ID}",
        f"https://www.youtube.com/live/{VIDEO_ID}",
    ],
)
def test_extract_youtube_id(value):
    assert extract_youtube_id(value) == VIDEO_ID


def test_extract_youtube_id_rejects_other_values():
    assert extract_youtube_id("") is None
    assert extract_youtube_id("https://vimeo.com/76979871") is None


def test_memo_is_bounded():
    handler = Recorder(httpx.Response(200, json=items()))
    client = httpx.Client(transport=httpx.MockTransport(handler))
    provider = YouTubeDataProvider(api_key="test-key", client=client, cache_size=1)

    provider.get_video_duration(VIDEO_ID)
    provider.get_video_duration("aaaaaaaaaaa")
    provider.get_video_duration(VIDEO_ID)

    assert [r.url.params["id"] for r in handler.requests] == [VIDEO_ID, "aaaaaaaaaaa", VIDEO_ID]
