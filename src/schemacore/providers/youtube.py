"""
YouTube Data API v3 duration provider.
"""
from __future__ import annotations

import re
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx
import structlog

from ..extractor.durations import iso_duration_to_seconds
from ..observability import increment

logger = structlog.get_logger(__name__)

DEFAULT_ENDPOINT = "https://www.googleapis.com/youtube/v3/videos"
DEFAULT_CACHE_SIZE = 1024

VIDEO_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{11}$")
VIDEO_URL_PATTERNS = (
    re.compile(r"youtube\.com/watch\?(?:[^#\s]*&)?v=([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtu\.be/([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube\.com/embed/([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube\.com/live/([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube-nocookie\.com/embed/([a-zA-Z0-9_-]{11})"),
)


def extract_youtube_id(value: str) -> Optional[str]:
    """Return the 11-character video id from a bare id or any common YouTube URL form."""
    if not value:
        return None
    value = value.strip()
    if VIDEO_ID_PATTERN.match(value):
        return value
    for pattern in VIDEO_URL_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(1)
    return None


class YouTubeDataProvider:
    """
    Looks up video durations through the YouTube Data API.

    Without an API key the provider reports itself unavailable and every
    lookup returns 0 without touching the network. Results, including
    failures, are memoised per instance in an LRU cache of cache_size ids, so a
    cached id costs no further request.
    """

    name = "youtube_data_api"

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
        endpoint: str = DEFAULT_ENDPOINT,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> None:
        self._api_key = api_key or None
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self.timeout = timeout
        self.endpoint = endpoint
        self._cached_duration = lru_cache(maxsize=cache_size)(self._lookup_duration)

    def is_available(self) -> bool:
        return bool(self._api_key)

    def get_video_duration(self, external_id: str) -> int:
        if not self.is_available():
            increment("provider_lookups_total", labels={"provider": self.name, "outcome": "skipped"})
            return 0

        video_id = extract_youtube_id(external_id)
        if not video_id:
            return 0

        return self._cached_duration(video_id)

    def _lookup_duration(self, video_id: str) -> int:
        item = self._fetch_item(video_id, part="contentDetails")
        duration = 0
        if item:
            duration = iso_duration_to_seconds(item.get("contentDetails", {}).get("duration", ""))

        increment(
            "provider_lookups_total",
            labels={"provider": self.name, "outcome": "hit" if duration else "miss"},
        )
        return duration

    def get_video_details(self, external_id: str) -> Optional[Dict[str, Any]]:
        """Fetch title, channel, thumbnail and duration for a video, or None."""
        if not self.is_available():
            return None

        video_id = extract_youtube_id(external_id)
        if not video_id:
            return None

        item = self._fetch_item(video_id, part="contentDetails,snippet")
        if not item:
            return None

        snippet = item.get("snippet", {})
        thumbnails = snippet.get("thumbnails", {})
        duration_iso = item.get("contentDetails", {}).get("duration", "PT0S")
        thumbnail = (thumbnails.get("high") or thumbnails.get("default") or {}).get("url", "")

        return {
            "id": video_id,
            "title": snippet.get("title", ""),
            "description": snippet.get("description", ""),
            "duration_seconds": iso_duration_to_seconds(duration_iso),
            "duration_iso": duration_iso,
            "thumbnail": thumbnail,
            "channel": snippet.get("channelTitle", ""),
            "published_at": snippet.get("publishedAt", ""),
        }

    def _fetch_item(self, video_id: str, part: str) -> Optional[Dict[str, Any]]:
        """Request a single video resource. Any failure is logged and returns None."""
        params = {"id": video_id, "part": part, "key": self._api_key}
        try:
            response = self._client.get(
                self.endpoint,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "YouTube API returned an error status", video_id=video_id, status=e.response.status_code
            )
            increment("provider_lookups_total", labels={"provider": self.name, "outcome": "error"})
            return None
        except httpx.HTTPError as e:
            logger.warning("YouTube API request failed", video_id=video_id, error=str(e))
            increment("provider_lookups_total", labels={"provider": self.name, "outcome": "error"})
            return None
        except ValueError as e:
            logger.warning("YouTube API returned invalid JSON", video_id=video_id, error=str(e))
            increment("provider_lookups_total", labels={"provider": self.name, "outcome": "error"})
            return None

        items = data.get("items") if isinstance(data, dict) else None
        if not items or not isinstance(items[0], dict):
            logger.debug("YouTube API returned no items", video_id=video_id)
            return None
        return items[0]

    def close(self) -> None:
        """Close the underlying HTTP client if it was created internally."""
        if self._owns_client and not self._client.is_closed:
            self._client.close()
