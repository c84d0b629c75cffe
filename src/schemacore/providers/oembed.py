"""
oEmbed metadata provider for embedded media URLs.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx
import structlog

from ..observability import increment

logger = structlog.get_logger(__name__)

DEFAULT_ENDPOINTS: Dict[str, str] = {
    "youtube.com": "https://www.youtube.com/oembed",
    "youtu.be": "https://www.youtube.com/oembed",
    "vimeo.com": "https://vimeo.com/api/oembed.json",
}


class OEmbedProvider:
    """
    Fetches oEmbed metadata (duration, thumbnail, author) for a media URL.

    The provider endpoint is chosen by matching the URL host against the
    configured host suffixes. Unknown hosts, HTTP errors and malformed
    payloads all yield None.
    """

    name = "oembed"

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        endpoints: Optional[Mapping[str, str]] = None,
        timeout: float = 5.0,
        user_agent: Optional[str] = None,
    ) -> None:
        headers = {"User-Agent": user_agent} if user_agent else None
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True, headers=headers)
        self.endpoints = dict(endpoints if endpoints is not None else DEFAULT_ENDPOINTS)
        self.timeout = timeout

    def endpoint_for(self, url: str) -> Optional[str]:
        """Return the oEmbed endpoint serving a media URL, if any."""
        try:
            host = httpx.URL(url).host.lower()
        except (httpx.InvalidURL, TypeError):
            return None
        if not host:
            return None
        for suffix, endpoint in self.endpoints.items():
            if host == suffix or host.endswith(f".{suffix}"):
                return endpoint
        return None

    def fetch(self, url: str) -> Optional[Dict[str, Any]]:
        endpoint = self.endpoint_for(url)
        if not endpoint:
            logger.debug("No oEmbed provider for URL", url=url)
            increment("provider_lookups_total", labels={"provider": self.name, "outcome": "skipped"})
            return None

        try:
            response = self._client.get(endpoint, params={"url": url, "format": "json"}, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.warning("oEmbed request failed", url=url, endpoint=endpoint, error=str(e))
            increment("provider_lookups_total", labels={"provider": self.name, "outcome": "error"})
            return None
        except ValueError as e:
            logger.warning("oEmbed returned invalid JSON", url=url, error=str(e))
            increment("provider_lookups_total", labels={"provider": self.name, "outcome": "error"})
            return None

        if not isinstance(payload, dict):
            increment("provider_lookups_total", labels={"provider": self.name, "outcome": "miss"})
            return None

        data: Dict[str, Any] = {}
        duration = payload.get("duration")
        if isinstance(duration, (int, float)) and not isinstance(duration, bool) and duration > 0:
            data["duration"] = int(duration)
        for key in ("thumbnail_url", "author_name"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                data[key] = value

        increment("provider_lookups_total", labels={"provider": self.name, "outcome": "hit" if data else "miss"})
        return data or None

    def close(self) -> None:
        """Close the underlying HTTP client if it was created internally."""
        if self._owns_client and not self._client.is_closed:
            self._client.close()
