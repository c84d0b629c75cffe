"""
Protocols for the external collaborators of the extraction engine.

The engine only ever talks to these two narrow interfaces; concrete HTTP
implementations live in schemacore.providers and tests use fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .extractor.models import ContentDocument


@runtime_checkable
class VideoDurationProvider(Protocol):
    """Authoritative duration lookup (e.g. the YouTube Data API)."""

    def is_available(self) -> bool:
        """Whether the provider is configured. Must not raise on missing credentials."""
        ...

    def get_video_duration(self, external_id: str) -> int:
        """
        Look up a video's duration.

        Args:
            external_id: Platform video id

        Returns:
            Duration in seconds, 0 if unknown
        """
        ...


@runtime_checkable
class EmbedMetadataProvider(Protocol):
    """Generic oEmbed-style metadata lookup for a media URL."""

    def fetch(self, url: str) -> Optional[Dict[str, Any]]:
        """
        Fetch embed metadata.

        Returns:
            A mapping with any of duration, thumbnail_url, author_name; or None
        """
        ...


# A post-processing hook receives the extracted value and the source
# document and returns the (possibly replaced) value.
PostProcessor = Callable[[Any, "ContentDocument"], Any]
