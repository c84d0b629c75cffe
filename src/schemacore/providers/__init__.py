"""HTTP-backed implementations of the engine's external collaborators."""

from .oembed import OEmbedProvider
from .youtube import YouTubeDataProvider, extract_youtube_id

__all__ = ["OEmbedProvider", "YouTubeDataProvider", "extract_youtube_id"]
