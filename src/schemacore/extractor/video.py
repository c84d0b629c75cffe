"""
Video Embed Resolver - detects embedded videos and enriches them.

Recognition is a priority-ordered list of regex alternatives per platform
(YouTube, then Vimeo, then generic embed blocks). Enrichment consults the
injected duration and embed-metadata providers; both are best-effort.
"""

from __future__ import annotations

import dataclasses
import math
import re
from typing import Any, Dict, Optional

import structlog

from ..protocols import EmbedMetadataProvider, VideoDurationProvider
from .models import VideoPlatform, VideoReference

logger = structlog.get_logger(__name__)

YOUTUBE_ID = r"([a-zA-Z0-9_-]{11})"

YOUTUBE_PATTERNS = (
    # Watch URLs
    re.compile(rf"(?:https?://)?(?:www\.)?youtube\.com/watch\?v={YOUTUBE_ID}"),
    # Short links
    re.compile(rf"(?:https?://)?youtu\.be/{YOUTUBE_ID}"),
    # Embed URLs
    re.compile(rf"(?:https?://)?(?:www\.)?youtube\.com/embed/{YOUTUBE_ID}"),
    # Privacy-enhanced embeds inside iframes
    re.compile(
        rf"<iframe[^>]+src=[\"'](?:https?://)?(?:www\.)?youtube(?:-nocookie)?\.com/embed/{YOUTUBE_ID}[^\"']*[\"'][^>]*>",
        re.IGNORECASE,
    ),
    # Embed block comments
    re.compile(
        r'<!-- wp:embed \{"url":"https?://(?:www\.)?(?:youtube\.com/watch\?v=|youtu\.be/)'
        rf'{YOUTUBE_ID}[^"]*","type":"video","providerNameSlug":"youtube"'
    ),
    re.compile(
        r'<!-- wp:core-embed/youtube \{"url":"https?://(?:www\.)?(?:youtube\.com/watch\?v=|youtu\.be/)'
        rf"{YOUTUBE_ID}"
    ),
)

VIMEO_PATTERNS = (
    re.compile(r"(?:https?://)?(?:www\.)?vimeo\.com/(\d+)"),
    re.compile(r"(?:https?://)?player\.vimeo\.com/video/(\d+)"),
    re.compile(
        r"<iframe[^>]+src=[\"'](?:https?://)?player\.vimeo\.com/video/(\d+)[^\"']*[\"'][^>]*>",
        re.IGNORECASE,
    ),
    re.compile(r'<!-- wp:embed \{"url":"https?://(?:www\.)?vimeo\.com/(\d+)[^"]*","type":"video","providerNameSlug":"vimeo"'),
)

GENERIC_EMBED_PATTERN = re.compile(r'<!-- wp:embed \{"url":"([^"]+)"[^}]*"type":"video"')


def youtube_reference(video_id: str) -> VideoReference:
    return VideoReference(
        platform=VideoPlatform.YOUTUBE,
        external_id=video_id,
        embed_url=f"https://www.youtube.com/embed/{video_id}",
        content_url=f"https://www.youtube.com/watch?v={video_id}",
        thumbnail_url=f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg",
    )


def vimeo_reference(video_id: str) -> VideoReference:
    # Vimeo has no predictable thumbnail URL; oEmbed supplies it
    return VideoReference(
        platform=VideoPlatform.VIMEO,
        external_id=video_id,
        embed_url=f"https://player.vimeo.com/video/{video_id}",
        content_url=f"https://vimeo.com/{video_id}",
    )


def match_youtube(content: str) -> Optional[VideoReference]:
    for pattern in YOUTUBE_PATTERNS:
        match = pattern.search(content)
        if match:
            return youtube_reference(match.group(1))
    return None


def match_vimeo(content: str) -> Optional[VideoReference]:
    for pattern in VIMEO_PATTERNS:
        match = pattern.search(content)
        if match:
            return vimeo_reference(match.group(1))
    return None


def match_generic_embed(content: str) -> Optional[VideoReference]:
    match = GENERIC_EMBED_PATTERN.search(content)
    if not match:
        return None

    url = match.group(1).replace("\\/", "/")
    if "youtube" in url or "youtu.be" in url:
        return match_youtube(url)
    if "vimeo" in url:
        return match_vimeo(url)
    return VideoReference(platform=VideoPlatform.GENERIC, embed_url=url, content_url=url)


def extract_video(content: str) -> Optional[VideoReference]:
    """Find the first embedded video in content: YouTube, then Vimeo, then generic embeds."""
    if not content:
        return None
    return match_youtube(content) or match_vimeo(content) or match_generic_embed(content)


class VideoEmbedResolver:
    """
    Detects embedded videos and resolves their duration, thumbnail and author.

    Providers are injected; either may be None, in which case that lookup is
    simply skipped.
    """

    def __init__(
        self,
        duration_provider: Optional[VideoDurationProvider] = None,
        metadata_provider: Optional[EmbedMetadataProvider] = None,
    ) -> None:
        self.duration_provider = duration_provider
        self.metadata_provider = metadata_provider

    def extract_video(self, content: str) -> Optional[VideoReference]:
        return extract_video(content)

    def resolve_duration(self, ref: Optional[VideoReference]) -> int:
        """Best-effort duration in seconds; 0 when no source knows it."""
        if ref is None:
            return 0
        duration = self._authoritative_duration(ref)
        if duration > 0:
            return duration
        metadata = self._fetch_metadata(ref)
        return metadata.get("duration", 0) if metadata else 0

    def resolve(
        self,
        ref: VideoReference,
        thumbnail: Optional[str] = None,
        principal_image: Optional[str] = None,
    ) -> VideoReference:
        """
        Return a copy of ref with duration, thumbnail and author filled in.

        Thumbnail order: explicit value, the platform default already on the
        reference, embed metadata, then the document's principal image. Each
        provider is called at most once.
        """
        duration = ref.duration_seconds or self._authoritative_duration(ref)
        thumbnail_url = thumbnail or ref.thumbnail_url
        author_name = ref.author_name

        metadata: Optional[Dict[str, Any]] = None
        if not duration or not thumbnail_url or not author_name:
            metadata = self._fetch_metadata(ref)

        if metadata:
            if not duration and metadata.get("duration"):
                duration = metadata["duration"]
            if not thumbnail_url and metadata.get("thumbnail_url"):
                thumbnail_url = metadata["thumbnail_url"]
            if not author_name and metadata.get("author_name"):
                author_name = metadata["author_name"]

        thumbnail_url = thumbnail_url or principal_image

        return dataclasses.replace(
            ref,
            duration_seconds=duration or None,
            thumbnail_url=thumbnail_url,
            author_name=author_name,
        )

    def _authoritative_duration(self, ref: VideoReference) -> int:
        provider = self.duration_provider
        if provider is None or ref.platform is not VideoPlatform.YOUTUBE or not ref.external_id:
            return 0
        try:
            if not provider.is_available():
                return 0
            return max(int(provider.get_video_duration(ref.external_id) or 0), 0)
        except Exception as e:
            logger.warning("Duration provider failed", video_id=ref.external_id, error=str(e))
            return 0

    def _fetch_metadata(self, ref: VideoReference) -> Optional[Dict[str, Any]]:
        provider = self.metadata_provider
        if provider is None or not ref.content_url:
            return None
        try:
            data = provider.fetch(ref.content_url)
        except Exception as e:
            logger.warning("Embed metadata provider failed", url=ref.content_url, error=str(e))
            return None
        if not isinstance(data, dict):
            return None

        metadata = dict(data)
        duration = metadata.pop("duration", None)
        if isinstance(duration, (int, float)) and not isinstance(duration, bool) and 0 < duration < math.inf:
            metadata["duration"] = int(duration)
        elif duration is not None:
            logger.debug("Ignoring unusable embed duration", url=ref.content_url, duration=repr(duration))
        return metadata
