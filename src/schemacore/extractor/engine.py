"""
Extraction Engine

Composes the individual extractors into a single stateless service. Every
extractor runs inside a guard that records metrics and converts unexpected
exceptions into the extractor's empty result, so analyze() is total for any
input string.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, List, Optional, TypeVar, Union

import structlog
from structlog.contextvars import bound_contextvars

from ..observability import increment, set_enabled, timed
from ..protocols import EmbedMetadataProvider, VideoDurationProvider
from .chapters import extract_chapters
from .classifier import ContentClassifier
from .durations import format_iso_duration
from .hooks import HookRegistry
from .models import (
    Chapter,
    ClassificationSignals,
    ContentDocument,
    ExtractionReport,
    InteractivityType,
    ResourceType,
    Step,
    VideoReference,
)
from .steps import StepExtractor
from .transcript import TranscriptExtractor
from .video import VideoEmbedResolver

if TYPE_CHECKING:
    from ..config import Config, ExtractionSettings

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ExtractionEngine:
    """
    Runs every extractor over a document and assembles an ExtractionReport.

    Providers are passed in explicitly; use from_settings() to build the HTTP
    providers from configuration.
    """

    def __init__(
        self,
        settings: Optional[ExtractionSettings] = None,
        duration_provider: Optional[VideoDurationProvider] = None,
        metadata_provider: Optional[EmbedMetadataProvider] = None,
        hooks: Optional[HookRegistry] = None,
    ) -> None:
        if settings is None:
            from ..config import ExtractionSettings

            settings = ExtractionSettings()

        self.settings = settings
        self.hooks = hooks if hooks is not None else HookRegistry()
        self.video = VideoEmbedResolver(duration_provider=duration_provider, metadata_provider=metadata_provider)
        self.steps = StepExtractor(text_max_length=settings.step_text_max_length)
        self.transcripts = TranscriptExtractor(
            max_length=settings.transcript_max_length,
            min_length=settings.transcript_min_length,
        )
        self.classifier = ContentClassifier(
            reading_wpm=settings.reading_words_per_minute,
            video_dominance_ratio=settings.video_dominance_ratio,
        )
        self._closeables: List[Any] = []

    @classmethod
    def from_settings(cls, config: Optional[Config] = None, hooks: Optional[HookRegistry] = None) -> ExtractionEngine:
        """Build an engine with YouTube Data API and oEmbed providers configured from settings."""
        from ..providers import OEmbedProvider, YouTubeDataProvider

        if config is None:
            from ..config import settings as config

        set_enabled(config.monitoring.metrics_enabled)
        provider_settings = config.providers

        api_key = provider_settings.youtube_api_key
        duration_provider = YouTubeDataProvider(
            api_key=api_key.get_secret_value() if api_key else None,
            timeout=provider_settings.timeout_seconds,
            endpoint=provider_settings.youtube_api_endpoint,
        )
        metadata_provider = None
        if provider_settings.enable_oembed:
            metadata_provider = OEmbedProvider(
                endpoints=provider_settings.oembed_endpoints,
                timeout=provider_settings.timeout_seconds,
                user_agent=provider_settings.user_agent,
            )

        engine = cls(
            settings=config.extraction,
            duration_provider=duration_provider,
            metadata_provider=metadata_provider,
            hooks=hooks,
        )
        engine._closeables = [p for p in (duration_provider, metadata_provider) if p is not None]
        logger.info(
            "Extraction engine configured",
            youtube_api=duration_provider.is_available(),
            oembed=metadata_provider is not None,
        )
        return engine

    def close(self) -> None:
        for provider in self._closeables:
            provider.close()
        self._closeables = []

    def __enter__(self) -> ExtractionEngine:
        return self

    def __exit__(self, exc_type: Optional[type], exc_val: Optional[BaseException], exc_tb: Optional[object]) -> None:
        self.close()

    def _run(self, name: str, func: Callable[[], T], default: T, document: ContentDocument) -> T:
        """Run one extractor with timing, error containment and post-processing hooks."""
        with timed(name):
            try:
                value = func()
            except Exception as e:
                logger.error("Extractor failed", extractor=name, error=str(e), exc_info=True)
                increment("extractions_total", labels={"extractor": name, "outcome": "error"})
                return default

        outcome = "found" if value else "empty"
        increment("extractions_total", labels={"extractor": name, "outcome": outcome})
        return self.hooks.apply(name, value, document)

    def extract_steps(self, content: Union[ContentDocument, str]) -> List[Step]:
        document = ContentDocument.of(content)
        return self._run("steps", lambda: self.steps.extract(document.raw), [], document)

    def extract_video(
        self,
        content: Union[ContentDocument, str],
        resolve: bool = True,
        principal_image: Optional[str] = None,
    ) -> Optional[VideoReference]:
        document = ContentDocument.of(content)

        def find() -> Optional[VideoReference]:
            ref = self.video.extract_video(document.raw)
            if ref is not None and resolve:
                ref = self.video.resolve(ref, principal_image=principal_image)
            return ref

        return self._run("video", find, None, document)

    def extract_chapters(
        self,
        content: Union[ContentDocument, str],
        video_ref: Optional[VideoReference] = None,
        permalink: Optional[str] = None,
    ) -> List[Chapter]:
        document = ContentDocument.of(content)
        return self._run(
            "chapters",
            lambda: extract_chapters(
                document.raw, video_ref, permalink=permalink, min_matches=self.settings.min_chapter_matches
            ),
            [],
            document,
        )

    def extract_transcript(self, content: Union[ContentDocument, str]) -> Optional[str]:
        document = ContentDocument.of(content)
        return self._run("transcript", lambda: self.transcripts.extract(document.raw), None, document)

    def analyze(
        self,
        content: Union[ContentDocument, str, None],
        permalink: Optional[str] = None,
        principal_image: Optional[str] = None,
        resolve_video: bool = True,
    ) -> ExtractionReport:
        """
        Run every extractor once over content.

        Args:
            content: Raw markup or an existing ContentDocument
            permalink: Page URL used for chapter deep links
            principal_image: Last-resort video thumbnail
            resolve_video: Query the duration/metadata providers for the video

        Returns:
            ExtractionReport with all extracted values
        """
        document = ContentDocument.of(content)

        with bound_contextvars(document_id=permalink or f"len:{len(document)}"):
            steps = self.extract_steps(document)
            video = self.extract_video(document, resolve=resolve_video, principal_image=principal_image)
            chapters = self.extract_chapters(document, video, permalink)
            transcript = self.extract_transcript(document)

            signals = self._run(
                "signals", lambda: self.classifier.compute_signals(document), ClassificationSignals(), document
            )
            resource_type = self._run(
                "resource_type",
                lambda: self.classifier.classify_resource_type(video, signals),
                ResourceType.LESSON,
                document,
            )
            interactivity = self._run(
                "interactivity",
                lambda: self.classifier.classify_interactivity(video, signals),
                InteractivityType.EXPOSITIVE,
                document,
            )

            def time_required() -> Optional[str]:
                minutes = self.classifier.estimate_time_required(document, video)
                return format_iso_duration(minutes * 60) if minutes > 0 else None

            required = self._run("time_required", time_required, None, document)

            logger.debug(
                "Document analyzed",
                steps=len(steps),
                video=video.platform.value if video else None,
                chapters=len(chapters),
                resource_type=getattr(resource_type, "value", resource_type),
            )

        return ExtractionReport(
            steps=steps,
            video=video,
            chapters=chapters,
            transcript=transcript,
            signals=signals,
            resource_type=resource_type,
            interactivity_type=interactivity,
            time_required=required,
        )
