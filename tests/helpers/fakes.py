"""In-memory fakes for the external video collaborators."""

from typing import Any, Dict, List, Optional


class FakeDurationProvider:
    """Duration provider returning canned values and recording calls."""

    def __init__(self, durations: Optional[Dict[str, int]] = None, available: bool = True) -> None:
        self.durations = durations or {}
        self.available = available
        self.calls: List[str] = []

    def is_available(self) -> bool:
        return self.available

    def get_video_duration(self, external_id: str) -> int:
        self.calls.append(external_id)
        return self.durations.get(external_id, 0)


class FakeMetadataProvider:
    """Embed metadata provider returning a canned payload and recording calls."""

    def __init__(self, payload: Optional[Dict[str, Any]] = None) -> None:
        self.payload = payload
        self.calls: List[str] = []

    def fetch(self, url: str) -> Optional[Dict[str, Any]]:
        self.calls.append(url)
        return self.payload


class ExplodingProvider:
    """A provider whose every call raises."""

    def is_available(self) -> bool:
        return True

    def get_video_duration(self, external_id: str) -> int:
        raise RuntimeError("provider exploded")

    def fetch(self, url: str) -> Optional[Dict[str, Any]]:
        raise RuntimeError("provider exploded")
