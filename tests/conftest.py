"""
Test configuration for SchemaCore.

Provides sample content documents and fixtures wrapping the in-memory fakes
for the two external collaborators (video duration lookup and embed
metadata fetch).
"""

import logging

import pytest
import structlog
from schemacore.observability import set_enabled

from tests.helpers.fakes import FakeDurationProvider, FakeMetadataProvider

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "network: Tests requiring network access")


@pytest.fixture(autouse=True)
def metrics_enabled():
    """Every test starts with metric recording switched on."""
    set_enabled(True)
    yield
    set_enabled(True)


# ============================================================================
# Provider Fixtures
# ============================================================================


@pytest.fixture
def duration_provider() -> FakeDurationProvider:
    return FakeDurationProvider({"dQw4w9WgXcQ": 212})


@pytest.fixture
def metadata_provider() -> FakeMetadataProvider:
    return FakeMetadataProvider(
        {"duration": 300, "thumbnail_url": "https://i.vimeocdn.com/video/1.jpg", "author_name": "Jane Doe"}
    )


# ============================================================================
# Sample Content
# ============================================================================


@pytest.fixture
def youtube_lesson() -> str:
    return (
        "<p>Welcome to the lesson.</p>\n"
        '<iframe width="560" height="315" src="https://www.youtube.com/embed/dQw4w9WgXcQ" '
        'frameborder="0" allowfullscreen></iframe>\n'
        "<p>Chapters:</p>\n"
        "0:00 Introduction<br>\n"
        "1:30 Setting up the project<br>\n"
        "05:10 Wrapping up\n"
    )


@pytest.fixture
def ordered_list_howto() -> str:
    return (
        "<p>Follow these steps.</p>"
        "<ol>"
        '<li><strong>Prepare</strong> Gather the screws and the drill.<img src="https://example.com/prep.jpg"></li>'
        "<li>Mark the holes on the wall.</li>"
        "<li>Drill the holes.</li>"
        "</ol>"
    )


@pytest.fixture
def long_reading() -> str:
    paragraph = "<p>" + " ".join(["knowledge"] * 120) + "</p>"
    return "<h2>Background</h2>" + paragraph * 3 + "<h2>Analysis</h2>" + paragraph * 2


# ============================================================================
# Logging Isolation
# ============================================================================


@pytest.fixture
def isolated_logging():
    """Restore root logging handlers and structlog defaults after configure_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
