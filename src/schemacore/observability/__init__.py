"""Structured logging and Prometheus metrics for SchemaCore."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from .logging import configure_logging
from .metrics import METRICS, export_prometheus

__all__ = ["configure_logging", "METRICS", "export_prometheus", "set_enabled", "increment", "histogram", "timed"]

_ENABLED = True


def set_enabled(enabled: bool) -> None:
    """Globally switch metric recording on or off."""
    global _ENABLED
    _ENABLED = enabled


def increment(name: str, value: float = 1.0, labels: Optional[Dict[str, Any]] = None) -> None:
    """Increment a counter metric."""
    if _ENABLED and name in METRICS:
        metric = METRICS[name]
        if labels is not None:
            metric.labels(**labels).inc(value)
        else:
            metric.inc(value)


def histogram(name: str, value: float, labels: Optional[Dict[str, Any]] = None) -> None:
    """Observe a histogram metric."""
    if _ENABLED and name in METRICS:
        metric = METRICS[name]
        if labels is not None:
            metric.labels(**labels).observe(value)
        else:
            metric.observe(value)


@contextmanager
def timed(extractor: str) -> Iterator[None]:
    """Record the wall time of the enclosed block as an extraction duration."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram("extraction_duration_seconds", time.perf_counter() - start, {"extractor": extractor})
