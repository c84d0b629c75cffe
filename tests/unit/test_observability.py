"""
Tests for structured logging setup and metric helpers.
"""

from __future__ import annotations

import json
import logging

import structlog
from schemacore.config import MonitoringConfig
from schemacore.observability import METRICS, configure_logging, export_prometheus, increment, set_enabled, timed
from structlog.contextvars import bound_contextvars

from tests.helpers.metric_delta import histogram_count, metric_delta


def test_json_log_file(tmp_path, isolated_logging):
    log_file = tmp_path / "logs" / "schemacore.jsonl"
    configure_logging(MonitoringConfig(log_level="INFO", log_file=str(log_file)))

    with bound_contextvars(document_id="https://example.com/lesson"):
        structlog.get_logger("schemacore.test").info("Document analyzed", steps=3)
    for handler in logging.getLogger().handlers:
        handler.flush()

    records = [json.loads(line) for line in log_file.read_text().splitlines()]
    record = next(r for r in records if r["event"] == "Document analyzed")
    assert record["steps"] == 3
    assert record["level"] == "info"
    assert record["document_id"] == "https://example.com/lesson"
    assert "timestamp" in record


def test_log_level_is_applied(isolated_logging):
    configure_logging(MonitoringConfig(log_level="WARNING"))
    assert logging.getLogger().level == logging.WARNING


def test_increment_labeled_counter():
    with metric_delta(METRICS["extractions_total"], 2, extractor="steps", outcome="found"):
        increment("extractions_total", labels={"extractor": "steps", "outcome": "found"})
        increment("extractions_total", labels={"extractor": "steps", "outcome": "found"})


def test_unknown_metric_is_ignored():
    increment("no_such_metric")


def test_disabled_recording():
    set_enabled(False)
    with metric_delta(METRICS["extractions_total"], 0, extractor="video", outcome="found"):
        increment("extractions_total", labels={"extractor": "video", "outcome": "found"})


def test_timed_observes_histogram():
    histogram = METRICS["extraction_duration_seconds"]
    before = histogram_count(histogram, extractor="timed-block")

    with timed("timed-block"):
        pass

    assert histogram_count(histogram, extractor="timed-block") == before + 1


def test_export_prometheus():
    increment("provider_lookups_total", labels={"provider": "oembed", "outcome": "hit"})
    exported = export_prometheus()

    assert "schemacore_extractions_total" in exported
    assert "schemacore_provider_lookups_total" in exported
