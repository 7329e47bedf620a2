"""
Tests for structured logging.
"""
import json
import logging

import pytest

from analyst.core.logging import (
    CorrelationIdFilter,
    JSONFormatter,
    TextFormatter,
    build_logging_config,
    correlation_id_var,
)


def make_record(message="Generated 4 charts", **extra):
    record = logging.LogRecord("analyst.services.engine", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
def test_filter_stamps_current_correlation_id():
    record = make_record()
    token = correlation_id_var.set("req-42")
    try:
        assert CorrelationIdFilter().filter(record) is True
    finally:
        correlation_id_var.reset(token)

    assert record.correlation_id == "req-42"


@pytest.mark.unit
def test_filter_defaults_to_system():
    record = make_record()
    CorrelationIdFilter().filter(record)
    assert record.correlation_id == "system"


@pytest.mark.unit
def test_json_formatter_includes_extras():
    record = make_record(correlation_id="abc", duration=0.25)

    data = json.loads(JSONFormatter().format(record))

    assert data["level"] == "INFO"
    assert data["message"] == "Generated 4 charts"
    assert data["logger"] == "analyst.services.engine"
    assert data["correlation_id"] == "abc"
    assert data["duration"] == 0.25
    assert data["timestamp"].endswith("Z")


@pytest.mark.unit
def test_text_formatter():
    line = TextFormatter().format(make_record())
    assert "[system] - Generated 4 charts" in line
    assert " - INFO - " in line


@pytest.mark.unit
def test_logging_config_selects_formatter():
    assert build_logging_config("debug", "json")["handlers"]["console"]["formatter"] == "json"
    config = build_logging_config("info", "text")
    assert config["handlers"]["console"]["formatter"] == "text"
    assert config["root"]["level"] == "INFO"
