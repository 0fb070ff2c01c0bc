"""Tests for error categorisation and reporting."""

import re

import pytest
from structlog.testing import capture_logs

from chunksmith.core.errors import (
    ChunkingConfigError,
    ChunkingError,
    ErrorType,
    LoggingErrorReporter,
    build_error_report,
    categorize_error,
    report_error,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "error, expected",
    [
        (ChunkingConfigError("too small"), ErrorType.CONFIG_ERROR),
        (MemoryError(), ErrorType.MEMORY_ERROR),
        (re.error("bad"), ErrorType.FORMATTING_ERROR),
        (TypeError("nope"), ErrorType.FORMATTING_ERROR),
        (IndexError("no such group"), ErrorType.FORMATTING_ERROR),
        (RuntimeError("missing environment variable"), ErrorType.CONFIG_ERROR),
        (RuntimeError("invalid chunk"), ErrorType.VALIDATION_ERROR),
        (RuntimeError("boom"), ErrorType.UNKNOWN_ERROR),
        (None, ErrorType.UNKNOWN_ERROR),
    ],
)
def test_categorize_error(error, expected):
    assert categorize_error(error) == expected


def test_config_error_hierarchy():
    assert issubclass(ChunkingConfigError, ChunkingError)
    assert issubclass(ChunkingConfigError, ValueError)


def test_build_error_report():
    report = build_error_report(TypeError("bad input"), "fixing chunk boundaries", {"chunk_count": 3})
    assert report.type == ErrorType.FORMATTING_ERROR
    assert report.context == "fixing chunk boundaries"
    assert report.message == "bad input"
    assert report.metadata == {"chunk_count": 3}
    assert report.timestamp.endswith("Z")


def test_empty_message_uses_class_name():
    assert build_error_report(MemoryError(), "ctx", {}).message == "MemoryError"


class TestLoggingErrorReporter:
    def test_formatting_error_is_warning(self):
        with capture_logs() as logs:
            LoggingErrorReporter().report(re.error("bad"), "preprocessing message", message_length=10)

        assert logs == [
            {
                "event": "chunk.error.recovered",
                "log_level": "warning",
                "context": "preprocessing message",
                "error_type": "FORMATTING_ERROR",
                "error": "bad",
                "message_length": 10,
            }
        ]

    def test_other_errors_are_errors(self):
        with capture_logs() as logs:
            LoggingErrorReporter().report(RuntimeError("boom"), "chunking message")

        assert logs[0]["event"] == "chunk.error"
        assert logs[0]["log_level"] == "error"


def test_report_error_uses_given_reporter(reporter):
    report = report_error(RuntimeError("boom"), "ctx", reporter, max_length=10)
    assert reporter.reports == [report]
    assert report.metadata == {"max_length": 10}


def test_report_error_default_reporter():
    with capture_logs() as logs:
        report = report_error(RuntimeError("boom"), "ctx")

    assert report.type == ErrorType.UNKNOWN_ERROR
    assert logs[0]["context"] == "ctx"
