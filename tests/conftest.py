"""Global test configuration for chunksmith tests."""

import pytest
import structlog

from chunksmith.core.config import SETTINGS
from chunksmith.core.errors import ErrorReport, build_error_report


class RecordingReporter:
    """Error reporter that keeps every report for inspection."""

    def __init__(self):
        self.reports: list[ErrorReport] = []

    def report(self, error, context, **metadata):
        report = build_error_report(error, context, metadata)
        self.reports.append(report)
        return report


@pytest.fixture
def reporter():
    """Recording error reporter."""
    return RecordingReporter()


@pytest.fixture(autouse=True)
def restore_settings_and_logging():
    """CLI runs rewrite SETTINGS and reconfigure structlog; undo both."""
    snapshot = SETTINGS.model_dump()
    yield
    for key, value in snapshot.items():
        setattr(SETTINGS, key, value)
    structlog.reset_defaults()
