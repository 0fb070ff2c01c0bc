"""Error taxonomy and the error-reporting channel used by the chunking engine.

Formatting failures inside the preprocessor, the reference formatter and the
boundary repair engine are recoverable: the caller gets its input back and the
failure goes to an ``ErrorReporter``. Validation reports failures as ``False``.
Configuration errors are raised as ``ChunkingConfigError``.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from pydantic import BaseModel, Field

from .logging import log


class ChunkingError(Exception):
    """Base class for errors surfaced to callers of the chunking engine."""

    pass


class ChunkingConfigError(ChunkingError, ValueError):
    """Raised when the configured limits leave no room for chunk content."""

    pass


class ErrorType(str, Enum):
    """Categories for reported errors."""

    FORMATTING_ERROR = "FORMATTING_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    MEMORY_ERROR = "MEMORY_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ErrorReport(BaseModel):
    """Structured record of one reported failure."""

    type: ErrorType
    context: str = Field(..., description="Operation that failed")
    message: str
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    metadata: Dict[str, Any] = Field(default_factory=dict)


def categorize_error(error: Optional[BaseException]) -> ErrorType:
    """Categorize an error by its class, falling back to its message."""
    if error is None:
        return ErrorType.UNKNOWN_ERROR
    if isinstance(error, ChunkingConfigError):
        return ErrorType.CONFIG_ERROR
    if isinstance(error, MemoryError):
        return ErrorType.MEMORY_ERROR
    if isinstance(error, (re.error, TypeError, AttributeError, IndexError)):
        return ErrorType.FORMATTING_ERROR

    message = str(error).lower()
    if "config" in message or "environment" in message:
        return ErrorType.CONFIG_ERROR
    if "validation" in message or "invalid" in message:
        return ErrorType.VALIDATION_ERROR
    return ErrorType.UNKNOWN_ERROR


def build_error_report(
    error: BaseException, context: str, metadata: Dict[str, Any]
) -> ErrorReport:
    return ErrorReport(
        type=categorize_error(error),
        context=context,
        message=str(error) or error.__class__.__name__,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        metadata=metadata,
    )


class ErrorReporter(Protocol):
    """Collaborator that receives failures the engine recovered from."""

    def report(
        self, error: BaseException, context: str, **metadata: Any
    ) -> ErrorReport: ...


class LoggingErrorReporter:
    """Default reporter: one structured log event per failure."""

    def report(
        self, error: BaseException, context: str, **metadata: Any
    ) -> ErrorReport:
        report = build_error_report(error, context, metadata)
        fields = {
            "context": context,
            "error_type": report.type.value,
            "error": report.message,
            **metadata,
        }
        if report.type == ErrorType.FORMATTING_ERROR:
            log.warning("chunk.error.recovered", **fields)
        else:
            log.error("chunk.error", **fields)
        return report


DEFAULT_REPORTER: ErrorReporter = LoggingErrorReporter()


def report_error(
    error: BaseException,
    context: str,
    reporter: Optional[ErrorReporter] = None,
    **metadata: Any,
) -> ErrorReport:
    """Send ``error`` to ``reporter`` (or the default reporter)."""
    return (reporter or DEFAULT_REPORTER).report(error, context, **metadata)
