"""Exception hierarchy for recce.

Every recce error carries:
- error_code: an ErrorCode for programmatic handling
- context: ErrorContext describing the scenario being recorded
- cause: the underlying exception, when there is one

Example:
    try:
        write_scenario_file(directory, "sc1.rest", content)
    except OutputError as e:
        print(f"Error [{e.error_code.value}]: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes.

    - E1xx: Request construction and capture errors
    - E2xx: Configuration errors
    - E6xx: Output errors
    - E9xx: Unknown/internal errors
    """

    # Request errors (E1xx)
    INVALID_REQUEST = "E101"
    BODY_CAPTURE_FAILED = "E102"
    SCENARIO_ABORTED = "E103"

    # Configuration errors (E2xx)
    INVALID_CONFIG = "E202"

    # Output errors (E6xx)
    OUTPUT_FAILED = "E601"

    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "request"
        elif code_num < 300:
            return "config"
        elif code_num < 700:
            return "output"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Scenario details attached to an error.

    Attributes:
        sequence: Scenario sequence number
        group: Scenario group path
        path: File or directory involved (for output errors)
        extra: Additional context-specific information
    """

    sequence: int | None = None
    group: str | None = None
    path: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result = {
            "sequence": self.sequence,
            "group": self.group,
            "path": self.path,
            "extra": self.extra or None,
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        parts = []
        if self.sequence is not None:
            parts.append(f"scenario={self.sequence}")
        if self.group is not None:
            parts.append(f"group={self.group}")
        if self.path:
            parts.append(f"path={self.path}")
        return " > ".join(parts) if parts else "unknown location"


class RecceError(Exception):
    """Base exception for all recce errors."""

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        if self.cause is not None:
            parts.append(f"caused by {type(self.cause).__name__}: {self.cause}")

        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "category": self.error_code.category,
            "message": self.message,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class RequestConstructionError(RecceError):
    """Raised when an HTTP request cannot be built from a method and URL."""

    error_code = ErrorCode.INVALID_REQUEST
    default_message = "Failed to construct request"


class BodyCaptureError(RecceError):
    """Raised when a request or response body cannot be read for capture."""

    error_code = ErrorCode.BODY_CAPTURE_FAILED
    default_message = "Failed to capture body"


class ScenarioAborted(RecceError):
    """Raised by a reporter to stop the current test immediately."""

    error_code = ErrorCode.SCENARIO_ABORTED
    default_message = "Scenario aborted"


class ConfigLoadError(RecceError):
    """Raised when a settings file cannot be loaded."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Failed to load configuration"


class OutputError(RecceError):
    """Raised when a scenario file or directory cannot be written."""

    error_code = ErrorCode.OUTPUT_FAILED
    default_message = "Failed to write scenario output"


__all__ = [
    "ErrorCode",
    "ErrorContext",
    "RecceError",
    "RequestConstructionError",
    "BodyCaptureError",
    "ScenarioAborted",
    "ConfigLoadError",
    "OutputError",
]
