"""Exception hierarchy for mockrig.

mockrig errors carry:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with container/request details
- suggestions: List of actionable steps to resolve the issue
- cause: The underlying exception, when one exists

Errors raised by Docker or httpx are not wrapped: they reach the caller
unchanged. The classes below cover failures that originate in mockrig itself.

Example:
    try:
        await fixture.start()
    except MockServerStartupError as e:
        print(e.format_verbose())
        print(f"Last probe error: {e.last_error!r}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for mockrig.

    Error codes are grouped by range:
    - E0xx: Container errors
    - E1xx: Mock server errors
    - E2xx: Validation errors
    - E3xx: Fixture state errors
    - E5xx: Resilience errors (retry)
    - E9xx: Unknown/internal errors
    """

    # Container errors (E0xx)
    IMAGE_PULL_FAILED = "E001"

    # Mock server errors (E1xx)
    SERVER_NOT_READY = "E101"

    # Validation errors (E2xx)
    VALIDATION_FAILED = "E201"
    INVALID_CONFIG = "E202"

    # Fixture state errors (E3xx)
    FIXTURE_NOT_STARTED = "E301"
    FIXTURE_ALREADY_STARTED = "E302"

    # Resilience errors (E5xx)
    RETRY_EXHAUSTED = "E502"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"


@dataclass
class ErrorContext:
    """Structured context for error logging and debugging.

    Attributes:
        image: Docker image of the mock server container
        container_id: Short id of the container, once created
        request: HTTP request details (method, url)
        response: HTTP response details (status, body)
        extra: Additional context-specific information
        timestamp: When the error occurred
    """

    image: str | None = None
    container_id: str | None = None
    request: dict[str, Any] | None = None
    response: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "image": self.image,
            "container_id": self.container_id,
            "request": self.request,
            "response": self.response,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.image:
            parts.append(f"image={self.image}")
        if self.container_id:
            parts.append(f"container={self.container_id}")
        return " > ".join(parts) if parts else "unknown location"


class MockRigError(Exception):
    """Base exception for all mockrig errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with execution details
        suggestions: List of actionable steps to resolve the issue
        recoverable: Whether the error can be retried
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        recoverable: bool = True,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self.recoverable = recoverable
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
            "",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.context.request:
            method = self.context.request.get("method", "?")
            url = self.context.request.get("url", "?")
            lines.append(f"Request: {method} {url}")

        if self.cause is not None:
            lines.append(f"Cause: {self.cause!r}")

        logs = self.context.extra.get("container_logs")
        if logs:
            lines.append("")
            lines.append("Container logs (tail):")
            lines.extend(f"  {line}" for line in logs.splitlines())

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ImagePullError(MockRigError):
    """Docker reported an error inside the image pull progress stream.

    The low-level pull call streams progress entries and signals failures
    as an ``error`` entry rather than an HTTP error, so they surface here.
    """

    error_code = ErrorCode.IMAGE_PULL_FAILED
    default_message = "Failed to pull mock server image"
    default_suggestions = [
        "Check the image name and tag in MOCKRIG_IMAGE",
        "Verify the Docker daemon can reach the registry",
        "Run 'docker pull mockserver/mockserver:latest' manually",
    ]


class ValidationError(MockRigError):
    """Validation failed.

    Check the 'field' and 'value' attributes for specific details
    about what failed validation.
    """

    error_code = ErrorCode.VALIDATION_FAILED
    default_message = "Validation failed"

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value
        kwargs.setdefault("recoverable", False)
        super().__init__(message=message, **kwargs)

    def __str__(self) -> str:
        base = super().__str__()
        if self.field:
            base = f"{base} (field: {self.field})"
        return base

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["field"] = self.field
        result["value"] = repr(self.value)
        return result


class ConfigValidationError(ValidationError):
    """Configuration validation failed.

    The mockrig YAML file or MOCKRIG_* environment contains invalid values.
    """

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"
    default_suggestions = [
        "Check MOCKRIG_* environment variables",
        "Check the YAML file syntax and the 'mockrig' section",
    ]


class FixtureStateError(MockRigError):
    """Lifecycle call made in the wrong order.

    Raised when stopping a fixture that never started, or starting
    one that already holds a running container.
    """

    error_code = ErrorCode.FIXTURE_NOT_STARTED
    default_message = "Mock server fixture is not started"
    default_suggestions = [
        "Call start() once before mock(), verify() or stop()",
        "Call stop() before starting the same fixture again",
    ]


class RetryExhaustedError(MockRigError):
    """All retry attempts exhausted."""

    error_code = ErrorCode.RETRY_EXHAUSTED
    default_message = "All retry attempts exhausted"

    def __init__(
        self,
        message: str | None = None,
        attempts: int = 0,
        last_error: Exception | None = None,
        **kwargs: Any,
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(message=message, cause=last_error, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["attempts"] = self.attempts
        return result


class MockServerStartupError(RetryExhaustedError):
    """The mock server never answered its readiness probe.

    Carries the last probe failure as ``last_error`` and the tail of the
    container logs in ``context.extra["container_logs"]``.
    """

    error_code = ErrorCode.SERVER_NOT_READY
    default_message = "Couldn't start mock-server"
    default_suggestions = [
        "Check the container logs for startup failures",
        "Make sure nothing else is bound to the mock server port",
        "Raise MOCKRIG_READY_RETRIES on slow machines",
    ]


class VerificationError(AssertionError):
    """Raised when the mock server did not receive an expected request.

    Subclasses AssertionError so test runners report it as a failed
    assertion. The message is the diagnostic returned by the mock server.
    """

    def __init__(
        self,
        message: str,
        expected: Any = None,
        status_code: int | None = None,
    ) -> None:
        self.expected = expected
        self.status_code = status_code
        super().__init__(message)
