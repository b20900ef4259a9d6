"""Errors and retry helpers for mockrig."""

from mockrig.errors.base import (
    ConfigValidationError,
    ErrorCode,
    ErrorContext,
    FixtureStateError,
    ImagePullError,
    MockRigError,
    MockServerStartupError,
    RetryExhaustedError,
    ValidationError,
    VerificationError,
)
from mockrig.errors.retry import RetryConfig, RetryPolicy

__all__ = [
    # Base
    "ErrorCode",
    "ErrorContext",
    "MockRigError",
    # Specific errors
    "ConfigValidationError",
    "FixtureStateError",
    "ImagePullError",
    "MockServerStartupError",
    "RetryExhaustedError",
    "ValidationError",
    "VerificationError",
    # Retry
    "RetryConfig",
    "RetryPolicy",
]
