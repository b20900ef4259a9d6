"""Tests for the mockrig error hierarchy."""

from __future__ import annotations

import httpx

from mockrig.errors import (
    ConfigValidationError,
    ErrorCode,
    ErrorContext,
    FixtureStateError,
    MockRigError,
    MockServerStartupError,
    RetryExhaustedError,
    VerificationError,
)


class TestErrorCode:
    def test_codes_are_unique(self) -> None:
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_verification_error_message_is_the_diagnostic(self) -> None:
        error = VerificationError("Request not found")
        assert str(error) == "Request not found"
        assert not hasattr(error, "error_code")


class TestMockRigError:
    def test_defaults(self) -> None:
        error = MockRigError()
        assert error.message == "An unexpected error occurred"
        assert error.error_code is ErrorCode.UNKNOWN
        assert error.suggestions == []
        assert str(error) == "[E999] An unexpected error occurred"

    def test_location_in_str(self) -> None:
        error = FixtureStateError(context=ErrorContext(image="mockserver/mockserver:latest"))
        assert str(error) == (
            "[E301] Mock server fixture is not started | at image=mockserver/mockserver:latest"
        )

    def test_extra_context(self) -> None:
        error = MockRigError("boom", attempt=3)
        assert error.context.extra == {"attempt": 3}

    def test_to_dict(self) -> None:
        cause = ValueError("bad")
        error = FixtureStateError(cause=cause)
        data = error.to_dict()
        assert data["error_code"] == "E301"
        assert data["error_type"] == "FixtureStateError"
        assert data["cause"] == "bad"
        assert data["suggestions"]
        assert "timestamp" in data["context"]


class TestMockServerStartupError:
    def test_is_retry_exhausted(self) -> None:
        cause = httpx.ConnectError("Connection refused")
        error = MockServerStartupError(
            message="Couldn't start mock-server after 2 min",
            attempts=8,
            last_error=cause,
        )
        assert isinstance(error, RetryExhaustedError)
        assert error.cause is cause
        assert error.to_dict()["attempts"] == 8

    def test_format_verbose_includes_logs_and_cause(self) -> None:
        error = MockServerStartupError(
            message="Couldn't start mock-server after 2 min",
            last_error=httpx.ConnectError("Connection refused"),
            context=ErrorContext(
                image="mockserver/mockserver:latest",
                request={"method": "PUT", "url": "http://localhost:1080/status"},
            ),
            container_logs="line one\nline two",
        )

        text = error.format_verbose()

        assert text.startswith("Error [E101]: Couldn't start mock-server after 2 min")
        assert "Request: PUT http://localhost:1080/status" in text
        assert "Cause: ConnectError('Connection refused')" in text
        assert "  line two" in text
        assert "Suggestions:" in text


class TestValidationErrors:
    def test_field_in_str(self) -> None:
        error = ConfigValidationError("Invalid mockrig configuration", field="port", value=0)
        assert "(field: port)" in str(error)
        assert error.to_dict()["value"] == "0"
        assert error.recoverable is False


class TestVerificationError:
    def test_is_assertion_error(self) -> None:
        error = VerificationError("Request not found", expected={"path": "/x"}, status_code=406)
        assert isinstance(error, AssertionError)
        assert str(error) == "Request not found"
