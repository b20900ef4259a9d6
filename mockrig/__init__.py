"""mockrig - MockServer containers as a test fixture.

Provisions a MockServer container through Docker, waits until it answers,
registers one-shot JSON expectations and verifies the calls were made.
"""

from typing import Any

from mockrig import default
from mockrig.client import MockServerClient
from mockrig.config import MockServerSettings, load_config
from mockrig.default import mock, start, stop, verify
from mockrig.errors import (
    FixtureStateError,
    ImagePullError,
    MockRigError,
    MockServerStartupError,
    VerificationError,
)
from mockrig.expectation import Expectation
from mockrig.fixture import MockServerFixture

__version__ = "0.1.0"


def __getattr__(name: str) -> Any:
    if name == "url":
        return default.get_fixture().url
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Fixture
    "MockServerFixture",
    "MockServerClient",
    "Expectation",
    # Config
    "MockServerSettings",
    "load_config",
    # Shared fixture shortcuts
    "start",
    "stop",
    "mock",
    "verify",
    "url",
    # Errors
    "MockRigError",
    "MockServerStartupError",
    "FixtureStateError",
    "ImagePullError",
    "VerificationError",
]
