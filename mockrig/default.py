"""Module-level shortcuts bound to one shared fixture.

For suites that drive a single mock server for the whole run:

    import mockrig

    await mockrig.start()
    expectation = await mockrig.mock("/orders", {"body": {"id": 1}}, {"body": {"ok": True}})
    ...
    await mockrig.verify(expectation)
    await mockrig.stop()

Use MockServerFixture directly when more than one server is needed.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mockrig.expectation import Expectation
from mockrig.fixture import MockServerFixture

_fixture: MockServerFixture | None = None


def get_fixture() -> MockServerFixture:
    """Shared fixture, created from MockServerSettings on first use."""
    global _fixture
    if _fixture is None:
        _fixture = MockServerFixture()
    return _fixture


def set_fixture(fixture: MockServerFixture | None) -> None:
    global _fixture
    _fixture = fixture


async def start() -> None:
    await get_fixture().start()


async def stop() -> None:
    await get_fixture().stop()


async def mock(
    path: str,
    request: Mapping[str, Any] | None = None,
    response: Mapping[str, Any] | None = None,
) -> Expectation:
    return await get_fixture().mock(path, request, response)


async def verify(expectation: Expectation) -> None:
    await get_fixture().verify(expectation)


def __getattr__(name: str) -> Any:
    if name == "url":
        return get_fixture().url
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
