"""pytest fixtures for mockrig.

Registered through the ``pytest11`` entry point, so installing mockrig
makes the fixtures available; nothing starts until a test asks for one.

The server starts once per session. Its HTTP client lives on the session
event loop, so async tests using it should run there too::

    @pytest.mark.asyncio(loop_scope="session")
    async def test_order_is_forwarded(mock_server_reset):
        expectation = await mock_server_reset.mock("/orders", {"body": {"id": 1}}, {"body": {}})
        ...
        await mock_server_reset.verify(expectation)

Set ``mockrig_config`` in the ini file to load settings from YAML.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from mockrig.config.settings import load_config
from mockrig.fixture import MockServerFixture


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addini("mockrig_config", "Path to a mockrig YAML config file", default="")


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def mock_server(pytestconfig: pytest.Config) -> AsyncIterator[MockServerFixture]:
    """A started MockServer shared by the whole session."""
    settings = load_config(pytestconfig.getini("mockrig_config") or None)
    async with MockServerFixture(settings) as fixture:
        yield fixture


@pytest_asyncio.fixture(loop_scope="session")
async def mock_server_reset(mock_server: MockServerFixture) -> AsyncIterator[MockServerFixture]:
    """The session server, cleared of expectations and logs after each test."""
    yield mock_server
    await mock_server.reset()
