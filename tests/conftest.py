"""Pytest fixtures for mockrig tests."""

from __future__ import annotations

import json
import os
from collections.abc import Iterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from mockrig.client import MockServerClient
from mockrig.config import MockServerSettings
from mockrig.fixture import MockServerFixture
from mockrig.infra.docker import DockerContainerManager


def _contains(actual: Any, expected: Any) -> bool:
    """ONLY_MATCHING_FIELDS: every expected field present with an equal value."""
    if isinstance(expected, dict):
        return isinstance(actual, dict) and all(
            key in actual and _contains(actual[key], value) for key, value in expected.items()
        )
    return actual == expected


class FakeMockServer:
    """In-process stand-in for MockServer's control API and mock endpoints."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self.expectations: list[dict[str, Any]] = []
        self.received: list[httpx.Request] = []
        self.status_failures = 0
        self.status_code = 200
        self.expectation_status = 201

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path

        if path == "/status":
            if self.status_failures > 0:
                self.status_failures -= 1
                raise httpx.ConnectError("Connection refused", request=request)
            return httpx.Response(self.status_code)

        if path == "/mockserver/expectation":
            if self.expectation_status >= 400:
                return httpx.Response(self.expectation_status, text="incorrect expectation json format")
            self.expectations.append(json.loads(request.content))
            return httpx.Response(self.expectation_status)

        if path == "/mockserver/verify":
            matcher = json.loads(request.content)["httpRequest"]
            if any(self._matches(r, matcher) for r in self.received):
                return httpx.Response(202)
            return httpx.Response(
                406,
                text=f"Request not found at least once, expected:<{json.dumps(matcher)}>",
            )

        if path == "/mockserver/reset":
            self.expectations.clear()
            self.received.clear()
            return httpx.Response(200)

        if path == "/mockserver/retrieve":
            return httpx.Response(
                200,
                json=[{"method": r.method, "path": r.url.path} for r in self.received],
            )

        return self._answer(request)

    def _answer(self, request: httpx.Request) -> httpx.Response:
        self.received.append(request)
        for expectation in self.expectations:
            rule = expectation["httpRequest"]
            times = expectation["times"]
            if times["remainingTimes"] < 1:
                continue
            if rule["path"] == request.url.path and rule["method"] == request.method:
                times["remainingTimes"] -= 1
                response = expectation["httpResponse"]
                headers = {h["name"]: h["values"][0] for h in response["headers"]}
                return httpx.Response(
                    response["statusCode"],
                    headers=headers,
                    content=response.get("body", "").encode(),
                )
        return httpx.Response(404)

    def _matches(self, request: httpx.Request, matcher: dict[str, Any]) -> bool:
        if request.method != matcher["method"] or request.url.path != matcher["path"]:
            return False
        for name, values in matcher.get("headers", {}).items():
            if not set(values) <= set(request.headers.get_list(name)):
                return False
        body = matcher.get("body")
        if body is not None:
            try:
                actual = json.loads(request.content)
            except ValueError:
                return False
            if not _contains(actual, json.loads(body["json"])):
                return False
        return True

    def bodies(self, path: str) -> list[Any]:
        return [json.loads(r.content) for r in self.calls if r.url.path == path]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep MOCKRIG_* variables from the developer shell out of tests."""
    for key in list(os.environ):
        if key.startswith("MOCKRIG_"):
            monkeypatch.delenv(key)


@pytest.fixture
def settings() -> MockServerSettings:
    return MockServerSettings(_env_file=None)


@pytest.fixture
def container() -> MagicMock:
    container = MagicMock()
    container.short_id = "abc123"
    container.logs.return_value = b"INFO 1080 started on port: 1080\n"
    return container


@pytest.fixture
def docker_client(container: MagicMock) -> MagicMock:
    client = MagicMock()
    client.api.pull.return_value = iter(
        [
            {"status": "Pulling from mockserver/mockserver", "id": "latest"},
            {"status": "Downloading", "progress": "[=>   ]", "id": "a1b2"},
            {"status": "Status: Image is up to date for mockserver/mockserver:latest"},
        ]
    )
    client.containers.create.return_value = container
    client.containers.get.return_value = container
    return client


@pytest.fixture
def containers(settings: MockServerSettings, docker_client: MagicMock) -> DockerContainerManager:
    return DockerContainerManager(settings, client=docker_client)


@pytest.fixture
def fake_server() -> FakeMockServer:
    return FakeMockServer()


@pytest.fixture
def transport(fake_server: FakeMockServer) -> httpx.MockTransport:
    return httpx.MockTransport(fake_server.handle)


@pytest.fixture
def mock_client(settings: MockServerSettings, transport: httpx.MockTransport) -> MockServerClient:
    return MockServerClient(settings.url, status_path=settings.status_path, transport=transport)


@pytest.fixture
def fixture(
    settings: MockServerSettings,
    containers: DockerContainerManager,
    mock_client: MockServerClient,
) -> MockServerFixture:
    return MockServerFixture(settings, containers=containers, client=mock_client)


@pytest.fixture
def no_sleep() -> Iterator[AsyncMock]:
    """Skip backoff delays; the mock records what would have been slept."""
    with patch("mockrig.errors.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep
