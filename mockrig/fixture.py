"""Mock HTTP fixture controller.

Ties the container lifecycle, the readiness probe and the MockServer
control API together behind one object owned by the test harness:

    fixture = MockServerFixture()
    await fixture.start()
    expectation = await fixture.mock("/orders", {"body": {"id": 1}}, {"statusCode": 201, "body": {"ok": True}})
    ...  # exercise the system under test against fixture.url
    await fixture.verify(expectation)
    await fixture.stop()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import docker.errors
import httpx

from mockrig.client import MockServerClient
from mockrig.config.settings import MockServerSettings
from mockrig.errors.base import ErrorContext, MockServerStartupError, RetryExhaustedError
from mockrig.errors.retry import RetryConfig, RetryPolicy
from mockrig.expectation import Expectation, build_expectation, has_body, json_body_matcher
from mockrig.infra.base import ContainerManager
from mockrig.infra.docker import DockerContainerManager

logger = logging.getLogger(__name__)

DEFAULT_METHOD = "POST"
DEFAULT_STATUS_CODE = 200


def format_budget(seconds: float) -> str:
    if seconds >= 60:
        return f"{round(seconds / 60)} min"
    return f"{seconds:g}s"


def readiness_policy(settings: MockServerSettings) -> RetryPolicy:
    """Retry policy of the readiness probe: no jitter, no delay cap."""
    return RetryPolicy(
        RetryConfig(
            max_attempts=settings.ready_retries + 1,
            base_delay=settings.ready_base_delay,
            exponential_base=settings.ready_backoff_factor,
            retryable_exceptions=(httpx.HTTPError, OSError),
        )
    )


class MockServerFixture:
    """A MockServer container plus a client for its control API.

    Lifecycle: start() once, then any number of mock()/verify() pairs,
    then stop() once. Not safe for concurrent start()/stop() calls.
    """

    def __init__(
        self,
        settings: MockServerSettings | None = None,
        containers: ContainerManager | None = None,
        client: MockServerClient | None = None,
    ) -> None:
        self.settings = settings or MockServerSettings()
        self.containers = containers or DockerContainerManager(self.settings)
        self.client = client or MockServerClient(
            self.settings.url,
            timeout=self.settings.request_timeout,
            status_path=self.settings.status_path,
        )
        self.policy = readiness_policy(self.settings)

    @property
    def url(self) -> str:
        return self.settings.url

    async def start(self) -> None:
        """Provision the container and wait until the server answers.

        Raises:
            MockServerStartupError: If the readiness probe never succeeded.
                The last probe failure is kept as its cause.
        """
        await self.containers.start()
        await self.wait_ready()

    async def wait_ready(self) -> None:
        """Probe the status endpoint with exponential backoff."""
        try:
            await self.policy.execute_async(self.client.status)
        except RetryExhaustedError as e:
            budget = format_budget(self.policy.total_delay())
            error = MockServerStartupError(
                message=f"Couldn't start mock-server after {budget}",
                attempts=e.attempts,
                last_error=e.last_error,
                context=ErrorContext(
                    image=self.settings.image,
                    request={"method": "PUT", "url": f"{self.url}{self.settings.status_path}"},
                ),
            )
            logs = await self._container_logs()
            if logs:
                error.context.extra["container_logs"] = logs
            raise error from e.last_error
        logger.info(f"Mock server ready at {self.url}")

    async def _container_logs(self) -> str | None:
        try:
            return await self.containers.logs(tail=self.settings.log_tail)
        except docker.errors.DockerException as e:
            logger.warning(f"Could not read mock server logs: {e}")
            return None

    async def stop(self) -> None:
        """Stop and remove the container.

        Raises:
            FixtureStateError: If start() was never called.
        """
        await self.containers.stop()
        await self.client.disconnect()

    async def mock(
        self,
        path: str,
        request: Mapping[str, Any] | None = None,
        response: Mapping[str, Any] | None = None,
    ) -> Expectation:
        """Answer the next request on ``path`` with a JSON response.

        Args:
            path: URI for which to respond.
            request: Criteria the request must match. ``body`` is the JSON the
                request body must contain; ``headers`` the headers it must carry.
            response: ``method`` (default POST) to respond to, ``statusCode``
                (default 200) and the JSON ``body`` to send back.

        Returns:
            The expectation to pass to verify().
        """
        request = request or {}
        response = response or {}
        method = response.get("method", DEFAULT_METHOD)
        status_code = response.get("statusCode", response.get("status_code", DEFAULT_STATUS_CODE))
        request_body = request.get("body")
        request_headers = request.get("headers")

        await self.client.mock_any_response(
            build_expectation(path, method, status_code, response.get("body"))
        )
        logger.debug(f"Registered one-shot expectation {method} {path} -> {status_code}")

        return Expectation(
            method=method,
            path=path,
            headers=dict(request_headers) if request_headers is not None else None,
            body=json_body_matcher(request_body) if has_body(request_body) else None,
        )

    async def verify(self, expectation: Expectation) -> None:
        """Check that a request matching ``expectation`` was received.

        Raises:
            VerificationError: If no matching request was received.
        """
        await self.client.verify(expectation.to_request_matcher())

    async def reset(self) -> None:
        """Drop every expectation and logged request on the server."""
        await self.client.reset()

    async def recorded_requests(self, path: str | None = None) -> list[dict[str, Any]]:
        return await self.client.retrieve_recorded_requests(path)

    async def __aenter__(self) -> MockServerFixture:
        try:
            await self.start()
        except BaseException:
            if self.containers.is_running():
                await self.stop()
            raise
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()
