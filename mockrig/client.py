"""Async client for the MockServer REST control API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mockrig.errors.base import VerificationError

logger = logging.getLogger(__name__)

MOCKSERVER_API = "/mockserver"


class MockServerClient:
    """Thin wrapper over MockServer's ``/mockserver/*`` endpoints.

    Control-API failures are raised as the httpx exceptions they are.
    The one exception is a failed verification, reported by MockServer
    as ``406 Not Acceptable`` and raised as VerificationError.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        status_path: str = "/status",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.status_path = status_path
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Initialize the async HTTP client."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )
        logger.debug(f"MockServer client connected to {self.base_url}")

    async def disconnect(self) -> None:
        """Close the async HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> MockServerClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.disconnect()

    async def _put(self, path: str, **kwargs: Any) -> httpx.Response:
        if self._client is None:
            await self.connect()
        assert self._client is not None
        logger.debug(f"PUT {path}")
        return await self._client.put(path, **kwargs)

    async def status(self) -> httpx.Response:
        """Readiness probe: succeeds once the server answers 2xx."""
        response = await self._put(self.status_path, headers={"Cache-Control": "no-cache"})
        response.raise_for_status()
        return response

    async def mock_any_response(
        self, expectation: dict[str, Any] | list[dict[str, Any]]
    ) -> httpx.Response:
        """Register one or more expectations."""
        response = await self._put(f"{MOCKSERVER_API}/expectation", json=expectation)
        response.raise_for_status()
        return response

    async def verify(
        self,
        request_matcher: dict[str, Any],
        at_least: int = 1,
        at_most: int | None = None,
    ) -> None:
        """Check the request log for requests matching ``request_matcher``.

        Raises:
            VerificationError: If MockServer reports no match; the message
                is the server's diagnostic.
            httpx.HTTPStatusError: For any other unexpected status.
        """
        times: dict[str, int] = {"atLeast": at_least}
        if at_most is not None:
            times["atMost"] = at_most

        response = await self._put(
            f"{MOCKSERVER_API}/verify",
            json={"httpRequest": request_matcher, "times": times},
        )
        if response.status_code == httpx.codes.NOT_ACCEPTABLE:
            raise VerificationError(
                response.text or "Request not found",
                expected=request_matcher,
                status_code=response.status_code,
            )
        response.raise_for_status()

    async def clear(self, path: str | None = None) -> None:
        """Clear expectations and logged requests, for one path or all."""
        body = {"path": path} if path else None
        response = await self._put(f"{MOCKSERVER_API}/clear", json=body)
        response.raise_for_status()

    async def reset(self) -> None:
        """Clear every expectation and logged request."""
        response = await self._put(f"{MOCKSERVER_API}/reset")
        response.raise_for_status()

    async def retrieve_recorded_requests(self, path: str | None = None) -> list[dict[str, Any]]:
        """Requests received by the server, optionally filtered by path."""
        response = await self._put(
            f"{MOCKSERVER_API}/retrieve",
            params={"type": "REQUESTS", "format": "JSON"},
            json={"path": path} if path else None,
        )
        response.raise_for_status()
        return response.json() if response.content else []
