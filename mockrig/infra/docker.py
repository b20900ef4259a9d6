"""Docker backend for the mock server container.

The Docker SDK is synchronous. Every call goes through the event loop's
default executor so the calling task suspends instead of blocking the loop.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

import docker
from docker.models.containers import Container

from mockrig.config.settings import MockServerSettings
from mockrig.errors.base import ErrorCode, ErrorContext, FixtureStateError, ImagePullError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DockerContainerManager:
    """Lifecycle of a single mock server container.

    Holds at most one container handle: set by start(), cleared by stop().

    Example:
        >>> manager = DockerContainerManager(MockServerSettings())
        >>> await manager.start()
        >>> print(await manager.logs(tail=20))
        >>> await manager.stop()
    """

    def __init__(
        self,
        settings: MockServerSettings | None = None,
        client: docker.DockerClient | None = None,
    ) -> None:
        """Initialize the container manager.

        Args:
            settings: Image, port and container name to use.
            client: Docker client; created from the environment on first use.
        """
        self.settings = settings or MockServerSettings()
        self._client = client
        self._container: Container | None = None

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            self._client = docker.from_env()
        return self._client

    @property
    def container(self) -> Container | None:
        return self._container

    async def _run(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    async def pull(self) -> None:
        """Pull the configured image and drain the progress stream.

        The pull only completes once the stream is exhausted.

        Raises:
            ImagePullError: If the stream reports an error entry.
        """
        image = self.settings.image
        logger.info(f"Pulling image {image}")
        await self._run(self._pull_blocking, image)

    def _pull_blocking(self, image: str) -> None:
        for event in self.client.api.pull(image, stream=True, decode=True):
            if "error" in event:
                raise ImagePullError(
                    message=f"Failed to pull {image}: {event['error']}",
                    context=ErrorContext(image=image),
                    detail=event.get("errorDetail"),
                )
            status = event.get("status")
            if status:
                progress = event.get("progress", "")
                logger.debug(f"{image}: {status} {progress}".rstrip())

    async def create(self) -> Container:
        """Create the container with TTY and the fixed port binding."""
        port_key = self.settings.container_port
        container = await self._run(
            self.client.containers.create,
            self.settings.image,
            tty=True,
            ports={port_key: self.settings.port},
            name=self.settings.container_name,
        )
        logger.debug(f"Created container {container.short_id} ({port_key} -> {self.settings.port})")
        return container

    async def start(self) -> None:
        """Pull the image, create the container and start it.

        Docker SDK errors propagate unchanged; nothing here is retried.

        Raises:
            FixtureStateError: If this manager already holds a container.
        """
        if self._container is not None:
            raise FixtureStateError(
                message="Mock server container already started; call stop() first",
                error_code=ErrorCode.FIXTURE_ALREADY_STARTED,
                context=ErrorContext(
                    image=self.settings.image,
                    container_id=self._container.short_id,
                ),
            )

        if self.settings.pull_image:
            await self.pull()

        container = await self.create()
        self._container = container
        await self._run(container.start)
        logger.info(f"Started container {container.short_id} from {self.settings.image}")

    async def attach(self, name: str | None = None) -> Container:
        """Take over an existing container by name, e.g. one left by `mockrig up`."""
        name = name or self.settings.container_name
        if not name:
            raise FixtureStateError(
                message="No container name configured to attach to",
                context=ErrorContext(image=self.settings.image),
            )
        container = await self._run(self.client.containers.get, name)
        self._container = container
        return container

    async def stop(self) -> None:
        """Stop then remove the container.

        Raises:
            FixtureStateError: If no container was started.
        """
        container = self._require_container()
        await self._run(container.stop)
        await self._run(container.remove)
        self._container = None
        logger.info(f"Stopped and removed container {container.short_id}")

    async def logs(self, tail: int | None = None) -> str:
        container = self._require_container()
        raw = await self._run(container.logs, tail=tail if tail is not None else "all")
        return raw.decode("utf-8", errors="replace")

    def is_running(self) -> bool:
        return self._container is not None

    def _require_container(self) -> Container:
        if self._container is None:
            raise FixtureStateError(
                message="Mock server container was never started",
                context=ErrorContext(image=self.settings.image),
            )
        return self._container
