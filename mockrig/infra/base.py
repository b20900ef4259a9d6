"""Protocol for container backends."""

from __future__ import annotations

from typing import Protocol


class ContainerManager(Protocol):
    """Protocol for container managers - enables different backends."""

    async def start(self) -> None:
        """Pull the image, create the container and start it."""
        ...

    async def stop(self) -> None:
        """Stop and remove the container."""
        ...

    async def logs(self, tail: int | None = None) -> str:
        """Get the container output.

        Args:
            tail: Number of trailing lines to return, all lines when None.

        Returns:
            Container logs as string.
        """
        ...

    def is_running(self) -> bool:
        """Check if this manager holds a started container.

        Returns:
            True after start() and before stop(), False otherwise.
        """
        ...
