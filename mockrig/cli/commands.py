"""CLI commands for mockrig."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
import docker.errors
import httpx

from mockrig.client import MockServerClient
from mockrig.config import MockServerSettings, load_config
from mockrig.errors import MockRigError
from mockrig.fixture import MockServerFixture
from mockrig.infra.docker import DockerContainerManager

DEFAULT_CONTAINER_NAME = "mockrig-mockserver"

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _named(settings: MockServerSettings) -> MockServerSettings:
    """Settings with a container name, so `down` can find what `up` started."""
    if settings.container_name:
        return settings
    return settings.model_copy(update={"container_name": DEFAULT_CONTAINER_NAME})


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """mockrig - MockServer containers for integration tests."""
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = load_config(config)
    except MockRigError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(EXIT_FAILURE)
    ctx.obj["verbose"] = verbose

    setup_logging(verbose)


@cli.command()
@click.pass_context
def up(ctx: click.Context) -> None:
    """Start a MockServer container and wait until it answers."""
    settings = _named(ctx.obj["settings"])

    async def _up() -> str:
        fixture = MockServerFixture(settings)
        try:
            await fixture.start()
        except BaseException:
            if fixture.containers.is_running():
                await fixture.containers.stop()
            raise
        finally:
            await fixture.client.disconnect()
        container = fixture.containers.container
        return container.short_id if container is not None else "?"

    try:
        container_id = asyncio.run(_up())
    except MockRigError as e:
        click.echo(e.format_verbose(), err=True)
        sys.exit(EXIT_FAILURE)
    except docker.errors.DockerException as e:
        click.echo(f"Docker error: {e}", err=True)
        sys.exit(EXIT_FAILURE)

    click.echo(f"✓ MockServer {settings.container_name} ({container_id}) ready at {settings.url}")


@cli.command()
@click.option("--name", "-n", default=None, help="Container name (default from config)")
@click.pass_context
def down(ctx: click.Context, name: str | None) -> None:
    """Stop and remove the MockServer container started by `up`."""
    settings = _named(ctx.obj["settings"])
    name = name or settings.container_name

    async def _down() -> None:
        manager = DockerContainerManager(settings)
        await manager.attach(name)
        await manager.stop()

    try:
        asyncio.run(_down())
    except docker.errors.NotFound:
        click.echo(f"No container named {name}", err=True)
        sys.exit(EXIT_FAILURE)
    except docker.errors.DockerException as e:
        click.echo(f"Docker error: {e}", err=True)
        sys.exit(EXIT_FAILURE)

    click.echo(f"✓ Removed {name}")


@cli.command()
@click.pass_context
def ping(ctx: click.Context) -> None:
    """Probe the MockServer status endpoint once."""
    settings: MockServerSettings = ctx.obj["settings"]

    async def _ping() -> int:
        async with MockServerClient(
            settings.url,
            timeout=settings.request_timeout,
            status_path=settings.status_path,
        ) as client:
            response = await client.status()
            return response.status_code

    try:
        status_code = asyncio.run(_ping())
    except httpx.HTTPError as e:
        click.echo(f"✗ {settings.url}{settings.status_path} unreachable: {e}", err=True)
        sys.exit(EXIT_FAILURE)

    click.echo(f"✓ {settings.url} answered {status_code}")
