"""mockrig CLI - run a MockServer container outside of a test session."""

from mockrig.cli.commands import cli


def main() -> None:
    """Main entry point for the mockrig CLI."""
    cli()


__all__ = ["main", "cli"]
