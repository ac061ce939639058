"""Command-line interface for techblog."""

from techblog.cli.main import app

__all__ = ["app", "main"]


def main() -> None:
    """Entry point for the CLI."""
    app()
