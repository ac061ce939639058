"""CLI error handling utilities."""

from collections.abc import Generator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.markup import escape

from techblog.build import BuildError, GeneratorNotInstalledError
from techblog.checks.base import UnknownCheckError
from techblog.config.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    SiteStructureError,
)
from techblog.exceptions import ContentError

console = Console(stderr=True)


@contextmanager
def handle_cli_errors(*, debug: bool = False) -> Generator[None, None, None]:
    """Context manager to handle CLI errors gracefully.

    Args:
        debug: If True, re-raise with the full traceback. If False, print a
            user-friendly error and exit with status 1.

    """
    try:
        yield
    except (KeyboardInterrupt, SystemExit, typer.Exit):
        raise
    except ConfigNotFoundError as e:
        if debug:
            raise
        console.print(f"[bold red]📂 Site Not Found:[/bold red] {escape(str(e))}")
        console.print("Run the command inside a site, or pass the site directory as an argument.")
        raise typer.Exit(1) from e
    except ConfigValidationError as e:
        if debug:
            raise
        console.print(f"[bold red]⚙️ Invalid Configuration:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except SiteStructureError as e:
        if debug:
            raise
        console.print(f"[bold red]🏗️ Site Structure Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except ConfigError as e:
        if debug:
            raise
        console.print(f"[bold red]⚙️ Configuration Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except UnknownCheckError as e:
        if debug:
            raise
        console.print(f"[bold red]🔍 Unknown Check:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except GeneratorNotInstalledError as e:
        if debug:
            raise
        console.print(f"[bold red]💎 Generator Missing:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except BuildError as e:
        if debug:
            raise
        console.print(f"[bold red]🚨 Build Failed:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except ContentError as e:
        if debug:
            raise
        console.print(f"[bold red]📝 Content Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except Exception as e:
        if debug:
            console.print_exception(show_locals=False)
            raise typer.Exit(1) from e

        console.print(f"[bold red]💥 An unexpected error occurred:[/bold red] {escape(str(e))}")
        console.print("[dim]Run with [bold]--debug[/bold] for more details.[/dim]")
        raise typer.Exit(1) from e
