"""Main Typer application for techblog."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from techblog import __version__
from techblog.build import SiteBuilder
from techblog.checks import available_checks, has_failures, run_checks
from techblog.cli.errorhandler import handle_cli_errors
from techblog.config import TechblogConfig, find_site_root, save_tool_config, tool_config_path
from techblog.logging_setup import configure_logging
from techblog.report import findings_json, posts_table, render_findings, term_counts, terms_table
from techblog.scaffold import create_post
from techblog.site import load_site

app = typer.Typer(
    name="techblog",
    help="Check, list and scaffold content of a Jekyll-style technical blog",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)

SiteArg = Annotated[
    Path,
    typer.Argument(help="Site directory (or any directory inside it)", file_okay=False),
]


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


@dataclass(slots=True)
class CliState:
    debug: bool = False


def _debug(ctx: typer.Context) -> bool:
    state = ctx.obj
    return bool(state and state.debug)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"techblog {__version__}")
        raise typer.Exit


@app.callback()
def main(
    ctx: typer.Context,
    *,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Show full tracebacks instead of friendly errors")] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit"),
    ] = False,
) -> None:
    """Tooling for a static technical blog."""
    configure_logging(verbose=verbose or debug)
    ctx.obj = CliState(debug=debug)


@app.command()
def check(
    ctx: typer.Context,
    site: SiteArg = Path(),
    *,
    only: Annotated[
        list[str] | None,
        typer.Option("--only", "-o", help="Run only this check (repeatable)"),
    ] = None,
    strict: Annotated[bool, typer.Option("--strict", help="Fail on warnings as well as errors")] = False,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format", case_sensitive=False)
    ] = OutputFormat.TABLE,
    build: Annotated[bool, typer.Option("--build", help="Also run a full generator build")] = False,
) -> None:
    """Validate front-matter, links, permalinks and duplicates."""
    with handle_cli_errors(debug=_debug(ctx)):
        loaded = load_site(site)
        names = list(only) if only else None
        if build:
            if names is None:
                enabled = set(loaded.tool_config.checks.enabled())
                names = [name for name in available_checks() if name in enabled]
            if "build" not in names:
                names.append("build")
        findings = run_checks(loaded, names)

    if output_format is OutputFormat.JSON:
        typer.echo(findings_json(findings))
    else:
        render_findings(console, findings)

    if has_failures(findings, strict=strict):
        raise typer.Exit(1)


@app.command()
def posts(
    ctx: typer.Context,
    site: SiteArg = Path(),
    *,
    category: Annotated[str | None, typer.Option("--category", "-c", help="Only posts in this category")] = None,
    tag: Annotated[str | None, typer.Option("--tag", "-t", help="Only posts with this tag")] = None,
    drafts: Annotated[bool, typer.Option("--drafts", help="Include drafts")] = False,
) -> None:
    """List posts, newest first."""
    with handle_cli_errors(debug=_debug(ctx)):
        loaded = load_site(site, include_drafts=drafts or None)
        selected = loaded.posts(include_drafts=drafts)

    if category:
        wanted = category.casefold()
        selected = [p for p in selected if p.meta and wanted in {c.casefold() for c in p.meta.categories}]
    if tag:
        wanted = tag.casefold()
        selected = [p for p in selected if p.meta and wanted in {t.casefold() for t in p.meta.tags}]

    if not selected:
        console.print("[yellow]No posts found.[/yellow]")
        return
    console.print(posts_table(selected, baseurl=loaded.config.normalized_baseurl))


@app.command()
def tags(ctx: typer.Context, site: SiteArg = Path()) -> None:
    """Show how many posts use each category and tag."""
    with handle_cli_errors(debug=_debug(ctx)):
        loaded = load_site(site)
    categories, tag_counts = term_counts(loaded.posts())
    console.print(terms_table("Categories", categories))
    console.print(terms_table("Tags", tag_counts))


@app.command()
def new(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Title of the new post")],
    site: SiteArg = Path(),
    *,
    category: Annotated[
        list[str] | None, typer.Option("--category", "-c", help="Category (repeatable)")
    ] = None,
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Tag (repeatable)")] = None,
    description: Annotated[str, typer.Option("--description", "-d", help="Short description")] = "",
) -> None:
    """Create a new post in _posts/ with front-matter filled in."""
    with handle_cli_errors(debug=_debug(ctx)):
        loaded = load_site(site)
        path = create_post(
            loaded,
            title,
            categories=category or [],
            tags=tag or [],
            description=description,
        )
    console.print(f"[green]Created[/green] {escape(path.relative_to(loaded.root).as_posix())}")


@app.command()
def build(ctx: typer.Context, site: SiteArg = Path()) -> None:
    """Build the site with the configured generator command."""
    with handle_cli_errors(debug=_debug(ctx)):
        loaded = load_site(site)
        config = loaded.tool_config.build
        result = SiteBuilder(loaded, config).build()

    for diagnostic in result.diagnostics:
        style = "red" if diagnostic.level == "error" else "yellow"
        console.print(f"[{style}]{diagnostic.level}:[/{style}] {escape(diagnostic.message)}")
    if result.warnings and config.fail_on_warnings:
        console.print(f"[bold red]Build produced {len(result.warnings)} warning(s)[/bold red]")
        raise typer.Exit(1)
    console.print(f"[bold green]✓ Site built into {config.destination}/[/bold green]")


@app.command()
def serve(ctx: typer.Context, site: SiteArg = Path()) -> None:
    """Run the generator's preview server until interrupted."""
    with handle_cli_errors(debug=_debug(ctx)):
        loaded = load_site(site)
        SiteBuilder(loaded).serve()


@app.command()
def init(
    ctx: typer.Context,
    site: SiteArg = Path(),
    *,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing configuration")] = False,
) -> None:
    """Write the default .techblog/config.yml for a site."""
    with handle_cli_errors(debug=_debug(ctx)):
        root = find_site_root(site)
        existing = tool_config_path(root)
        if existing.exists() and not force:
            console.print(f"[yellow]{existing.relative_to(root).as_posix()} already exists; use --force to overwrite[/yellow]")
            return
        path = save_tool_config(TechblogConfig(), root)
    console.print(f"[green]Wrote[/green] {path.relative_to(root).as_posix()}")


__all__ = ["app"]
