"""Render findings and post listings for the terminal."""

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Iterable, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from techblog.checks.base import Finding, Severity
from techblog.content.models import ContentDocument, DocumentKind

_SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def summarize(findings: Iterable[Finding]) -> dict[str, int]:
    """Count findings per severity, always including every level."""
    counts = Counter(finding.severity for finding in findings)
    return {severity.value: counts.get(severity, 0) for severity in Severity}


def findings_table(findings: Sequence[Finding]) -> Table:
    table = Table(title="Content check", show_lines=False)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Location", overflow="fold")
    table.add_column("Check", no_wrap=True)
    table.add_column("Message", overflow="fold")
    for finding in findings:
        style = _SEVERITY_STYLES[finding.severity]
        table.add_row(
            f"[{style}]{finding.severity.value}[/{style}]",
            escape(finding.location),
            finding.check,
            escape(finding.message),
        )
    return table


def render_findings(console: Console, findings: Sequence[Finding]) -> None:
    """Print ``findings`` as a table followed by a one-line summary."""
    counts = summarize(findings)
    if findings:
        console.print(findings_table(findings))
    summary = f"{counts['error']} error(s), {counts['warning']} warning(s), {counts['info']} info"
    if counts["error"]:
        console.print(f"[bold red]✗ {summary}[/bold red]")
    elif counts["warning"]:
        console.print(f"[bold yellow]⚠ {summary}[/bold yellow]")
    else:
        console.print(f"[bold green]✓ No problems found[/bold green] [dim]({summary})[/dim]")


def findings_json(findings: Sequence[Finding]) -> str:
    return json.dumps(
        {"summary": summarize(findings), "findings": [finding.to_dict() for finding in findings]},
        indent=2,
        ensure_ascii=False,
    )


def posts_table(posts: Sequence[ContentDocument], *, baseurl: str = "") -> Table:
    table = Table(title=f"Posts ({len(posts)})")
    table.add_column("Date", no_wrap=True)
    table.add_column("Title", overflow="fold")
    table.add_column("Categories", overflow="fold")
    table.add_column("Tags", overflow="fold")
    table.add_column("URL", overflow="fold")
    for post in posts:
        meta = post.meta
        title = escape(post.title)
        if post.kind is not DocumentKind.POST:
            title = f"{title} [dim](draft)[/dim]"
        table.add_row(
            post.date.strftime("%Y-%m-%d") if post.date else "-",
            title,
            escape(", ".join(meta.categories)) if meta else "",
            escape(", ".join(meta.tags)) if meta else "",
            escape(f"{baseurl}{post.permalink}") if post.permalink else "-",
        )
    return table


def term_counts(posts: Iterable[ContentDocument]) -> tuple[Counter[str], Counter[str]]:
    """Return (category counts, tag counts) over ``posts``."""
    categories: Counter[str] = Counter()
    tags: Counter[str] = Counter()
    for post in posts:
        if post.meta is None:
            continue
        categories.update(post.meta.categories)
        tags.update(post.meta.tags)
    return categories, tags


def terms_table(title: str, counts: Counter[str]) -> Table:
    table = Table(title=title)
    table.add_column("Name", overflow="fold")
    table.add_column("Posts", justify="right")
    for name, count in sorted(counts.items(), key=lambda item: (-item[1], item[0].casefold())):
        table.add_row(escape(name), str(count))
    return table


__all__ = [
    "findings_json",
    "findings_table",
    "posts_table",
    "render_findings",
    "summarize",
    "term_counts",
    "terms_table",
]
