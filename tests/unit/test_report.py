from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console

from techblog.checks import Finding, Severity
from techblog.content.models import ContentDocument, DocumentKind, PostMetadata
from techblog.report import findings_json, posts_table, render_findings, summarize, term_counts
from techblog.site import Site

FINDINGS = [
    Finding(check="links", severity=Severity.ERROR, path="a.md", message="broken", code="broken-link", line=3),
    Finding(check="front_matter", severity=Severity.INFO, path="b.md", message="no description"),
]


def test_summarize_counts_every_level() -> None:
    assert summarize(FINDINGS) == {"error": 1, "warning": 0, "info": 1}
    assert summarize([]) == {"error": 0, "warning": 0, "info": 0}


def test_findings_json_is_machine_readable() -> None:
    data = json.loads(findings_json(FINDINGS))

    assert data["summary"]["error"] == 1
    assert data["findings"][0]["code"] == "broken-link"
    assert data["findings"][0]["line"] == 3


def test_render_findings_prints_table_and_summary() -> None:
    console = Console(record=True, width=120)

    render_findings(console, FINDINGS)

    text = console.export_text()
    assert "a.md:3" in text
    assert "1 error(s)" in text


def test_render_findings_reports_clean_run() -> None:
    console = Console(record=True, width=120)

    render_findings(console, [])

    assert "No problems found" in console.export_text()


def test_term_counts(site: Site) -> None:
    categories, tags = term_counts(site.posts())

    assert categories == {"Systems": 1, "Caching": 1, "Databases": 1}
    assert tags["postgresql"] == 1


def test_tables_print_bracketed_text_literally() -> None:
    post = ContentDocument(
        path=Path("_posts/2023-07-01-hosts.md"),
        relative_path="_posts/2023-07-01-hosts.md",
        kind=DocumentKind.POST,
        meta=PostMetadata(title="Editing [/etc/hosts] safely", tags=("[bold]",)),
        permalink="/posts/hosts/",
        output=True,
    )
    finding = Finding(
        check="links", severity=Severity.ERROR, path="[draft].md", message="target '[/x]' does not exist"
    )
    console = Console(record=True, width=200)

    console.print(posts_table([post]))
    render_findings(console, [finding])

    text = console.export_text()
    assert "Editing [/etc/hosts] safely" in text
    assert "[bold]" in text
    assert "[draft].md" in text
    assert "target '[/x]' does not exist" in text
