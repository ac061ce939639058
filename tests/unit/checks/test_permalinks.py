from __future__ import annotations

from pathlib import Path

from techblog.checks import Severity, run_checks
from techblog.site import load_site


def test_page_and_tab_with_same_url_collide(site_root: Path, write_file) -> None:
    write_file("about.md", "---\ntitle: About again\n---\n")

    findings = run_checks(load_site(site_root), ["permalinks"])

    assert {f.path for f in findings} == {"about.md", "_tabs/about.md"}
    assert all(f.severity is Severity.ERROR and f.code == "permalink-collision" for f in findings)
    assert "_tabs/about.md" in next(f.message for f in findings if f.path == "about.md")


def test_html_and_directory_spellings_collide(site_root: Path, write_file) -> None:
    write_file("_posts/2023-06-01-a.md", "---\ntitle: A\npermalink: /notes.html\n---\n")
    write_file("_posts/2023-06-02-b.md", "---\ntitle: B\npermalink: /notes/\n---\n")

    findings = run_checks(load_site(site_root), ["permalinks"])

    assert sorted(f.path for f in findings) == ["_posts/2023-06-01-a.md", "_posts/2023-06-02-b.md"]


def test_document_colliding_with_static_file(site_root: Path, write_file) -> None:
    write_file("feed.xml", "<feed/>\n")
    write_file("feed.md", "---\ntitle: Feed\npermalink: /feed.xml\n---\n")

    findings = run_checks(load_site(site_root), ["permalinks"])

    assert sorted(f.path for f in findings) == ["feed.md", "feed.xml"]


def test_unpublished_documents_do_not_collide(site_root: Path, write_file) -> None:
    write_file("_posts/2023-06-01-a.md", "---\ntitle: A\npermalink: /about/\npublished: false\n---\n")

    assert run_checks(load_site(site_root), ["permalinks"]) == []
