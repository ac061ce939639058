from __future__ import annotations

from pathlib import Path

from techblog.checks import Severity, run_checks
from techblog.checks.duplicates import body_fingerprint
from techblog.site import load_site


def test_body_fingerprint_ignores_whitespace_layout() -> None:
    assert body_fingerprint("Hello   world\n\n") == body_fingerprint("Hello world")
    assert body_fingerprint("Hello world") != body_fingerprint("Hello, world")
    assert body_fingerprint(" \n ") is None


def test_republished_post_is_reported_on_both_copies(site_root: Path, write_file) -> None:
    original = (site_root / "_posts/2023-04-01-caching-basics.md").read_text(encoding="utf-8")
    write_file("_posts/2023-09-10-caching-basics-v2.md", original.replace("title: Caching basics", "title: Caching 2"))

    findings = run_checks(load_site(site_root), ["duplicates"])

    assert sorted((f.path, f.code) for f in findings) == [
        ("_posts/2023-04-01-caching-basics.md", "duplicate-body"),
        ("_posts/2023-09-10-caching-basics-v2.md", "duplicate-body"),
    ]
    assert all(f.severity is Severity.WARNING for f in findings)


def test_titles_compare_case_insensitively(site_root: Path, write_file) -> None:
    write_file("_posts/2023-09-10-again.md", "---\ntitle: CACHING BASICS\n---\nA different take.\n")

    findings = run_checks(load_site(site_root), ["duplicates"])

    assert {f.code for f in findings} == {"duplicate-title"}
    assert len(findings) == 2


def test_empty_bodies_are_not_duplicates(site_root: Path, write_file) -> None:
    write_file("_posts/2023-09-10-a.md", "---\ntitle: A\n---\n")
    write_file("_posts/2023-09-11-b.md", "---\ntitle: B\n---\n")

    assert run_checks(load_site(site_root), ["duplicates"]) == []
