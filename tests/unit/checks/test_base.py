from __future__ import annotations

from pathlib import Path

import pytest

from techblog.checks import (
    Finding,
    Severity,
    UnknownCheckError,
    available_checks,
    has_failures,
    run_checks,
    sort_findings,
)
from techblog.site import Site, load_site


def _finding(severity: Severity, path: str = "a.md", line: int | None = None) -> Finding:
    return Finding(check="test", severity=severity, path=path, message="m", line=line)


def test_builtin_checks_are_registered() -> None:
    assert {"front_matter", "links", "permalinks", "duplicates", "ordering", "build"} <= set(available_checks())


def test_valid_site_has_no_findings(site: Site) -> None:
    assert run_checks(site) == []


def test_disabled_checks_only_run_when_named(site_root: Path, write_file) -> None:
    write_file("_posts/2023-06-01-copy.md", "---\ntitle: Caching basics\ndescription: d\n---\nOther body.\n")
    write_file(".techblog/config.yml", "checks:\n  duplicates: false\n")
    loaded = load_site(site_root)

    assert [f for f in run_checks(loaded) if f.check == "duplicates"] == []
    assert [f.code for f in run_checks(loaded, ["duplicates"])] == ["duplicate-title", "duplicate-title"]


def test_unknown_check_name_raises(site: Site) -> None:
    with pytest.raises(UnknownCheckError, match="Available checks"):
        run_checks(site, ["spelling"])


def test_has_failures_respects_strict() -> None:
    warnings = [_finding(Severity.WARNING), _finding(Severity.INFO)]

    assert not has_failures(warnings)
    assert has_failures(warnings, strict=True)
    assert has_failures([_finding(Severity.ERROR)])


def test_sort_findings_orders_by_path_line_severity() -> None:
    findings = [
        _finding(Severity.INFO, "b.md", 1),
        _finding(Severity.WARNING, "a.md", 5),
        _finding(Severity.ERROR, "a.md", 5),
        _finding(Severity.ERROR, "a.md", 2),
    ]

    ordered = sort_findings(findings)

    assert [(f.path, f.line, f.severity) for f in ordered] == [
        ("a.md", 2, Severity.ERROR),
        ("a.md", 5, Severity.ERROR),
        ("a.md", 5, Severity.WARNING),
        ("b.md", 1, Severity.INFO),
    ]


def test_finding_location_and_dict() -> None:
    finding = Finding(check="links", severity=Severity.ERROR, path="a.md", message="m", code="broken-link", line=3)

    assert finding.location == "a.md:3"
    assert finding.to_dict() == {
        "check": "links",
        "severity": "error",
        "path": "a.md",
        "line": 3,
        "code": "broken-link",
        "message": "m",
    }
