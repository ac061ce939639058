"""Opt-in check that runs a real generator build."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from techblog.build import BuildResult, SiteBuilder
from techblog.checks.base import Finding, Severity, register
from techblog.config.schema import SITE_CONFIG_NAMES

if TYPE_CHECKING:
    from techblog.site import Site

CHECK_NAME = "build"


def build_findings(result: BuildResult, *, fail_on_warnings: bool = True) -> list[Finding]:
    """Turn generator diagnostics into findings.

    Generator warnings are errors when ``fail_on_warnings`` is set, so a
    deploy that would render a broken page fails early.
    """
    warning_severity = Severity.ERROR if fail_on_warnings else Severity.WARNING
    findings = [
        Finding(
            check=CHECK_NAME,
            severity=Severity.ERROR if diag.level == "error" else warning_severity,
            path=diag.path or SITE_CONFIG_NAMES[0],
            message=diag.message,
            code=f"build-{diag.level}",
        )
        for diag in result.diagnostics
    ]
    if not result.ok:
        findings.append(
            Finding(
                check=CHECK_NAME,
                severity=Severity.ERROR,
                path=SITE_CONFIG_NAMES[0],
                message=f"generator exited with code {result.returncode}",
                code="build-failed",
            )
        )
    return findings


@register(CHECK_NAME)
def check_build(site: Site) -> Iterator[Finding]:
    config = site.tool_config.build
    result = SiteBuilder(site, config).build(check=False)
    yield from build_findings(result, fail_on_warnings=config.fail_on_warnings)


__all__ = ["CHECK_NAME", "build_findings", "check_build"]
