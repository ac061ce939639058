"""Findings, severities and the check registry.

A check is a plain function taking a :class:`~techblog.site.Site` and
yielding :class:`Finding` objects. Content problems are reported, never
raised, so one broken post does not hide the rest.

Usage:
    from techblog.checks import run_checks

    for finding in run_checks(site):
        print(f"{finding.location}: {finding.message}")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from techblog.exceptions import TechblogError

if TYPE_CHECKING:
    from techblog.site import Site

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """Finding severity levels."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}[self]


@dataclass(frozen=True, slots=True)
class Finding:
    """One problem found in the site's content.

    Attributes:
        check: Name of the check that produced it (e.g. "links")
        severity: Error, warning or info
        path: Site-relative path of the offending file
        message: Human-readable message
        code: Stable short identifier (e.g. "broken-link")
        line: 1-based line in ``path``, when known

    """

    check: str
    severity: Severity
    path: str
    message: str
    code: str = ""
    line: int | None = None

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}" if self.line is not None else self.path

    def to_dict(self) -> dict[str, object]:
        return {
            "check": self.check,
            "severity": self.severity.value,
            "path": self.path,
            "line": self.line,
            "code": self.code,
            "message": self.message,
        }


CheckFunc = Callable[["Site"], Iterable[Finding]]

_REGISTRY: dict[str, CheckFunc] = {}


class UnknownCheckError(TechblogError):
    """Raised when a check name is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(f"Unknown check '{name}'. Available checks: {', '.join(available)}")


def register(name: str) -> Callable[[CheckFunc], CheckFunc]:
    """Register a check function under ``name``."""

    def decorator(func: CheckFunc) -> CheckFunc:
        _REGISTRY[name] = func
        return func

    return decorator


def available_checks() -> list[str]:
    return list(_REGISTRY)


def get_check(name: str) -> CheckFunc:
    try:
        return _REGISTRY[name]
    except KeyError:
        raise UnknownCheckError(name, available_checks()) from None


def sort_findings(findings: Iterable[Finding]) -> list[Finding]:
    return sorted(findings, key=lambda f: (f.path, f.line or 0, f.severity.rank, f.check, f.message))


def run_checks(site: Site, only: Iterable[str] | None = None) -> list[Finding]:
    """Run the selected checks against ``site``.

    Args:
        site: Loaded site
        only: Check names to run; defaults to the checks enabled in
            ``.techblog/config.yml``

    Raises:
        UnknownCheckError: If ``only`` names an unregistered check.

    """
    if only:
        names = list(dict.fromkeys(only))
    else:
        enabled = set(site.tool_config.checks.enabled())
        names = [name for name in available_checks() if name in enabled]

    checks = [(name, get_check(name)) for name in names]
    findings: list[Finding] = []
    for name, check in checks:
        produced = list(check(site))
        logger.debug("Check %s produced %d finding(s)", name, len(produced))
        findings.extend(produced)
    return sort_findings(findings)


def has_failures(findings: Iterable[Finding], *, strict: bool = False) -> bool:
    """Whether ``findings`` should fail a run: any error, or any warning when ``strict``."""
    failing = {Severity.ERROR, Severity.WARNING} if strict else {Severity.ERROR}
    return any(finding.severity in failing for finding in findings)


__all__ = [
    "CheckFunc",
    "Finding",
    "Severity",
    "UnknownCheckError",
    "available_checks",
    "get_check",
    "has_failures",
    "register",
    "run_checks",
    "sort_findings",
]
