"""Content checks.

Importing this package registers the built-in checks in the order they run.
"""

from techblog.checks import build, duplicates, front_matter, links, ordering, permalinks  # noqa: F401
from techblog.checks.base import (
    CheckFunc,
    Finding,
    Severity,
    UnknownCheckError,
    available_checks,
    get_check,
    has_failures,
    register,
    run_checks,
    sort_findings,
)

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
