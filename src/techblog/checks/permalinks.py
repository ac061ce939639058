"""Detect output URL collisions between documents and static files."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from techblog.checks.base import Finding, Severity, register

if TYPE_CHECKING:
    from techblog.site import Site

CHECK_NAME = "permalinks"


@register(CHECK_NAME)
def check_permalinks(site: Site) -> Iterator[Finding]:
    """Two published files must never claim the same URL.

    ``/about/``, ``/about.html`` and ``/about/index.html`` count as the same
    URL. Each colliding file gets its own finding naming the others.
    """
    for key, targets in sorted(site.url_collisions().items()):
        if all(target.is_asset for target in targets):
            # Static files cannot share a path on disk; differing spellings are not a real clash.
            continue
        for target in targets:
            others = ", ".join(other.relative_path for other in targets if other is not target)
            yield Finding(
                check=CHECK_NAME,
                severity=Severity.ERROR,
                path=target.relative_path,
                message=f"output URL '{target.url}' collides with {others} (both render to {key})",
                code="permalink-collision",
            )


__all__ = ["CHECK_NAME", "check_permalinks"]
