"""Check the sort key of ordered collections such as theme tabs."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from techblog.checks.base import Finding, Severity, register
from techblog.content.models import ContentDocument, DocumentKind

if TYPE_CHECKING:
    from techblog.site import Site

CHECK_NAME = "ordering"


def _sort_value(doc: ContentDocument, key: str) -> Any:
    if key == "order" and doc.meta is not None:
        return doc.meta.order
    return doc.metadata.get(key)


@register(CHECK_NAME)
def check_ordering(site: Site) -> Iterator[Finding]:
    """Every document of a ``sort_by`` collection has a distinct sort value."""
    for label, collection in sorted(site.config.collections.items()):
        key = collection.sort_by
        if not key:
            continue
        docs = [
            doc
            for doc in site.documents
            if doc.kind is DocumentKind.COLLECTION and doc.collection == label and doc.error is None
        ]

        seen: dict[str, list[ContentDocument]] = defaultdict(list)
        for doc in docs:
            value = _sort_value(doc, key)
            if value is None:
                yield Finding(
                    check=CHECK_NAME,
                    severity=Severity.WARNING,
                    path=doc.relative_path,
                    message=f"'{key}' is missing; collection '{label}' is sorted by it",
                    code="missing-sort-key",
                )
                continue
            seen[str(value)].append(doc)

        for value, group in sorted(seen.items()):
            if len(group) < 2:
                continue
            for doc in group:
                others = ", ".join(other.relative_path for other in group if other is not doc)
                yield Finding(
                    check=CHECK_NAME,
                    severity=Severity.WARNING,
                    path=doc.relative_path,
                    message=f"'{key}: {value}' is shared with {others}",
                    code="duplicate-sort-key",
                )


__all__ = ["CHECK_NAME", "check_ordering"]
