"""Find posts that were published twice."""

from __future__ import annotations

import hashlib
import re
from collections import defaultdict
from collections.abc import Iterator
from typing import TYPE_CHECKING

from techblog.checks.base import Finding, Severity, register
from techblog.content.models import ContentDocument, DocumentKind

if TYPE_CHECKING:
    from techblog.site import Site

CHECK_NAME = "duplicates"

_WHITESPACE_RE = re.compile(r"\s+")


def body_fingerprint(body: str) -> str | None:
    """Hash of ``body`` with whitespace collapsed; None for empty bodies."""
    normalized = _WHITESPACE_RE.sub(" ", body).strip()
    if not normalized:
        return None
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def _groups(docs: list[ContentDocument], key_func) -> list[list[ContentDocument]]:
    grouped: dict[str, list[ContentDocument]] = defaultdict(list)
    for doc in docs:
        key = key_func(doc)
        if key:
            grouped[key].append(doc)
    return [group for group in grouped.values() if len(group) > 1]


def _report(group: list[ContentDocument], code: str, what: str) -> Iterator[Finding]:
    for doc in group:
        others = ", ".join(other.relative_path for other in group if other is not doc)
        yield Finding(
            check=CHECK_NAME,
            severity=Severity.WARNING,
            path=doc.relative_path,
            message=f"{what} as {others}",
            code=code,
        )


@register(CHECK_NAME)
def check_duplicates(site: Site) -> Iterator[Finding]:
    posts = [doc for doc in site.documents if doc.kind is DocumentKind.POST and doc.error is None]

    for group in _groups(posts, lambda doc: body_fingerprint(doc.body)):
        yield from _report(group, "duplicate-body", "same content")

    for group in _groups(posts, lambda doc: doc.meta.title.casefold() if doc.meta and doc.meta.title else None):
        yield from _report(group, "duplicate-title", "same title")


__all__ = ["CHECK_NAME", "body_fingerprint", "check_duplicates"]
