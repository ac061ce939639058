"""Validate front-matter of posts, drafts, pages and collection documents."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from techblog.checks.base import Finding, Severity, register
from techblog.content.dates import coerce_datetime, local_date
from techblog.content.models import ContentDocument, DocumentKind, is_scalar_title

if TYPE_CHECKING:
    from techblog.site import Site

CHECK_NAME = "front_matter"

_TERM_FIELDS = ("categories", "tags", "category", "tag")
_BOOLEAN_FIELDS = ("comments", "published")


def _finding(doc: ContentDocument, severity: Severity, code: str, message: str, line: int | None = None) -> Finding:
    return Finding(check=CHECK_NAME, severity=severity, path=doc.relative_path, message=message, code=code, line=line)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _has_invalid_title(doc: ContentDocument) -> bool:
    value = doc.metadata.get("title")
    return value is not None and not is_scalar_title(value)


def _check_structure(doc: ContentDocument) -> Iterator[Finding]:
    """Field-shape checks shared by every document kind."""
    meta = doc.metadata

    for key in _TERM_FIELDS:
        if key not in meta or meta[key] is None:
            continue
        value = meta[key]
        if isinstance(value, list):
            if not all(_is_scalar(item) for item in value):
                yield _finding(doc, Severity.ERROR, "invalid-terms", f"'{key}' must be a list of plain values")
        elif not _is_scalar(value):
            yield _finding(doc, Severity.ERROR, "invalid-terms", f"'{key}' must be a string or a list")

    for key in _BOOLEAN_FIELDS:
        if key in meta and not isinstance(meta[key], bool):
            yield _finding(doc, Severity.ERROR, "invalid-boolean", f"'{key}' must be true or false, got {meta[key]!r}")

    if _has_invalid_title(doc):
        kind = type(meta["title"]).__name__
        yield _finding(doc, Severity.ERROR, "invalid-title", f"'title' must be plain text, got a {kind}")

    if "permalink" in meta and not (isinstance(meta["permalink"], str) and meta["permalink"].strip()):
        yield _finding(doc, Severity.ERROR, "invalid-permalink", "'permalink' must be a non-empty string")


def _check_dates(doc: ContentDocument, site: Site) -> Iterator[Finding]:
    meta = doc.metadata
    tz = site.config.tzinfo
    parsed_date: datetime | None = None

    if "date" in meta:
        parsed_date = coerce_datetime(meta["date"], tz=tz)
        if parsed_date is None:
            yield _finding(doc, Severity.ERROR, "invalid-date", f"'date' is not a valid date: {meta['date']!r}")
    elif doc.meta is not None:
        parsed_date = doc.meta.date

    if "last_modified_at" in meta:
        modified = coerce_datetime(meta["last_modified_at"], tz=tz)
        if modified is None:
            yield _finding(
                doc,
                Severity.ERROR,
                "invalid-date",
                f"'last_modified_at' is not a valid date: {meta['last_modified_at']!r}",
            )
        elif parsed_date is not None and modified < parsed_date:
            yield _finding(doc, Severity.WARNING, "modified-before-date", "'last_modified_at' is earlier than 'date'")

    if not doc.is_post or parsed_date is None:
        return

    if doc.filename_date is not None and "date" in meta and local_date(parsed_date, tz) != doc.filename_date:
        yield _finding(
            doc,
            Severity.WARNING,
            "date-mismatch",
            f"front-matter date {local_date(parsed_date, tz).isoformat()} differs from filename date "
            f"{doc.filename_date.isoformat()}",
        )

    if doc.kind is DocumentKind.POST and not site.config.future and parsed_date > datetime.now(tz=UTC):
        yield _finding(
            doc,
            Severity.WARNING,
            "future-date",
            "post is dated in the future and will not be published while 'future' is false",
        )


def _check_post(doc: ContentDocument, site: Site) -> Iterator[Finding]:
    rules = site.tool_config.front_matter

    # Drafts are named without a date until they are moved into _posts/.
    if doc.kind is DocumentKind.POST and doc.filename_title is None:
        yield _finding(
            doc,
            Severity.ERROR,
            "invalid-filename",
            "post filename must look like YYYY-MM-DD-title.md; the generator skips it otherwise",
        )

    for key in rules.required_post_fields:
        if key == "title":
            if (doc.meta is None or not doc.meta.title) and not _has_invalid_title(doc):
                yield _finding(doc, Severity.ERROR, "missing-title", "post has no title")
        elif key == "date":
            if "date" not in doc.metadata and doc.filename_date is None and doc.kind is DocumentKind.POST:
                yield _finding(doc, Severity.ERROR, "missing-date", "post has no date")
        elif doc.metadata.get(key) in (None, "", []):
            yield _finding(doc, Severity.ERROR, "missing-field", f"required field '{key}' is missing")

    layout = doc.metadata.get("layout")
    if rules.allowed_layouts and layout is not None and str(layout) not in rules.allowed_layouts:
        yield _finding(
            doc,
            Severity.WARNING,
            "unknown-layout",
            f"layout '{layout}' is not one of: {', '.join(rules.allowed_layouts)}",
        )

    for key in rules.recommended_fields:
        if doc.metadata.get(key) in (None, "", []):
            yield _finding(doc, Severity.INFO, "missing-recommended", f"recommended field '{key}' is missing")


def _check_page(doc: ContentDocument, site: Site) -> Iterator[Finding]:
    if _has_invalid_title(doc):
        return
    if site.tool_config.front_matter.require_page_title and (doc.meta is None or not doc.meta.title):
        yield _finding(doc, Severity.ERROR, "missing-title", "page has no title")


def check_document(doc: ContentDocument, site: Site) -> list[Finding]:
    """All front-matter findings for one document."""
    if doc.error is not None:
        return [_finding(doc, Severity.ERROR, "invalid-front-matter", str(doc.error), line=doc.error.line)]
    if not doc.has_front_matter:
        return [
            _finding(
                doc,
                Severity.ERROR,
                "missing-front-matter",
                "file has no front-matter block; the generator will not render it",
                line=1,
            )
        ]

    findings = list(_check_structure(doc))
    findings.extend(_check_dates(doc, site))
    if doc.is_post:
        findings.extend(_check_post(doc, site))
    else:
        findings.extend(_check_page(doc, site))
    return findings


@register(CHECK_NAME)
def check_front_matter(site: Site) -> Iterator[Finding]:
    """Every document's front-matter parses and carries valid metadata."""
    for doc in site.documents:
        yield from check_document(doc, site)


__all__ = ["CHECK_NAME", "check_document", "check_front_matter"]
