"""Slug and path-safety helpers."""

from __future__ import annotations

import re
from pathlib import Path

from pymdownx.slugs import slugify as _md_slugify

from techblog.exceptions import PathTraversalError

# Pre-configured slugifiers, reused across calls.
# NFKD transliterates accents to ASCII equivalents for filenames; heading ids
# keep Unicode the way GFM-flavoured kramdown does.
_slugify_filename = _md_slugify(case="lower", separator="-", normalize="NFKD")
_slugify_heading = _md_slugify(case="lower", separator="-")

# Characters the generator's "pretty" slug mode keeps in ``:title``.
_PRETTY_DISALLOWED = re.compile(r"(?:[^\w._~!$&'()+,;=@]|_)+")
# The "default" slug mode keeps only letters and digits.
_DEFAULT_DISALLOWED = re.compile(r"(?:[^\w]|_)+")


def slugify(text: str, max_len: int = 60) -> str:
    """Convert text to an ASCII, URL-friendly slug for new post filenames.

    Examples:
        >>> slugify("Tuning PostgreSQL for Write-Heavy Loads!")
        'tuning-postgresql-for-write-heavy-loads'
        >>> slugify("Café à Paris")
        'cafe-a-paris'
        >>> slugify("../../etc/passwd")
        'etcpasswd'

    """
    if text is None:
        return ""

    slug = _slugify_filename(text, sep="-")
    slug = slug.encode("ascii", "ignore").decode("ascii")

    slug = slug or "post"
    if len(slug) > max_len:
        slug = slug[:max_len]
    return slug.rstrip("-")


def heading_slug(text: str) -> str:
    """Auto-generated anchor id for a heading, GFM style.

    Examples:
        >>> heading_slug("Why FFI calls are slow")
        'why-ffi-calls-are-slow'

    """
    return _slugify_heading(text, sep="-")


def pretty_slug(text: str) -> str:
    """Slug used for the ``:title`` permalink placeholder.

    Keeps case and URL-safe punctuation, folds everything else to hyphens.
    """
    return _PRETTY_DISALLOWED.sub("-", text).strip("-")


def default_slug(text: str) -> str:
    """Slug used for the ``:slug`` permalink placeholder.

    Examples:
        >>> default_slug("v1.2 release notes!")
        'v1-2-release-notes'

    """
    return _DEFAULT_DISALLOWED.sub("-", text).strip("-").lower()


def safe_path_join(base_dir: Path, *parts: str) -> Path:
    """Join ``parts`` onto ``base_dir`` and ensure the result stays inside it.

    Raises:
        PathTraversalError: If the resulting path would escape ``base_dir``.

    """
    if any(Path(part).is_absolute() for part in parts):
        absolute_part = next(part for part in parts if Path(part).is_absolute())
        msg = f"Absolute paths not allowed: {absolute_part}"
        raise PathTraversalError(msg)

    base_resolved = base_dir.resolve()
    candidate_path = base_resolved.joinpath(*parts)

    try:
        candidate_resolved = candidate_path.resolve()
        candidate_resolved.relative_to(base_resolved)
    except (ValueError, OSError) as err:
        msg = f"Path traversal detected: joining {parts} to {base_dir} would escape base directory"
        raise PathTraversalError(msg) from err

    return candidate_resolved


__all__ = ["default_slug", "heading_slug", "pretty_slug", "safe_path_join", "slugify"]
