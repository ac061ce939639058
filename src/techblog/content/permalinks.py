"""Predict the output URL the generator assigns to each document."""

from __future__ import annotations

import posixpath
import re
from datetime import UTC, datetime
from datetime import tzinfo as TZInfo
from pathlib import PurePosixPath
from typing import Final
from urllib.parse import unquote

from techblog.content.slugs import default_slug, pretty_slug

OUTPUT_EXT: Final[str] = ".html"

PERMALINK_STYLES: Final[dict[str, str]] = {
    "date": "/:categories/:year/:month/:day/:title:output_ext",
    "pretty": "/:categories/:year/:month/:day/:title/",
    "ordinal": "/:categories/:year/:y_day/:title:output_ext",
    "weekdate": "/:categories/:year/W:week/:short_day/:title:output_ext",
    "none": "/:categories/:title:output_ext",
}

DEFAULT_COLLECTION_PERMALINK: Final[str] = "/:collection/:path:output_ext"

_PLACEHOLDER_RE = re.compile(r":([a-z_]+)")
_MULTI_SLASH_RE = re.compile(r"/{2,}")


def resolve_style(permalink: str) -> str:
    """Return the template for a built-in style name, or ``permalink`` itself."""
    return PERMALINK_STYLES.get(permalink.strip(), permalink.strip())


def expand(template: str, values: dict[str, str]) -> str:
    """Substitute ``:placeholder`` tokens and tidy the resulting URL.

    Unknown placeholders are left untouched. Empty segments collapse so a post
    without categories does not produce ``//``.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in values:
            return values[name]
        # ``:title:output_ext`` style adjacency: try the longest known prefix.
        for end in range(len(name), 0, -1):
            if name[:end] in values:
                return values[name[:end]] + name[end:]
        return match.group(0)

    url = _PLACEHOLDER_RE.sub(_replace, template)
    url = _MULTI_SLASH_RE.sub("/", url)
    if not url.startswith("/"):
        url = f"/{url}"
    return url


def _date_values(when: datetime | None, tz: TZInfo) -> dict[str, str]:
    if when is None:
        return {}
    local = when.astimezone(tz)
    return {
        "year": local.strftime("%Y"),
        "month": local.strftime("%m"),
        "i_month": str(local.month),
        "day": local.strftime("%d"),
        "i_day": str(local.day),
        "short_year": local.strftime("%y"),
        "y_day": local.strftime("%j"),
        "hour": local.strftime("%H"),
        "minute": local.strftime("%M"),
        "second": local.strftime("%S"),
        "week": local.strftime("%V"),
        "short_day": local.strftime("%a"),
        "long_day": local.strftime("%A"),
    }


def _categories_value(categories: tuple[str, ...]) -> str:
    return "/".join(dict.fromkeys(c.lower() for c in categories if c))


def post_permalink(
    *,
    site_permalink: str,
    title: str,
    when: datetime | None,
    categories: tuple[str, ...] = (),
    slug: str | None = None,
    front_matter_permalink: str | None = None,
    tz: TZInfo = UTC,
) -> str:
    """URL of a post.

    Args:
        site_permalink: Site-wide ``permalink`` (style name or template)
        title: Title part of the filename
        when: Post date (front-matter or filename)
        categories: All categories, including directory-derived ones
        slug: Front-matter ``slug`` override for ``:title``
        front_matter_permalink: Front-matter ``permalink`` (wins over the site setting)
        tz: Site timezone

    """
    template = front_matter_permalink or resolve_style(site_permalink)
    title_slug = pretty_slug(slug) if slug else pretty_slug(title)
    values = {
        **_date_values(when, tz),
        "title": title_slug,
        "slug": default_slug(slug or title),
        "name": title_slug,
        "categories": _categories_value(categories),
        "collection": "posts",
        "output_ext": OUTPUT_EXT,
    }
    return expand(template, values)


def page_permalink(
    relative_path: str,
    *,
    site_permalink: str,
    front_matter_permalink: str | None = None,
) -> str:
    """URL of a standalone page such as ``about.md`` or ``docs/index.html``."""
    path = PurePosixPath(relative_path)
    directory = "" if str(path.parent) == "." else str(path.parent)
    basename = path.stem

    if front_matter_permalink:
        values = {"path": directory, "basename": basename, "output_ext": OUTPUT_EXT, "name": basename}
        return expand(front_matter_permalink, values)

    if basename == "index":
        return expand(f"/{directory}/", {})

    if resolve_style(site_permalink).endswith("/"):
        return expand(f"/{directory}/{basename}/", {})
    return expand(f"/{directory}/{basename}{OUTPUT_EXT}", {})


def collection_permalink(
    label: str,
    path_in_collection: str,
    *,
    template: str | None,
    title: str | None = None,
    slug: str | None = None,
    when: datetime | None = None,
    categories: tuple[str, ...] = (),
    front_matter_permalink: str | None = None,
    tz: TZInfo = UTC,
) -> str:
    """URL of a document in an output collection (e.g. theme tabs)."""
    path = PurePosixPath(path_in_collection)
    stem_path = str(path.with_suffix(""))
    name = path.stem
    values = {
        **_date_values(when, tz),
        "collection": label,
        "path": stem_path,
        "name": default_slug(name),
        "title": pretty_slug(slug or name),
        "slug": default_slug(slug or name),
        "categories": _categories_value(categories),
        "output_ext": OUTPUT_EXT,
    }
    chosen = front_matter_permalink or (resolve_style(template) if template else DEFAULT_COLLECTION_PERMALINK)
    url = expand(chosen, values)
    if url.endswith(f"/index{OUTPUT_EXT}"):
        url = url[: -len(f"index{OUTPUT_EXT}")]
    return url


def static_url(relative_path: str) -> str:
    """URL of a static file copied verbatim."""
    return expand(f"/{relative_path}", {})


def canonical_url(url: str) -> str:
    """Fold the spellings a static host serves identically onto one key.

    Examples:
        >>> canonical_url("/about/")
        '/about'
        >>> canonical_url("/about.html")
        '/about'
        >>> canonical_url("/about/index.html#team")
        '/about'
        >>> canonical_url("/")
        '/'

    """
    path = url.split("#", 1)[0].split("?", 1)[0]
    path = unquote(path)
    if not path.startswith("/"):
        path = f"/{path}"
    path = posixpath.normpath(path) + ("/" if path.endswith("/") else "")
    path = _MULTI_SLASH_RE.sub("/", path)
    if path.endswith("/index.html"):
        path = path[: -len("index.html")]
    elif path.endswith(OUTPUT_EXT):
        path = path[: -len(OUTPUT_EXT)]
    path = path.rstrip("/")
    return path or "/"


__all__ = [
    "DEFAULT_COLLECTION_PERMALINK",
    "OUTPUT_EXT",
    "PERMALINK_STYLES",
    "canonical_url",
    "collection_permalink",
    "expand",
    "page_permalink",
    "post_permalink",
    "resolve_style",
    "static_url",
]
