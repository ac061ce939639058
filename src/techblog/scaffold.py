"""Create new posts with front-matter the theme expects."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from techblog.content.dates import format_front_matter_date
from techblog.content.discovery import POSTS_DIR
from techblog.content.frontmatter import dump_frontmatter
from techblog.content.slugs import safe_path_join, slugify

if TYPE_CHECKING:
    from collections.abc import Sequence

    from techblog.site import Site

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
POST_TEMPLATE = "post.md.jinja"
DEFAULT_LAYOUT = "post"


def _render_body(**context: Any) -> str:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "htm", "xml"]),
        keep_trailing_newline=True,
    )
    return env.get_template(POST_TEMPLATE).render(**context)


def post_front_matter(
    title: str,
    when: datetime,
    *,
    categories: Sequence[str] = (),
    tags: Sequence[str] = (),
    description: str = "",
    layout: str = DEFAULT_LAYOUT,
) -> dict[str, Any]:
    """Front-matter for a new post, in the key order authors expect to read it."""
    metadata: dict[str, Any] = {
        "layout": layout,
        "title": title,
        "date": format_front_matter_date(when),
        "categories": list(categories),
        "tags": [tag.lower() for tag in tags],
    }
    if description:
        metadata["description"] = description
    metadata["comments"] = True
    return metadata


def create_post(
    site: Site,
    title: str,
    *,
    categories: Sequence[str] = (),
    tags: Sequence[str] = (),
    description: str = "",
    now: datetime | None = None,
) -> Path:
    """Write ``_posts/YYYY-MM-DD-<slug>.md`` and return its path.

    The date is taken in the site's timezone. When a post with the same
    filename exists, ``-2``, ``-3`` ... are appended to the slug; existing
    files are never overwritten.

    Raises:
        ValueError: If ``title`` is blank.
        PathTraversalError: If the generated filename would leave ``_posts/``.

    """
    title = title.strip()
    if not title:
        msg = "post title must not be blank"
        raise ValueError(msg)

    tz = site.config.tzinfo
    when = (now or datetime.now(tz=UTC)).astimezone(tz).replace(microsecond=0)
    date_prefix = when.strftime("%Y-%m-%d")
    slug = slugify(title)

    posts_dir = site.root / site.config.collections_dir.strip("/") / POSTS_DIR
    posts_dir.mkdir(parents=True, exist_ok=True)

    metadata = post_front_matter(
        title,
        when,
        categories=categories,
        tags=tags,
        description=description,
        layout=str(site.config.theme_setting("post_layout", DEFAULT_LAYOUT)),
    )
    body = _render_body(title=title, description=description)
    text = dump_frontmatter(metadata, body)

    suffix = 1
    while True:
        name = f"{date_prefix}-{slug}.md" if suffix == 1 else f"{date_prefix}-{slug}-{suffix}.md"
        path = safe_path_join(posts_dir, name)
        try:
            with path.open("x", encoding="utf-8") as handle:
                handle.write(text)
        except FileExistsError:
            suffix += 1
            continue
        break

    logger.info("Created %s", path.relative_to(site.root).as_posix())
    return path


__all__ = ["POST_TEMPLATE", "create_post", "post_front_matter"]
