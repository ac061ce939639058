"""Typed views of posts, pages and collection documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from datetime import tzinfo as TZInfo
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from techblog.content.dates import coerce_datetime

if TYPE_CHECKING:
    from techblog.content.frontmatter import FrontMatterError

# Front-matter keys mapped onto PostMetadata attributes; everything else lands in ``extra``.
KNOWN_FIELDS = frozenset({
    "title", "date", "last_modified_at", "categories", "category", "tags", "tag",
    "description", "layout", "comments", "published", "permalink", "slug", "order", "icon",
})


def is_scalar_title(value: Any) -> bool:
    """Titles render as text; lists, mappings and booleans do not make one."""
    return isinstance(value, (str, int, float, date)) and not isinstance(value, bool)


class DocumentKind(str, Enum):
    """Where a document came from, which decides how the generator treats it."""

    POST = "post"
    DRAFT = "draft"
    PAGE = "page"
    COLLECTION = "collection"

    @property
    def default_type(self) -> str:
        """Name used by ``defaults:`` scopes (``type: posts`` etc.)."""
        return {
            DocumentKind.POST: "posts",
            DocumentKind.DRAFT: "drafts",
            DocumentKind.PAGE: "pages",
            DocumentKind.COLLECTION: "",
        }[self]


def as_terms(value: Any, *, split: bool = True) -> tuple[str, ...]:
    """Normalise a categories/tags value into a tuple of strings.

    The generator accepts a YAML list or a whitespace-separated string.
    Values of any other shape yield an empty tuple; the front-matter check
    reports them.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(value.split()) if split else ((value.strip(),) if value.strip() else ())
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value if item is not None and not isinstance(item, (dict, list)))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (str(value),)
    return ()


def _dedupe(terms: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(terms))


@dataclass(frozen=True, slots=True)
class PostMetadata:
    """Front-matter of one document after defaults, with types normalised.

    Invalid values are not rejected here: dates that do not parse become
    ``None`` and odd category shapes become empty tuples, so listing commands
    keep working while the front-matter check reports the problem.
    """

    title: str
    date: datetime | None = None
    last_modified_at: datetime | None = None
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    description: str = ""
    layout: str | None = None
    comments: bool | None = None
    published: bool = True
    permalink: str | None = None
    slug: str | None = None
    order: Any = None
    icon: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls,
        meta: dict[str, Any],
        *,
        tz: TZInfo = UTC,
        fallback_date: date | None = None,
        path_categories: tuple[str, ...] = (),
    ) -> PostMetadata:
        """Build metadata from a merged front-matter mapping.

        Args:
            meta: Front-matter with defaults already applied
            tz: Site timezone for naive dates
            fallback_date: Date taken from a post filename, used when ``date`` is absent
            path_categories: Categories implied by the directories above ``_posts``

        """
        title_value = meta.get("title")
        title = str(title_value).strip() if is_scalar_title(title_value) else ""

        parsed_date = coerce_datetime(meta.get("date"), tz=tz)
        if parsed_date is None and "date" not in meta and fallback_date is not None:
            parsed_date = coerce_datetime(fallback_date, tz=tz)

        categories = _dedupe(
            path_categories + as_terms(meta.get("categories")) + as_terms(meta.get("category"), split=False)
        )
        tags = _dedupe(as_terms(meta.get("tags")) + as_terms(meta.get("tag"), split=False))

        comments = meta.get("comments")
        published = meta.get("published", True)
        permalink = meta.get("permalink")
        slug = meta.get("slug")
        icon = meta.get("icon")
        description = meta.get("description")

        return cls(
            title=title,
            date=parsed_date,
            last_modified_at=coerce_datetime(meta.get("last_modified_at"), tz=tz),
            categories=categories,
            tags=tags,
            description="" if description is None else str(description).strip(),
            layout=None if meta.get("layout") is None else str(meta["layout"]),
            comments=comments if isinstance(comments, bool) else None,
            published=published if isinstance(published, bool) else True,
            permalink=permalink if isinstance(permalink, str) and permalink.strip() else None,
            slug=None if slug is None else str(slug),
            order=meta.get("order"),
            icon=icon if isinstance(icon, str) else None,
            extra={k: v for k, v in meta.items() if k not in KNOWN_FIELDS},
        )


@dataclass(frozen=True, slots=True)
class ContentDocument:
    """A content file as the generator will see it.

    Attributes:
        path: Absolute path of the source file
        relative_path: POSIX path relative to the site root
        kind: Post, draft, page or collection document
        metadata: Front-matter merged with ``defaults:`` from the site config
        meta: Typed metadata, None when the front-matter could not be parsed
        body: Content after the front-matter block
        body_line: Source line on which ``body`` starts
        collection: Collection label for collection documents
        filename_date: Date from a ``YYYY-MM-DD-title`` filename
        filename_title: Title part of such a filename
        permalink: Output URL, None when the document is not rendered
        output: Whether the generator will render this document
        has_front_matter: Whether the file opened with a front-matter block
        error: Front-matter parse error, if any

    """

    path: Path
    relative_path: str
    kind: DocumentKind
    metadata: dict[str, Any] = field(default_factory=dict)
    meta: PostMetadata | None = None
    body: str = ""
    body_line: int = 1
    collection: str | None = None
    filename_date: date | None = None
    filename_title: str | None = None
    permalink: str | None = None
    output: bool = False
    has_front_matter: bool = False
    error: FrontMatterError | None = None

    @property
    def title(self) -> str:
        if self.meta is not None and self.meta.title:
            return self.meta.title
        return Path(self.relative_path).stem

    @property
    def date(self) -> datetime | None:
        return self.meta.date if self.meta is not None else None

    @property
    def is_post(self) -> bool:
        return self.kind in (DocumentKind.POST, DocumentKind.DRAFT)

    def line_of(self, offset: int) -> int:
        """Translate an offset into ``body`` to a line in the source file."""
        return self.body_line + self.body.count("\n", 0, offset)


__all__ = [
    "KNOWN_FIELDS",
    "ContentDocument",
    "DocumentKind",
    "PostMetadata",
    "as_terms",
    "is_scalar_title",
]
