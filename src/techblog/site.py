"""Load a site: configuration, documents, permalinks and the URL index."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath
from typing import Any

from techblog.config.loader import find_site_root, load_site_config, load_tool_config
from techblog.config.schema import FrontMatterDefault, SiteConfig, TechblogConfig
from techblog.content.dates import parse_post_filename
from techblog.content.discovery import SourceFile, discover
from techblog.content.frontmatter import FrontMatterError, ParsedContent, parse_frontmatter_file
from techblog.content.markdown import anchor_ids
from techblog.content.models import ContentDocument, DocumentKind, PostMetadata
from techblog.content.permalinks import (
    canonical_url,
    collection_permalink,
    page_permalink,
    post_permalink,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UrlTarget:
    """Something the built site serves at a URL: a rendered document or a static file."""

    url: str
    relative_path: str
    document: ContentDocument | None = None

    @property
    def is_asset(self) -> bool:
        return self.document is None


# ============================================================================
# Front-matter defaults
# ============================================================================


def _scope_matches(entry: FrontMatterDefault, relative_path: str, type_names: tuple[str, ...]) -> bool:
    scope = entry.scope
    if scope.type and scope.type not in type_names:
        return False
    scope_path = scope.path.strip().strip("/")
    if not scope_path:
        return True
    if "*" in scope_path:
        return fnmatch.fnmatch(relative_path, scope_path) or fnmatch.fnmatch(relative_path, f"{scope_path}/*")
    return relative_path == scope_path or relative_path.startswith(f"{scope_path}/")


def apply_defaults(
    defaults: list[FrontMatterDefault],
    relative_path: str,
    type_names: tuple[str, ...],
    front_matter: dict[str, Any],
) -> dict[str, Any]:
    """Merge ``defaults:`` entries under a document's own front-matter.

    Matching entries apply from least to most specific (longer path, then
    typed over untyped, then later in the file); the document's own keys
    always win.
    """
    matching = [
        (len(entry.scope.path.strip().strip("/")), bool(entry.scope.type), index, entry)
        for index, entry in enumerate(defaults)
        if _scope_matches(entry, relative_path, type_names)
    ]
    merged: dict[str, Any] = {}
    for *_, entry in sorted(matching, key=lambda item: item[:3]):
        merged.update(entry.values)
    merged.update(front_matter)
    return merged


def _type_names(source: SourceFile) -> tuple[str, ...]:
    if source.kind is DocumentKind.DRAFT:
        return ("drafts", "posts")
    if source.kind is DocumentKind.COLLECTION and source.collection:
        return (source.collection,)
    return (source.kind.default_type,)


# ============================================================================
# Site
# ============================================================================


@dataclass(slots=True)
class Site:
    """Everything the checks need to know about a site.

    Attributes:
        root: Directory holding ``_config.yml``
        config: Parsed generator configuration
        tool_config: Parsed ``.techblog/config.yml`` (defaults when absent)
        documents: Every discovered content document, rendered or not
        assets: Output URL -> source path of each static file

    """

    root: Path
    config: SiteConfig
    tool_config: TechblogConfig = field(default_factory=TechblogConfig)
    documents: list[ContentDocument] = field(default_factory=list)
    assets: dict[str, str] = field(default_factory=dict)
    _url_index: dict[str, list[UrlTarget]] = field(default_factory=dict, repr=False)
    _by_source: dict[str, ContentDocument] = field(default_factory=dict, repr=False)
    _anchors: dict[str, frozenset[str]] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self.reindex()

    def reindex(self) -> None:
        """Rebuild the URL and source-path indexes from ``documents`` and ``assets``."""
        self._url_index = {}
        self._by_source = {doc.relative_path: doc for doc in self.documents}
        self._anchors = {}
        for doc in self.documents:
            if doc.output and doc.permalink:
                self._url_index.setdefault(canonical_url(doc.permalink), []).append(
                    UrlTarget(url=doc.permalink, relative_path=doc.relative_path, document=doc)
                )
        for url, rel_path in sorted(self.assets.items()):
            self._url_index.setdefault(canonical_url(url), []).append(UrlTarget(url=url, relative_path=rel_path))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def posts(self, *, include_drafts: bool = False) -> list[ContentDocument]:
        """Published posts (and optionally drafts), newest first."""
        kinds = {DocumentKind.POST, DocumentKind.DRAFT} if include_drafts else {DocumentKind.POST}
        selected = [
            doc
            for doc in self.documents
            if doc.kind in kinds and doc.meta is not None and (doc.output or doc.kind is DocumentKind.DRAFT)
        ]
        oldest = datetime.min.replace(tzinfo=UTC)
        return sorted(selected, key=lambda doc: (doc.date or oldest, doc.relative_path), reverse=True)

    def pages(self) -> list[ContentDocument]:
        return [doc for doc in self.documents if doc.kind in (DocumentKind.PAGE, DocumentKind.COLLECTION)]

    def url_collisions(self) -> dict[str, list[UrlTarget]]:
        """Canonical URLs claimed by more than one target."""
        return {key: targets for key, targets in self._url_index.items() if len(targets) > 1}

    def resolve_url(self, url: str) -> UrlTarget | None:
        """Return what the built site serves at ``url`` (a site-absolute path without baseurl)."""
        targets = self._url_index.get(canonical_url(url))
        return targets[0] if targets else None

    def document_at(self, relative_path: str) -> ContentDocument | None:
        return self._by_source.get(relative_path.strip("/"))

    def source_exists(self, relative_path: str) -> bool:
        """Whether ``relative_path`` names a content file or static file in the site."""
        cleaned = relative_path.strip("/")
        return cleaned in self._by_source or cleaned in self.assets.values()

    def find_post(self, name: str) -> ContentDocument | None:
        """Find a post by the ``{% post_url %}`` key: filename stem, optionally with subdirectories."""
        cleaned = name.strip().strip("/")
        for doc in self.documents:
            if doc.kind is not DocumentKind.POST:
                continue
            rel = PurePosixPath(doc.relative_path)
            stem_path = str(rel.with_suffix(""))
            if stem_path.endswith(f"/{cleaned}") or rel.stem == cleaned:
                return doc
        return None

    def anchors_for(self, document: ContentDocument) -> frozenset[str]:
        cached = self._anchors.get(document.relative_path)
        if cached is None:
            cached = anchor_ids(document.body)
            self._anchors[document.relative_path] = cached
        return cached


# ============================================================================
# Loading
# ============================================================================


class SiteLoader:
    """Turn discovered files into :class:`ContentDocument` objects with permalinks."""

    def __init__(self, config: SiteConfig, *, include_drafts: bool | None = None) -> None:
        self._config = config
        self._include_drafts = config.show_drafts if include_drafts is None else include_drafts
        self._now = datetime.now(tz=UTC)

    def load_document(self, source: SourceFile) -> ContentDocument:
        filename = None
        if source.kind in (DocumentKind.POST, DocumentKind.DRAFT):
            filename = parse_post_filename(source.path.stem)
        filename_date, filename_title = filename if filename else (None, None)

        error: FrontMatterError | None = None
        try:
            parsed = parse_frontmatter_file(source.path)
        except FrontMatterError as exc:
            logger.warning("Unparseable front-matter in %s: %s", source.relative_path, exc)
            error = exc
            parsed = ParsedContent()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", source.relative_path, exc)
            error = FrontMatterError(f"could not read file: {exc}")
            parsed = ParsedContent()

        metadata: dict[str, Any] = {}
        meta: PostMetadata | None = None
        if error is None:
            metadata = apply_defaults(self._config.defaults, source.relative_path, _type_names(source), parsed.metadata)
            meta = PostMetadata.from_mapping(
                metadata,
                tz=self._config.tzinfo,
                fallback_date=filename_date,
                path_categories=source.path_categories,
            )

        output = self._renders(source, parsed, meta, filename_title)
        permalink = self._permalink(source, meta, filename_title) if meta is not None else None

        return ContentDocument(
            path=source.path,
            relative_path=source.relative_path,
            kind=source.kind,
            metadata=metadata,
            meta=meta,
            body=parsed.body,
            body_line=parsed.body_line,
            collection=source.collection,
            filename_date=filename_date,
            filename_title=filename_title,
            permalink=permalink,
            output=output,
            has_front_matter=parsed.has_front_matter,
            error=error,
        )

    def _renders(
        self,
        source: SourceFile,
        parsed: ParsedContent,
        meta: PostMetadata | None,
        filename_title: str | None,
    ) -> bool:
        if meta is None or not parsed.has_front_matter or not meta.published:
            return False
        if source.kind is DocumentKind.POST:
            if filename_title is None:
                return False
            if meta.date is not None and meta.date > self._now and not self._config.future:
                return False
            return True
        if source.kind is DocumentKind.DRAFT:
            return self._include_drafts
        if source.kind is DocumentKind.COLLECTION:
            collection = self._config.collections.get(source.collection or "")
            return bool(collection and collection.output)
        return True

    def _permalink(self, source: SourceFile, meta: PostMetadata, filename_title: str | None) -> str:
        tz = self._config.tzinfo
        if source.kind in (DocumentKind.POST, DocumentKind.DRAFT):
            when = meta.date
            if when is None and source.kind is DocumentKind.DRAFT:
                when = datetime.fromtimestamp(source.path.stat().st_mtime, tz=UTC)
            return post_permalink(
                site_permalink=self._config.permalink,
                title=filename_title or source.path.stem,
                when=when,
                categories=meta.categories,
                slug=meta.slug,
                front_matter_permalink=meta.permalink,
                tz=tz,
            )
        if source.kind is DocumentKind.COLLECTION and source.collection:
            collection = self._config.collections.get(source.collection)
            return collection_permalink(
                source.collection,
                source.path_in_collection,
                template=collection.permalink if collection else None,
                slug=meta.slug,
                when=meta.date,
                categories=meta.categories,
                front_matter_permalink=meta.permalink,
                tz=tz,
            )
        return page_permalink(
            source.relative_path,
            site_permalink=self._config.permalink,
            front_matter_permalink=meta.permalink,
        )


def load_site(start: Path, *, include_drafts: bool | None = None) -> Site:
    """Load the site containing ``start``.

    Raises:
        ConfigNotFoundError: If there is no ``_config.yml`` in or above ``start``.
        ConfigValidationError: If either configuration file is invalid.

    """
    root = find_site_root(start)
    config = load_site_config(root)
    tool_config = load_tool_config(root)

    discovered = discover(root, config)
    loader = SiteLoader(config, include_drafts=include_drafts)
    documents = [loader.load_document(source) for source in discovered.sources]

    logger.info(
        "Loaded %d documents (%d posts) and %d static files from %s",
        len(documents),
        sum(1 for doc in documents if doc.kind is DocumentKind.POST),
        len(discovered.assets),
        root,
    )
    return Site(root=root, config=config, tool_config=tool_config, documents=documents, assets=discovered.assets)


__all__ = ["Site", "SiteLoader", "UrlTarget", "apply_defaults", "load_site"]
