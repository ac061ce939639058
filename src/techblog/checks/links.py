"""Verify that internal links, images and anchors resolve."""

from __future__ import annotations

import fnmatch
import posixpath
from collections.abc import Iterator
from pathlib import PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import unquote

from techblog.checks.base import Finding, Severity, register
from techblog.content.markdown import Link, LinkKind, extract_links, is_external
from techblog.content.models import ContentDocument, DocumentKind

if TYPE_CHECKING:
    from techblog.site import Site, UrlTarget

CHECK_NAME = "links"


class LinkResolver:
    """Resolve link targets found in one site against its URL index."""

    def __init__(self, site: Site) -> None:
        self._site = site
        self._baseurl = site.config.normalized_baseurl
        self._site_url = site.config.url.rstrip("/")
        self._markdown_exts = site.config.markdown_extensions

    def strip_site_prefix(self, target: str) -> str:
        """Turn absolute links to this site into site-absolute paths."""
        if self._site_url and (target == self._site_url or target.startswith(f"{self._site_url}/")):
            target = target[len(self._site_url) :] or "/"
        return target

    def strip_baseurl(self, path: str) -> str | None:
        """Site-absolute path behind a root-relative link, None when it bypasses the baseurl.

        The generator leaves raw links untouched, so on a site served under
        ``/blog`` a link to ``/about/`` leaves the site.
        """
        base = self._baseurl
        if not base:
            return path
        if path == base or path.startswith(f"{base}/"):
            return path[len(base) :] or "/"
        return None

    def missing_baseurl(self, path: str) -> bool:
        """Whether ``path`` would resolve if it carried the baseurl."""
        return (
            path.startswith("/")
            and self.strip_baseurl(path) is None
            and self._site.resolve_url(path) is not None
        )

    def resolve(self, doc: ContentDocument, path: str) -> UrlTarget | None:
        """Resolve a URL path (no fragment, no query) written inside ``doc``."""
        site = self._site
        if path.startswith("/"):
            stripped = self.strip_baseurl(path)
            return site.resolve_url(stripped) if stripped is not None else None

        # Relative links to source files are rewritten by the generator's relative-links plugin.
        if PurePosixPath(path).suffix.lower() in self._markdown_exts:
            source_dir = posixpath.dirname(doc.relative_path)
            source_path = posixpath.normpath(posixpath.join(source_dir, path))
            target_doc = site.document_at(source_path)
            if target_doc is not None and target_doc.output and target_doc.permalink:
                return site.resolve_url(target_doc.permalink)

        base = doc.permalink or "/"
        base_dir = base if base.endswith("/") else posixpath.dirname(base)
        joined = posixpath.normpath(posixpath.join(base_dir, path))
        if path.endswith("/") and not joined.endswith("/"):
            joined = f"{joined}/"
        return site.resolve_url(joined)


def _finding(doc: ContentDocument, link: Link, severity: Severity, code: str, message: str) -> Finding:
    return Finding(
        check=CHECK_NAME,
        severity=severity,
        path=doc.relative_path,
        message=message,
        code=code,
        line=doc.body_line + link.line,
    )


def _ignored(target: str, patterns: list[str]) -> bool:
    return any(fnmatch.fnmatch(target, pattern) for pattern in patterns)


def check_document_links(doc: ContentDocument, site: Site, resolver: LinkResolver | None = None) -> Iterator[Finding]:
    """Findings for every unresolved link in ``doc``."""
    config = site.config
    rules = site.tool_config.links
    resolver = resolver or LinkResolver(site)

    for link in extract_links(doc.body, baseurl=config.baseurl, site_url=config.url):
        target = link.target.strip()

        if link.kind is LinkKind.POST_URL:
            post = site.find_post(target)
            if post is None:
                yield _finding(doc, link, Severity.ERROR, "unknown-post", f"post_url refers to a missing post '{target}'")
            elif not post.output:
                yield _finding(
                    doc, link, Severity.ERROR, "unpublished-post", f"post_url refers to an unpublished post '{target}'"
                )
            continue

        if link.kind is LinkKind.LINK_TAG:
            if not site.source_exists(target):
                yield _finding(doc, link, Severity.ERROR, "unknown-source", f"link tag refers to a missing file '{target}'")
            continue

        target = resolver.strip_site_prefix(target)
        if is_external(target):
            continue
        # Patterns may be written with or without the baseurl.
        if _ignored(target, rules.ignore) or _ignored(resolver.strip_baseurl(target) or target, rules.ignore):
            continue

        path, _, fragment = target.partition("#")
        path = path.split("?", 1)[0]
        fragment = unquote(fragment)

        if not path:
            if fragment and rules.check_anchors and fragment not in site.anchors_for(doc):
                yield _finding(doc, link, Severity.WARNING, "missing-anchor", f"anchor '#{fragment}' not found in this page")
            continue

        resolved = resolver.resolve(doc, path)
        if resolved is None:
            if resolver.missing_baseurl(path):
                message = f"link target '{link.target}' is missing the baseurl '{config.normalized_baseurl}'"
            else:
                message = f"link target '{link.target}' does not exist"
            yield _finding(doc, link, Severity.ERROR, "broken-link", message)
            continue

        if fragment and rules.check_anchors and resolved.document is not None:
            if fragment not in site.anchors_for(resolved.document):
                yield _finding(
                    doc,
                    link,
                    Severity.WARNING,
                    "missing-anchor",
                    f"anchor '#{fragment}' not found in {resolved.document.relative_path}",
                )


def _should_scan(doc: ContentDocument, site: Site) -> bool:
    if doc.error is not None or not doc.has_front_matter:
        return False
    if doc.output:
        return True
    return doc.kind is DocumentKind.DRAFT and site.tool_config.links.check_drafts


@register(CHECK_NAME)
def check_links(site: Site) -> Iterator[Finding]:
    """Every internal link resolves to an existing page, asset or anchor."""
    resolver = LinkResolver(site)
    for doc in site.documents:
        if _should_scan(doc, site):
            yield from check_document_links(doc, site, resolver)


__all__ = ["CHECK_NAME", "LinkResolver", "check_document_links", "check_links", "is_external"]
