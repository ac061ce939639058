"""Find content files and static assets the way the generator does."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from techblog.content.frontmatter import has_front_matter
from techblog.content.models import DocumentKind

if TYPE_CHECKING:
    from techblog.config.schema import SiteConfig

logger = logging.getLogger(__name__)

POSTS_DIR = "_posts"
DRAFTS_DIR = "_drafts"
HTML_EXTENSIONS = frozenset({".html", ".htm"})
SASS_EXTENSIONS = frozenset({".scss", ".sass"})


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A content file located during discovery."""

    path: Path
    relative_path: str
    kind: DocumentKind
    collection: str | None = None
    path_categories: tuple[str, ...] = ()

    @property
    def path_in_collection(self) -> str:
        """Path relative to the collection directory (``_tabs/about.md`` -> ``about.md``)."""
        parts = PurePosixPath(self.relative_path).parts
        marker = {
            DocumentKind.POST: POSTS_DIR,
            DocumentKind.DRAFT: DRAFTS_DIR,
        }.get(self.kind, f"_{self.collection}" if self.collection else None)
        if marker and marker in parts:
            index = len(parts) - 1 - parts[::-1].index(marker)
            return str(PurePosixPath(*parts[index + 1 :]))
        return self.relative_path


@dataclass(slots=True)
class DiscoveryResult:
    """Everything discovery found under a site root."""

    sources: list[SourceFile] = field(default_factory=list)
    # output URL -> site-relative source path of each static file
    assets: dict[str, str] = field(default_factory=dict)


def is_excluded(relative_path: str, patterns: tuple[str, ...] | list[str]) -> bool:
    """Whether ``relative_path`` matches one of the ``exclude:`` entries.

    Entries match the path itself, any parent directory, or as a glob.
    """
    for pattern in patterns:
        cleaned = pattern.strip().strip("/")
        if not cleaned:
            continue
        if relative_path == cleaned or relative_path.startswith(f"{cleaned}/"):
            return True
        if fnmatch.fnmatch(relative_path, cleaned) or fnmatch.fnmatch(PurePosixPath(relative_path).name, cleaned):
            return True
    return False


def _is_special_name(name: str) -> bool:
    return name.startswith(("_", ".", "#")) or name.endswith("~")


class ContentScanner:
    """Walk a site root and classify every file.

    Underscore directories are private to the generator except ``_posts``,
    ``_drafts`` and configured collections; dot files are skipped unless
    listed in ``include:``.
    """

    def __init__(self, site_root: Path, config: SiteConfig) -> None:
        self._root = site_root
        self._config = config
        self._excludes = config.all_excludes
        self._includes = frozenset(config.include)
        self._content_exts = config.markdown_extensions | HTML_EXTENSIONS
        self._collections_dir = config.collections_dir.strip("/")

    def scan(self) -> DiscoveryResult:
        result = DiscoveryResult()
        for directory, dirnames, filenames in self._root.walk():
            rel_dir = directory.relative_to(self._root).as_posix()
            rel_dir = "" if rel_dir == "." else rel_dir
            dirnames[:] = sorted(d for d in dirnames if self._descend(rel_dir, d))
            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                self._classify(directory / filename, rel_path, result)
        logger.debug(
            "Discovered %d content files and %d static files under %s",
            len(result.sources),
            len(result.assets),
            self._root,
        )
        return result

    def _descend(self, rel_dir: str, name: str) -> bool:
        rel_path = f"{rel_dir}/{name}" if rel_dir else name
        if name in self._includes:
            return True
        if is_excluded(rel_path, self._excludes):
            return False
        if name in (POSTS_DIR, DRAFTS_DIR):
            return True
        if name.startswith("_"):
            return self._collection_label(rel_path) is not None
        return not _is_special_name(name)

    def _collection_label(self, rel_dir: str) -> str | None:
        """Label of the collection rooted exactly at ``rel_dir``, if any."""
        path = PurePosixPath(rel_dir)
        parent = "" if str(path.parent) == "." else str(path.parent)
        if parent != self._collections_dir or not path.name.startswith("_"):
            return None
        label = path.name[1:]
        if label in self._config.collections and label != "posts":
            return label
        return None

    def _owner(self, rel_path: str) -> tuple[DocumentKind | None, str | None, tuple[str, ...]]:
        """Return (kind, collection, path categories) implied by the directories of ``rel_path``."""
        parts = PurePosixPath(rel_path).parts[:-1]
        for index, part in enumerate(parts):
            if part in (POSTS_DIR, DRAFTS_DIR):
                kind = DocumentKind.POST if part == POSTS_DIR else DocumentKind.DRAFT
                prefix = parts[:index]
                if self._collections_dir:
                    cd_parts = PurePosixPath(self._collections_dir).parts
                    if prefix[: len(cd_parts)] == cd_parts:
                        prefix = prefix[len(cd_parts) :]
                return kind, None, tuple(prefix)
            if part.startswith("_"):
                label = self._collection_label("/".join(parts[: index + 1]))
                if label is not None:
                    return DocumentKind.COLLECTION, label, ()
        return None, None, ()

    def _classify(self, path: Path, rel_path: str, result: DiscoveryResult) -> None:
        name = path.name
        suffix = path.suffix.lower()
        if name not in self._includes and (_is_special_name(name) or is_excluded(rel_path, self._excludes)):
            return

        kind, collection, path_categories = self._owner(rel_path)
        if kind is not None:
            if suffix in self._content_exts:
                result.sources.append(
                    SourceFile(
                        path=path,
                        relative_path=rel_path,
                        kind=kind,
                        collection=collection,
                        path_categories=path_categories,
                    )
                )
            elif collection is not None and self._config.collections[collection].output:
                result.assets[f"/{rel_path}"] = rel_path
            return

        if suffix in self._content_exts and has_front_matter(path):
            result.sources.append(SourceFile(path=path, relative_path=rel_path, kind=DocumentKind.PAGE))
            return

        if suffix in SASS_EXTENSIONS and has_front_matter(path):
            css_path = str(PurePosixPath(rel_path).with_suffix(".css"))
            result.assets[f"/{css_path}"] = rel_path
            return

        result.assets[f"/{rel_path}"] = rel_path


def discover(site_root: Path, config: SiteConfig) -> DiscoveryResult:
    """Scan ``site_root`` for posts, drafts, pages, collection documents and assets."""
    return ContentScanner(site_root, config).scan()


__all__ = [
    "DRAFTS_DIR",
    "POSTS_DIR",
    "ContentScanner",
    "DiscoveryResult",
    "SourceFile",
    "discover",
    "is_excluded",
]
