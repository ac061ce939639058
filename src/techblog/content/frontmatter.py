"""Helpers for parsing YAML front-matter from Markdown and HTML content."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import frontmatter
import yaml
from frontmatter.default_handlers import YAMLHandler

from techblog.exceptions import ContentError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

FRONT_MATTER_DELIMITER = "---"

_handler = YAMLHandler()


class FrontMatterError(ContentError):
    """Raised when a front-matter block exists but cannot be used."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class ParsedContent:
    """A content file split into metadata and body.

    Attributes:
        metadata: Front-matter mapping (empty when absent)
        body: Everything after the closing delimiter
        has_front_matter: Whether the file opened with a front-matter block
        body_line: 1-based source line on which ``body`` starts

    """

    metadata: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    has_front_matter: bool = False
    body_line: int = 1

    def line_of(self, offset: int) -> int:
        """Translate an offset into ``body`` to a line number in the source file."""
        return self.body_line + self.body.count("\n", 0, offset)


def parse_frontmatter(content: str) -> ParsedContent:
    """Parse YAML front-matter using python-frontmatter's YAML handler.

    Args:
        content: File content that may start with a ``---`` block.

    Returns:
        The parsed metadata and body. Content without a leading delimiter is
        returned unchanged with empty metadata.

    Raises:
        FrontMatterError: If the block is unterminated, is not valid YAML, or
            does not hold a mapping.

    """
    if content.startswith("\ufeff"):
        content = content[1:]

    if not _handler.detect(content):
        return ParsedContent(metadata={}, body=content, has_front_matter=False, body_line=1)

    try:
        raw, body = _handler.split(content)
    except ValueError as exc:
        msg = "front-matter block is not closed with '---'"
        raise FrontMatterError(msg, line=1) from exc

    try:
        data = _handler.load(raw)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        # +2: the opening delimiter line and 1-based numbering.
        line = mark.line + 2 if mark is not None else None
        problem = getattr(exc, "problem", None) or str(exc)
        msg = f"invalid YAML in front-matter: {problem}"
        raise FrontMatterError(msg, line=line) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"front-matter must be a mapping, got {type(data).__name__}"
        raise FrontMatterError(msg, line=2)

    body_line = content.count("\n", 0, len(content) - len(body)) + 1
    metadata = {str(key): value for key, value in data.items()}
    return ParsedContent(metadata=metadata, body=body, has_front_matter=True, body_line=body_line)


def parse_frontmatter_file(path: Path, *, encoding: str = "utf-8") -> ParsedContent:
    """Read a content file and parse its front-matter.

    Raises:
        OSError: If the file cannot be read.
        FrontMatterError: If the front-matter block is malformed.

    """
    return parse_frontmatter(path.read_text(encoding=encoding))


def has_front_matter(path: Path) -> bool:
    """Return True when ``path`` opens with a front-matter delimiter.

    Only the first line is read, which is how the generator decides between
    a page and a static file.
    """
    try:
        with path.open("r", encoding="utf-8") as fh:
            first_line = fh.readline()
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Could not read %s: %s", path, exc)
        return False
    return first_line.lstrip("\ufeff").rstrip() == FRONT_MATTER_DELIMITER


def dump_frontmatter(metadata: dict[str, Any], body: str) -> str:
    """Serialise ``metadata`` and ``body`` into a front-matter document."""
    post = frontmatter.Post(body, **metadata)
    text = frontmatter.dumps(post, sort_keys=False)
    return text if text.endswith("\n") else f"{text}\n"


__all__ = [
    "FRONT_MATTER_DELIMITER",
    "FrontMatterError",
    "ParsedContent",
    "dump_frontmatter",
    "has_front_matter",
    "parse_frontmatter",
    "parse_frontmatter_file",
]
