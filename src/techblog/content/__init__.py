"""Content model: front-matter, dates, discovery, permalinks and Markdown scanning."""

from techblog.content.frontmatter import FrontMatterError, ParsedContent, parse_frontmatter
from techblog.content.models import ContentDocument, DocumentKind, PostMetadata
from techblog.content.permalinks import canonical_url

__all__ = [
    "ContentDocument",
    "DocumentKind",
    "FrontMatterError",
    "ParsedContent",
    "PostMetadata",
    "canonical_url",
    "parse_frontmatter",
]
