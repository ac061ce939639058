"""Scan Markdown/HTML bodies for links and anchor ids.

Nothing here renders Markdown. The scanners are line-preserving: masked
regions are replaced by spaces so offsets still map to source lines.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from enum import Enum

from techblog.content.slugs import heading_slug


class LinkKind(str, Enum):
    """How a link was written."""

    URL = "url"
    POST_URL = "post_url"
    LINK_TAG = "link"


@dataclass(frozen=True, slots=True)
class Link:
    """A link target found in a document body.

    ``line`` is 0-based relative to the start of the body.
    """

    target: str
    line: int
    kind: LinkKind = LinkKind.URL


_FENCE_RE = re.compile(r"^[ \t]{0,3}(`{3,}|~{3,})")
_INLINE_CODE_RE = re.compile(r"(`+)(?!`)(.+?)(?<!`)\1(?!`)")
_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_LIQUID_BLOCK_RE = re.compile(
    r"\{%-?\s*(raw|highlight|comment)\b[^%]*-?%\}.*?\{%-?\s*end\1\s*-?%\}",
    re.DOTALL,
)

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")

_POST_URL_RE = re.compile(r"\{%-?\s*post_url\s+(\S+?)\s*-?%\}")
_LINK_TAG_RE = re.compile(r"\{%-?\s*link\s+(\S+?)\s*-?%\}")
# ``{{ site.baseurl }}{% post_url x %}`` is one URL; the prefix goes with the tag.
_BASEURL_PREFIX = r"(?:\{\{-?\s*site\.baseurl\s*-?\}\})?"
_POST_URL_SPAN_RE = re.compile(_BASEURL_PREFIX + _POST_URL_RE.pattern)
_LINK_TAG_SPAN_RE = re.compile(_BASEURL_PREFIX + _LINK_TAG_RE.pattern)
_SITE_URL_VAR_RE = re.compile(r"\{\{-?\s*site\.(?P<var>url|baseurl)\s*-?\}\}")
_URL_FILTER_RE = re.compile(
    r"\{\{-?\s*(['\"])(?P<path>.*?)\1\s*\|\s*(?P<filter>relative_url|absolute_url)\s*-?\}\}"
)

_INLINE_LINK_RE = re.compile(r"(?<!\\)\]\(\s*(<[^>\n]*>|[^\s)]*)")
_REFERENCE_DEF_RE = re.compile(r"^[ ]{0,3}\[(?!\^)[^\]\n]+\]:[ \t]*(<[^>\n]*>|\S+)", re.MULTILINE)
_HTML_ATTR_LINK_RE = re.compile(r"\b(?:href|src)\s*=\s*([\"'])(.*?)\1", re.IGNORECASE)

_ATX_HEADING_RE = re.compile(r"^[ ]{0,3}(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
_SETEXT_UNDERLINE_RE = re.compile(r"^[ ]{0,3}(=+|-+)[ \t]*$")
_HEADING_ID_SUFFIX_RE = re.compile(r"\s*\{:?\s*#([\w-]+)[^}]*\}\s*$")
_IAL_ID_RE = re.compile(r"\{:?\s*#([\w-]+)[^}\n]*\}")
_HTML_ID_RE = re.compile(r"\b(?:id|name)\s*=\s*([\"'])(.*?)\1", re.IGNORECASE)
_MD_LINK_TEXT_RE = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")


def _blank(match: re.Match[str]) -> str:
    return re.sub(r"[^\n]", " ", match.group(0))


def mask_blocks(text: str) -> str:
    """Blank out fenced code, HTML comments and raw Liquid blocks."""
    lines = text.split("\n")
    masked: list[str] = []
    fence: str | None = None
    for line in lines:
        match = _FENCE_RE.match(line)
        if fence is None:
            if match:
                fence = match.group(1)
                masked.append(" " * len(line))
                continue
            masked.append(line)
            continue
        if match and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence):
            fence = None
        masked.append(" " * len(line))

    result = "\n".join(masked)
    result = _LIQUID_BLOCK_RE.sub(_blank, result)
    return _HTML_COMMENT_RE.sub(_blank, result)


def mask_code(text: str) -> str:
    """Blank out everything that is code: blocks from :func:`mask_blocks` plus inline spans."""
    return _INLINE_CODE_RE.sub(_blank, mask_blocks(text))


def is_external(target: str) -> bool:
    """Links with a scheme (``https:``, ``mailto:``, ``data:``) or protocol-relative ``//``."""
    return target.startswith("//") or bool(_SCHEME_RE.match(target))


def normalize_baseurl(baseurl: str) -> str:
    base = baseurl.strip().strip("/")
    return f"/{base}" if base else ""


def relative_url(path: str, baseurl: str = "") -> str:
    """What the ``relative_url`` filter outputs: ``path`` under the baseurl.

    Examples:
        >>> relative_url("/about/", "/blog")
        '/blog/about/'
        >>> relative_url("assets/a.png")
        '/assets/a.png'
        >>> relative_url("https://example.com/x", "/blog")
        'https://example.com/x'

    """
    if is_external(path):
        return path
    return f"{normalize_baseurl(baseurl)}/{path.lstrip('/')}"


def expand_liquid_urls(text: str, *, baseurl: str = "", site_url: str = "") -> str:
    """Resolve the URL-building Liquid idioms the way the generator renders them.

    ``{{ site.baseurl }}`` and ``{{ site.url }}`` become the configured values,
    ``relative_url`` prefixes the baseurl and ``absolute_url`` additionally
    the site URL. Newlines are never added or removed.
    """
    base = normalize_baseurl(baseurl)
    origin = site_url.strip().rstrip("/")

    def _filter(match: re.Match[str]) -> str:
        url = relative_url(match["path"], base)
        if match["filter"] == "absolute_url" and not is_external(url):
            return f"{origin}{url}"
        return url

    text = _URL_FILTER_RE.sub(_filter, text)
    return _SITE_URL_VAR_RE.sub(lambda m: origin if m["var"] == "url" else base, text)


def _strip_angle(target: str) -> str:
    if target.startswith("<") and target.endswith(">"):
        return target[1:-1].strip()
    return target


def extract_links(body: str, *, baseurl: str = "", site_url: str = "") -> list[Link]:
    """Return every link target in ``body`` outside code, in source order.

    Plain URL targets are reported as the browser will see them, with the
    Liquid URL idioms expanded against ``baseurl`` and ``site_url``.
    """
    text = mask_code(body)
    links: list[Link] = []

    def _line(offset: int) -> int:
        return text.count("\n", 0, offset)

    for match in _POST_URL_RE.finditer(text):
        links.append(Link(match.group(1), _line(match.start()), LinkKind.POST_URL))
    for match in _LINK_TAG_RE.finditer(text):
        links.append(Link(match.group(1), _line(match.start()), LinkKind.LINK_TAG))

    # Tag targets are recorded above; drop them so ``[x]({% post_url y %})`` is not seen twice.
    text = _POST_URL_SPAN_RE.sub(_blank, text)
    text = _LINK_TAG_SPAN_RE.sub(_blank, text)
    text = expand_liquid_urls(text, baseurl=baseurl, site_url=site_url)

    for match in _INLINE_LINK_RE.finditer(text):
        target = _strip_angle(match.group(1))
        if target and "{{" not in target and "{%" not in target:
            links.append(Link(target, _line(match.start())))
    for match in _REFERENCE_DEF_RE.finditer(text):
        target = _strip_angle(match.group(1))
        if target and "{{" not in target and "{%" not in target:
            links.append(Link(target, _line(match.start())))
    for match in _HTML_ATTR_LINK_RE.finditer(text):
        target = match.group(2).strip()
        if target and "{{" not in target and "{%" not in target:
            links.append(Link(target, _line(match.start())))

    links.sort(key=lambda link: link.line)
    return links


def _heading_texts(lines: list[str]) -> list[str]:
    headings: list[str] = []
    previous = ""
    for line in lines:
        atx = _ATX_HEADING_RE.match(line)
        if atx:
            headings.append(atx.group(2))
            previous = ""
            continue
        if _SETEXT_UNDERLINE_RE.match(line) and previous.strip() and not previous.lstrip().startswith(("-", "*", "+", ">", "|")):
            headings.append(previous.strip())
            previous = ""
            continue
        previous = line
    return headings


def anchor_ids(body: str) -> frozenset[str]:
    """Ids a reader can jump to inside a rendered document.

    Auto ids follow GFM: lower-case, punctuation removed, spaces to hyphens,
    repeats suffixed ``-1``, ``-2``. Explicit ``{#id}`` attributes and HTML
    ``id``/``name`` attributes are included.
    """
    text = mask_blocks(body)
    ids: set[str] = set()
    seen: Counter[str] = Counter()

    for heading in _heading_texts(text.split("\n")):
        explicit = _HEADING_ID_SUFFIX_RE.search(heading)
        if explicit:
            ids.add(explicit.group(1))
            continue
        plain = _MD_LINK_TEXT_RE.sub(lambda m: m.group(1), heading)
        slug = heading_slug(plain)
        if not slug:
            continue
        count = seen[slug]
        seen[slug] += 1
        ids.add(slug if count == 0 else f"{slug}-{count}")

    code_free = _INLINE_CODE_RE.sub(_blank, text)
    ids.update(match.group(1) for match in _IAL_ID_RE.finditer(code_free))
    ids.update(match.group(2) for match in _HTML_ID_RE.finditer(code_free) if match.group(2))
    return frozenset(ids)


__all__ = [
    "Link",
    "LinkKind",
    "anchor_ids",
    "expand_liquid_urls",
    "extract_links",
    "is_external",
    "mask_blocks",
    "mask_code",
    "normalize_baseurl",
    "relative_url",
]
