"""Pydantic models for the generator's ``_config.yml`` and the tool's own settings.

Two files are involved:

- ``_config.yml`` belongs to the external generator. We only read the keys
  that affect URLs and discovery and keep everything else in ``model_extra``
  so theme settings (``avatar``, ``icon``, ``social`` ...) stay reachable.
- ``.techblog/config.yml`` holds check and build settings for this tool.
  Every field has a default so the file is optional.
"""

from __future__ import annotations

from datetime import UTC
from datetime import tzinfo as TZInfo
from typing import Any, Final
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ============================================================================
# Constants
# ============================================================================

SITE_CONFIG_NAMES: Final[tuple[str, ...]] = ("_config.yml", "_config.yaml")
TOOL_CONFIG_DIR: Final[str] = ".techblog"
TOOL_CONFIG_NAME: Final[str] = "config.yml"

DEFAULT_MARKDOWN_EXT: Final[str] = "markdown,mkdown,mkdn,mkd,md"

# Jekyll excludes these even when the site config does not mention them.
DEFAULT_EXCLUDES: Final[tuple[str, ...]] = (
    ".sass-cache",
    ".jekyll-cache",
    "gemfiles",
    "Gemfile",
    "Gemfile.lock",
    "node_modules",
    "vendor/bundle/",
    "vendor/cache/",
    "vendor/gems/",
    "vendor/ruby/",
)


def _none_as_empty_list(value: Any) -> Any:
    return [] if value is None else value


# ============================================================================
# Generator configuration (_config.yml)
# ============================================================================


class CollectionConfig(BaseModel):
    """Settings for one ``collections:`` entry."""

    model_config = ConfigDict(extra="allow")

    output: bool = False
    permalink: str | None = None
    sort_by: str | None = None


class DefaultScope(BaseModel):
    """Scope of a front-matter ``defaults:`` entry."""

    model_config = ConfigDict(extra="allow")

    path: str = ""
    type: str | None = None

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Any:
        return "" if value is None else value


class FrontMatterDefault(BaseModel):
    """One ``defaults:`` entry: values applied to documents inside ``scope``."""

    scope: DefaultScope = Field(default_factory=DefaultScope)
    values: dict[str, Any] = Field(default_factory=dict)

    @field_validator("values", mode="before")
    @classmethod
    def _coerce_values(cls, value: Any) -> Any:
        return {} if value is None else value


class SiteConfig(BaseModel):
    """The subset of ``_config.yml`` that decides what gets published and where."""

    model_config = ConfigDict(extra="allow")

    title: str = ""
    description: str = ""
    url: str = ""
    baseurl: str = ""
    theme: str | None = None
    remote_theme: str | None = None
    timezone: str | None = None
    permalink: str = "date"
    future: bool = False
    show_drafts: bool = False
    markdown_ext: str = DEFAULT_MARKDOWN_EXT
    collections_dir: str = ""
    collections: dict[str, CollectionConfig] = Field(default_factory=dict)
    defaults: list[FrontMatterDefault] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    include: list[str] = Field(default_factory=list)

    @field_validator("title", "description", "url", "baseurl", "collections_dir", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value

    @field_validator("permalink", mode="before")
    @classmethod
    def _coerce_permalink(cls, value: Any) -> Any:
        return "date" if value in (None, "") else value

    @field_validator("exclude", "include", "defaults", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> Any:
        return _none_as_empty_list(value)

    @field_validator("collections", mode="before")
    @classmethod
    def _coerce_collections(cls, value: Any) -> Any:
        # ``collections: [tabs]`` is shorthand for ``collections: {tabs: {}}``.
        if value is None:
            return {}
        if isinstance(value, list):
            return {str(label): {} for label in value}
        if isinstance(value, dict):
            return {str(label): ({} if settings is None else settings) for label, settings in value.items()}
        return value

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            msg = f"unknown timezone '{value}'"
            raise ValueError(msg) from exc
        return value

    @property
    def tzinfo(self) -> TZInfo:
        """Timezone used for naive front-matter dates."""
        if self.timezone:
            return ZoneInfo(self.timezone)
        return UTC

    @property
    def markdown_extensions(self) -> frozenset[str]:
        return frozenset(f".{ext.strip().lower()}" for ext in self.markdown_ext.split(",") if ext.strip())

    @property
    def normalized_baseurl(self) -> str:
        """``baseurl`` with a leading slash and no trailing slash (``""`` for root)."""
        base = self.baseurl.strip().strip("/")
        return f"/{base}" if base else ""

    @property
    def all_excludes(self) -> tuple[str, ...]:
        return (*DEFAULT_EXCLUDES, *self.exclude)

    def theme_setting(self, key: str, default: Any = None) -> Any:
        """Return a theme-specific key that is not part of the typed model."""
        extra = self.model_extra or {}
        return extra.get(key, default)


# ============================================================================
# Tool configuration (.techblog/config.yml)
# ============================================================================


class ChecksConfig(BaseModel):
    """Which content checks run by default."""

    model_config = ConfigDict(extra="forbid")

    front_matter: bool = True
    links: bool = True
    permalinks: bool = True
    duplicates: bool = True
    ordering: bool = True

    def enabled(self) -> list[str]:
        return [name for name, value in self.model_dump().items() if value]


class FrontMatterRules(BaseModel):
    """Field rules for post and page front-matter."""

    model_config = ConfigDict(extra="forbid")

    required_post_fields: list[str] = Field(
        default_factory=lambda: ["title", "date"],
        description="Fields every post must define (date may come from the filename)",
    )
    recommended_fields: list[str] = Field(
        default_factory=lambda: ["description"],
        description="Fields reported at info level when missing from a post",
    )
    allowed_layouts: list[str] = Field(
        default_factory=list,
        description="Layouts the theme provides; empty accepts any layout",
    )
    require_page_title: bool = True


class LinkRules(BaseModel):
    """Settings for the internal link check."""

    model_config = ConfigDict(extra="forbid")

    check_anchors: bool = True
    ignore: list[str] = Field(
        default_factory=list,
        description="Glob patterns for URLs provided by the theme gem or remote theme",
    )
    check_drafts: bool = False


class BuildConfig(BaseModel):
    """How to invoke the external static-site generator."""

    model_config = ConfigDict(extra="forbid")

    command: list[str] = Field(default_factory=lambda: ["bundle", "exec", "jekyll", "build"])
    serve_command: list[str] = Field(default_factory=lambda: ["bundle", "exec", "jekyll", "serve"])
    destination: str = "_site"
    fail_on_warnings: bool = True
    timeout: int | None = Field(default=None, ge=1, description="Seconds before the build is aborted")

    @field_validator("command", "serve_command")
    @classmethod
    def _non_empty(cls, value: list[str]) -> list[str]:
        if not value:
            msg = "command must not be empty"
            raise ValueError(msg)
        return value


class TechblogConfig(BaseModel):
    """Root model for ``.techblog/config.yml``."""

    model_config = ConfigDict(extra="forbid")

    checks: ChecksConfig = Field(default_factory=ChecksConfig)
    front_matter: FrontMatterRules = Field(default_factory=FrontMatterRules)
    links: LinkRules = Field(default_factory=LinkRules)
    build: BuildConfig = Field(default_factory=BuildConfig)


__all__ = [
    "DEFAULT_EXCLUDES",
    "SITE_CONFIG_NAMES",
    "TOOL_CONFIG_DIR",
    "TOOL_CONFIG_NAME",
    "BuildConfig",
    "ChecksConfig",
    "CollectionConfig",
    "DefaultScope",
    "FrontMatterDefault",
    "FrontMatterRules",
    "LinkRules",
    "SiteConfig",
    "TechblogConfig",
]
