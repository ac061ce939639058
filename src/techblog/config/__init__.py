"""Configuration for techblog: the generator's ``_config.yml`` and the tool's own settings."""

from techblog.config.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    SiteStructureError,
)
from techblog.config.loader import (
    find_site_config,
    find_site_root,
    load_site_config,
    load_tool_config,
    save_tool_config,
    tool_config_path,
)
from techblog.config.schema import (
    BuildConfig,
    ChecksConfig,
    CollectionConfig,
    FrontMatterDefault,
    FrontMatterRules,
    LinkRules,
    SiteConfig,
    TechblogConfig,
)

__all__ = [
    "BuildConfig",
    "ChecksConfig",
    "CollectionConfig",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigValidationError",
    "FrontMatterDefault",
    "FrontMatterRules",
    "LinkRules",
    "SiteConfig",
    "SiteStructureError",
    "TechblogConfig",
    "find_site_config",
    "find_site_root",
    "load_site_config",
    "load_tool_config",
    "save_tool_config",
    "tool_config_path",
]
