"""Loading and saving of ``_config.yml`` and ``.techblog/config.yml``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from techblog.config.exceptions import ConfigNotFoundError, ConfigValidationError, SiteStructureError
from techblog.config.schema import (
    SITE_CONFIG_NAMES,
    TOOL_CONFIG_DIR,
    TOOL_CONFIG_NAME,
    SiteConfig,
    TechblogConfig,
)

logger = logging.getLogger(__name__)


def find_site_config(start: Path) -> Path | None:
    """Search upward from ``start`` for the generator's ``_config.yml``."""
    current = start.expanduser().resolve()
    if current.is_file():
        current = current.parent
    for candidate in (current, *current.parents):
        for name in SITE_CONFIG_NAMES:
            config_path = candidate / name
            if config_path.is_file():
                return config_path
    return None


def find_site_root(start: Path) -> Path:
    """Return the directory holding ``_config.yml``.

    Raises:
        ConfigNotFoundError: If no site config exists in or above ``start``.

    """
    config_path = find_site_config(start)
    if config_path is None:
        raise ConfigNotFoundError(start)
    return config_path.parent


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigValidationError(path, reason=f"YAML error: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError(path, reason=f"expected a mapping, got {type(data).__name__}")
    return data


def _validate[ModelT: BaseModel](model: type[ModelT], data: dict[str, Any], path: Path) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ConfigValidationError(path, errors=exc.errors(include_url=False)) from exc


def load_site_config(site_root: Path) -> SiteConfig:
    """Load and validate the generator configuration of ``site_root``.

    Raises:
        ConfigNotFoundError: If the site root has no ``_config.yml``.
        ConfigValidationError: If the file is not valid YAML or has invalid values.

    """
    for name in SITE_CONFIG_NAMES:
        config_path = site_root / name
        if config_path.is_file():
            logger.debug("Loading site config from %s", config_path)
            return _validate(SiteConfig, _read_yaml_mapping(config_path), config_path)
    raise ConfigNotFoundError(site_root)


def tool_config_path(site_root: Path) -> Path:
    return site_root / TOOL_CONFIG_DIR / TOOL_CONFIG_NAME


def load_tool_config(site_root: Path) -> TechblogConfig:
    """Load ``.techblog/config.yml``, falling back to defaults when it is absent.

    Raises:
        ConfigValidationError: If the file exists but is invalid.

    """
    config_path = tool_config_path(site_root)
    if not config_path.exists():
        logger.debug("No %s found, using defaults", config_path)
        return TechblogConfig()

    logger.debug("Loading tool config from %s", config_path)
    return _validate(TechblogConfig, _read_yaml_mapping(config_path), config_path)


def save_tool_config(config: TechblogConfig, site_root: Path) -> Path:
    """Write ``config`` to ``.techblog/config.yml`` and return the path."""
    config_path = tool_config_path(site_root)
    if config_path.parent.exists() and not config_path.parent.is_dir():
        raise SiteStructureError(str(config_path.parent), "expected a directory for tool settings, found a file")
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(exclude_defaults=False, mode="python")
    yaml_str = yaml.dump(
        data,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    config_path.write_text(yaml_str, encoding="utf-8")
    logger.debug("Saved tool config to %s", config_path)
    return config_path


__all__ = [
    "find_site_config",
    "find_site_root",
    "load_site_config",
    "load_tool_config",
    "save_tool_config",
    "tool_config_path",
]
