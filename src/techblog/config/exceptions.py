"""Custom exceptions for configuration handling."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from techblog.exceptions import TechblogError


class ConfigError(TechblogError):
    """Base exception for all configuration-related errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when no ``_config.yml`` exists in or above the start directory."""

    def __init__(self, search_path: Path) -> None:
        self.search_path = search_path
        super().__init__(f"Could not find _config.yml in or above {search_path}")


class ConfigValidationError(ConfigError):
    """Raised when a configuration file fails parsing or validation."""

    def __init__(self, path: Path, errors: Sequence[dict[str, Any]] | None = None, reason: str | None = None) -> None:
        self.path = path
        self.errors = list(errors or [])
        self.reason = reason
        detail = reason or "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ())) or '<root>'}: {error.get('msg', 'invalid value')}"
            for error in self.errors
        )
        super().__init__(f"Invalid configuration in {path}: {detail}")


class SiteStructureError(ConfigError):
    """Raised when required site directory structure is missing."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid site structure at '{path}': {reason}")
