"""Logging for the techblog command line.

Records go to stderr through Rich so they never mix with ``--format json``
output on stdout. ``TECHBLOG_LOG_LEVEL`` picks the level; ``--verbose``
forces DEBUG and adds timestamps and source locations to each line.
"""

from __future__ import annotations

import logging
import os
from typing import Final

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["LOG_LEVEL_ENV", "TechblogLogHandler", "configure_logging", "console", "resolve_level"]

LOG_LEVEL_ENV: Final[str] = "TECHBLOG_LOG_LEVEL"

console = Console(stderr=True)

logger = logging.getLogger(__name__)


class TechblogLogHandler(RichHandler):
    """Root handler installed by :func:`configure_logging`."""

    def __init__(self, *, verbose: bool = False) -> None:
        super().__init__(
            console=console,
            show_time=verbose,
            show_path=verbose,
            rich_tracebacks=True,
            # Messages quote titles and paths that may contain ``[...]``.
            markup=False,
        )
        self.setFormatter(logging.Formatter("%(message)s"))


def resolve_level(name: str | None) -> int | None:
    """Logging level for ``name`` (``"debug"``, ``"WARNING"``, ``"10"``).

    Unset or blank means INFO; an unrecognised name returns None.
    """
    if name is None or not name.strip():
        return logging.INFO
    cleaned = name.strip().upper()
    if cleaned.isdigit():
        return int(cleaned)
    return logging.getLevelNamesMapping().get(cleaned)


def configure_logging(*, verbose: bool = False) -> None:
    """Install a single :class:`TechblogLogHandler` on the root logger.

    Calling it again replaces the handler, so every CLI invocation in one
    process (tests, ``CliRunner``) gets the settings it asked for. Handlers
    installed by others are left alone.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if isinstance(handler, TechblogLogHandler):
            root_logger.removeHandler(handler)
    root_logger.addHandler(TechblogLogHandler(verbose=verbose))

    raw_level = os.getenv(LOG_LEVEL_ENV)
    level = logging.DEBUG if verbose else resolve_level(raw_level)
    root_logger.setLevel(level if level is not None else logging.INFO)
    logging.captureWarnings(True)

    if level is None:
        logger.warning("Ignoring unknown %s=%r; logging at INFO", LOG_LEVEL_ENV, raw_level)
