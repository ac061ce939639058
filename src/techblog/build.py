"""Run the external static-site generator for builds and previews."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from techblog.exceptions import TechblogError

if TYPE_CHECKING:
    from techblog.config.schema import BuildConfig
    from techblog.site import Site

logger = logging.getLogger(__name__)

_DIAGNOSTIC_RE = re.compile(r"\b(?P<topic>Warning|Error|Conflict|Deprecation):\s*(?P<message>.+)$")
# Topics the generator prints for problems that do not stop the build.
_TOPIC_LEVELS = {"warning": "warning", "error": "error", "conflict": "warning", "deprecation": "warning"}
_PATH_RE = re.compile(r"\bin (?P<path>[^\s:]+\.\w+)")


class BuildError(TechblogError):
    """Base error for the generator wrapper."""


class GeneratorNotInstalledError(BuildError):
    """Raised when the generator executable is not on ``PATH``."""

    def __init__(self, executable: str) -> None:
        self.executable = executable
        super().__init__(
            f"'{executable}' is not available on PATH; install Ruby and run 'bundle install' in the site root"
        )


class GeneratorExecutionError(BuildError):
    """Raised when a generator command exits with a non-zero status or times out."""

    def __init__(self, description: str, returncode: int | None, output: str = "") -> None:
        self.description = description
        self.returncode = returncode
        self.output = output
        reason = "timed out" if returncode is None else f"exit code {returncode}"
        super().__init__(f"{description} failed: {reason}")


@dataclass(frozen=True, slots=True)
class BuildDiagnostic:
    """A warning, error, conflict or deprecation line printed by the generator."""

    level: str
    message: str
    path: str | None = None


@dataclass(slots=True)
class BuildResult:
    """Outcome of one generator build."""

    returncode: int
    output: str = ""
    diagnostics: list[BuildDiagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def warnings(self) -> list[BuildDiagnostic]:
        return [diag for diag in self.diagnostics if diag.level == "warning"]

    @property
    def errors(self) -> list[BuildDiagnostic]:
        return [diag for diag in self.diagnostics if diag.level == "error"]


def parse_diagnostics(output: str, root: Path | None = None) -> list[BuildDiagnostic]:
    """Extract warning and error lines from generator output.

    Paths mentioned as ``... in /abs/path/file.md`` are made relative to
    ``root`` when they live under it.
    """
    diagnostics: list[BuildDiagnostic] = []
    for raw_line in output.splitlines():
        match = _DIAGNOSTIC_RE.search(raw_line)
        if not match:
            continue
        message = match.group("message").strip()
        path = None
        path_match = _PATH_RE.search(message)
        if path_match:
            path = path_match.group("path")
            if root is not None and Path(path).is_relative_to(root):
                path = Path(path).relative_to(root).as_posix()
        level = _TOPIC_LEVELS[match.group("topic").lower()]
        diagnostics.append(BuildDiagnostic(level=level, message=message, path=path))
    return diagnostics


class SiteBuilder:
    """Invoke the configured generator commands inside a site root."""

    def __init__(self, site: Site, config: BuildConfig | None = None) -> None:
        self._root = site.root
        self._config = config or site.tool_config.build

    @property
    def destination(self) -> Path:
        return self._root / self._config.destination

    def build_command(self) -> list[str]:
        command = list(self._config.command)
        if "-d" not in command and "--destination" not in command:
            command += ["-d", self._config.destination]
        return command

    def build(self, *, check: bool = True) -> BuildResult:
        """Run the build command and capture its output.

        Args:
            check: Raise :class:`GeneratorExecutionError` on a non-zero exit
                instead of returning the failed result

        Raises:
            GeneratorNotInstalledError: If the executable cannot be found.
            GeneratorExecutionError: On timeout, or on failure when ``check``.

        """
        command = self.build_command()
        command[0] = self._resolve_executable(command[0])
        logger.info("Running %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                cwd=self._root,
                capture_output=True,
                text=True,
                timeout=self._config.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise GeneratorExecutionError("site build", None) from exc

        output = (completed.stdout or "") + (completed.stderr or "")
        result = BuildResult(
            returncode=completed.returncode,
            output=output,
            diagnostics=parse_diagnostics(output, self._root),
        )
        logger.debug("Build finished with exit code %d and %d diagnostic(s)", result.returncode, len(result.diagnostics))
        if check and not result.ok:
            raise GeneratorExecutionError("site build", result.returncode, output)
        return result

    def serve(self) -> None:
        """Run the preview server until the user stops it with Ctrl-C."""
        command = list(self._config.serve_command)
        command[0] = self._resolve_executable(command[0])
        logger.info("Running %s", " ".join(command))
        try:
            subprocess.run(command, cwd=self._root, check=True)
        except KeyboardInterrupt:
            logger.info("Preview server stopped")
        except subprocess.CalledProcessError as exc:
            raise GeneratorExecutionError("preview server", exc.returncode) from exc

    def _resolve_executable(self, name: str) -> str:
        candidate = shutil.which(name)
        if not candidate:
            raise GeneratorNotInstalledError(name)
        return candidate


__all__ = [
    "BuildDiagnostic",
    "BuildError",
    "BuildResult",
    "GeneratorExecutionError",
    "GeneratorNotInstalledError",
    "SiteBuilder",
    "parse_diagnostics",
]
