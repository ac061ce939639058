from pathlib import Path
from unittest.mock import patch

import pytest
import typer

from techblog.build import GeneratorExecutionError, GeneratorNotInstalledError
from techblog.checks import UnknownCheckError
from techblog.cli.errorhandler import handle_cli_errors
from techblog.config.exceptions import ConfigNotFoundError, ConfigValidationError
from techblog.exceptions import PathTraversalError


def _printed(mock_print) -> list[str]:
    return [str(arg) for call in mock_print.call_args_list for arg in call[0]]


@pytest.mark.parametrize(
    ("error", "label"),
    [
        (ConfigNotFoundError(Path("/nowhere")), "Site Not Found"),
        (ConfigValidationError(Path("_config.yml"), reason="bad"), "Invalid Configuration"),
        (UnknownCheckError("spelling", ["links"]), "Unknown Check"),
        (GeneratorNotInstalledError("bundle"), "Generator Missing"),
        (GeneratorExecutionError("site build", 1), "Build Failed"),
        (PathTraversalError("escape"), "Content Error"),
        (RuntimeError("boom"), "unexpected error"),
    ],
)
def test_handle_cli_errors_prints_friendly_message(error: Exception, label: str) -> None:
    with patch("techblog.cli.errorhandler.console.print") as mock_print:
        with pytest.raises(typer.Exit) as excinfo:
            with handle_cli_errors(debug=False):
                raise error

    assert excinfo.value.exit_code == 1
    assert any(label in arg for arg in _printed(mock_print))


def test_handle_cli_errors_debug_mode_re_raises() -> None:
    with pytest.raises(ConfigNotFoundError):
        with handle_cli_errors(debug=True):
            raise ConfigNotFoundError(Path("/nowhere"))


def test_handle_cli_errors_passes_exit_through() -> None:
    with pytest.raises(typer.Exit) as excinfo:
        with handle_cli_errors(debug=False):
            raise typer.Exit(3)

    assert excinfo.value.exit_code == 3
