"""``ahoy config init``: download a starter ``.ahoy.yml``.

The overwrite confirmation uses questionary, imported lazily so that
the rest of the CLI keeps working without it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ahoy.cli import exit_codes
from ahoy.cli.console import out
from ahoy.exceptions import EnvironmentError
from ahoy.infra.config_locator import DEFAULT_CONFIG_NAME
from ahoy.infra.starter_download import EXAMPLE_CONFIG_URL, download_file

DEPRECATION_NOTICE: str = "Note: 'ahoy init' is deprecated. Please use 'ahoy config init' instead."


def _import_questionary() -> Any:
    """Import questionary lazily for the overwrite prompt."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def confirm_overwrite() -> bool:
    """Ask whether the existing file may be replaced; default is no.

    Raises
    ------
    KeyboardInterrupt
        If the user cancels the prompt with Ctrl+C.
    """
    questionary = _import_questionary()
    answer = questionary.confirm(
        "Are you sure you wish to overwrite it with an example file?",
        default=False,
    ).ask()
    # questionary returns None on Ctrl+C
    if answer is None:
        raise KeyboardInterrupt
    return bool(answer)


def run_init(url: str = "", *, force: bool = False, directory: Path | None = None) -> int:
    """Download *url* (or the example file) to ``.ahoy.yml`` in *directory*."""
    destination = (directory or Path.cwd()) / DEFAULT_CONFIG_NAME

    if destination.exists():
        if force:
            out.print(
                f"[yellow]Warning:[/yellow] '--force' parameter passed, overwriting "
                f"{DEFAULT_CONFIG_NAME} in current directory."
            )
        else:
            out.print(f"[yellow]Warning:[/yellow] {DEFAULT_CONFIG_NAME} found in current directory.")
            if not confirm_overwrite():
                out.print("Abort: exiting without overwriting.")
                return exit_codes.SUCCESS
            source = "specified file" if url else "example file"
            out.print(f"Ok, overwriting {DEFAULT_CONFIG_NAME} in current directory with {source}.")

    download_file(url or EXAMPLE_CONFIG_URL, destination)

    if url:
        out.print(f"Your specified {DEFAULT_CONFIG_NAME} has been downloaded to the current directory.")
    else:
        out.print(
            f"[green]Example {DEFAULT_CONFIG_NAME} downloaded to the current directory.[/green] "
            "You can customize it to suit your needs!"
        )
    return exit_codes.SUCCESS
