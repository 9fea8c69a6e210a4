"""Custom exception hierarchy for ahoy.

All exceptions that cross layer boundaries must inherit from
:class:`AhoyError`.  Raw third-party exceptions (PyYAML, httpx, OS
errors) must NEVER propagate beyond the infrastructure layer; they must
be caught and re-raised as a typed subclass defined here.

Hierarchy
---------
AhoyError
├── ConfigNotFoundError
├── ConfigParseError
├── UnsupportedVersionError
├── SchemaViolationError
├── MissingImportError
├── CommandNotFoundError
├── CommandExecutionError
├── InitError
└── EnvironmentError
"""

from __future__ import annotations


class AhoyError(Exception):
    """Base exception for all ahoy errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Loading a configuration file -------------------------------------------

class ConfigNotFoundError(AhoyError):
    """Raised when a configuration file cannot be found or read."""


class ConfigParseError(AhoyError):
    """Raised when a configuration file is not valid YAML for the schema."""


class UnsupportedVersionError(AhoyError):
    """Raised when the ``ahoyapi`` tag is missing or not supported."""


# --- Building the command tree ----------------------------------------------

class SchemaViolationError(AhoyError):
    """Raised when a command has conflicting or missing ``cmd``/``imports``."""


class MissingImportError(AhoyError):
    """Raised when a required import group resolves to no commands."""


# --- Running commands -------------------------------------------------------

class CommandNotFoundError(AhoyError):
    """Raised when the invoked name matches no command."""


class CommandExecutionError(AhoyError):
    """Raised when the entrypoint of a command cannot be started."""


class InitError(AhoyError):
    """Raised when ``ahoy config init`` cannot fetch or write the file."""


# --- Environment / tooling --------------------------------------------------

class EnvironmentError(AhoyError):
    """Raised when an optional runtime dependency is not available."""


def append_validate_suggestion(hint: str) -> str:
    """Append the ``ahoy config validate`` pointer to a hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "For more help, run: ahoy config validate"
    if marker in hint:
        return hint
    return "\n\n".join((hint, marker))
