"""Core config loader: turns a raw YAML mapping into a :class:`Configuration`.

The loader depends on a :class:`~ahoy.core.protocols.ConfigProvider`
injected at construction time, keeping YAML and the filesystem out of
the core.

Guarantees
----------
* Only :class:`~ahoy.exceptions.AhoyError` subclasses escape.
* Parsing is deterministic and stateless.
* A configuration with an unsupported ``ahoyapi`` tag is never returned
  by :meth:`ConfigLoader.load`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ahoy.core.models import (
    DEFAULT_ENTRYPOINT,
    CommandDefinition,
    Configuration,
    ImportCommand,
    LeafCommand,
)
from ahoy.core.protocols import ConfigProvider
from ahoy.core.versioning import SUPPORTED_API_VERSION
from ahoy.exceptions import (
    AhoyError,
    ConfigParseError,
    SchemaViolationError,
    UnsupportedVersionError,
)

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Stateless service that loads one configuration file.

    Parameters
    ----------
    provider:
        Any object satisfying the :class:`ConfigProvider` protocol.
    """

    def __init__(self, provider: ConfigProvider) -> None:
        self._provider: ConfigProvider = provider

    @property
    def provider(self) -> ConfigProvider:
        return self._provider

    def load(self, path: str | Path) -> Configuration:
        """Read, parse and version-check the file at *path*.

        Raises
        ------
        ConfigNotFoundError
            If the file cannot be read.
        ConfigParseError
            If the content is not valid YAML for the schema.
        UnsupportedVersionError
            If ``ahoyapi`` is missing or not the supported value.
        SchemaViolationError
            If a command breaks the ``cmd``/``imports`` exclusivity.
        """
        source = Path(path).absolute()
        raw = self._fetch(source)
        config = parse_configuration(raw, source)

        # All ahoy files (and imports) must declare the API version.
        if config.api_version != SUPPORTED_API_VERSION:
            raise UnsupportedVersionError(
                f"Ahoy only supports API version '{SUPPORTED_API_VERSION}', "
                f"but '{config.api_version}' given in {source}",
                hint=f"Set 'ahoyapi: {SUPPORTED_API_VERSION}' at the top of the file.",
            )
        return config

    def _fetch(self, path: Path) -> dict[str, Any]:
        """Call the provider and ensure only our exceptions escape."""
        try:
            return self._provider.fetch_raw(path)
        except AhoyError:
            raise
        except Exception as exc:
            raise ConfigParseError(f"{path}: unexpected read error: {exc}") from exc


# ---------------------------------------------------------------------------
# Raw-mapping → domain-model parsers (pure)
# ---------------------------------------------------------------------------

def parse_configuration(raw: dict[str, Any], source: Path) -> Configuration:
    """Convert a raw top-level mapping into a :class:`Configuration`.

    The API version is recorded but not checked here, so validation can
    still inspect a file declaring the wrong version.
    """
    raw_commands = raw.get("commands") or {}
    if not isinstance(raw_commands, dict):
        raise ConfigParseError(f"{source}: 'commands' must be a mapping.")

    commands: dict[str, CommandDefinition] = {}
    for name, body in raw_commands.items():
        name = str(name)
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise ConfigParseError(f"{source}: command '{name}' must be a mapping.")
        commands[name] = parse_command(name, body, source)

    raw_entrypoint = raw.get("entrypoint")
    entrypoint = (
        DEFAULT_ENTRYPOINT
        if raw_entrypoint is None
        else _string_list(raw_entrypoint, "entrypoint", source, allow_scalar=False)
    )
    if not entrypoint:
        raise ConfigParseError(f"{source}: 'entrypoint' must not be empty.")

    return Configuration(
        source=source,
        api_version=_string(raw.get("ahoyapi"), "ahoyapi", source),
        usage=_string(raw.get("usage"), "usage", source),
        commands=commands,
        entrypoint=entrypoint,
        env=_string_list(raw.get("env"), "env", source),
    )


def parse_command(name: str, body: dict[str, Any], source: Path) -> CommandDefinition:
    """Build the command variant selected by ``cmd`` or ``imports``."""
    cmd = _string(body.get("cmd"), f"commands.{name}.cmd", source)
    has_imports = "imports" in body and body["imports"] is not None

    if not cmd and not has_imports:
        raise SchemaViolationError(
            f"Command [{name}] has neither 'cmd' or 'imports' set. Check your yaml file.",
        )
    if cmd and has_imports:
        raise SchemaViolationError(
            f"Command [{name}] has both 'cmd' and 'imports' set, but only one is allowed. "
            "Check your yaml file.",
        )

    common: dict[str, Any] = {
        "name": name,
        "description": _string(body.get("description"), f"commands.{name}.description", source),
        "usage": _string(body.get("usage"), f"commands.{name}.usage", source),
        "hide": _bool(body.get("hide"), f"commands.{name}.hide", source),
        "aliases": _string_list(
            body.get("aliases"), f"commands.{name}.aliases", source, allow_scalar=False
        ),
        "env": _string_list(body.get("env"), f"commands.{name}.env", source),
    }

    optional = _bool(body.get("optional"), f"commands.{name}.optional", source)
    if cmd:
        if optional:
            logger.debug("Ignoring 'optional' on command [%s]: it has no imports.", name)
        return LeafCommand(cmd=cmd, **common)

    imports = _string_list(
        body["imports"], f"commands.{name}.imports", source, allow_scalar=False
    )
    if not imports:
        raise SchemaViolationError(
            f"Command [{name}] has 'imports' set, but it is empty. Check your yaml file.",
        )
    return ImportCommand(imports=imports, optional=optional, **common)


def _string(value: Any, field: str, source: Path) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ConfigParseError(f"{source}: '{field}' must be a string.")
    return str(value)


def _bool(value: Any, field: str, source: Path) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigParseError(f"{source}: '{field}' must be a boolean.")
    return value


def _string_list(
    value: Any,
    field: str,
    source: Path,
    *,
    allow_scalar: bool = True,
) -> tuple[str, ...]:
    """Coerce a YAML list of scalars into a tuple of strings.

    With *allow_scalar* a single string is accepted as a one-item list,
    which is how ``env: .env`` is commonly written.
    """
    if value is None:
        return ()
    if isinstance(value, str) and allow_scalar:
        return (value,)
    if not isinstance(value, list):
        raise ConfigParseError(f"{source}: '{field}' must be a list of strings.")
    if any(isinstance(item, (dict, list)) for item in value):
        raise ConfigParseError(f"{source}: '{field}' must be a list of strings.")
    return tuple("" if item is None else str(item) for item in value)
