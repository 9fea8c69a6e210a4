"""PyYAML backed implementation of :class:`~ahoy.core.protocols.ConfigProvider`.

This module is the **only** place in the codebase that imports ``yaml``.
All PyYAML and OS exceptions are caught here and re-raised as typed
:class:`~ahoy.exceptions.AhoyError` subclasses so nothing raw escapes the
infrastructure boundary.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ahoy.exceptions import ConfigNotFoundError, ConfigParseError

logger = logging.getLogger(__name__)


class YamlConfigProvider:
    """Concrete :class:`ConfigProvider` reading files from the local disk.

    Usage::

        provider = YamlConfigProvider()
        raw = provider.fetch_raw(Path(".ahoy.yml"))
    """

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def fetch_raw(self, path: Path) -> dict[str, Any]:
        """Read and parse *path* with ``yaml.safe_load``.

        An empty document is returned as an empty mapping so that the
        loader reports the missing ``ahoyapi`` tag rather than a type
        error.
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigNotFoundError(
                f"An ahoy config file couldn't be read at {path}.",
                hint="You can create an example one by using 'ahoy config init'.",
            ) from exc

        try:
            data: Any = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigParseError(f"{path}: {exc}") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigParseError(
                f"{path}: expected a mapping at the top level, "
                f"got {type(data).__name__}."
            )
        logger.debug("Parsed %s", path)
        return data

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def read_env_file(self, path: Path) -> list[str] | None:
        if not self.exists(path):
            return None
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not read environment file '%s': %s", path, exc)
            return None

        lines: list[str] = []
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            lines.append(line)
        return lines
