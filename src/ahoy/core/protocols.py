"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on concrete
implementations, so resolution and validation can be exercised
against any file source.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol


class ConfigProvider(Protocol):
    """Contract for reading configuration and environment files.

    Any object implementing these methods satisfies this protocol
    structurally (no explicit inheritance required).
    """

    def fetch_raw(self, path: Path) -> dict[str, Any]:
        """Read *path* and return its top-level YAML mapping.

        Implementations must map all backend-specific exceptions to
        :class:`~ahoy.exceptions.AhoyError` subclasses.

        Raises
        ------
        ConfigNotFoundError
            When the file cannot be read.
        ConfigParseError
            When the content is not a YAML mapping.
        """
        ...  # pragma: no cover

    def exists(self, path: Path) -> bool:
        """Return whether *path* names an existing regular file."""
        ...  # pragma: no cover

    def read_env_file(self, path: Path) -> list[str] | None:
        """Return the ``KEY=VALUE`` lines of *path*.

        Blank lines and ``#`` comments are dropped; every other line is
        returned stripped but otherwise verbatim.  Returns ``None`` when
        the file does not exist or cannot be read.
        """
        ...  # pragma: no cover
