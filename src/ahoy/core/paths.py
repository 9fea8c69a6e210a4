"""Resolution of file references found in configuration files.

References are resolved against the directory of the configuration
that declared them, never against the process working directory, so
commands behave the same wherever ``ahoy`` is invoked from.
"""

from __future__ import annotations

import os
from pathlib import Path

HOME_MARKER: str = "~"


def resolve_path(reference: str, base_dir: str | Path) -> Path:
    """Turn *reference* into an absolute path.

    * Absolute references are returned unchanged.
    * ``~`` references expand to the user's home directory; exactly one
      separator after the marker is stripped.
    * Anything else is joined onto *base_dir*.

    Pure path arithmetic: the filesystem is never consulted.
    """
    path = Path(reference)
    if path.is_absolute():
        return path

    if reference.startswith(HOME_MARKER):
        remainder = reference[len(HOME_MARKER):]
        if remainder[:1] in (os.sep, "/"):
            remainder = remainder[1:]
        return Path.home() / remainder

    return Path(base_dir) / reference
