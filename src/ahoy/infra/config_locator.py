"""Infrastructure: locating the root ``.ahoy.yml`` file.

The core never searches for an unnamed file; this module turns the
``-f`` option (or its absence) into the one path the core consumes.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ahoy.exceptions import ConfigNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME: str = ".ahoy.yml"


def find_config_path(explicit: str = "", start: Path | None = None) -> Path | None:
    """Return the configuration file to use, or ``None`` when there is none.

    Parameters
    ----------
    explicit:
        Path given with ``-f``.  It must exist.
    start:
        Directory the upward search begins in.  Defaults to the current
        working directory.

    Raises
    ------
    ConfigNotFoundError
        If *explicit* is set but does not exist.
    """
    if explicit:
        path = Path(explicit).expanduser()
        if path.exists():
            return path.absolute()
        raise ConfigNotFoundError(
            f"An ahoy config file was specified using -f to be at {explicit} "
            "but couldn't be found.",
            hint="Check your path.",
        )

    directory = (start or Path.cwd()).absolute()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / DEFAULT_CONFIG_NAME
        if candidate.exists():
            logger.debug("Found %s at %s", DEFAULT_CONFIG_NAME, candidate)
            return candidate

    logger.debug("Can't find a %s file.", DEFAULT_CONFIG_NAME)
    return None
