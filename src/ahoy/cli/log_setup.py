"""Logging configuration for the ``ahoy`` logger hierarchy.

Core and infra modules only ever call ``logging.getLogger(__name__)``;
handlers are attached here, once, by the CLI entry point.
"""

from __future__ import annotations

import logging

LOGGER_NAME: str = "ahoy"
PLAIN_FORMAT: str = "[%(levelname)s] %(message)s"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a single stderr handler to the ``ahoy`` logger.

    Uses :class:`rich.logging.RichHandler` when Rich is installed and a
    plain :class:`logging.StreamHandler` otherwise.  Calling this again
    replaces the previous handler instead of stacking another one.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler: logging.Handler
    try:
        from rich.logging import RichHandler

        from ahoy.cli.console import get_rich_console
    except ModuleNotFoundError:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    else:
        handler = RichHandler(
            console=get_rich_console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger
