"""Infrastructure: spawning the process behind a leaf command.

Rules
-----
* Exactly one child process per invocation, run to completion.
* stdin, stdout and stderr are inherited; no capture, no piping.
* ``FileNotFoundError``/``PermissionError`` from the OS are re-raised as
  :class:`~ahoy.exceptions.CommandExecutionError`.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence

from ahoy.core.models import CommandAction
from ahoy.exceptions import CommandExecutionError

logger = logging.getLogger(__name__)


def build_environment(
    env_lines: Sequence[str],
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Overlay ``KEY=VALUE`` lines on *base* (``os.environ`` by default).

    Lines are applied in order, so a later assignment of a key wins.
    Lines without ``=`` are ignored; values are used verbatim.
    """
    environment = dict(os.environ if base is None else base)
    for line in env_lines:
        key, sep, value = line.partition("=")
        if not sep or not key:
            logger.debug("Ignoring malformed environment line: %r", line)
            continue
        environment[key] = value
    return environment


def run_action(action: CommandAction, args: Sequence[str] = ()) -> int:
    """Run *action* with user *args* and return the child's exit code."""
    argv = action.command_line(args)
    logger.info("===> %s", " ".join(argv))

    try:
        completed = subprocess.run(
            argv,
            cwd=action.working_dir,
            env=build_environment(action.env),
            check=False,
        )
    except (FileNotFoundError, PermissionError) as exc:
        raise CommandExecutionError(
            f"Could not start '{argv[0]}': {exc.strerror or exc}",
            hint="Check the 'entrypoint' of your .ahoy.yml file.",
        ) from exc
    return completed.returncode
