"""Resolution of ``imports`` references into child commands.

Two independent steps, composed by :class:`ImportResolver`:

1. **Existence filtering**: :func:`existing_imports` resolves each
   reference and drops files that are not there.  Absence alone decides
   participation, which is how public and private command files are
   split; the ``optional`` flag plays no part here.
2. **Ordered merge**: :func:`merge_command_sets` folds the per-file
   command lists into one, the later file replacing same-named entries
   wholesale, then sorts by name.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from ahoy.core.config_loader import ConfigLoader
from ahoy.core.models import Configuration, ResolvedCommand
from ahoy.core.paths import resolve_path
from ahoy.core.protocols import ConfigProvider
from ahoy.exceptions import ConfigNotFoundError, ConfigParseError, UnsupportedVersionError

logger = logging.getLogger(__name__)

BuildFn = Callable[[Configuration], list[ResolvedCommand]]


def _normalized(path: Path) -> Path:
    return Path(os.path.normpath(path))


# ---------------------------------------------------------------------------
# 1. Existence filtering
# ---------------------------------------------------------------------------

def existing_imports(
    references: Sequence[str],
    base_dir: Path,
    probe: ConfigProvider,
) -> list[Path]:
    """Return resolved paths of the referenced files that exist, in order."""
    paths: list[Path] = []
    for reference in references:
        if not reference:
            continue
        path = resolve_path(reference, base_dir)
        if not probe.exists(path):
            logger.debug("Skipping missing import '%s'", path)
            continue
        paths.append(path)
    return paths


def missing_imports(
    references: Sequence[str],
    base_dir: Path,
    probe: ConfigProvider,
) -> list[str]:
    """Return the references (as written) whose files do not exist."""
    return [
        reference
        for reference in references
        if reference and not probe.exists(resolve_path(reference, base_dir))
    ]


# ---------------------------------------------------------------------------
# 2. Ordered merge
# ---------------------------------------------------------------------------

def merge_command_sets(
    command_sets: Iterable[Iterable[ResolvedCommand]],
) -> list[ResolvedCommand]:
    """Merge command lists by name; the last definition of a name wins.

    No field-level merging happens: a later command fully replaces the
    earlier one.  The result is sorted lexically by name.
    """
    merged: dict[str, ResolvedCommand] = {}
    for commands in command_sets:
        for command in commands:
            merged[command.name] = command
    return [merged[name] for name in sorted(merged)]


# ---------------------------------------------------------------------------
# Composite resolver
# ---------------------------------------------------------------------------

class ImportResolver:
    """Load, build and merge the commands of imported configuration files.

    Parameters
    ----------
    loader:
        Loader used for every imported file.
    build:
        Callable turning a loaded configuration into its command list,
        normally :meth:`CommandTreeBuilder.build`, which makes imports
        recursive.
    """

    def __init__(self, loader: ConfigLoader, build: BuildFn) -> None:
        self._loader: ConfigLoader = loader
        self._build: BuildFn = build
        self._active: list[Path] = []

    @contextmanager
    def visiting(self, path: Path) -> Iterator[None]:
        """Mark *path* as being resolved until the block exits."""
        self._active.append(_normalized(path))
        try:
            yield
        finally:
            self._active.pop()

    def resolve(self, references: Sequence[str], base_dir: Path) -> list[ResolvedCommand]:
        """Resolve *references* declared by a file living in *base_dir*.

        A file that fails to load is logged and skipped; the remaining
        imports are still resolved.  So is a file that is already being
        resolved further up, which would otherwise import itself forever.
        Callers mark files as in progress with :meth:`visiting`.
        """
        paths = existing_imports(references, base_dir, self._loader.provider)
        return merge_command_sets(self._load_each(paths))

    def _load_each(self, paths: Iterable[Path]) -> Iterable[list[ResolvedCommand]]:
        for path in paths:
            if _normalized(path) in self._active:
                logger.warning("Skipping import cycle: '%s' is already being resolved.", path)
                continue
            try:
                config = self._loader.load(path)
            except (ConfigNotFoundError, ConfigParseError, UnsupportedVersionError) as exc:
                logger.error("Could not load imported config '%s': %s", path, exc)
                continue
            yield self._build(config)
