"""Core command tree builder: configuration in, invocable tree out.

This is the only place where usage, description, alias and hidden
metadata are attached to runtime commands.  Import groups are resolved
recursively through :class:`~ahoy.core.imports.ImportResolver`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from ahoy.core.config_loader import ConfigLoader
from ahoy.core.imports import ImportResolver, missing_imports
from ahoy.core.models import (
    CMD_PLACEHOLDER,
    NAME_PLACEHOLDER,
    CommandAction,
    Configuration,
    ImportCommand,
    LeafCommand,
    ResolvedCommand,
)
from ahoy.core.paths import resolve_path
from ahoy.core.protocols import ConfigProvider
from ahoy.core.versioning import EngineContext
from ahoy.exceptions import MissingImportError, append_validate_suggestion

logger = logging.getLogger(__name__)


class CommandTreeBuilder:
    """Builds :class:`ResolvedCommand` trees from loaded configurations.

    Parameters
    ----------
    loader:
        Loader for imported files; its provider also reads env files.
    context:
        Engine version the configuration is interpreted by.
    working_dir:
        Directory every leaf command runs in.  Defaults to the directory
        of the configuration that declares the command.
    """

    def __init__(
        self,
        loader: ConfigLoader,
        context: EngineContext,
        *,
        working_dir: Path | None = None,
    ) -> None:
        self._loader: ConfigLoader = loader
        self._provider: ConfigProvider = loader.provider
        self._context: EngineContext = context
        self._working_dir: Path | None = working_dir
        self._imports: ImportResolver = ImportResolver(loader, self.build)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, config: Configuration) -> list[ResolvedCommand]:
        """Return the commands of *config* in lexical name order.

        Raises
        ------
        MissingImportError
            If a required import group yields no commands, or an optional
            one does while the engine lacks ``optional_imports``.
        SchemaViolationError
            Propagated from loading an imported file.
        """
        global_env = self.read_env_files(config.env, config.base_dir)

        nodes: list[ResolvedCommand] = []
        with self._imports.visiting(config.source):
            for command in config.sorted_commands():
                if isinstance(command, LeafCommand):
                    nodes.append(self._build_leaf(command, config, global_env))
                    continue

                node = self._build_group(command, config)
                if node is not None:
                    nodes.append(node)
        return nodes

    def read_env_files(self, references: Sequence[str], base_dir: Path) -> list[str]:
        """Read every referenced env file into one ordered list of lines."""
        lines: list[str] = []
        for reference in references:
            path = resolve_path(reference, base_dir)
            values = self._provider.read_env_file(path)
            if values is None:
                logger.warning("Environment file '%s' not found, skipping.", path)
                continue
            lines.extend(values)
        return lines

    # ------------------------------------------------------------------
    # Node construction
    # ------------------------------------------------------------------

    def _build_leaf(
        self,
        command: LeafCommand,
        config: Configuration,
        global_env: list[str],
    ) -> ResolvedCommand:
        argv = tuple(
            command.cmd if token == CMD_PLACEHOLDER
            else command.name if token == NAME_PLACEHOLDER
            else token
            for token in config.entrypoint
        )
        # Command-level lines come last so they override global ones.
        env = (*global_env, *self.read_env_files(command.env, config.base_dir))
        action = CommandAction(
            argv=argv,
            env=env,
            working_dir=self._working_dir or config.base_dir,
        )
        return ResolvedCommand(
            name=command.name,
            aliases=command.aliases,
            hidden=command.hide,
            usage=command.usage,
            description=command.description,
            action=action,
        )

    def _build_group(
        self,
        command: ImportCommand,
        config: Configuration,
    ) -> ResolvedCommand | None:
        children = self._imports.resolve(command.imports, config.base_dir)

        if not children:
            if not command.optional:
                raise self._missing_required(command, config)
            if not self._context.supports("optional_imports"):
                raise self._optional_unsupported(command)
            logger.debug("Dropping optional command [%s]: no imports found.", command.name)
            return None

        return ResolvedCommand(
            name=command.name,
            aliases=command.aliases,
            hidden=command.hide,
            usage=command.usage,
            description=command.description,
            children=tuple(children),
        )

    # ------------------------------------------------------------------
    # Error construction
    # ------------------------------------------------------------------

    def _missing_required(self, command: ImportCommand, config: Configuration) -> MissingImportError:
        message = f"Command [{command.name}] has 'imports' set, but no commands were found."
        missing = missing_imports(command.imports, config.base_dir, self._provider)
        if not missing:
            return MissingImportError(message)

        message += f"\n\nMissing import files: {', '.join(missing)}"
        solutions = [
            "1. Create the missing files",
            "2. Mark imports as optional with 'optional: true'",
        ]
        if not self._context.supports("optional_imports"):
            solutions.append(
                f"3. Upgrade Ahoy to {self._context.required_version('optional_imports')}+ "
                "for optional import support"
            )
        hint = "Solutions:\n" + "\n".join(solutions)
        return MissingImportError(message, hint=append_validate_suggestion(hint))

    def _optional_unsupported(self, command: ImportCommand) -> MissingImportError:
        required = self._context.required_version("optional_imports")
        hint = "\n".join(
            (
                f"This feature requires Ahoy {required} or later.",
                "Solutions:",
                "1. Upgrade Ahoy to the latest version",
                "2. Remove 'optional: true' and create the missing import files",
            )
        )
        return MissingImportError(
            f"Command [{command.name}] uses 'optional: true' but this Ahoy version "
            f"({self._context.version}) doesn't support optional imports.",
            hint=append_validate_suggestion(hint),
        )


def build_command_tree(
    path: str | Path,
    provider: ConfigProvider,
    context: EngineContext,
) -> tuple[Configuration, list[ResolvedCommand]]:
    """Load the root configuration at *path* and build its command tree.

    Every leaf command, imported ones included, runs in the directory of
    the root configuration.
    """
    loader = ConfigLoader(provider)
    config = loader.load(path)
    builder = CommandTreeBuilder(loader, context, working_dir=config.base_dir)
    return config, builder.build(config)
