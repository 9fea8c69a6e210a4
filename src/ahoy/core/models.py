"""Domain models for ahoy.

All models are **frozen** dataclasses, immutable value objects created
once per parse or build and read-only afterwards.  They carry zero I/O
and no dependencies on external packages.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

CMD_PLACEHOLDER: str = "{{cmd}}"
NAME_PLACEHOLDER: str = "{{name}}"

DEFAULT_ENTRYPOINT: tuple[str, ...] = ("bash", "-c", CMD_PLACEHOLDER, NAME_PLACEHOLDER)
"""Used when a configuration declares no ``entrypoint``.

``bash -c`` binds the first trailing argument to ``$0``, so the command
name is passed there and user arguments start at ``$1``.
"""


# ---------------------------------------------------------------------------
# Command definitions (tagged variant)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True, kw_only=True)
class _CommandBase:
    name: str
    """Key of the command in the ``commands`` mapping."""

    description: str = ""
    """Long help text."""

    usage: str = ""
    """One-line summary shown in listings."""

    hide: bool = False
    """Omit from listings; the command stays invocable by exact name."""

    aliases: tuple[str, ...] = ()

    env: tuple[str, ...] = ()
    """Command-specific environment-file references."""


@dataclass(frozen=True, slots=True, kw_only=True)
class LeafCommand(_CommandBase):
    """A command that runs a shell string through the entrypoint."""

    cmd: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportCommand(_CommandBase):
    """A command group whose children come from other configuration files."""

    imports: tuple[str, ...]

    optional: bool = False
    """Tolerate every import being absent (requires ``optional_imports``)."""


CommandDefinition = Union[LeafCommand, ImportCommand]


# ---------------------------------------------------------------------------
# Parsed configuration file
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Configuration:
    """One parsed ``.ahoy.yml`` file."""

    source: Path
    """Absolute path of the file this configuration was read from."""

    api_version: str
    usage: str = ""
    commands: Mapping[str, CommandDefinition] = field(default_factory=dict)
    entrypoint: tuple[str, ...] = DEFAULT_ENTRYPOINT
    env: tuple[str, ...] = ()
    """Global environment-file references, applied to every command."""

    @property
    def base_dir(self) -> Path:
        """Directory every relative reference in this file resolves against."""
        return self.source.parent

    def sorted_commands(self) -> Iterator[CommandDefinition]:
        """Yield command definitions in lexical name order."""
        for name in sorted(self.commands):
            yield self.commands[name]


# ---------------------------------------------------------------------------
# Resolved runtime tree
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CommandAction:
    """Everything needed to spawn the process behind a leaf command."""

    argv: tuple[str, ...]
    """Entrypoint tokens with the placeholders substituted."""

    env: tuple[str, ...]
    """``KEY=VALUE`` lines; later lines override earlier ones."""

    working_dir: Path

    def command_line(self, args: Sequence[str] = ()) -> list[str]:
        """Return the full argv with user *args* appended.

        Bare ``--`` separators are dropped so that ``ahoy cmd -- -x``
        forwards ``-x`` untouched.
        """
        return [*self.argv, *(arg for arg in args if arg != "--")]


@dataclass(frozen=True, slots=True)
class ResolvedCommand:
    """One node of the invocable command tree.

    Exactly one of :attr:`action` (leaf) or :attr:`children` (group) is
    populated.
    """

    name: str
    aliases: tuple[str, ...] = ()
    hidden: bool = False
    usage: str = ""
    description: str = ""
    action: CommandAction | None = None
    children: tuple[ResolvedCommand, ...] = ()

    def __post_init__(self) -> None:
        if self.action is not None and self.children:
            raise ValueError(
                f"Command '{self.name}' cannot have both an action and children."
            )

    @property
    def is_group(self) -> bool:
        return self.action is None
