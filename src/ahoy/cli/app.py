"""CLI application entry point and command routing for ahoy.

This module is the **sole error boundary** for the entire application.
It catches :class:`~ahoy.exceptions.AhoyError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* Global options are pre-parsed first so the configuration file can be
  located before the full parser (one subparser per command) is built.
* Arguments after a leaf command name are forwarded verbatim; argparse
  only ever sees the tokens that name the command.
* No business logic lives here, tree building, validation and process
  spawning are delegated to the core and infrastructure layers.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from functools import partial

from ahoy.cli import exit_codes
from ahoy.cli.console import console, escape, out
from ahoy.cli.log_setup import configure_logging
from ahoy.core.models import ResolvedCommand
from ahoy.core.tree_builder import build_command_tree
from ahoy.core.versioning import EngineContext
from ahoy.exceptions import AhoyError, CommandExecutionError, CommandNotFoundError
from ahoy.infra.config_locator import find_config_path
from ahoy.infra.yaml_provider import YamlConfigProvider
from ahoy.version import __version__

logger = logging.getLogger(__name__)

PROG: str = "ahoy"
DEFAULT_DESCRIPTION: str = "Creates a configurable cli app for running commands."
EPILOG: str = "Use 'ahoy <command> --help' for detailed information about a command."

FILE_ENV_VAR: str = "AHOY_FILE"
VERBOSE_ENV_VAR: str = "AHOY_VERBOSE"

BUILTIN_COMMANDS: tuple[str, ...] = ("config", "init")

_VALUE_OPTIONS: frozenset[str] = frozenset({"-f", "--file", "--simulate-version"})
_HELP_FLAGS: frozenset[str] = frozenset({"-h", "--help"})


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------

def _add_global_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--file",
        default=os.environ.get(FILE_ENV_VAR, ""),
        help="Use a specific ahoy file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=_env_flag(VERBOSE_ENV_VAR),
        help="Output extra details like the commands to be run.",
    )
    parser.add_argument(
        "--simulate-version",
        default=None,
        help=argparse.SUPPRESS,
    )
    parser.add_argument(
        "--generate-bash-completion",
        action="store_true",
        help=argparse.SUPPRESS,
    )


def _split_leading_options(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split *argv* into the global options and the command tokens."""
    index = 0
    while index < len(argv):
        token = argv[index]
        if token == "--" or not token.startswith("-"):
            break
        if token in _VALUE_OPTIONS:
            index += 1
        index += 1
    return list(argv[:index]), list(argv[index:])


def _preparse(leading: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=PROG, add_help=False)
    _add_global_options(parser)
    options, _ = parser.parse_known_args(list(leading))
    return options


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _add_command_parsers(
    subparsers: argparse._SubParsersAction,
    nodes: Sequence[ResolvedCommand],
) -> None:
    taken: set[str] = {node.name for node in nodes}
    for node in nodes:
        aliases = [alias for alias in node.aliases if alias not in taken]
        taken.update(aliases)

        kwargs: dict[str, object] = {
            "aliases": aliases,
            "description": node.description or node.usage or None,
        }
        # argparse lists a subcommand only when ``help`` is passed
        if not node.hidden:
            kwargs["help"] = node.usage
        command_parser = subparsers.add_parser(node.name, **kwargs)

        if node.is_group:
            children = command_parser.add_subparsers(title="commands", metavar="<command>")
            _add_command_parsers(children, node.children)
            command_parser.set_defaults(handler=partial(_print_help, command_parser))
        else:
            command_parser.set_defaults(handler=partial(_run_leaf, node))


def _add_builtin_parsers(
    subparsers: argparse._SubParsersAction,
    nodes: Sequence[ResolvedCommand],
) -> None:
    """Register ``config`` and ``init`` unless the configuration defines them."""
    defined = _defined_names(nodes)

    if "config" not in defined:
        config_parser = subparsers.add_parser("config", help="Manage Ahoy configuration.")
        config_parser.set_defaults(handler=partial(_print_help, config_parser))
        config_commands = config_parser.add_subparsers(title="commands", metavar="<command>")

        validate_parser = config_commands.add_parser(
            "validate",
            help="Validate and diagnose an Ahoy configuration file.",
        )
        validate_parser.set_defaults(handler=_handle_validate)

        init_parser = config_commands.add_parser(
            "init",
            help="Initialise a new .ahoy.yml config file in the current directory.",
        )
        _add_init_arguments(init_parser)
        init_parser.set_defaults(handler=partial(_handle_init, deprecated=False))

    if "init" not in defined:
        init_parser = subparsers.add_parser(
            "init",
            help="Initialise a new .ahoy.yml config file in the current directory.",
        )
        _add_init_arguments(init_parser)
        init_parser.set_defaults(handler=partial(_handle_init, deprecated=True))


def _add_init_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", nargs="?", default="", help="URL of the file to download.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Force overwriting the .ahoy.yml file in the current directory.",
    )


def _build_parser(
    nodes: Sequence[ResolvedCommand],
    description: str = "",
) -> argparse.ArgumentParser:
    """Construct the full parser for one configuration's command tree."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=description or DEFAULT_DESCRIPTION,
        epilog=EPILOG,
    )
    _add_global_options(parser)
    parser.add_argument(
        "--version",
        action="version",
        version=__version__,
    )
    subparsers = parser.add_subparsers(title="commands", metavar="<command>")
    _add_command_parsers(subparsers, nodes)
    _add_builtin_parsers(subparsers, nodes)
    parser.set_defaults(handler=None)
    return parser


# ---------------------------------------------------------------------------
# Command lookup
# ---------------------------------------------------------------------------

def _find(nodes: Sequence[ResolvedCommand], token: str) -> ResolvedCommand | None:
    for node in nodes:
        if node.name == token:
            return node
    for node in nodes:
        if token in node.aliases:
            return node
    return None


def _command_depth(tokens: Sequence[str], nodes: Sequence[ResolvedCommand]) -> int:
    """Return how many leading *tokens* name a command in *nodes*.

    Descends through groups until a leaf, an option-like token or the
    end of *tokens* is reached.

    Raises
    ------
    CommandNotFoundError
        If a token matches no command at its level.
    """
    level: Sequence[ResolvedCommand] = nodes
    for depth, token in enumerate(tokens, start=1):
        node = _find(level, token)
        if node is None:
            raise CommandNotFoundError(f"Command not found for '{' '.join(tokens)}'")
        if not node.is_group or depth == len(tokens) or tokens[depth].startswith("-"):
            return depth
        level = node.children
    return len(tokens)


def _defined_names(nodes: Sequence[ResolvedCommand]) -> set[str]:
    names: set[str] = set()
    for node in nodes:
        names.add(node.name)
        names.update(node.aliases)
    return names


def completion_words(nodes: Sequence[ResolvedCommand]) -> list[str]:
    """Visible top-level command names, built-ins included."""
    words = [node.name for node in nodes if not node.hidden]
    defined = _defined_names(nodes)
    words.extend(name for name in BUILTIN_COMMANDS if name not in defined)
    return words


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _print_help(parser: argparse.ArgumentParser, args: argparse.Namespace, forwarded: Sequence[str]) -> int:
    parser.print_help()
    return exit_codes.SUCCESS


def _run_leaf(node: ResolvedCommand, args: argparse.Namespace, forwarded: Sequence[str]) -> int:
    from ahoy.infra.process_runner import run_action

    if node.action is None:
        raise CommandExecutionError(f"Command [{node.name}] has nothing to run.")
    logger.debug("Running command [%s]", node.name)
    return run_action(node.action, forwarded)


def _handle_validate(args: argparse.Namespace, forwarded: Sequence[str]) -> int:
    """Dispatch the ``config validate`` diagnostics command."""
    from ahoy.cli.validate import run_validate

    return run_validate(args.config_path, args.context)


def _handle_init(args: argparse.Namespace, forwarded: Sequence[str], *, deprecated: bool) -> int:
    """Dispatch ``config init`` and its deprecated ``init`` spelling."""
    from ahoy.cli.init_command import DEPRECATION_NOTICE, run_init

    if deprecated:
        out.print(DEPRECATION_NOTICE)
    return run_init(args.url, force=args.force)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the ahoy CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.  For leaf commands this is the exit code of
        the child process.
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    leading, tokens = _split_leading_options(argv)
    options = _preparse(leading)

    configure_logging(options.verbose)
    context = EngineContext.current(options.simulate_version)

    if tokens[:1] == ["--"]:
        tokens = tokens[1:]

    config_path = find_config_path(options.file)
    nodes: list[ResolvedCommand] = []
    description = ""
    if config_path is not None:
        try:
            config, nodes = build_command_tree(config_path, YamlConfigProvider(), context)
        except AhoyError as exc:
            # built-ins stay usable so a broken file can be diagnosed or replaced
            if not tokens or tokens[0] not in BUILTIN_COMMANDS:
                raise
            logger.debug("Ignoring configuration error for built-in command: %s", exc)
        else:
            description = config.usage

    parser = _build_parser(nodes, description)
    parser.set_defaults(config_path=config_path, context=context)

    if options.generate_bash_completion:
        for word in completion_words(nodes):
            out.print(word)
        return exit_codes.SUCCESS

    if not tokens:
        if _HELP_FLAGS.intersection(leading) or "--version" in leading:
            parser.parse_args(leading)
        parser.print_help()
        if config_path is None:
            logger.error("No .ahoy.yml found. You can use 'ahoy init' to download an example.")
        logger.warning("Missing flag or argument.")
        return exit_codes.GENERAL_ERROR

    if tokens[0] in BUILTIN_COMMANDS and _find(nodes, tokens[0]) is None:
        args = parser.parse_args([*leading, *tokens])
        return args.handler(args, ())

    depth = _command_depth(tokens, nodes)
    head, forwarded = tokens[:depth], tokens[depth:]
    if forwarded and forwarded[0] in _HELP_FLAGS:
        head.append(forwarded[0])

    args = parser.parse_args([*leading, *head])
    return args.handler(args, forwarded)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except AhoyError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
