"""Core layer: configuration resolution and compatibility validation.

Rules
-----
* No ``print()`` calls.
* No YAML, subprocess or network access; files are reached only through
  :class:`~ahoy.core.protocols.ConfigProvider`.
* No imports from ``cli`` or ``infra``.
"""

from ahoy.core.config_loader import ConfigLoader
from ahoy.core.diagnostics import ConfigReport, build_report
from ahoy.core.models import (
    CommandAction,
    Configuration,
    ImportCommand,
    LeafCommand,
    ResolvedCommand,
)
from ahoy.core.paths import resolve_path
from ahoy.core.protocols import ConfigProvider
from ahoy.core.tree_builder import CommandTreeBuilder, build_command_tree
from ahoy.core.validation import ValidationIssue, ValidationResult, validate_config
from ahoy.core.versioning import EngineContext, compare_versions, supports

__all__: list[str] = [
    "CommandAction",
    "CommandTreeBuilder",
    "ConfigLoader",
    "ConfigProvider",
    "ConfigReport",
    "Configuration",
    "EngineContext",
    "ImportCommand",
    "LeafCommand",
    "ResolvedCommand",
    "ValidationIssue",
    "ValidationResult",
    "build_command_tree",
    "build_report",
    "compare_versions",
    "resolve_path",
    "supports",
    "validate_config",
]
