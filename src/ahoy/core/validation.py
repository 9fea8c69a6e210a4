"""Compatibility validation of a loaded configuration.

A read-only pass over a :class:`Configuration`: it never builds or
mutates the command tree and never raises for configuration problems.
Every finding becomes a :class:`ValidationIssue`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ahoy.core.models import CommandDefinition, Configuration, ImportCommand
from ahoy.core.paths import resolve_path
from ahoy.core.protocols import ConfigProvider
from ahoy.core.versioning import SUPPORTED_API_VERSION, EngineContext


class IssueKind(str, Enum):
    VERSION_MISMATCH = "version_mismatch"
    MISSING_FILE = "missing_file"
    SCHEMA_ERROR = "schema_error"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One problem found in a configuration."""

    kind: IssueKind
    severity: Severity
    message: str
    file: str = ""
    field: str = ""
    feature: str = ""
    required_version: str = ""
    current_version: str = ""
    suggestion: str = ""


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """All issues found by :func:`validate_config`."""

    issues: tuple[ValidationIssue, ...] = ()

    @property
    def has_error(self) -> bool:
        return any(issue.severity is Severity.ERROR for issue in self.issues)

    def count(self, severity: Severity) -> int:
        return sum(1 for issue in self.issues if issue.severity is severity)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def validate_config(
    config: Configuration,
    context: EngineContext,
    probe: ConfigProvider,
) -> ValidationResult:
    """Check *config* against the engine described by *context*.

    *probe* answers file-existence questions for imports and env files.
    """
    source = str(config.source)
    issues: list[ValidationIssue] = []

    if config.api_version != SUPPORTED_API_VERSION:
        issues.append(
            ValidationIssue(
                kind=IssueKind.VERSION_MISMATCH,
                severity=Severity.ERROR,
                message=(
                    f"Unsupported API version '{config.api_version}'. "
                    f"Only '{SUPPORTED_API_VERSION}' is currently supported."
                ),
                file=source,
                field="ahoyapi",
            )
        )

    issues.extend(_validate_features(config, context))
    issues.extend(_check_global_env_files(config, probe))
    for command in config.sorted_commands():
        issues.extend(_validate_command(command, config, context, probe))

    return ValidationResult(issues=tuple(issues))


# ---------------------------------------------------------------------------
# Feature and command checks
# ---------------------------------------------------------------------------

def _validate_features(config: Configuration, context: EngineContext) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if len(config.env) > 1 and not context.supports("multiple_env_files"):
        issues.append(
            ValidationIssue(
                kind=IssueKind.VERSION_MISMATCH,
                severity=Severity.WARNING,
                message="Multiple environment files detected. This feature requires proper support.",
                file=str(config.source),
                field="env",
                feature="multiple_env_files",
                required_version=context.required_version("multiple_env_files"),
                current_version=context.version,
                suggestion="Multiple env files are partially supported. Upgrade for full compatibility.",
            )
        )
    return issues


def _check_global_env_files(config: Configuration, probe: ConfigProvider) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            kind=IssueKind.MISSING_FILE,
            severity=Severity.WARNING,
            message=f"Global environment file '{reference}' not found (will be ignored)",
            file=str(config.source),
            field="env",
            suggestion=f"Create the file '{reference}' or remove it from the configuration",
        )
        for reference in config.env
        if not probe.exists(resolve_path(reference, config.base_dir))
    ]


def _validate_command(
    command: CommandDefinition,
    config: Configuration,
    context: EngineContext,
    probe: ConfigProvider,
) -> list[ValidationIssue]:
    name = command.name
    source = str(config.source)
    issues: list[ValidationIssue] = []
    optional = isinstance(command, ImportCommand) and command.optional

    if optional and not context.supports("optional_imports"):
        required = context.required_version("optional_imports")
        issues.append(
            ValidationIssue(
                kind=IssueKind.VERSION_MISMATCH,
                severity=Severity.ERROR,
                message=f"Command '{name}' uses 'optional: true' which requires Ahoy {required} or later",
                file=source,
                field=f"commands.{name}.optional",
                feature="optional_imports",
                required_version=required,
                current_version=context.version,
                suggestion="Upgrade Ahoy or remove 'optional: true' from the command",
            )
        )

    if command.aliases and not context.supports("command_aliases"):
        required = context.required_version("command_aliases")
        issues.append(
            ValidationIssue(
                kind=IssueKind.VERSION_MISMATCH,
                severity=Severity.WARNING,
                message=f"Command '{name}' uses aliases which require Ahoy {required} or later",
                file=source,
                field=f"commands.{name}.aliases",
                feature="command_aliases",
                required_version=required,
                current_version=context.version,
                suggestion="Upgrade Ahoy for full alias support",
            )
        )

    if isinstance(command, ImportCommand):
        for reference in command.imports:
            issue = _check_import(name, reference, optional, config, context, probe)
            if issue is not None:
                issues.append(issue)

    for reference in command.env:
        if not probe.exists(resolve_path(reference, config.base_dir)):
            issues.append(
                ValidationIssue(
                    kind=IssueKind.MISSING_FILE,
                    severity=Severity.WARNING,
                    message=(
                        f"Environment file '{reference}' not found for command "
                        f"'{name}' (will be ignored)"
                    ),
                    file=source,
                    field=f"commands.{name}.env",
                    suggestion=f"Create the file '{reference}' or remove it from the configuration",
                )
            )

    return issues


def _check_import(
    name: str,
    reference: str,
    optional: bool,
    config: Configuration,
    context: EngineContext,
    probe: ConfigProvider,
) -> ValidationIssue | None:
    if probe.exists(resolve_path(reference, config.base_dir)):
        return None

    source = str(config.source)
    field = f"commands.{name}.imports"

    if not optional:
        # The tree builder skips missing imports, so this alone is not fatal.
        return ValidationIssue(
            kind=IssueKind.MISSING_FILE,
            severity=Severity.WARNING,
            message=f"Import file '{reference}' not found for command '{name}' (will be skipped)",
            file=source,
            field=field,
            suggestion=f"Create the file '{reference}' or mark the import as 'optional: true'",
        )

    if context.supports("optional_imports"):
        return ValidationIssue(
            kind=IssueKind.MISSING_FILE,
            severity=Severity.INFO,
            message=f"Optional import file '{reference}' not found for command '{name}' (this is OK)",
            file=source,
            field=field,
        )

    required = context.required_version("optional_imports")
    return ValidationIssue(
        kind=IssueKind.VERSION_MISMATCH,
        severity=Severity.ERROR,
        message=(
            f"Import file '{reference}' not found for command '{name}'. This file is marked "
            "as optional but your Ahoy version doesn't support optional imports."
        ),
        file=source,
        field=field,
        feature="optional_imports",
        required_version=required,
        current_version=context.version,
        suggestion=(
            f"Either upgrade Ahoy to {required}+, create the missing file "
            f"'{reference}', or remove 'optional: true'"
        ),
    )
