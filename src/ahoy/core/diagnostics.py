"""Diagnostics report for ``ahoy config validate``.

Combines file existence, parse status, the validation result and the
status of every referenced env and import file into one
:class:`ConfigReport`, plus human-readable recommendations derived from
them.  Reports are built fresh on every call and never persisted.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path

from ahoy.core.config_loader import ConfigLoader
from ahoy.core.models import Configuration, ImportCommand
from ahoy.core.paths import resolve_path
from ahoy.core.protocols import ConfigProvider
from ahoy.core.validation import (
    IssueKind,
    Severity,
    ValidationIssue,
    ValidationResult,
    validate_config,
)
from ahoy.core.versioning import EngineContext
from ahoy.exceptions import (
    ConfigNotFoundError,
    ConfigParseError,
    SchemaViolationError,
    UnsupportedVersionError,
)

REC_RUN_INIT = "Create a .ahoy.yml file using 'ahoy config init'"
REC_UPGRADE = "Upgrade Ahoy to the latest version for full feature support"
REC_CREATE_IMPORTS = "Create missing import files or mark them as optional"
REC_CREATE_ENV = "Consider creating missing environment files or removing them from configuration"
REC_CONSIDER_UPGRADE = (
    "Consider upgrading to a newer Ahoy version for better support of advanced features"
)
REC_ALL_GOOD = "Configuration looks good! No issues found."


# ---------------------------------------------------------------------------
# Report models
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class EnvFileStatus:
    path: str
    exists: bool
    global_: bool
    """``True`` for top-level ``env`` entries, ``False`` for command ones."""

    command: str = ""


@dataclass(frozen=True, slots=True)
class ImportFileStatus:
    path: str
    exists: bool
    optional: bool
    command: str


@dataclass(frozen=True, slots=True)
class ConfigReport:
    """Snapshot of everything ``config validate`` knows about a file."""

    config_file: str
    engine_version: str
    config_exists: bool = False
    config_valid: bool = False
    parse_error: str = ""
    """Raw loader error text when :attr:`config_valid` is ``False``."""

    api_version: str = ""
    validation: ValidationResult = ValidationResult()
    env_files: tuple[EnvFileStatus, ...] = ()
    import_files: tuple[ImportFileStatus, ...] = ()
    recommendations: tuple[str, ...] = ()

    @property
    def has_error(self) -> bool:
        """Whether the process should exit with a failure status."""
        return not self.config_valid or self.validation.has_error


# ---------------------------------------------------------------------------
# Report construction
# ---------------------------------------------------------------------------

def build_report(
    path: str | Path,
    provider: ConfigProvider,
    context: EngineContext,
) -> ConfigReport:
    """Diagnose the configuration file at *path*.

    Never raises for configuration problems: a missing or broken file is
    described by the returned report.
    """
    path = Path(path)
    report = ConfigReport(config_file=str(path), engine_version=context.version)

    if not provider.exists(path):
        return dataclasses.replace(report, recommendations=(REC_RUN_INIT,))
    report = dataclasses.replace(report, config_exists=True)

    try:
        config = ConfigLoader(provider).load(path)
    except SchemaViolationError as exc:
        issue = ValidationIssue(
            kind=IssueKind.SCHEMA_ERROR,
            severity=Severity.ERROR,
            message=str(exc),
            file=str(path),
            field="commands",
        )
        return dataclasses.replace(
            report,
            parse_error=str(exc),
            validation=ValidationResult(issues=(issue,)),
            recommendations=(f"Fix command definition: {exc}",),
        )
    except (ConfigNotFoundError, ConfigParseError, UnsupportedVersionError) as exc:
        return dataclasses.replace(
            report,
            parse_error=str(exc),
            recommendations=(f"Fix YAML syntax error: {exc}",),
        )

    report = dataclasses.replace(
        report,
        config_valid=True,
        api_version=config.api_version,
        validation=validate_config(config, context, provider),
        env_files=tuple(check_env_files(config, provider)),
        import_files=tuple(check_import_files(config, provider)),
    )
    return dataclasses.replace(report, recommendations=tuple(generate_recommendations(report)))


def check_env_files(config: Configuration, probe: ConfigProvider) -> list[EnvFileStatus]:
    """Status of every env file: global ones first, then per command."""
    statuses = [
        EnvFileStatus(
            path=reference,
            exists=probe.exists(resolve_path(reference, config.base_dir)),
            global_=True,
        )
        for reference in config.env
    ]
    for command in config.sorted_commands():
        statuses.extend(
            EnvFileStatus(
                path=reference,
                exists=probe.exists(resolve_path(reference, config.base_dir)),
                global_=False,
                command=command.name,
            )
            for reference in command.env
        )
    return statuses


def check_import_files(config: Configuration, probe: ConfigProvider) -> list[ImportFileStatus]:
    """Status of every import reference, grouped by owning command."""
    statuses: list[ImportFileStatus] = []
    for command in config.sorted_commands():
        if not isinstance(command, ImportCommand):
            continue
        statuses.extend(
            ImportFileStatus(
                path=reference,
                exists=probe.exists(resolve_path(reference, config.base_dir)),
                optional=command.optional,
                command=command.name,
            )
            for reference in command.imports
        )
    return statuses


def generate_recommendations(report: ConfigReport) -> list[str]:
    """Derive ordered, de-duplicated advice from *report*."""
    issues = report.validation.issues
    recommendations: list[str] = []

    if any(_is_version_issue(issue, Severity.ERROR) for issue in issues):
        recommendations.append(REC_UPGRADE)

    if any(not f.exists and not f.optional for f in report.import_files):
        recommendations.append(REC_CREATE_IMPORTS)

    if any(not f.exists for f in report.env_files):
        recommendations.append(REC_CREATE_ENV)

    if any(_is_version_issue(issue, Severity.WARNING) for issue in issues):
        recommendations.append(REC_CONSIDER_UPGRADE)

    if not issues and not recommendations:
        recommendations.append(REC_ALL_GOOD)

    return recommendations


def _is_version_issue(issue: ValidationIssue, severity: Severity) -> bool:
    return issue.kind is IssueKind.VERSION_MISMATCH and issue.severity is severity
