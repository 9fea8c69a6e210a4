"""``ahoy config validate``: configuration diagnostics command.

Builds a :class:`~ahoy.core.diagnostics.ConfigReport` and renders it as
Rich tables, falling back to plain text when Rich is not installed.

This module lives in the CLI layer, it may import from ``infra`` and
``core``, and it renders via Rich.  No business logic resides here; it
purely collects and displays diagnostic data.
"""

from __future__ import annotations

import sys
from pathlib import Path

from ahoy.cli import exit_codes
from ahoy.cli.console import escape, out, rich_available
from ahoy.core.diagnostics import ConfigReport, build_report
from ahoy.core.validation import Severity, ValidationIssue
from ahoy.core.versioning import SUPPORTED_API_VERSION, EngineContext
from ahoy.infra.yaml_provider import YamlConfigProvider

_SEVERITY_STYLE: dict[Severity, str] = {
    Severity.ERROR: "[red]ERROR[/red]",
    Severity.WARNING: "[yellow]WARN[/yellow]",
    Severity.INFO: "[cyan]INFO[/cyan]",
}


# ---------------------------------------------------------------------------
# Row collectors (pure)
# ---------------------------------------------------------------------------

def _summary_rows(report: ConfigReport) -> list[tuple[str, str, str]]:
    """Return (label, value, status) rows for the header table."""
    rows = [("Config file", report.config_file, _status(report.config_exists, "found", "not found"))]
    if not report.config_exists:
        return rows

    if report.config_valid:
        api_ok = report.api_version == SUPPORTED_API_VERSION
        rows.append(("API version", report.api_version, _status(api_ok, "supported", "unsupported")))
    rows.append(("Ahoy version", report.engine_version, "[green]OK[/green]"))
    rows.append(("Syntax", "Valid YAML" if report.config_valid else "Invalid",
                 _status(report.config_valid, "OK", "FAIL")))
    return rows


def _status(ok: bool, good: str, bad: str) -> str:
    return f"[green]{good}[/green]" if ok else f"[red]{bad}[/red]"


def _issue_details(issue: ValidationIssue) -> list[str]:
    details: list[str] = []
    if issue.field:
        details.append(f"Location: {issue.field}")
    if issue.required_version:
        details.append(f"Required Version: {issue.required_version} (current: {issue.current_version})")
    if issue.suggestion:
        details.append(f"Fix: {issue.suggestion}")
    return details


def _env_rows(report: ConfigReport) -> list[tuple[str, str, str]]:
    rows: list[tuple[str, str, str]] = []
    for env_file in report.env_files:
        scope = "global" if env_file.global_ else f"command: {env_file.command}"
        rows.append((env_file.path, scope, _status(env_file.exists, "OK", "missing")))
    return rows


def _import_rows(report: ConfigReport) -> list[tuple[str, str, str]]:
    rows: list[tuple[str, str, str]] = []
    for import_file in report.import_files:
        kind = "optional" if import_file.optional else "required"
        if import_file.exists:
            status = "[green]OK[/green]"
        elif import_file.optional:
            status = "[yellow]missing but OK[/yellow]"
        else:
            status = "[red]missing[/red]"
        rows.append((import_file.path, f"{kind}, command: {import_file.command}", status))
    return rows


def _verdict(report: ConfigReport) -> str:
    if report.has_error:
        return "[bold red]Configuration has errors that need to be fixed.[/bold red]"
    if report.validation.issues:
        return "[bold yellow]Configuration has warnings but should work.[/bold yellow]"
    return "[bold green]Configuration looks great![/bold green]"


def _plain(markup: str) -> str:
    """Strip the small set of Rich tags used in this module."""
    for tag in ("bold red", "bold yellow", "bold green", "red", "yellow", "green", "cyan", "bold"):
        markup = markup.replace(f"[{tag}]", "").replace(f"[/{tag}]", "")
    return markup


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _render_rich(report: ConfigReport) -> None:
    from rich.table import Table

    def table(title: str, *columns: str) -> Table:
        t = Table(title=title, show_header=True, header_style="bold cyan", border_style="dim")
        for column in columns:
            t.add_column(column)
        return t

    summary = table("Ahoy configuration validator", "Check", "Value", "Status")
    for label, value, status in _summary_rows(report):
        summary.add_row(label, escape(value), status)
    out.print()
    out.print(summary)

    if report.parse_error:
        out.print(f"[red]{escape(report.parse_error)}[/red]")

    if report.config_valid:
        if report.validation.issues:
            issues = table("Issues found", "#", "Severity", "Message")
            for i, issue in enumerate(report.validation.issues, start=1):
                text = "\n".join([issue.message, *_issue_details(issue)])
                issues.add_row(str(i), _SEVERITY_STYLE[issue.severity], escape(text))
            out.print(issues)
        else:
            out.print("[green]No validation issues found.[/green]")

    for title, rows in (("Environment files", _env_rows(report)), ("Import files", _import_rows(report))):
        if rows:
            files = table(title, "Path", "Scope", "Status")
            for path, scope, status in rows:
                files.add_row(escape(path), escape(scope), status)
            out.print(files)

    if report.recommendations:
        out.print("\n[bold]Recommendations:[/bold]")
        for i, rec in enumerate(report.recommendations, start=1):
            out.print(f"  {i}. {escape(rec)}")

    if report.config_exists:
        out.print()
        out.print(_verdict(report))
    out.print()


def _render_plain(report: ConfigReport) -> None:
    stream = sys.stdout
    print("\nAhoy configuration validator", file=stream)
    print("=" * 56, file=stream)
    for label, value, status in _summary_rows(report):
        print(f"{label:<14} {value:<30} {_plain(status)}", file=stream)
    if report.parse_error:
        print(f"   {report.parse_error}", file=stream)
    print(file=stream)

    if report.config_valid:
        if report.validation.issues:
            print("Issues found:", file=stream)
            for i, issue in enumerate(report.validation.issues, start=1):
                print(f"{i}. {issue.severity.value.upper()}: {issue.message}", file=stream)
                for detail in _issue_details(issue):
                    print(f"   {detail}", file=stream)
            print(file=stream)
        else:
            print("No validation issues found.\n", file=stream)

    for title, rows in (("Environment files", _env_rows(report)), ("Import files", _import_rows(report))):
        if rows:
            print(f"{title}:", file=stream)
            for path, scope, status in rows:
                print(f"   {path} ({scope}) {_plain(status)}", file=stream)
            print(file=stream)

    if report.recommendations:
        print("Recommendations:", file=stream)
        for i, rec in enumerate(report.recommendations, start=1):
            print(f"{i}. {rec}", file=stream)
        print(file=stream)

    if report.config_exists:
        print(_plain(_verdict(report)), file=stream)


def render_report(report: ConfigReport) -> None:
    """Print *report* with Rich when available, else as plain text."""
    if rich_available():
        _render_rich(report)
    else:
        _render_plain(report)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_validate(config_file: Path | None, context: EngineContext) -> int:
    """Diagnose *config_file* and render the report.

    Returns
    -------
    int
        :data:`exit_codes.GENERAL_ERROR` when the file is invalid or any
        error-severity issue was found, :data:`exit_codes.SUCCESS`
        otherwise.  No file at all is a warning, not a failure.
    """
    if config_file is None:
        out.print("[yellow]Warning:[/yellow] No .ahoy.yml file found")
        out.print("Run 'ahoy config init' to create a new configuration file")
        return exit_codes.SUCCESS

    report = build_report(config_file, YamlConfigProvider(), context)
    render_report(report)
    return exit_codes.GENERAL_ERROR if report.has_error else exit_codes.SUCCESS
