"""Rich console rendering of validation reports."""

import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from portlint.validation.diagnostics import Diagnostic, Severity
from portlint.validation.framework import CheckState, ValidationReport

SEVERITY_STYLES = {
    Severity.INFO: "",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}

STATE_STYLES = {
    CheckState.PASSED: "green",
    CheckState.FAILED: "red",
    CheckState.SKIPPED: "dim",
    CheckState.NOT_EVALUATED: "yellow",
}


def render_diagnostic(console: Console, diagnostic: Diagnostic) -> None:
    style = SEVERITY_STYLES[diagnostic.severity]
    message = escape(diagnostic.message)
    console.print(f"[{style}]{message}[/{style}]" if style else message)
    for path in diagnostic.paths:
        console.print(f"    {escape(path.as_posix())}")


def render_report(console: Console, report: ValidationReport, show_outcomes: bool = False) -> None:
    """Print diagnostics in check order, optionally followed by a per-check table."""
    for diagnostic in report.diagnostics:
        render_diagnostic(console, diagnostic)

    if show_outcomes:
        table = Table(title=f"Checks for {report.spec}")
        table.add_column("Check", style="cyan")
        table.add_column("Result")
        table.add_column("Reason", style="dim")
        for outcome in report.outcomes:
            style = STATE_STYLES[outcome.state]
            table.add_row(outcome.check, f"[{style}]{outcome.state.value}[/{style}]", outcome.reason or "")
        console.print(table)


def render_json(console: Console, report: ValidationReport) -> None:
    console.print_json(json.dumps(report.to_dict()))
