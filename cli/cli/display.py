"""Rich output formatting for the contractguard CLI.

All functions write to a :class:`rich.console.Console` instance (typically
bound to *stderr*) so that machine-readable output on *stdout* is never
polluted with human-readable decoration.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from contract_engine.introspection.inspection import DiagnosticsCounts, TableInspection
    from contract_engine.models.report import AuditSummary, DiffReport


# ---------------------------------------------------------------------------
# Status colour mapping
# ---------------------------------------------------------------------------

_STATUS_COLOURS: dict[str, str] = {
    "PASS": "green",
    "FAIL": "red",
    "NOT_FOUND": "yellow",
}


def _coloured_status(status: str) -> str:
    """Return a Rich markup string with the status colour-coded."""
    colour = _STATUS_COLOURS.get(status, "white")
    return f"[{colour}]{status}[/{colour}]"


# ---------------------------------------------------------------------------
# Audit summary
# ---------------------------------------------------------------------------


def display_audit_summary(console: Console, summary: AuditSummary, report_dir: Path) -> None:
    """Render one row per audited table, drift details, and a footer.

    Parameters
    ----------
    console:
        Rich console to write to (typically stderr).
    summary:
        The aggregated audit result.
    report_dir:
        Directory the JSON reports were written to, shown in the footer.
    """
    if not summary.reports:
        console.print("[dim]No tables were audited.[/dim]")
        return

    table = Table(
        title="Schema Contract Audit",
        show_lines=False,
        pad_edge=True,
        expand=False,
    )
    table.add_column("Table", style="bold")
    table.add_column("Status")
    table.add_column("Missing", justify="right")
    table.add_column("Extraneous", justify="right")
    table.add_column("Mismatched", justify="right")
    table.add_column("Error")

    for report in summary.reports:
        table.add_row(
            escape(report.table_name),
            _coloured_status(report.status.value),
            str(len(report.missing)),
            str(len(report.extraneous)),
            str(len(report.mismatched)),
            escape(report.error) if report.error else "-",
        )

    console.print(table)

    for report in summary.reports:
        if report.drift_count:
            display_drift_details(console, report)

    if summary.failed == 0:
        console.print(f"\n[green bold]All {summary.total} table(s) are aligned with their contracts.[/green bold]")
    else:
        console.print(
            f"\n[red bold]{summary.failed} of {summary.total} table(s) failed the audit.[/red bold] "
            f"See the individual reports in {report_dir}."
        )


def display_drift_details(console: Console, report: DiffReport) -> None:
    """Render the missing, extraneous and mismatched columns of one table."""
    drift = Table(
        title=f"Drift in {escape(report.table_name)}",
        show_lines=False,
        pad_edge=True,
        expand=False,
    )
    drift.add_column("Column", style="bold")
    drift.add_column("Drift")
    drift.add_column("Expected")
    drift.add_column("Actual")

    for col in report.missing:
        drift.add_row(col.column, "[red]missing[/red]", col.canonical_type, "-")
    for col in report.extraneous:
        drift.add_row(col.column, "[yellow]extraneous[/yellow]", "-", col.canonical_type)
    for mismatch in report.mismatched:
        drift.add_row(mismatch.column, "[magenta]mismatched[/magenta]", mismatch.expected, mismatch.actual)

    console.print(drift)


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


def display_diagnostics_counts(console: Console, counts: DiagnosticsCounts, path: Path) -> None:
    """Render the per-category counts of a saved diagnostics snapshot."""
    table = Table(title="Schema Snapshot", show_lines=False, pad_edge=True, expand=False)
    table.add_column("Category", style="bold")
    table.add_column("Count", justify="right")

    for label, value in (
        ("Tables", counts.tables),
        ("Columns", counts.columns),
        ("Constraints", counts.constraints),
        ("Indexes", counts.indexes),
        ("RLS policies", counts.rls_policies),
        ("Triggers", counts.triggers),
        ("Functions", counts.functions),
        ("Procedures", counts.procedures),
    ):
        table.add_row(label, str(value))

    console.print(table)
    console.print(f"[dim]Snapshot saved to {path}[/dim]")


def display_inspection(console: Console, inspection: TableInspection) -> None:
    """Render the full structure of one table."""
    if not inspection.found:
        console.print(f"[yellow]{inspection.summary_line}[/yellow]")
        return

    snapshot = inspection.snapshot
    meta = snapshot.metadata
    console.print(Panel(inspection.summary_line, title=inspection.table_name, border_style="blue"))

    columns = Table(title="Columns", show_lines=False, pad_edge=True, expand=False)
    columns.add_column("Column", style="bold")
    columns.add_column("Type")
    for col in snapshot.columns:
        columns.add_row(col.column, col.canonical_type)
    console.print(columns)

    if meta.constraints:
        constraints = Table(title="Constraints", show_lines=False, pad_edge=True, expand=False)
        constraints.add_column("Name", style="bold")
        constraints.add_column("Type")
        for c in meta.constraints:
            constraints.add_row(c.constraint_name, c.type)
        console.print(constraints)

    if meta.indexes:
        console.print("[bold]Indexes:[/bold] " + ", ".join(i.index_name for i in meta.indexes))

    if meta.rls_policies:
        policies = Table(title="RLS Policies", show_lines=False, pad_edge=True, expand=False)
        policies.add_column("Policy", style="bold")
        policies.add_column("Command")
        policies.add_column("Definition")
        for p in meta.rls_policies:
            policies.add_row(p.policy_name, p.command, p.definition or "-")
        console.print(policies)

    if meta.triggers:
        triggers = Table(title="Triggers", show_lines=False, pad_edge=True, expand=False)
        triggers.add_column("Trigger", style="bold")
        triggers.add_column("Timing")
        triggers.add_column("Event")
        for t in meta.triggers:
            triggers.add_row(t.trigger_name, t.timing, t.event)
        console.print(triggers)
