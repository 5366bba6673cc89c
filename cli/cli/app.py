"""contractguard CLI application -- Typer-based audit interface.

Provides commands for contract audits, full schema snapshots and
single-table inspection.  Human-readable output goes to *stderr* via
Rich; machine-readable summaries go to *stdout* with ``--json`` and the
durable JSON reports go to files under the report directory.
"""

from __future__ import annotations

import json
import sys
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from cli.display import (
    display_audit_summary,
    display_diagnostics_counts,
    display_inspection,
)
from contract_engine.audit import AuditOrchestrator, ReportWriter, exit_code
from contract_engine.config import Settings, load_settings
from contract_engine.contracts import RegistryContractSource, load_registry
from contract_engine.errors import AuditError, ConfigurationError
from contract_engine.introspection import (
    DiagnosticsClient,
    LiveSchemaSource,
    inspect_table,
    load_diagnostics_file,
    summarize_diagnostics,
)
from contract_engine.manifest import ManifestContractSource, ManifestReader, ManifestSchemaSource
from contract_engine.models.diagnostics import SystemDiagnostics
from contract_engine.sources import ContractSource, SchemaSource
from contract_engine.telemetry import configure_logging

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="contractguard",
    help="contractguard - verify application schema contracts against the live database",
    no_args_is_help=True,
)
console = Console(stderr=True)

# Mutable global options populated by the Typer callback.
_json_output: bool = False


class SchemaSourceKind(str, Enum):
    LIVE = "live"
    MANIFEST = "manifest"


class ContractSourceKind(str, Enum):
    REGISTRY = "registry"
    MANIFEST = "manifest"


# ---------------------------------------------------------------------------
# Callback -- global options
# ---------------------------------------------------------------------------


@app.callback()
def _global_options(
    json_mode: bool = typer.Option(
        False,
        "--json/--no-json",
        help="Emit structured JSON to stdout instead of human-readable output.",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).  Defaults to CONTRACTGUARD_LOG_LEVEL.",
    ),
) -> None:
    """Global options applied to every command."""
    global _json_output  # noqa: PLW0603
    _json_output = json_mode

    settings = load_settings()
    configure_logging(log_level or settings.log_level, structured=settings.structured_logging)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: dict[str, Any]) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, sort_keys=True) + "\n")


def _fail(message: str) -> None:
    """Report a command-level failure on the active channel."""
    if _json_output:
        _emit_json({"status": "FAIL", "error": message})
    else:
        console.print(f"[red]{escape(message)}[/red]")


def _build_contract_source(
    kind: ContractSourceKind,
    settings: Settings,
    registry_path: str | None,
    reader: ManifestReader,
) -> ContractSource:
    if kind is ContractSourceKind.MANIFEST:
        return ManifestContractSource(reader)

    import_path = registry_path or settings.contract_registry
    if not import_path:
        raise ConfigurationError(
            "No contract registry configured. Pass --registry module:ATTR or set CONTRACTGUARD_CONTRACT_REGISTRY."
        )
    return RegistryContractSource(load_registry(import_path))


def _build_schema_source(
    kind: SchemaSourceKind,
    settings: Settings,
    snapshot_file: Path | None,
    reader: ManifestReader,
) -> SchemaSource:
    if kind is SchemaSourceKind.MANIFEST:
        return ManifestSchemaSource(reader)
    if snapshot_file is not None:
        return LiveSchemaSource.from_file(snapshot_file)
    return LiveSchemaSource.from_client(DiagnosticsClient.from_settings(settings))


def _load_diagnostics(settings: Settings, snapshot_file: Path | None) -> SystemDiagnostics:
    if snapshot_file is not None:
        return load_diagnostics_file(snapshot_file)
    return DiagnosticsClient.from_settings(settings).fetch()


# ---------------------------------------------------------------------------
# audit
# ---------------------------------------------------------------------------


@app.command()
def audit(
    table: str | None = typer.Argument(
        None,
        help="Audit only this table.  Defaults to every table of the contract source.",
    ),
    source: SchemaSourceKind = typer.Option(
        SchemaSourceKind.LIVE,
        "--source",
        help="Authoritative schema: the live database or the DDL manifests.",
    ),
    contracts: ContractSourceKind = typer.Option(
        ContractSourceKind.REGISTRY,
        "--contracts",
        help="Expected schema: the application model registry or the DDL manifests.",
    ),
    registry: str | None = typer.Option(
        None,
        "--registry",
        help="Import path of the model registry, e.g. 'app.schemas:REGISTRY'.",
    ),
    snapshot_file: Path | None = typer.Option(
        None,
        "--snapshot-file",
        help="Audit offline against a saved diagnostics document instead of the live database.",
    ),
    manifest_dir: Path | None = typer.Option(
        None,
        "--manifest-dir",
        help="Directory holding the DDL manifests.",
    ),
    report_dir: Path | None = typer.Option(
        None,
        "--report-dir",
        help="Directory the JSON reports are written to.",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        min=1,
        help="Maximum number of tables audited concurrently.",
    ),
) -> None:
    """Compare each table's contract with the authoritative schema and write one report per table."""
    settings = load_settings()
    writer = ReportWriter(report_dir or settings.report_dir)
    reader = ManifestReader(
        manifest_dir or settings.manifest_dir,
        settings.manifest_filename_template,
    )
    target = [table] if table else None

    try:
        if source is SchemaSourceKind.MANIFEST and contracts is ContractSourceKind.MANIFEST:
            raise ConfigurationError(
                "--source manifest and --contracts manifest would compare the manifests to themselves."
            )
        contract_source = _build_contract_source(contracts, settings, registry, reader)
        schema_source = _build_schema_source(source, settings, snapshot_file, reader)
    except ConfigurationError as exc:
        writer.write_run_failure(str(exc), target)
        _fail(str(exc))
        raise typer.Exit(code=1) from exc

    orchestrator = AuditOrchestrator(
        contract_source,
        schema_source,
        writer,
        max_workers=workers or settings.max_workers,
    )

    try:
        summary = orchestrator.run(target)
    except AuditError as exc:
        _fail(f"Audit aborted: {exc}")
        raise typer.Exit(code=1) from exc

    if _json_output:
        _emit_json(
            {
                "status": "PASS" if summary.failed == 0 else "FAIL",
                "total": summary.total,
                "passed": summary.passed,
                "failed": summary.failed,
                "reports": [r.model_dump(mode="json", by_alias=True) for r in summary.reports],
            }
        )
    else:
        display_audit_summary(console, summary, writer.consistency_dir)

    raise typer.Exit(code=exit_code(summary))


# ---------------------------------------------------------------------------
# snapshot
# ---------------------------------------------------------------------------


@app.command()
def snapshot(
    snapshot_file: Path | None = typer.Option(
        None,
        "--snapshot-file",
        help="Re-save a diagnostics document from this file instead of fetching it.",
    ),
    report_dir: Path | None = typer.Option(
        None,
        "--report-dir",
        help="Directory the snapshot is written to.",
    ),
) -> None:
    """Fetch the full structural diagnostic of the database and save it as schema-all.json."""
    settings = load_settings()
    writer = ReportWriter(report_dir or settings.report_dir)

    try:
        diagnostics = _load_diagnostics(settings, snapshot_file)
    except AuditError as exc:
        writer.write_snapshot(None, None, error=str(exc))
        _fail(f"Snapshot failed: {exc}")
        raise typer.Exit(code=1) from exc

    counts = summarize_diagnostics(diagnostics)
    path = writer.write_snapshot(diagnostics, counts)

    if _json_output:
        _emit_json({"status": "SUCCESS", "path": str(path), "counts": counts.model_dump(mode="json")})
    else:
        display_diagnostics_counts(console, counts, path)


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


@app.command()
def inspect(
    table: str = typer.Argument(..., help="Table to inspect."),
    snapshot_file: Path | None = typer.Option(
        None,
        "--snapshot-file",
        help="Inspect a saved diagnostics document instead of the live database.",
    ),
    report_dir: Path | None = typer.Option(
        None,
        "--report-dir",
        help="Directory the inspection report is written to.",
    ),
) -> None:
    """Report the columns, constraints, indexes, RLS policies and triggers of one table."""
    settings = load_settings()
    writer = ReportWriter(report_dir or settings.report_dir)

    try:
        diagnostics = _load_diagnostics(settings, snapshot_file)
    except AuditError as exc:
        writer.write_inspection(table, None, error=str(exc))
        _fail(f"Inspection failed: {exc}")
        raise typer.Exit(code=1) from exc

    inspection = inspect_table(diagnostics, table)
    path = writer.write_inspection(table, inspection)

    if _json_output:
        _emit_json(
            {
                "status": "SUCCESS" if inspection.found else "NOT_FOUND",
                "path": str(path),
                "inspection": inspection.model_dump(mode="json", by_alias=True),
            }
        )
    else:
        display_inspection(console, inspection)

    if not inspection.found:
        raise typer.Exit(code=1)
