"""Durable JSON artifacts for audit runs.

Layout under ``report_dir``::

    consistency/{table}-consistency-report.json   one per audited table
    consistency/_run-failure.json                 only when the run aborted
    schema/schema-all.json                        ``snapshot`` command
    schema/schema-{table}.json                    ``inspect`` command

Every artifact carries ``reportMetadata`` and an ``instructionsForAI``
block describing how to read it.  Table names are percent-encoded in file
names, so files for different tables never collide.  Concurrent runs
against the same directory are last-writer-wins.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from urllib.parse import quote

from contract_engine.introspection.inspection import DiagnosticsCounts, TableInspection
from contract_engine.models.diagnostics import SystemDiagnostics
from contract_engine.models.report import DiffReport

logger = logging.getLogger(__name__)

TOOL_NAME = "contractguard"

CONSISTENCY_INSTRUCTIONS: tuple[str, ...] = (
    "This is a schema consistency report comparing a table's declared contract with the authoritative schema.",
    "'missing' lists contract columns absent from the authoritative schema; "
    "'extraneous' lists authoritative columns absent from the contract; "
    "'mismatched' lists columns whose authoritative type does not satisfy the contract type.",
    "'status' is PASS when all three lists are empty, NOT_FOUND when the table does not exist "
    "in the authoritative source, and FAIL otherwise. A non-null 'error' means the audit could not run.",
    "Use this report to write migrations (ALTER TABLE) or to update the contract schemas so both stay aligned.",
)

SNAPSHOT_INSTRUCTIONS: tuple[str, ...] = (
    "This is a complete structural diagnostic of the database.",
    "'schemaDetails' holds one array per object kind: 'schema_columns', 'table_constraints', "
    "'indexes', 'rls_policies', 'triggers' and 'functions_and_procedures'.",
    "Treat it as the source of truth for the database structure at generation time.",
    "Cross-check it: routines used by triggers and RLS policies should exist, "
    "and foreign keys should reference existing tables.",
)

INSPECTION_INSTRUCTIONS: tuple[str, ...] = (
    "This report details the structure of a single table.",
    "'columns' lists every column and its store type; 'constraints', 'indexes', 'rls_policies' "
    "and 'triggers' describe the rest of its structure.",
    "Constraint and policy definitions are reported for review only; they are not validated.",
)

def _utc_now() -> datetime:
    return datetime.now(UTC)


class ReportWriter:
    """Write audit artifacts below *report_dir*.

    Parameters
    ----------
    report_dir:
        Root directory for every artifact.
    clock:
        Source of ``generatedAt`` timestamps, injectable for tests.
    """

    def __init__(self, report_dir: Path, clock: Callable[[], datetime] = _utc_now) -> None:
        self.report_dir = report_dir
        self._clock = clock

    @property
    def consistency_dir(self) -> Path:
        return self.report_dir / "consistency"

    @property
    def schema_dir(self) -> Path:
        return self.report_dir / "schema"

    def report_path(self, table: str) -> Path:
        return self.consistency_dir / f"{_safe_key(table)}-consistency-report.json"

    def _metadata(self, purpose: str, **extra: Any) -> dict[str, Any]:
        return {
            "tool": TOOL_NAME,
            "purpose": purpose,
            "generatedAt": self._clock().isoformat(),
            **extra,
        }

    def write_report(self, report: DiffReport, *, contract_source: str, schema_source: str) -> Path:
        """Persist one table's diff report and return its path."""
        body = report.model_dump(mode="json", by_alias=True)
        document = {
            "reportMetadata": self._metadata(
                f"Consistency audit between the contract and the authoritative schema of '{report.table_name}'.",
                contractSource=contract_source,
                schemaSource=schema_source,
            ),
            "instructionsForAI": list(CONSISTENCY_INSTRUCTIONS),
            **body,
            "summary": report.summary_line,
        }
        path = self.report_path(report.table_name)
        _write_json(path, document)
        logger.info("Report saved: %s", path)
        return path

    def write_run_failure(self, error: str, tables: Sequence[str] | None) -> Path:
        """Persist the reason a run aborted before any table was audited."""
        document = {
            "reportMetadata": self._metadata("Record of an audit run that aborted before auditing any table."),
            "instructionsForAI": [
                "The audit run failed as a whole; no per-table report was produced.",
                "Fix the connectivity or configuration problem in 'error' and re-run the audit.",
            ],
            "status": "FAIL",
            "targetTables": list(tables) if tables is not None else None,
            "error": error,
            "summary": f"Audit run aborted: {error}",
        }
        path = self.consistency_dir / "_run-failure.json"
        _write_json(path, document)
        logger.info("Run failure report saved: %s", path)
        return path

    def write_snapshot(
        self,
        diagnostics: SystemDiagnostics | None,
        counts: DiagnosticsCounts | None,
        *,
        error: str | None = None,
    ) -> Path:
        """Persist the full diagnostics document (or the reason it is missing)."""
        if error is None and diagnostics is not None:
            summary = f"Schema diagnostic completed: {counts.tables if counts else 0} tables captured."
        else:
            summary = f"Schema diagnostic failed: {error}"
        document = {
            "reportMetadata": self._metadata("Complete structural diagnostic of the database."),
            "instructionsForAI": list(SNAPSHOT_INSTRUCTIONS),
            "auditStatus": "SUCCESS" if error is None else "FAILED",
            "schemaDetails": diagnostics.model_dump(mode="json") if diagnostics is not None else None,
            "counts": counts.model_dump(mode="json") if counts is not None else None,
            "summary": summary,
        }
        path = self.schema_dir / "schema-all.json"
        _write_json(path, document)
        logger.info("Schema snapshot saved: %s", path)
        return path

    def write_inspection(self, table: str, inspection: TableInspection | None, *, error: str | None = None) -> Path:
        """Persist the structural report of one table."""
        details: dict[str, Any] | None = None
        if inspection is None:
            summary = f"Schema inspection of '{table}' failed: {error}"
            status = "FAILED"
        else:
            snapshot = inspection.snapshot
            details = {
                "columns": [{"column": c.column, "type": c.canonical_type} for c in snapshot.columns],
                **snapshot.metadata.model_dump(mode="json"),
            }
            summary = inspection.summary_line
            status = "SUCCESS" if inspection.found else "FAILED"
        document = {
            "reportMetadata": self._metadata(f"Structural diagnostic of table '{table}'.", targetTable=table),
            "instructionsForAI": list(INSPECTION_INSTRUCTIONS),
            "auditStatus": status,
            "schemaDetails": details,
            "summary": summary,
        }
        path = self.schema_dir / f"schema-{_safe_key(table)}.json"
        _write_json(path, document)
        logger.info("Inspection report saved: %s", path)
        return path


def _safe_key(table: str) -> str:
    # Percent-encoding is injective, so distinct tables never share a file.
    return quote(table, safe="") or "%"


def _write_json(path: Path, document: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
