"""Audit orchestration across every table of a run.

One run:

1. Resolve the target tables (explicit list, or every table the contract
   source knows).
2. Call ``schemas.prepare()`` once.  For live introspection this is the
   single diagnostics round trip shared by all tables; a connectivity or
   shape error here aborts the whole run after writing a run-failure
   artifact.
3. Audit each table on a worker thread: derive the contract, derive the
   snapshot, then diff it (or report ``NOT_FOUND`` for an empty snapshot).
   Any per-table exception becomes a FAIL report; it never reaches sibling
   tables.
4. Write every table's report, whatever happened to it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from contract_engine.audit.report_writer import ReportWriter
from contract_engine.diff.schema_diff import compute_diff
from contract_engine.errors import AuditError
from contract_engine.models.report import AuditSummary, DiffReport, failed_report, not_found_report
from contract_engine.sources import ContractSource, SchemaSource

logger = logging.getLogger(__name__)


class AuditOrchestrator:
    """Drive a contract audit over many tables.

    Parameters
    ----------
    contracts:
        Source of expected columns.
    schemas:
        Source of authoritative columns.
    writer:
        Destination of the per-table JSON artifacts.
    max_workers:
        Upper bound on concurrently audited tables.
    """

    def __init__(
        self,
        contracts: ContractSource,
        schemas: SchemaSource,
        writer: ReportWriter,
        *,
        max_workers: int = 8,
    ) -> None:
        self._contracts = contracts
        self._schemas = schemas
        self._writer = writer
        self._max_workers = max(1, max_workers)

    def run(self, tables: Sequence[str] | None = None) -> AuditSummary:
        """Audit *tables* (default: every contract table) and aggregate the results.

        Raises
        ------
        AuditError
            When ``schemas.prepare()`` fails; nothing has been audited.
        """
        target = list(tables) if tables is not None else self._contracts.tables()
        start = time.monotonic()

        try:
            self._schemas.prepare()
        except AuditError as exc:
            logger.error(
                "Audit run aborted before auditing any table: %s",
                exc,
                extra={"audit": {"event": "run_aborted", "error": str(exc), "tables": target}},
            )
            try:
                self._writer.write_run_failure(str(exc), target)
            except OSError as write_exc:
                logger.error("Could not write run failure report: %s", write_exc)
            raise

        if not target:
            logger.warning("No tables to audit.")
            return AuditSummary()

        logger.info("Auditing %d tables: %s", len(target), ", ".join(target))
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(target))) as executor:
            reports = list(executor.map(self.audit_table, target))

        summary = AuditSummary(reports=tuple(reports))
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Audit finished: %d/%d tables passed",
            summary.passed,
            summary.total,
            extra={
                "audit": {
                    "event": "run_complete",
                    "total": summary.total,
                    "passed": summary.passed,
                    "failed": summary.failed,
                    "elapsed_ms": elapsed_ms,
                }
            },
        )
        return summary

    def audit_table(self, table: str) -> DiffReport:
        """Audit one table; never raises.

        The report is written even when deriving the contract or the
        snapshot failed, so that failures are never silent.
        """
        try:
            contract = self._contracts.contract_for(table)
            snapshot = self._schemas.snapshot_for(table)
            report = not_found_report(table) if snapshot.is_empty else compute_diff(contract, snapshot)
        except AuditError as exc:
            logger.error("Audit of table '%s' failed: %s", table, exc)
            report = failed_report(table, str(exc))
        except Exception as exc:
            logger.exception("Unexpected error while auditing table '%s'", table)
            report = failed_report(table, f"{type(exc).__name__}: {exc}")

        self._persist(report)
        logger.info(
            report.summary_line,
            extra={
                "audit": {
                    "event": "table_audited",
                    "table": table,
                    "status": report.status.value,
                    "missing": len(report.missing),
                    "extraneous": len(report.extraneous),
                    "mismatched": len(report.mismatched),
                    "error": report.error,
                }
            },
        )
        return report

    def _persist(self, report: DiffReport) -> None:
        try:
            self._writer.write_report(
                report,
                contract_source=self._contracts.name,
                schema_source=self._schemas.name,
            )
        except OSError as exc:
            logger.error("Could not write report for table '%s': %s", report.table_name, exc)


def exit_code(summary: AuditSummary) -> int:
    """Return the process exit code for *summary*: 1 when any table did not pass."""
    return 1 if summary.failed > 0 else 0
