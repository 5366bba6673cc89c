"""Audit result models: per-table diff reports and the run summary."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from contract_engine.models.columns import ColumnDescriptor


class AuditStatus(str, Enum):
    """Outcome of auditing one table."""

    PASS = "PASS"
    FAIL = "FAIL"
    NOT_FOUND = "NOT_FOUND"


class MismatchedColumn(BaseModel):
    """A column present on both sides whose types are not equivalent."""

    model_config = ConfigDict(frozen=True)

    column: str
    expected: str
    actual: str


class DiffReport(BaseModel):
    """Three-way diff between a table's contract and its authoritative snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    table_name: str = Field(..., alias="tableName")
    missing: tuple[ColumnDescriptor, ...] = Field(
        default=(),
        description="Contract columns absent from the store, in contract order.",
    )
    extraneous: tuple[ColumnDescriptor, ...] = Field(
        default=(),
        description="Store columns absent from the contract, in fetch order.",
    )
    mismatched: tuple[MismatchedColumn, ...] = Field(
        default=(),
        description="Columns whose types are not equivalent, in contract order.",
    )
    status: AuditStatus
    error: str | None = Field(
        default=None,
        description="Reason the audit failed before a diff could be produced.",
    )

    @property
    def drift_count(self) -> int:
        return len(self.missing) + len(self.extraneous) + len(self.mismatched)

    @property
    def summary_line(self) -> str:
        """One-line human summary accompanying the JSON report."""
        if self.error is not None:
            return f"{self.table_name}: FAIL ({self.error})"
        if self.status == AuditStatus.NOT_FOUND:
            return f"{self.table_name}: NOT_FOUND (table absent from the authoritative source)"
        if self.status == AuditStatus.PASS:
            return f"{self.table_name}: PASS (schema aligned with contract)"
        return (
            f"{self.table_name}: FAIL ({len(self.missing)} missing, "
            f"{len(self.extraneous)} extraneous, {len(self.mismatched)} mismatched)"
        )


def failed_report(table: str, error: str) -> DiffReport:
    """Build the FAIL report recorded when a table's audit raised."""
    return DiffReport(table_name=table, status=AuditStatus.FAIL, error=error)


def not_found_report(table: str) -> DiffReport:
    """Build the report for a table with an empty authoritative snapshot."""
    return DiffReport(table_name=table, status=AuditStatus.NOT_FOUND)


class AuditSummary(BaseModel):
    """Aggregate over every table audited in one run.  Never persisted."""

    reports: tuple[DiffReport, ...] = ()

    @property
    def total(self) -> int:
        return len(self.reports)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.reports if r.status == AuditStatus.PASS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.reports if r.status != AuditStatus.PASS)

    def report_for(self, table: str) -> DiffReport | None:
        for report in self.reports:
            if report.table_name == table:
                return report
        return None
