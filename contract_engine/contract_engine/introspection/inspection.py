"""Structural reports built from a diagnostics document.

These reports surface constraints, indexes, row-security policies,
triggers and stored routines for human/AI review.  None of it is diffed.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from contract_engine.introspection.live_source import snapshot_from_diagnostics
from contract_engine.models.columns import TableSchemaSnapshot
from contract_engine.models.diagnostics import SystemDiagnostics


class TableInspection(BaseModel):
    """Full structure of one table, as reported by the store."""

    table_name: str
    found: bool
    snapshot: TableSchemaSnapshot

    @property
    def summary_line(self) -> str:
        if not self.found:
            return f"{self.table_name}: NOT_FOUND (table absent from the store)"
        meta = self.snapshot.metadata
        return (
            f"{self.table_name}: {len(self.snapshot.columns)} columns, "
            f"{len(meta.constraints)} constraints, {len(meta.indexes)} indexes, "
            f"{len(meta.rls_policies)} RLS policies, {len(meta.triggers)} triggers"
        )


class DiagnosticsCounts(BaseModel):
    """Number of objects per category in a diagnostics document."""

    tables: int = Field(default=0)
    columns: int = Field(default=0)
    constraints: int = Field(default=0)
    indexes: int = Field(default=0)
    rls_policies: int = Field(default=0)
    triggers: int = Field(default=0)
    functions: int = Field(default=0)
    procedures: int = Field(default=0)


def inspect_table(diagnostics: SystemDiagnostics, table: str) -> TableInspection:
    """Build the structural report of *table*; no columns means not found."""
    snapshot = snapshot_from_diagnostics(diagnostics, table)
    return TableInspection(table_name=table, found=not snapshot.is_empty, snapshot=snapshot)


def summarize_diagnostics(diagnostics: SystemDiagnostics) -> DiagnosticsCounts:
    routines = diagnostics.functions_and_procedures
    return DiagnosticsCounts(
        tables=len(diagnostics.table_names()),
        columns=len(diagnostics.schema_columns),
        constraints=len(diagnostics.table_constraints),
        indexes=len(diagnostics.indexes),
        rls_policies=len(diagnostics.rls_policies),
        triggers=len(diagnostics.triggers),
        functions=sum(1 for r in routines if r.type == "FUNCTION"),
        procedures=sum(1 for r in routines if r.type == "PROCEDURE"),
    )
