"""Strict shape of the store's system-diagnostics document.

The diagnostics RPC returns one JSON document describing every column,
constraint, index, row-security policy, trigger and stored routine in the
store.  Validation is strict: string fields never accept other types, and
any missing or mistyped field rejects the whole document.  Unknown keys are
ignored so that the store may report more than the engine reads.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class _DiagnosticsRow(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class ColumnRow(_DiagnosticsRow):
    """One ``{table, column, type}`` entry of ``schema_columns``."""

    table: StrictStr
    column: StrictStr
    type: StrictStr


class ConstraintRow(_DiagnosticsRow):
    table: StrictStr
    constraint_name: StrictStr
    type: StrictStr


class IndexRow(_DiagnosticsRow):
    table: StrictStr
    index_name: StrictStr


class RlsPolicyRow(_DiagnosticsRow):
    table: StrictStr
    policy_name: StrictStr
    command: StrictStr
    definition: StrictStr | None


class TriggerRow(_DiagnosticsRow):
    trigger_name: StrictStr
    table: StrictStr
    timing: StrictStr
    event: StrictStr


class RoutineRow(_DiagnosticsRow):
    """A stored function or procedure."""

    name: StrictStr
    type: Literal["FUNCTION", "PROCEDURE"]


class SystemDiagnostics(_DiagnosticsRow):
    """The full structural snapshot returned by one diagnostics round trip."""

    schema_columns: list[ColumnRow] = Field(..., description="Every column of every table.")
    table_constraints: list[ConstraintRow] = Field(..., description="Table constraints.")
    indexes: list[IndexRow] = Field(..., description="Indexes, keyed by table.")
    rls_policies: list[RlsPolicyRow] = Field(..., description="Row-level security policies.")
    triggers: list[TriggerRow] = Field(..., description="Table triggers.")
    functions_and_procedures: list[RoutineRow] = Field(..., description="Stored routines.")

    def table_names(self) -> list[str]:
        """Return the distinct table names in first-seen column order."""
        return list(dict.fromkeys(row.table for row in self.schema_columns))
