"""Domain models for the contract audit engine."""

from contract_engine.models.columns import (
    ColumnDescriptor,
    TableContract,
    TableMetadata,
    TableSchemaSnapshot,
    TypeToken,
)
from contract_engine.models.diagnostics import (
    ColumnRow,
    ConstraintRow,
    IndexRow,
    RlsPolicyRow,
    RoutineRow,
    SystemDiagnostics,
    TriggerRow,
)
from contract_engine.models.report import (
    AuditStatus,
    AuditSummary,
    DiffReport,
    MismatchedColumn,
    failed_report,
    not_found_report,
)

__all__ = [
    "AuditStatus",
    "AuditSummary",
    "ColumnDescriptor",
    "ColumnRow",
    "ConstraintRow",
    "DiffReport",
    "IndexRow",
    "MismatchedColumn",
    "RlsPolicyRow",
    "RoutineRow",
    "SystemDiagnostics",
    "TableContract",
    "TableMetadata",
    "TableSchemaSnapshot",
    "TriggerRow",
    "TypeToken",
    "failed_report",
    "not_found_report",
]
