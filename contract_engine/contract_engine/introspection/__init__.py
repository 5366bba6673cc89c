"""Live introspection of the authoritative store."""

from contract_engine.introspection.diagnostics_client import (
    DiagnosticsClient,
    load_diagnostics_file,
    validate_diagnostics,
)
from contract_engine.introspection.inspection import (
    DiagnosticsCounts,
    TableInspection,
    inspect_table,
    summarize_diagnostics,
)
from contract_engine.introspection.live_source import LiveSchemaSource, snapshot_from_diagnostics

__all__ = [
    "DiagnosticsClient",
    "DiagnosticsCounts",
    "LiveSchemaSource",
    "TableInspection",
    "inspect_table",
    "load_diagnostics_file",
    "snapshot_from_diagnostics",
    "summarize_diagnostics",
    "validate_diagnostics",
]
