"""Authoritative schema source backed by one live diagnostics fetch.

The diagnostics document is fetched once in :meth:`LiveSchemaSource.prepare`
and then shared read-only by every table worker; per-table snapshots are
filtered from it in memory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from contract_engine.contracts.type_normalizer import normalize_authoritative
from contract_engine.introspection.diagnostics_client import DiagnosticsClient, load_diagnostics_file
from contract_engine.models.columns import ColumnDescriptor, TableMetadata, TableSchemaSnapshot
from contract_engine.models.diagnostics import SystemDiagnostics

logger = logging.getLogger(__name__)


def snapshot_from_diagnostics(diagnostics: SystemDiagnostics, table: str) -> TableSchemaSnapshot:
    """Filter the columns and ancillary metadata of *table* out of *diagnostics*.

    Column order follows the order of the diagnostics document.  An unknown
    table yields an empty snapshot, never an error.
    """
    columns = tuple(
        ColumnDescriptor(
            table=row.table,
            column=row.column,
            canonical_type=normalize_authoritative(row.type),
        )
        for row in diagnostics.schema_columns
        if row.table == table
    )
    metadata = TableMetadata(
        constraints=tuple(c for c in diagnostics.table_constraints if c.table == table),
        indexes=tuple(i for i in diagnostics.indexes if i.table == table),
        rls_policies=tuple(p for p in diagnostics.rls_policies if p.table == table),
        triggers=tuple(t for t in diagnostics.triggers if t.table == table),
    )
    return TableSchemaSnapshot(table=table, columns=columns, metadata=metadata)


class LiveSchemaSource:
    """Serve table snapshots from a single diagnostics document.

    Parameters
    ----------
    fetch:
        Zero-argument callable returning the validated document.  It is
        invoked exactly once, by :meth:`prepare`.
    name:
        Label recorded in report metadata.
    """

    def __init__(self, fetch: Callable[[], SystemDiagnostics], name: str = "live") -> None:
        self._fetch = fetch
        self._diagnostics: SystemDiagnostics | None = None
        self.name = name

    @classmethod
    def from_client(cls, client: DiagnosticsClient) -> LiveSchemaSource:
        return cls(client.fetch, name="live")

    @classmethod
    def from_file(cls, path: Path) -> LiveSchemaSource:
        return cls(lambda: load_diagnostics_file(path), name=f"snapshot:{path}")

    @classmethod
    def from_diagnostics(cls, diagnostics: SystemDiagnostics) -> LiveSchemaSource:
        source = cls(lambda: diagnostics, name="live")
        source._diagnostics = diagnostics
        return source

    @property
    def diagnostics(self) -> SystemDiagnostics:
        if self._diagnostics is None:
            raise RuntimeError("LiveSchemaSource.prepare() must run before snapshots are requested.")
        return self._diagnostics

    def prepare(self) -> None:
        """Fetch the diagnostics document once for the whole run.

        Raises
        ------
        ConnectivityError
            If the round trip fails.
        ShapeValidationError
            If the document does not match the expected shape.
        """
        if self._diagnostics is not None:
            return
        self._diagnostics = self._fetch()
        logger.info(
            "Authoritative snapshot ready: %d tables, %d columns",
            len(self._diagnostics.table_names()),
            len(self._diagnostics.schema_columns),
        )

    def snapshot_for(self, table: str) -> TableSchemaSnapshot:
        return snapshot_from_diagnostics(self.diagnostics, table)
