"""Protocols implemented by the two sides of an audit."""

from __future__ import annotations

from typing import Protocol

from contract_engine.models.columns import TableContract, TableSchemaSnapshot


class ContractSource(Protocol):
    """Anything that can produce the expected columns of a table."""

    name: str

    def tables(self) -> list[str]: ...

    def contract_for(self, table: str) -> TableContract: ...


class SchemaSource(Protocol):
    """Anything that can produce the authoritative columns of a table.

    ``prepare`` runs once per audit before any table is processed and may
    raise run-fatal errors; ``snapshot_for`` must be safe to call from
    several worker threads at once.
    """

    name: str

    def prepare(self) -> None: ...

    def snapshot_for(self, table: str) -> TableSchemaSnapshot: ...
