"""Column-level models shared by both sides of a contract audit."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from contract_engine.models.diagnostics import ConstraintRow, IndexRow, RlsPolicyRow, TriggerRow


class TypeToken(str, Enum):
    """Closed vocabulary every type description is normalized into."""

    TEXT = "text"
    UUID = "uuid"
    INTEGER = "integer"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    TIMESTAMP_TZ = "timestamp_tz"
    JSONB = "jsonb"
    ARRAY = "array"
    ENUM_LIKE = "enum_like"
    UNKNOWN = "unknown"


class ColumnDescriptor(BaseModel):
    """A single column of a table as seen by one source.

    Contract-side descriptors always carry a :class:`TypeToken` value.
    Authoritative-side descriptors carry the normalized raw type reported by
    the store, which may be any string (e.g. ``character varying(255)``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    table: str = Field(..., description="Table the column belongs to.")
    column: str = Field(..., description="Column name, unique within the table.")
    canonical_type: str = Field(..., alias="canonicalType", description="Canonical type token.")


class TableContract(BaseModel):
    """Columns a table is expected to have, in declaration order."""

    model_config = ConfigDict(frozen=True)

    table: str
    columns: tuple[ColumnDescriptor, ...] = ()


class TableMetadata(BaseModel):
    """Ancillary structure reported alongside a table's columns.

    Only surfaced for human/AI review; never diffed.
    """

    model_config = ConfigDict(frozen=True)

    constraints: tuple[ConstraintRow, ...] = ()
    indexes: tuple[IndexRow, ...] = ()
    rls_policies: tuple[RlsPolicyRow, ...] = ()
    triggers: tuple[TriggerRow, ...] = ()


class TableSchemaSnapshot(BaseModel):
    """Authoritative columns of a table, fetched fresh every run."""

    model_config = ConfigDict(frozen=True)

    table: str
    columns: tuple[ColumnDescriptor, ...] = ()
    metadata: TableMetadata = Field(default_factory=TableMetadata)

    @property
    def is_empty(self) -> bool:
        return not self.columns
