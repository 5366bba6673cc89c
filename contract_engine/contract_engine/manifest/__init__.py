"""DDL manifest parsing and manifest-backed sources."""

from contract_engine.manifest.ddl_parser import (
    DdlColumn,
    LineKind,
    classify_line,
    clean_line,
    extract_sql_block,
    parse_create_table,
    table_name_from_ddl,
    tokenize_column,
)
from contract_engine.manifest.manifest_source import (
    ManifestContractSource,
    ManifestReader,
    ManifestSchemaSource,
)

__all__ = [
    "DdlColumn",
    "LineKind",
    "ManifestContractSource",
    "ManifestReader",
    "ManifestSchemaSource",
    "classify_line",
    "clean_line",
    "extract_sql_block",
    "parse_create_table",
    "table_name_from_ddl",
    "tokenize_column",
]
