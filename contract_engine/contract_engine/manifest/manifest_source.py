"""Schema and contract sources backed by DDL manifest files.

Each table has one Markdown manifest in ``manifest_dir`` whose file name is
built from ``filename_template`` (``{table}`` and ``{TABLE}`` expand to the
table name as-is and upper-cased).  Manifests are read fresh for every
table; reads are independent, so table workers never coordinate.
"""

from __future__ import annotations

import logging
from pathlib import Path

from contract_engine.errors import EmptyContractError, ParseError
from contract_engine.manifest.ddl_parser import (
    DdlColumn,
    extract_sql_block,
    parse_create_table,
    table_name_from_ddl,
)
from contract_engine.models.columns import ColumnDescriptor, TableContract, TableSchemaSnapshot

logger = logging.getLogger(__name__)

DEFAULT_FILENAME_TEMPLATE = "001_MANIFEST_TABLE_{TABLE}.md"


class ManifestReader:
    """Locate, read and parse table manifests."""

    def __init__(self, manifest_dir: Path, filename_template: str = DEFAULT_FILENAME_TEMPLATE) -> None:
        self.manifest_dir = manifest_dir
        self.filename_template = filename_template

    def manifest_path(self, table: str) -> Path:
        return self.manifest_dir / self.filename_template.format(table=table, TABLE=table.upper())

    def read_ddl(self, path: Path) -> str:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ParseError(f"Cannot read manifest {path}: {exc}") from exc
        try:
            return extract_sql_block(text)
        except ParseError as exc:
            raise ParseError(f"No SQL block found in manifest {path}.") from exc

    def read_columns(self, table: str) -> list[DdlColumn]:
        """Return the columns declared in *table*'s manifest.

        Raises
        ------
        ParseError
            If the manifest is unreadable or has no SQL block.
        """
        path = self.manifest_path(table)
        columns = parse_create_table(self.read_ddl(path))
        if not columns:
            logger.warning("Manifest %s declares no columns for table '%s'", path, table)
        return columns

    def discover_tables(self) -> list[str]:
        """Return the tables named by the manifests in ``manifest_dir``, sorted.

        Manifests that cannot be read or hold no ``CREATE TABLE`` are skipped
        with a warning.
        """
        pattern = self.filename_template.format(table="*", TABLE="*")
        tables: set[str] = set()
        for path in sorted(self.manifest_dir.glob(pattern)):
            try:
                name = table_name_from_ddl(self.read_ddl(path))
            except ParseError as exc:
                logger.warning("Skipping manifest %s: %s", path, exc)
                continue
            if name is None:
                logger.warning("Skipping manifest %s: no CREATE TABLE statement", path)
                continue
            tables.add(name)
        return sorted(tables)


class ManifestSchemaSource:
    """Authoritative snapshots parsed from DDL manifests."""

    name = "manifest"

    def __init__(self, reader: ManifestReader) -> None:
        self._reader = reader

    def prepare(self) -> None:
        logger.info("Reading authoritative schemas from manifests in %s", self._reader.manifest_dir)

    def snapshot_for(self, table: str) -> TableSchemaSnapshot:
        columns = tuple(
            ColumnDescriptor(table=table, column=col.name, canonical_type=col.type)
            for col in self._reader.read_columns(table)
        )
        return TableSchemaSnapshot(table=table, columns=columns)


class ManifestContractSource:
    """Contracts parsed from DDL manifests, for auditing manifests against the store.

    Column types are the normalized DDL spellings (``uuid``, ``text``,
    ``timestamp_tz``, ``varchar(255)`` ...), not classified tokens, so a
    manifest type matches any store type it is a prefix of.
    """

    name = "manifest"

    def __init__(self, reader: ManifestReader) -> None:
        self._reader = reader

    def tables(self) -> list[str]:
        return self._reader.discover_tables()

    def contract_for(self, table: str) -> TableContract:
        """Return the manifest-declared contract of *table*.

        Raises
        ------
        ParseError
            If the manifest is unreadable or has no SQL block.
        EmptyContractError
            If no column could be extracted.
        """
        columns = tuple(
            ColumnDescriptor(table=table, column=col.name, canonical_type=col.type)
            for col in self._reader.read_columns(table)
        )
        if not columns:
            raise EmptyContractError(table)
        return TableContract(table=table, columns=columns)
