"""Unit tests for contract_engine.manifest.ddl_parser.

Covers:
- SQL block extraction from Markdown manifests (present, empty, absent).
- Line cleaning and classification (constraint, blank, keyword rows).
- Splitting a body line into definitions at top-level commas.
- Column extraction round trip for generated single-line and multi-line DDL.
"""

from __future__ import annotations

import pytest
from contract_engine.errors import ParseError
from contract_engine.manifest.ddl_parser import (
    DdlColumn,
    LineKind,
    classify_line,
    clean_line,
    extract_sql_block,
    parse_create_table,
    split_definitions,
    table_name_from_ddl,
    tokenize_column,
)

PROFILES_DDL = """\
CREATE TABLE public.profiles (
    id uuid PRIMARY KEY,
    email text NOT NULL,
    created_at timestamptz DEFAULT now(),
    age integer,
    CONSTRAINT profiles_email_key UNIQUE (email)
);"""


# ---------------------------------------------------------------------------
# SQL block extraction
# ---------------------------------------------------------------------------


class TestExtractSqlBlock:
    def test_extracts_first_block(self):
        text = f"# Profiles\n\nSome prose.\n\n```sql\n{PROFILES_DDL}\n```\n\n```sql\nSELECT 1;\n```\n"
        assert extract_sql_block(text) == PROFILES_DDL

    def test_empty_block_returns_empty_string(self):
        assert extract_sql_block("```sql\n```") == ""

    def test_missing_block_raises(self):
        with pytest.raises(ParseError):
            extract_sql_block("# Profiles\n\nNo DDL here.\n")

    def test_non_sql_fence_is_ignored(self):
        with pytest.raises(ParseError):
            extract_sql_block("```python\nprint('hi')\n```")


class TestTableNameFromDdl:
    def test_qualified_name(self):
        assert table_name_from_ddl(PROFILES_DDL) == "profiles"

    def test_if_not_exists_and_quotes(self):
        assert table_name_from_ddl('create table if not exists "public"."orders" (id uuid);') == "orders"

    def test_no_create_table(self):
        assert table_name_from_ddl("SELECT 1;") is None


# ---------------------------------------------------------------------------
# Line handling
# ---------------------------------------------------------------------------


class TestCleanLine:
    def test_strips_whitespace_and_one_comma(self):
        assert clean_line("   email text NOT NULL,  ") == "email text NOT NULL"

    def test_strips_only_one_comma(self):
        assert clean_line("a text,,") == "a text,"


class TestClassifyLine:
    @pytest.mark.parametrize(
        ("line", "kind"),
        [
            ("", LineKind.BLANK),
            ("CONSTRAINT profiles_pkey PRIMARY KEY (id)", LineKind.CONSTRAINT),
            ("constraint fk_user FOREIGN KEY (user_id) REFERENCES users(id)", LineKind.CONSTRAINT),
            ("PRIMARY KEY (id)", LineKind.CONSTRAINT),
            ("primary   key (id, tenant_id)", LineKind.CONSTRAINT),
            ("id", LineKind.INCOMPLETE),
            ("CREATE TABLE", LineKind.KEYWORD),
            ("TABLE profiles", LineKind.KEYWORD),
            ("id uuid PRIMARY KEY", LineKind.COLUMN),
            ("email text NOT NULL", LineKind.COLUMN),
        ],
    )
    def test_classification(self, line, kind):
        assert classify_line(line) == kind


class TestTokenizeColumn:
    def test_lowercases_type(self):
        assert tokenize_column("id UUID PRIMARY KEY") == DdlColumn(name="id", type="uuid")

    def test_timestamptz_becomes_canonical(self):
        assert tokenize_column("created_at timestamptz DEFAULT now()") == DdlColumn(
            name="created_at", type="timestamp_tz"
        )

    def test_preserves_column_name_case(self):
        assert tokenize_column("displayName text").name == "displayName"


# ---------------------------------------------------------------------------
# parse_create_table
# ---------------------------------------------------------------------------


class TestSplitDefinitions:
    def test_splits_at_top_level_commas(self):
        assert split_definitions("a text, b integer") == ["a text", " b integer"]

    def test_commas_inside_parentheses_are_kept(self):
        assert split_definitions("price numeric(10, 2), PRIMARY KEY (a, b)") == [
            "price numeric(10, 2)",
            " PRIMARY KEY (a, b)",
        ]

    def test_commas_inside_literals_are_kept(self):
        assert split_definitions("tag text DEFAULT 'a,b',") == ["tag text DEFAULT 'a,b'", ""]

    def test_line_without_comma(self):
        assert split_definitions("    id uuid") == ["    id uuid"]


class TestParseCreateTable:
    def test_profiles_manifest(self):
        assert parse_create_table(PROFILES_DDL) == [
            DdlColumn("id", "uuid"),
            DdlColumn("email", "text"),
            DdlColumn("created_at", "timestamp_tz"),
            DdlColumn("age", "integer"),
        ]

    def test_round_trip_of_generated_ddl(self):
        columns = [
            DdlColumn("id", "uuid"),
            DdlColumn("owner_id", "uuid"),
            DdlColumn("title", "text"),
            DdlColumn("price", "numeric(10,2)"),
            DdlColumn("is_active", "boolean"),
            DdlColumn("payload", "jsonb"),
            DdlColumn("updated_at", "timestamp_tz"),
        ]
        body = ",\n".join(f"    {c.name} {c.type}" for c in columns)
        ddl = f"CREATE TABLE items (\n{body},\n    PRIMARY KEY (id)\n);"
        assert parse_create_table(ddl) == columns

    def test_blank_lines_are_skipped(self):
        ddl = "CREATE TABLE t (\n\n    a text,\n\n    b integer\n);"
        assert parse_create_table(ddl) == [DdlColumn("a", "text"), DdlColumn("b", "integer")]

    def test_keyword_rows_are_discarded(self):
        ddl = "CREATE TABLE t (\n    a text\n);\nCREATE TABLE u (\n    b integer\n);"
        names = [c.name for c in parse_create_table(ddl)]
        assert "CREATE" not in names
        assert "TABLE" not in names
        assert names == ["a", "b"]

    def test_no_body_returns_empty(self):
        assert parse_create_table("CREATE TABLE t;") == []

    def test_empty_parens_return_empty(self):
        assert parse_create_table("CREATE TABLE t ();") == []

    def test_empty_input_returns_empty(self):
        assert parse_create_table("") == []

    def test_single_line_statement(self):
        ddl = (
            "CREATE TABLE t (id uuid PRIMARY KEY, name text, created_at timestamptz, "
            "CONSTRAINT t_pk PRIMARY KEY (id))"
        )
        assert parse_create_table(ddl) == [
            DdlColumn("id", "uuid"),
            DdlColumn("name", "text"),
            DdlColumn("created_at", "timestamp_tz"),
        ]

    def test_single_and_multi_line_forms_agree(self):
        single = "CREATE TABLE t (id uuid, total numeric(10,2), tags text[], PRIMARY KEY (id));"
        multi = "CREATE TABLE t (\n    id uuid,\n    total numeric(10,2),\n    tags text[],\n    PRIMARY KEY (id)\n);"
        assert parse_create_table(single) == parse_create_table(multi)
        assert [c.name for c in parse_create_table(single)] == ["id", "total", "tags"]
