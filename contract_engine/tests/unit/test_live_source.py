"""Unit tests for the live schema source and the structural inspection helpers."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from contract_engine.errors import ConnectivityError
from contract_engine.introspection.diagnostics_client import validate_diagnostics
from contract_engine.introspection.inspection import inspect_table, summarize_diagnostics
from contract_engine.introspection.live_source import LiveSchemaSource, snapshot_from_diagnostics


@pytest.fixture()
def diagnostics(diagnostics_payload):
    return validate_diagnostics(diagnostics_payload)


# ---------------------------------------------------------------------------
# snapshot_from_diagnostics
# ---------------------------------------------------------------------------


class TestSnapshotFromDiagnostics:
    def test_filters_columns_in_fetch_order(self, diagnostics):
        snapshot = snapshot_from_diagnostics(diagnostics, "profiles")

        assert [(c.column, c.canonical_type) for c in snapshot.columns] == [
            ("id", "uuid"),
            ("email", "text"),
            ("age", "bigint"),
            ("created_at", "timestamp_tz"),
        ]

    def test_user_defined_becomes_enum_like(self, diagnostics):
        snapshot = snapshot_from_diagnostics(diagnostics, "orders")
        types = {c.column: c.canonical_type for c in snapshot.columns}
        assert types["status"] == "enum_like"

    def test_metadata_is_filtered_by_table(self, diagnostics):
        meta = snapshot_from_diagnostics(diagnostics, "orders").metadata

        assert [c.constraint_name for c in meta.constraints] == ["orders_pkey", "orders_profile_fkey"]
        assert meta.indexes == ()
        assert [p.policy_name for p in meta.rls_policies] == ["service only"]
        assert meta.triggers == ()

    def test_unknown_table_is_empty(self, diagnostics):
        snapshot = snapshot_from_diagnostics(diagnostics, "ghosts")
        assert snapshot.is_empty
        assert snapshot.metadata.constraints == ()


# ---------------------------------------------------------------------------
# LiveSchemaSource
# ---------------------------------------------------------------------------


class TestLiveSchemaSource:
    def test_prepare_fetches_once(self, diagnostics):
        fetch = MagicMock(return_value=diagnostics)
        source = LiveSchemaSource(fetch)

        source.prepare()
        source.prepare()
        source.snapshot_for("profiles")
        source.snapshot_for("orders")

        fetch.assert_called_once_with()

    def test_snapshot_before_prepare_raises(self, diagnostics):
        source = LiveSchemaSource(MagicMock(return_value=diagnostics))

        with pytest.raises(RuntimeError, match="prepare"):
            source.snapshot_for("profiles")

    def test_prepare_propagates_fetch_errors(self):
        source = LiveSchemaSource(MagicMock(side_effect=ConnectivityError("down")))

        with pytest.raises(ConnectivityError):
            source.prepare()

    def test_from_diagnostics_is_ready(self, diagnostics):
        source = LiveSchemaSource.from_diagnostics(diagnostics)
        assert len(source.snapshot_for("profiles").columns) == 4

    def test_from_file(self, tmp_path, diagnostics_payload):
        path = tmp_path / "diag.json"
        path.write_text(json.dumps(diagnostics_payload), encoding="utf-8")

        source = LiveSchemaSource.from_file(path)
        source.prepare()

        assert source.name == f"snapshot:{path}"
        assert len(source.snapshot_for("orders").columns) == 3

    def test_from_client_uses_fetch(self, diagnostics):
        client = MagicMock()
        client.fetch.return_value = diagnostics

        source = LiveSchemaSource.from_client(client)
        source.prepare()

        client.fetch.assert_called_once_with()
        assert source.name == "live"


# ---------------------------------------------------------------------------
# Structural inspection
# ---------------------------------------------------------------------------


class TestInspection:
    def test_inspect_existing_table(self, diagnostics):
        inspection = inspect_table(diagnostics, "profiles")

        assert inspection.found is True
        assert inspection.summary_line == (
            "profiles: 4 columns, 1 constraints, 2 indexes, 1 RLS policies, 1 triggers"
        )

    def test_inspect_missing_table(self, diagnostics):
        inspection = inspect_table(diagnostics, "ghosts")

        assert inspection.found is False
        assert "NOT_FOUND" in inspection.summary_line

    def test_summarize_counts_every_category(self, diagnostics):
        counts = summarize_diagnostics(diagnostics)

        assert counts.tables == 2
        assert counts.columns == 7
        assert counts.constraints == 3
        assert counts.indexes == 2
        assert counts.rls_policies == 2
        assert counts.triggers == 1
        assert counts.functions == 2
        assert counts.procedures == 1
