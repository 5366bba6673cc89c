"""Shared fixtures for contract engine unit tests."""

from __future__ import annotations

import copy
from typing import Any

import pytest

DIAGNOSTICS_PAYLOAD: dict[str, Any] = {
    "schema_columns": [
        {"table": "profiles", "column": "id", "type": "uuid"},
        {"table": "profiles", "column": "email", "type": "text"},
        {"table": "profiles", "column": "age", "type": "bigint"},
        {"table": "profiles", "column": "created_at", "type": "timestamp with time zone"},
        {"table": "orders", "column": "id", "type": "uuid"},
        {"table": "orders", "column": "status", "type": "USER-DEFINED"},
        {"table": "orders", "column": "total", "type": "numeric"},
    ],
    "table_constraints": [
        {"table": "profiles", "constraint_name": "profiles_pkey", "type": "PRIMARY KEY"},
        {"table": "orders", "constraint_name": "orders_pkey", "type": "PRIMARY KEY"},
        {"table": "orders", "constraint_name": "orders_profile_fkey", "type": "FOREIGN KEY"},
    ],
    "indexes": [
        {"table": "profiles", "index_name": "profiles_pkey"},
        {"table": "profiles", "index_name": "profiles_email_idx"},
    ],
    "rls_policies": [
        {
            "table": "profiles",
            "policy_name": "owner can read",
            "command": "SELECT",
            "definition": "(auth.uid() = id)",
        },
        {"table": "orders", "policy_name": "service only", "command": "ALL", "definition": None},
    ],
    "triggers": [
        {"trigger_name": "set_updated_at", "table": "profiles", "timing": "BEFORE", "event": "UPDATE"},
    ],
    "functions_and_procedures": [
        {"name": "get_system_diagnostics", "type": "FUNCTION"},
        {"name": "handle_new_user", "type": "FUNCTION"},
        {"name": "rebuild_stats", "type": "PROCEDURE"},
    ],
}


@pytest.fixture()
def diagnostics_payload() -> dict[str, Any]:
    """A fresh, mutable copy of a valid diagnostics document."""
    return copy.deepcopy(DIAGNOSTICS_PAYLOAD)
