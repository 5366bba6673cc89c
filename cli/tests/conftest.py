"""Shared fixtures for CLI tests.

Every test runs in its own working directory with no ``CONTRACTGUARD_*``
variables set, so a developer's ``.env`` or shell never leaks into the
assertions.  The root logger is restored afterwards because the CLI
callback reinstalls its handlers on every invocation.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import sys
import uuid
from datetime import datetime
from pathlib import Path
from types import ModuleType
from typing import Any

import pytest
from pydantic import BaseModel


class Profile(BaseModel):
    id: uuid.UUID
    email: str
    age: int
    created_at: datetime


class Invoice(BaseModel):
    id: uuid.UUID
    amount: float


DIAGNOSTICS: dict[str, Any] = {
    "schema_columns": [
        {"table": "profiles", "column": "id", "type": "uuid"},
        {"table": "profiles", "column": "email", "type": "text"},
        {"table": "profiles", "column": "age", "type": "bigint"},
        {"table": "profiles", "column": "created_at", "type": "timestamp with time zone"},
        {"table": "invoices", "column": "id", "type": "uuid"},
        {"table": "invoices", "column": "amount", "type": "text"},
    ],
    "table_constraints": [
        {"table": "profiles", "constraint_name": "profiles_pkey", "type": "PRIMARY KEY"},
    ],
    "indexes": [{"table": "profiles", "index_name": "profiles_pkey"}],
    "rls_policies": [
        {"table": "profiles", "policy_name": "owner can read", "command": "SELECT", "definition": "(auth.uid() = id)"},
    ],
    "triggers": [
        {"trigger_name": "set_updated_at", "table": "profiles", "timing": "BEFORE", "event": "UPDATE"},
    ],
    "functions_and_procedures": [{"name": "get_system_diagnostics", "type": "FUNCTION"}],
}


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("CONTRACTGUARD_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)

    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture()
def registry_module(monkeypatch) -> str:
    """Register an importable schema registry and return its import path."""
    module = ModuleType("cli_test_schemas")
    module.REGISTRY = {"profiles": Profile, "invoices": Invoice}  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "cli_test_schemas", module)
    return "cli_test_schemas:REGISTRY"


@pytest.fixture()
def diagnostics_document() -> dict[str, Any]:
    return copy.deepcopy(DIAGNOSTICS)


@pytest.fixture()
def snapshot_file(tmp_path, diagnostics_document) -> Path:
    path = tmp_path / "diagnostics.json"
    path.write_text(json.dumps(diagnostics_document), encoding="utf-8")
    return path
