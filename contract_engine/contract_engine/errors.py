"""Error taxonomy for contract audits.

Per-table errors (:class:`ConfigurationError`, :class:`ParseError`) are
caught by the orchestrator and turned into FAIL reports.  Whole-run errors
(:class:`ConnectivityError`, :class:`ShapeValidationError`) abort the run
before any table is audited.
"""

from __future__ import annotations


class AuditError(Exception):
    """Base class for every error raised by the audit engine."""


class ConfigurationError(AuditError):
    """Raised when the audit is misconfigured for a table or for the run."""


class MissingContractError(ConfigurationError):
    """Raised when a table has no entry in the contract registry."""

    def __init__(self, table: str) -> None:
        super().__init__(f"No contract schema registered for table '{table}'.")
        self.table = table


class EmptyContractError(ConfigurationError):
    """Raised when a contract declares zero columns."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Contract for table '{table}' declares no columns.")
        self.table = table


class ConnectivityError(AuditError):
    """Raised when the introspection round trip to the store fails."""


class ShapeValidationError(AuditError):
    """Raised when a diagnostics document does not match the expected shape.

    The document is never coerced or partially trusted: any violation is
    fatal for the whole run.
    """


class ParseError(AuditError):
    """Raised when a DDL manifest has no usable SQL block."""
