"""Logging setup for audit runs."""

from contract_engine.telemetry.json_formatter import JSONFormatter, configure_logging

__all__ = ["JSONFormatter", "configure_logging"]
