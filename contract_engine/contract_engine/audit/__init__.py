"""Audit orchestration and report persistence."""

from contract_engine.audit.orchestrator import AuditOrchestrator, exit_code
from contract_engine.audit.report_writer import ReportWriter

__all__ = ["AuditOrchestrator", "ReportWriter", "exit_code"]
