"""Pure contract-versus-store comparison."""

from contract_engine.diff.schema_diff import compute_diff

__all__ = ["compute_diff"]
