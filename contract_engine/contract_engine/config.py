"""Contract audit configuration loaded from environment variables."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class AuditEnv(str, Enum):
    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Audit settings loaded from environment variables with CONTRACTGUARD_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="CONTRACTGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    env: AuditEnv = AuditEnv.DEV
    debug: bool = False

    # Store introspection
    supabase_url: str | None = None
    service_role_key: SecretStr | None = None
    diagnostics_rpc: str = "get_system_diagnostics"
    request_timeout_seconds: float = 30.0

    # Contracts
    contract_registry: str | None = None

    # Manifests
    manifest_dir: Path = Path("_docs/supabase")
    manifest_filename_template: str = "001_MANIFEST_TABLE_{TABLE}.md"

    # Reports
    report_dir: Path = Path("reports")

    # Execution
    max_workers: int = 8

    # Logging
    log_level: str = "INFO"
    structured_logging: bool = False

    @field_validator("service_role_key", mode="before")
    @classmethod
    def mask_key_in_repr(cls, v: str | None) -> SecretStr | None:
        if v is None:
            return None
        if isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("max_workers")
    @classmethod
    def at_least_one_worker(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_workers must be >= 1")
        return v

    def is_store_configured(self) -> bool:
        return self.supabase_url is not None and self.service_role_key is not None


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment, with optional overrides for testing."""
    settings = Settings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info("Loaded settings for environment: %s", settings.env.value)

    return settings
