"""Client for the store's system-diagnostics RPC.

One ``POST {url}/rest/v1/rpc/{rpc_name}`` returns the full structural
snapshot of the store.  The response is validated against the strict
:class:`~contract_engine.models.diagnostics.SystemDiagnostics` shape before
anything else sees it.

No retries are attempted: a transport failure or an error status is fatal
for the run that issued the request.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from contract_engine.config import Settings
from contract_engine.errors import ConfigurationError, ConnectivityError, ShapeValidationError
from contract_engine.models.diagnostics import SystemDiagnostics

logger = logging.getLogger(__name__)

# Key under which the ``snapshot`` report nests the diagnostics document.
SNAPSHOT_DETAILS_KEY = "schemaDetails"


def validate_diagnostics(payload: Any) -> SystemDiagnostics:
    """Validate a decoded diagnostics document.

    Raises
    ------
    ShapeValidationError
        If any required field is missing or has the wrong type.
    """
    if not isinstance(payload, dict):
        raise ShapeValidationError(
            f"Diagnostics document must be a JSON object, got {type(payload).__name__}."
        )
    try:
        return SystemDiagnostics.model_validate(payload)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()[:5]
        )
        raise ShapeValidationError(
            f"Diagnostics document does not match the expected shape ({exc.error_count()} errors): {errors}"
        ) from exc


class DiagnosticsClient:
    """Synchronous wrapper around the diagnostics RPC endpoint.

    Parameters
    ----------
    base_url:
        Root URL of the store's REST gateway (e.g. ``https://xyz.supabase.co``).
    service_role_key:
        Privileged key sent as both ``apikey`` and bearer token.
    rpc_name:
        Name of the diagnostic routine to invoke.
    timeout:
        Request timeout in seconds.  This bounds the only blocking call of a
        live audit.
    transport:
        Optional httpx transport, used by tests to stub the network.
    """

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        rpc_name: str = "get_system_diagnostics",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._rpc_name = rpc_name
        self._timeout = timeout
        self._transport = transport
        self._headers = {
            "Content-Type": "application/json",
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> DiagnosticsClient:
        url = settings.supabase_url
        key = settings.service_role_key
        if url is None or key is None:
            raise ConfigurationError(
                "Live introspection requires CONTRACTGUARD_SUPABASE_URL and CONTRACTGUARD_SERVICE_ROLE_KEY."
            )
        return cls(
            base_url=url,
            service_role_key=key.get_secret_value(),
            rpc_name=settings.diagnostics_rpc,
            timeout=settings.request_timeout_seconds,
        )

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/rest/v1/rpc/{self._rpc_name}"

    def fetch(self) -> SystemDiagnostics:
        """Invoke the RPC once and return the validated document.

        Raises
        ------
        ConnectivityError
            On transport failure or a non-2xx response.
        ShapeValidationError
            If the body is not JSON or does not match the expected shape.
        """
        logger.info("Invoking diagnostics RPC '%s'", self._rpc_name)
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self.endpoint, headers=self._headers, json={})
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ConnectivityError(
                f"Diagnostics RPC '{self._rpc_name}' failed with status "
                f"{exc.response.status_code}: {exc.response.text[:500]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ConnectivityError(f"Cannot reach diagnostics RPC at {self._base_url}: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ShapeValidationError(f"Diagnostics RPC '{self._rpc_name}' returned a non-JSON body.") from exc

        diagnostics = validate_diagnostics(payload)
        logger.info(
            "Diagnostics fetched and validated",
            extra={
                "audit": {
                    "event": "diagnostics_fetched",
                    "columns": len(diagnostics.schema_columns),
                    "tables": len(diagnostics.table_names()),
                }
            },
        )
        return diagnostics


def load_diagnostics_file(path: Path) -> SystemDiagnostics:
    """Load a diagnostics document saved on disk.

    Accepts either the bare document or a ``snapshot`` report that nests it
    under ``schemaDetails``.

    Raises
    ------
    ConnectivityError
        If the file cannot be read.
    ShapeValidationError
        If the content is not JSON or does not match the expected shape.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConnectivityError(f"Cannot read diagnostics snapshot {path}: {exc}") from exc

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ShapeValidationError(f"Diagnostics snapshot {path} is not valid JSON: {exc}") from exc

    if isinstance(payload, dict) and SNAPSHOT_DETAILS_KEY in payload:
        payload = payload[SNAPSHOT_DETAILS_KEY]

    return validate_diagnostics(payload)
