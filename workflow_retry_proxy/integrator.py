"""Thin wrapper around the Integrator workflow API."""

from __future__ import annotations

from typing import Any, Mapping

import httpx
import structlog

DASHBOARD_DATA_PATH = "/dashboard/get-data"
TRIGGER_RUN_PATH = "/workflows/test-and-fix-action/run"


class IntegratorClient:
    """Encapsulate Integrator HTTP calls for easier testing."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        client: httpx.Client | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if client is None and base_url is None:
            raise ValueError("Either an instantiated client or a base URL must be provided.")

        self._client = client or httpx.Client(base_url=base_url, timeout=timeout, transport=transport)
        self._log = structlog.get_logger(__name__)

    @property
    def client(self) -> httpx.Client:
        """Expose the underlying httpx client for advanced use cases."""

        return self._client

    def fetch_dashboard_data(self, *, workflow_id: Any, run_number: Any) -> httpx.Response:
        """Ask Integrator for the state of one workflow run."""

        self._log.info("integrator_fetch_dashboard_data", workflow_id=workflow_id, run_number=run_number)
        return self._client.post(
            DASHBOARD_DATA_PATH,
            json={"workflow_id": workflow_id, "run_number": run_number},
        )

    def trigger_run(self, payload: Mapping[str, Any]) -> httpx.Response:
        """Start a test-and-fix run with *payload*."""

        self._log.info("integrator_trigger_run", payload=dict(payload))
        response = self._client.post(TRIGGER_RUN_PATH, json=dict(payload))
        self._log.info("integrator_trigger_run_response", http_status=response.status_code)
        return response

    def close(self) -> None:
        self._client.close()
