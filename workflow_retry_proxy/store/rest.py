"""Backing store speaking the PostgREST dialect exposed by Supabase."""

from __future__ import annotations

from typing import Any, Dict

import httpx
import structlog

from workflow_retry_proxy.exceptions import StoreError
from workflow_retry_proxy.retries.state import NewRun, RetryMark, WorkflowRecord

REST_PREFIX = "/rest/v1"
RETURN_MINIMAL = "return=minimal"
MERGE_DUPLICATES = "return=minimal,resolution=merge-duplicates"


def _eq(value: Any) -> str:
    return f"eq.{value}"


class RestStore:
    """Read and write tracking rows through the store's REST interface."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        service_key: str | None = None,
        client: httpx.Client | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if client is None:
            if not base_url or not service_key:
                raise ValueError("A base URL and service key are required without an explicit client.")
            client = httpx.Client(
                base_url=f"{base_url.rstrip('/')}{REST_PREFIX}",
                headers={"apikey": service_key, "Authorization": f"Bearer {service_key}"},
                timeout=timeout,
                transport=transport,
            )
        self._client = client
        self._log = structlog.get_logger(__name__)

    @property
    def client(self) -> httpx.Client:
        return self._client

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {path} failed: {exc}") from exc

    def _write(self, method: str, path: str, *, prefer: str, json: Dict[str, Any], **kwargs: Any) -> bool:
        response = self._request(method, path, headers={"Prefer": prefer}, json=json, **kwargs)
        if not response.is_success:
            self._log.warning(
                "store_write_rejected",
                method=method,
                table=path.lstrip("/"),
                http_status=response.status_code,
                body=response.text,
            )
        return response.is_success

    def latest_run_number(self, workflow_id: str) -> int | None:
        response = self._request(
            "GET",
            "/workflow_runs",
            params={
                "workflow_id": _eq(workflow_id),
                "select": "run_number",
                "order": "run_number.desc",
                "limit": "1",
            },
        )
        try:
            rows = response.json()
        except ValueError as exc:
            raise StoreError("workflow_runs lookup returned invalid JSON") from exc

        # Error bodies are objects, not row lists; treat them like "no runs".
        if not isinstance(rows, list) or not rows:
            if not response.is_success:
                self._log.warning("run_lookup_rejected", workflow_id=workflow_id, http_status=response.status_code)
            return None
        return rows[0].get("run_number")

    def mark_tool_retrying(self, *, toolkit: str, action_name: str, mark: RetryMark) -> bool:
        return self._write(
            "PATCH",
            "/failed_tools",
            prefer=RETURN_MINIMAL,
            json=mark.as_row(),
            params={"toolkit": _eq(toolkit), "action_name": _eq(action_name)},
        )

    def upsert_workflow(self, record: WorkflowRecord) -> bool:
        return self._write("POST", "/workflows", prefer=MERGE_DUPLICATES, json=record.as_row())

    def insert_workflow_run(self, run: NewRun) -> bool:
        return self._write("POST", "/workflow_runs", prefer=RETURN_MINIMAL, json=run.as_row())

    def ping(self) -> None:
        response = self._request("GET", "/workflows", params={"select": "workflow_id", "limit": "1"})
        if not response.is_success:
            raise StoreError(f"store answered HTTP {response.status_code}")

    def close(self) -> None:
        self._client.close()
