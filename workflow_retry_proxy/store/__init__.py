"""Backing stores for the failed_tools, workflows and workflow_runs tables."""

from __future__ import annotations

from typing import Protocol

from workflow_retry_proxy.config import AppSettings
from workflow_retry_proxy.retries.state import NewRun, RetryMark, WorkflowRecord

from .rest import RestStore
from .sql import SqlStore


class BackingStore(Protocol):
    """Operations the handlers need from a backing store.

    Writes return False when the store rejected them; transport failures
    raise :class:`~workflow_retry_proxy.exceptions.StoreError`.
    """

    def latest_run_number(self, workflow_id: str) -> int | None: ...

    def mark_tool_retrying(self, *, toolkit: str, action_name: str, mark: RetryMark) -> bool: ...

    def upsert_workflow(self, record: WorkflowRecord) -> bool: ...

    def insert_workflow_run(self, run: NewRun) -> bool: ...

    def ping(self) -> None: ...


def build_store(settings: AppSettings) -> BackingStore:
    """Instantiate the store selected by ``STORE_BACKEND``."""

    if settings.store_backend == "sql":
        return SqlStore(settings.database_url)
    return RestStore(
        base_url=settings.supabase_url,
        service_key=settings.supabase_service_key,
        timeout=settings.http_timeout_seconds,
    )


__all__ = ["BackingStore", "RestStore", "SqlStore", "build_store"]
