"""SQLAlchemy backing store, used for local development against SQLite."""

from __future__ import annotations

from sqlalchemy import select, text, update
from sqlalchemy.exc import SQLAlchemyError

from workflow_retry_proxy.db import Base, get_engine, session_scope
from workflow_retry_proxy.exceptions import StoreError
from workflow_retry_proxy.models import FailedTool, Workflow, WorkflowRun
from workflow_retry_proxy.retries.state import NewRun, RetryMark, WorkflowRecord


class SqlStore:
    """Same operations as :class:`RestStore`, executed directly with SQL."""

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url

    def create_schema(self) -> None:
        Base.metadata.create_all(get_engine(self._database_url))

    def drop_schema(self) -> None:
        Base.metadata.drop_all(get_engine(self._database_url))

    def latest_run_number(self, workflow_id: str) -> int | None:
        try:
            with session_scope(self._database_url) as session:
                return session.execute(
                    select(WorkflowRun.run_number)
                    .where(WorkflowRun.workflow_id == workflow_id)
                    .order_by(WorkflowRun.run_number.desc())
                    .limit(1)
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"workflow_runs lookup failed: {exc}") from exc

    def mark_tool_retrying(self, *, toolkit: str, action_name: str, mark: RetryMark) -> bool:
        try:
            with session_scope(self._database_url) as session:
                session.execute(
                    update(FailedTool)
                    .where(FailedTool.toolkit == toolkit, FailedTool.action_name == action_name)
                    .values(
                        status=mark.status.value,
                        retry_workflow_id=mark.retry_workflow_id,
                        retry_run_number=mark.retry_run_number,
                        retried_at=mark.retried_at,
                    )
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"failed_tools update failed: {exc}") from exc
        return True

    def upsert_workflow(self, record: WorkflowRecord) -> bool:
        try:
            with session_scope(self._database_url) as session:
                workflow = session.execute(
                    select(Workflow).where(Workflow.workflow_id == record.workflow_id)
                ).scalar_one_or_none()
                if workflow is None:
                    session.add(Workflow(**record.as_row()))
                else:
                    for key, value in record.as_row().items():
                        setattr(workflow, key, value)
        except SQLAlchemyError as exc:
            raise StoreError(f"workflows upsert failed: {exc}") from exc
        return True

    def insert_workflow_run(self, run: NewRun) -> bool:
        try:
            with session_scope(self._database_url) as session:
                session.add(
                    WorkflowRun(
                        workflow_id=run.workflow_id,
                        run_number=run.run_number,
                        status=run.status.value,
                        execution_state=run.execution_state.value,
                        total=run.total,
                        started_at=run.started_at,
                    )
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"workflow_runs insert failed: {exc}") from exc
        return True

    def ping(self) -> None:
        try:
            with session_scope(self._database_url) as session:
                session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
