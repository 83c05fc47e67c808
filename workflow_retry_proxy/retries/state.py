"""Status vocabulary and row builders for retry bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict


class ToolStatus(str, Enum):
    FAILED = "failed"
    RETRYING = "retrying"


class RunStatus(str, Enum):
    ACTIVE = "active"


class ExecutionState(str, Enum):
    PENDING = "PENDING"


FIRST_RUN_NUMBER = 1
MISSING_LINEAR_TICKET = "N/A"


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class RetryMark:
    """Fields patched onto a failed tool when a retry starts."""

    retry_workflow_id: str
    retried_at: datetime
    retry_run_number: int = FIRST_RUN_NUMBER
    status: ToolStatus = ToolStatus.RETRYING

    def as_row(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "retry_workflow_id": self.retry_workflow_id,
            "retry_run_number": self.retry_run_number,
            "retried_at": self.retried_at.isoformat(),
        }


@dataclass(frozen=True)
class WorkflowRecord:
    workflow_id: str
    app_name: str
    connection_id: str
    environment: str
    linear_ticket: str = MISSING_LINEAR_TICKET

    def as_row(self) -> Dict[str, Any]:
        return {
            "workflow_id": self.workflow_id,
            "app_name": self.app_name,
            "linear_ticket": self.linear_ticket,
            "connection_id": self.connection_id,
            "environment": self.environment,
        }


@dataclass(frozen=True)
class NewRun:
    """A workflow run row created right after a successful trigger."""

    workflow_id: str
    run_number: int
    started_at: datetime
    total: int | None = None
    status: RunStatus = RunStatus.ACTIVE
    execution_state: ExecutionState = ExecutionState.PENDING

    def as_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "workflow_id": self.workflow_id,
            "run_number": self.run_number,
            "status": self.status.value,
            "execution_state": self.execution_state.value,
            "started_at": self.started_at.isoformat(),
        }
        if self.total is not None:
            row["total"] = self.total
        return row


def mark_retrying(workflow_id: str, *, now: datetime | None = None) -> RetryMark:
    return RetryMark(retry_workflow_id=workflow_id, retried_at=now or utcnow())


def start_run(
    workflow_id: str,
    *,
    run_number: int = FIRST_RUN_NUMBER,
    total: int | None = None,
    now: datetime | None = None,
) -> NewRun:
    return NewRun(workflow_id=workflow_id, run_number=run_number, total=total, started_at=now or utcnow())


def next_run_number(latest: int | None) -> int:
    """Run number following *latest*; a workflow with no runs starts at 1."""

    return (latest or 0) + 1
