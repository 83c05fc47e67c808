"""Request parsing, payload building and bookkeeping state for retries."""

from .payloads import (
    build_action_retry_payload,
    build_run_retry_payload,
    describe_trigger_failure,
    extract_workflow_id,
    normalise_environment,
)
from .requests import (
    FailedActionsRequest,
    RetryActionsRequest,
    RetryRunRequest,
    parse_request,
)
from .state import (
    ExecutionState,
    RunStatus,
    ToolStatus,
    WorkflowRecord,
    mark_retrying,
    next_run_number,
    start_run,
)

__all__ = [
    "build_action_retry_payload",
    "build_run_retry_payload",
    "describe_trigger_failure",
    "extract_workflow_id",
    "normalise_environment",
    "FailedActionsRequest",
    "RetryActionsRequest",
    "RetryRunRequest",
    "parse_request",
    "ExecutionState",
    "RunStatus",
    "ToolStatus",
    "WorkflowRecord",
    "mark_retrying",
    "next_run_number",
    "start_run",
]
