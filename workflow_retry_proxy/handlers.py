"""Request handlers translating dashboard actions into Integrator calls.

Each handler is built once with its collaborators and is safe to call from
concurrent requests: it keeps no per-request state on the instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence, Tuple

import httpx
import structlog

from workflow_retry_proxy.background import run_each
from workflow_retry_proxy.config import AppSettings
from workflow_retry_proxy.exceptions import RequestValidationError, StoreError
from workflow_retry_proxy.integrator import IntegratorClient
from workflow_retry_proxy.retries import (
    FailedActionsRequest,
    RetryActionsRequest,
    RetryRunRequest,
    WorkflowRecord,
    build_action_retry_payload,
    build_run_retry_payload,
    describe_trigger_failure,
    extract_workflow_id,
    mark_retrying,
    next_run_number,
    normalise_environment,
    parse_request,
    start_run,
)
from workflow_retry_proxy.retries.state import MISSING_LINEAR_TICKET
from workflow_retry_proxy.store import BackingStore


@dataclass(frozen=True)
class HandlerResult:
    body: Dict[str, Any] | None
    status: int = 200


@dataclass(frozen=True)
class PatchOutcome:
    """Result of marking one failed tool as retrying."""

    action_name: str
    ok: bool
    error: str | None = None


class Handler:
    """Base class providing the error boundary shared by every handler."""

    name = "handler"
    allowed_methods: Tuple[str, ...] = ("POST", "OPTIONS")

    def __init__(self) -> None:
        self._log = structlog.get_logger(__name__).bind(handler=self.name)

    def handle(self, body: Any = None) -> HandlerResult:
        try:
            return self._process(body)
        except RequestValidationError as exc:
            self._log.info("request_rejected", reason=str(exc))
            return HandlerResult(exc.payload, 400)
        except Exception as exc:
            self._log.exception("handler_failed", error=str(exc))
            return HandlerResult({"error": str(exc)}, 500)

    def _process(self, body: Any) -> HandlerResult:
        raise NotImplementedError


class ConfigHandler(Handler):
    """Serve the public client configuration. Never includes the service key."""

    name = "config"
    allowed_methods = ("GET", "OPTIONS")

    def __init__(self, settings: AppSettings) -> None:
        super().__init__()
        self._payload = {
            "serviceUrl": settings.supabase_url,
            "publicKey": settings.supabase_anon_key,
        }

    def _process(self, body: Any) -> HandlerResult:
        return HandlerResult(dict(self._payload))


class FailedActionsHandler(Handler):
    """Proxy the failed-action lookup for one workflow run."""

    name = "get_failed_actions"

    def __init__(self, integrator: IntegratorClient) -> None:
        super().__init__()
        self._integrator = integrator

    def _process(self, body: Any) -> HandlerResult:
        request = parse_request(FailedActionsRequest, body)
        log = self._log.bind(workflow_id=request.workflow_id, run_number=request.run_number)
        log.info("failed_actions_requested")

        response = self._integrator.fetch_dashboard_data(
            workflow_id=request.workflow_id,
            run_number=request.run_number,
        )
        if not response.is_success:
            log.error("integrator_request_failed", http_status=response.status_code, body=response.text)
            return HandlerResult(
                {"error": "Failed to fetch from Integrator API", "details": response.text},
                response.status_code,
            )

        data = response.json()
        if not isinstance(data, dict):
            data = {}
        failed_actions = data.get("failed_actions") or []
        log.info("failed_actions_found", count=len(failed_actions))

        return HandlerResult(
            {
                "success": True,
                "failed_actions": failed_actions,
                "execution_state": data.get("execution_state"),
            }
        )


class TriggerHandler(Handler):
    """Shared plumbing for handlers that start an Integrator run."""

    def __init__(self, settings: AppSettings, integrator: IntegratorClient, store: BackingStore) -> None:
        super().__init__()
        self._settings = settings
        self._integrator = integrator
        self._store = store

    def _trigger(self, payload: Dict[str, Any]) -> Tuple[httpx.Response, Any, Any]:
        response = self._integrator.trigger_run(payload)
        result = response.json()
        return response, result, extract_workflow_id(result)

    def _trigger_failed(self, response: httpx.Response, result: Any) -> HandlerResult:
        self._log.error("workflow_trigger_failed", http_status=response.status_code, api_response=result)
        return HandlerResult(
            {
                "error": "Failed to trigger workflow",
                "details": describe_trigger_failure(result),
                "api_response": result,
                "http_status": response.status_code,
            },
            500,
        )

    def _best_effort(self, operation: str, func: Callable[..., bool], *args: Any) -> bool:
        """Run a bookkeeping write whose failure must not fail the request."""

        try:
            ok = func(*args)
        except StoreError as exc:
            self._log.warning("store_write_failed", operation=operation, error=str(exc))
            return False
        if not ok:
            self._log.warning("store_write_failed", operation=operation)
        return ok


class RetryActionsHandler(TriggerHandler):
    """Retry a subset of failed actions and record the new workflow."""

    name = "retry_actions"

    def _process(self, body: Any) -> HandlerResult:
        request = parse_request(RetryActionsRequest, body)
        environment = normalise_environment(request.environment)
        payload = build_action_retry_payload(request, linear_base_url=self._settings.linear_issue_base_url)

        response, result, workflow_id = self._trigger(payload)
        if not response.is_success or not workflow_id:
            return self._trigger_failed(response, result)

        log = self._log.bind(workflow_id=workflow_id, toolkit=request.toolkit)
        log.info("retry_actions_triggered", actions_count=len(request.action_names))

        outcomes = self.mark_actions_retrying(
            toolkit=request.toolkit,
            action_names=request.action_names,
            workflow_id=workflow_id,
        )
        failed = [outcome.action_name for outcome in outcomes if not outcome.ok]
        if failed:
            log.warning("failed_tool_patches_incomplete", failed_actions=failed)

        self._best_effort(
            "upsert_workflow",
            self._store.upsert_workflow,
            WorkflowRecord(
                workflow_id=workflow_id,
                app_name=request.toolkit,
                linear_ticket=str(request.linear_ticket or MISSING_LINEAR_TICKET),
                connection_id=request.connection_id,
                environment=environment,
            ),
        )
        self._best_effort(
            "insert_workflow_run",
            self._store.insert_workflow_run,
            start_run(workflow_id, total=len(request.action_names)),
        )

        return HandlerResult(
            {
                "success": True,
                "workflow_id": workflow_id,
                "toolkit": request.toolkit,
                "actions_count": len(request.action_names),
                "actions": request.action_names,
                "api_response": result,
            }
        )

    def mark_actions_retrying(
        self,
        *,
        toolkit: str,
        action_names: Sequence[str],
        workflow_id: str,
    ) -> List[PatchOutcome]:
        """Patch every action concurrently and collect one outcome per action."""

        mark = mark_retrying(workflow_id)

        def patch(action_name: str) -> bool:
            return self._store.mark_tool_retrying(toolkit=toolkit, action_name=action_name, mark=mark)

        futures = run_each(patch, action_names)
        outcomes: List[PatchOutcome] = []
        for action_name, future in zip(action_names, futures):
            try:
                ok = future.result()
            except StoreError as exc:
                outcomes.append(PatchOutcome(action_name=action_name, ok=False, error=str(exc)))
                continue
            outcomes.append(PatchOutcome(action_name=action_name, ok=bool(ok)))
        return outcomes


class RetryRunHandler(TriggerHandler):
    """Re-run a previous workflow, partially or completely."""

    name = "retry_run"

    def _process(self, body: Any) -> HandlerResult:
        request = parse_request(RetryRunRequest, body)
        payload = build_run_retry_payload(request, linear_base_url=self._settings.linear_issue_base_url)

        response, result, workflow_id = self._trigger(payload)
        if not response.is_success or not workflow_id:
            return self._trigger_failed(response, result)

        log = self._log.bind(workflow_id=workflow_id, previous_workflow_id=request.workflow_id)

        # Run numbers continue the requested workflow's sequence even when
        # Integrator answers with a different workflow_id.
        run_number = next_run_number(self._store.latest_run_number(request.workflow_id))
        if workflow_id != request.workflow_id:
            log.warning("run_number_source_mismatch", run_number=run_number)

        self._best_effort(
            "insert_workflow_run",
            self._store.insert_workflow_run,
            start_run(workflow_id, run_number=run_number),
        )
        log.info("retry_run_triggered", run_number=run_number, complete_rerun=bool(request.complete_rerun))

        return HandlerResult(
            {
                "success": True,
                "workflow_id": workflow_id,
                "run_number": run_number,
                "actions_count": "ALL" if request.complete_rerun else len(request.failed_actions or []),
                "complete_rerun": bool(request.complete_rerun),
                "api_response": result,
            }
        )
