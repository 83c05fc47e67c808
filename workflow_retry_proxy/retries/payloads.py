"""Builders for Integrator trigger payloads."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from .requests import RetryActionsRequest, RetryRunRequest

MODEL_PROVIDER = "claude"
TIMEOUT_HOURS = 36
INTEGRATOR_BRANCH = "next"
BASE_BRANCH = "master"
DEFAULT_ENVIRONMENT = "production"
ENVIRONMENT_ALIASES = {"prod": "production"}
NO_WORKFLOW_ID_MESSAGE = "No workflow_id returned"

TEST_INSTRUCTION = (
    "Test thoroughly and ensure: (1) tool/parameter descriptions are clear and accurate, "
    "not sloppy or vague, (2) correct API endpoints are used, (3) response schemas are "
    "complete and useful, (4) the tool is well-built for agent use with sensible defaults."
)


def normalise_environment(environment: str | None) -> str:
    """Map ``prod`` to ``production`` and fill in the default environment."""

    if not environment:
        return DEFAULT_ENVIRONMENT
    return ENVIRONMENT_ALIASES.get(environment, environment)


def linear_issue_link(ticket: str | int | None, base_url: str) -> str:
    if not ticket:
        return ""
    return f"{base_url}{ticket}"


def _base_payload(*, app_name: str, connection_id: str, env: str, linear_link: str) -> Dict[str, Any]:
    return {
        "model_provider": MODEL_PROVIDER,
        "force_run": True,
        "timeout_hours": TIMEOUT_HOURS,
        "linear_issue_link": linear_link,
        "env": env,
        "integrator_branch": INTEGRATOR_BRANCH,
        "app_name": app_name,
        "base_branch": BASE_BRANCH,
        "connection_id": connection_id,
    }


def build_action_retry_payload(request: RetryActionsRequest, *, linear_base_url: str) -> Dict[str, Any]:
    """Payload retrying a selected set of actions of one toolkit."""

    payload = _base_payload(
        app_name=request.toolkit,
        connection_id=request.connection_id,
        env=normalise_environment(request.environment),
        linear_link=linear_issue_link(request.linear_ticket, linear_base_url),
    )
    payload["action_names"] = list(request.action_names)
    payload["test_instruction"] = TEST_INSTRUCTION
    return payload


def build_run_retry_payload(request: RetryRunRequest, *, linear_base_url: str) -> Dict[str, Any]:
    """Payload re-running a previous workflow.

    ``action_names`` is omitted for complete reruns, which tells Integrator to
    retry every action. Unlike action retries the environment is not aliased.
    """

    payload = {"previous_workflow_id": request.workflow_id}
    payload.update(
        _base_payload(
            app_name=request.app_name,
            connection_id=request.connection_id,
            env=request.environment or DEFAULT_ENVIRONMENT,
            linear_link=linear_issue_link(request.linear_ticket, linear_base_url),
        )
    )
    payload["test_instruction"] = TEST_INSTRUCTION

    if not request.complete_rerun and request.failed_actions:
        payload["action_names"] = list(request.failed_actions)
    return payload


def describe_trigger_failure(body: Any) -> str:
    """Best human-readable reason from a failed trigger response body."""

    if isinstance(body, Mapping):
        return body.get("message") or body.get("error") or NO_WORKFLOW_ID_MESSAGE
    return NO_WORKFLOW_ID_MESSAGE


def extract_workflow_id(body: Any) -> Any:
    if isinstance(body, Mapping):
        return body.get("workflow_id") or None
    return None
