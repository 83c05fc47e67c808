"""Tests for Integrator trigger payload builders."""

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from workflow_retry_proxy.retries.payloads import (  # noqa: E402
    TEST_INSTRUCTION,
    build_action_retry_payload,
    build_run_retry_payload,
    describe_trigger_failure,
    extract_workflow_id,
    linear_issue_link,
    normalise_environment,
)
from workflow_retry_proxy.retries.requests import RetryActionsRequest, RetryRunRequest  # noqa: E402

LINEAR = "https://linear.app/composio/issue/"


@pytest.mark.parametrize(
    ("environment", "expected"),
    [
        ("prod", "production"),
        (None, "production"),
        ("", "production"),
        ("production", "production"),
        ("staging", "staging"),
        ("Prod", "Prod"),
    ],
)
def test_normalise_environment(environment, expected):
    assert normalise_environment(environment) == expected


def test_linear_issue_link():
    assert linear_issue_link("ENG-12", LINEAR) == "https://linear.app/composio/issue/ENG-12"
    assert linear_issue_link(None, LINEAR) == ""
    assert linear_issue_link("", LINEAR) == ""


def test_action_retry_payload_shape():
    request = RetryActionsRequest(
        toolkit="github",
        connection_id="conn-1",
        action_names=["GITHUB_CREATE_ISSUE", "GITHUB_LIST_REPOS"],
        linear_ticket="ENG-7",
        environment="prod",
    )

    payload = build_action_retry_payload(request, linear_base_url=LINEAR)

    assert payload == {
        "model_provider": "claude",
        "force_run": True,
        "timeout_hours": 36,
        "linear_issue_link": "https://linear.app/composio/issue/ENG-7",
        "env": "production",
        "integrator_branch": "next",
        "app_name": "github",
        "base_branch": "master",
        "connection_id": "conn-1",
        "action_names": ["GITHUB_CREATE_ISSUE", "GITHUB_LIST_REPOS"],
        "test_instruction": TEST_INSTRUCTION,
    }


def test_run_retry_payload_links_previous_workflow():
    request = RetryRunRequest(app_name="notion", workflow_id="wf-old", connection_id="conn-2")

    payload = build_run_retry_payload(request, linear_base_url=LINEAR)

    assert payload["previous_workflow_id"] == "wf-old"
    assert payload["app_name"] == "notion"
    assert payload["linear_issue_link"] == ""
    assert payload["env"] == "production"
    assert "action_names" not in payload


def test_run_retry_payload_does_not_alias_prod():
    request = RetryRunRequest(app_name="notion", workflow_id="wf", connection_id="c", environment="prod")

    assert build_run_retry_payload(request, linear_base_url=LINEAR)["env"] == "prod"


def test_complete_rerun_omits_action_names():
    request = RetryRunRequest(
        app_name="notion",
        workflow_id="wf",
        connection_id="c",
        failed_actions=["A", "B"],
        complete_rerun=True,
    )

    assert "action_names" not in build_run_retry_payload(request, linear_base_url=LINEAR)


@pytest.mark.parametrize("complete_rerun", [False, None])
def test_partial_rerun_includes_failed_actions_verbatim(complete_rerun):
    request = RetryRunRequest(
        app_name="notion",
        workflow_id="wf",
        connection_id="c",
        failed_actions=["B", "A", "B"],
        complete_rerun=complete_rerun,
    )

    payload = build_run_retry_payload(request, linear_base_url=LINEAR)

    assert payload["action_names"] == ["B", "A", "B"]


def test_describe_trigger_failure_prefers_message_then_error():
    assert describe_trigger_failure({"message": "quota", "error": "ignored"}) == "quota"
    assert describe_trigger_failure({"error": "bad connection"}) == "bad connection"
    assert describe_trigger_failure({}) == "No workflow_id returned"
    assert describe_trigger_failure(["unexpected"]) == "No workflow_id returned"


def test_extract_workflow_id():
    assert extract_workflow_id({"workflow_id": "wf-9"}) == "wf-9"
    assert extract_workflow_id({"workflow_id": ""}) is None
    assert extract_workflow_id({}) is None
    assert extract_workflow_id(None) is None
