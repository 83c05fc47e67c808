"""Tests for dashboard request parsing."""

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from workflow_retry_proxy.exceptions import RequestValidationError  # noqa: E402
from workflow_retry_proxy.retries.requests import (  # noqa: E402
    FailedActionsRequest,
    RetryActionsRequest,
    RetryRunRequest,
    parse_request,
)


def test_parse_failed_actions_request():
    request = parse_request(FailedActionsRequest, {"workflow_id": "wf1", "run_number": 2, "extra": True})

    assert request.workflow_id == "wf1"
    assert request.run_number == 2


@pytest.mark.parametrize(
    "body",
    [
        {"workflow_id": "wf1"},
        {"run_number": 2},
        {"workflow_id": "", "run_number": 2},
        {"workflow_id": "wf1", "run_number": 0},
        {"workflow_id": "wf1", "run_number": [2]},
        None,
        ["wf1", 2],
    ],
)
def test_failed_actions_request_rejections(body):
    with pytest.raises(RequestValidationError) as err:
        parse_request(FailedActionsRequest, body)

    assert err.value.payload == {"error": "Missing required fields (workflow_id, run_number)"}


@pytest.mark.parametrize(
    "body",
    [
        {"connection_id": "c1", "action_names": ["a"]},
        {"toolkit": "github", "action_names": ["a"]},
        {"toolkit": "github", "connection_id": "c1"},
        {"toolkit": "github", "connection_id": "c1", "action_names": []},
        {"toolkit": "github", "connection_id": "c1", "action_names": "a"},
    ],
)
def test_retry_actions_request_rejections(body):
    with pytest.raises(RequestValidationError) as err:
        parse_request(RetryActionsRequest, body)

    assert err.value.payload == {
        "error": "Missing required fields",
        "required": ["toolkit", "connection_id", "action_names (array)"],
    }


def test_retry_run_request_optional_fields_default_to_none():
    request = parse_request(
        RetryRunRequest,
        {"app_name": "github", "workflow_id": "wf1", "connection_id": "c1"},
    )

    assert request.failed_actions is None
    assert request.complete_rerun is None
    assert request.environment is None


def test_retry_run_request_missing_connection():
    with pytest.raises(RequestValidationError) as err:
        parse_request(RetryRunRequest, {"app_name": "github", "workflow_id": "wf1"})

    assert err.value.payload == {
        "error": "Missing required fields (app_name, workflow_id, connection_id)"
    }


def test_retry_run_request_accepts_numeric_workflow_id():
    request = parse_request(
        RetryRunRequest,
        {"app_name": "github", "workflow_id": 123, "connection_id": "c1", "linear_ticket": 42},
    )

    assert request.workflow_id == 123
    assert request.linear_ticket == 42


@pytest.mark.parametrize(("complete_rerun", "truthy"), [(2, True), ("yes", True), (0, False), ("", False)])
def test_retry_run_request_keeps_complete_rerun_as_sent(complete_rerun, truthy):
    request = parse_request(
        RetryRunRequest,
        {"app_name": "github", "workflow_id": "wf1", "connection_id": "c1", "complete_rerun": complete_rerun},
    )

    assert request.complete_rerun == complete_rerun
    assert bool(request.complete_rerun) is truthy


def test_retry_actions_request_accepts_numeric_linear_ticket():
    request = parse_request(
        RetryActionsRequest,
        {"toolkit": "github", "connection_id": "c1", "action_names": ["a"], "linear_ticket": 42},
    )

    assert request.linear_ticket == 42
