"""Unit tests for the Integrator client wrapper."""

import json
from pathlib import Path
import sys

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from workflow_retry_proxy.integrator import IntegratorClient  # noqa: E402


def _client(calls, response=None):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return response or httpx.Response(200, json={"ok": True})

    return IntegratorClient(base_url="https://integrator.test", transport=httpx.MockTransport(handler))


def test_requires_base_url_or_client():
    with pytest.raises(ValueError):
        IntegratorClient()


def test_fetch_dashboard_data_posts_workflow_and_run():
    calls = []
    client = _client(calls)

    response = client.fetch_dashboard_data(workflow_id="wf1", run_number=2)

    assert response.status_code == 200
    request = calls[0]
    assert request.method == "POST"
    assert str(request.url) == "https://integrator.test/dashboard/get-data"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"workflow_id": "wf1", "run_number": 2}


def test_trigger_run_posts_payload_unchanged():
    calls = []
    client = _client(calls, httpx.Response(200, json={"workflow_id": "wf-new"}))

    response = client.trigger_run({"app_name": "github", "force_run": True})

    assert response.json() == {"workflow_id": "wf-new"}
    assert str(calls[0].url) == "https://integrator.test/workflows/test-and-fix-action/run"
    assert json.loads(calls[0].content) == {"app_name": "github", "force_run": True}


def test_explicit_client_is_used():
    calls = []
    transport = httpx.MockTransport(lambda request: calls.append(request) or httpx.Response(204))
    http_client = httpx.Client(base_url="https://other.test", transport=transport)

    client = IntegratorClient(client=http_client)
    client.trigger_run({})

    assert client.client is http_client
    assert calls[0].url.host == "other.test"
