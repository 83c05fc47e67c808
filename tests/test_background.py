"""Tests for background task utilities."""

from __future__ import annotations

import threading

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, get_contextvars
from structlog.testing import capture_logs

from workflow_retry_proxy.background import run_async, run_each


def test_run_async_propagates_structlog_context():
    """Trace IDs bound in the caller should be visible within the worker thread."""

    clear_contextvars()
    bind_contextvars(trace_id="trace-123")
    captured: dict[str, str] = {}

    future = run_async(lambda: captured.update(get_contextvars()))
    future.result(timeout=1)

    assert captured.get("trace_id") == "trace-123"

    clear_contextvars()


def test_run_async_accepts_explicit_trace_id():
    clear_contextvars()
    captured: dict[str, str] = {}

    future = run_async(lambda: captured.update(get_contextvars()), trace_id="trace-456")
    future.result(timeout=1)

    assert captured.get("trace_id") == "trace-456"

    clear_contextvars()


def test_run_each_returns_futures_in_input_order():
    futures = run_each(lambda value: value * 2, [3, 1, 2])

    assert [future.result(timeout=1) for future in futures] == [6, 2, 4]


def test_run_each_runs_items_concurrently():
    """Every item must be in flight at once for the barrier to release."""

    barrier = threading.Barrier(3, timeout=2)

    futures = run_each(lambda _item: barrier.wait(), ["a", "b", "c"])

    assert sorted(future.result(timeout=3) for future in futures) == [0, 1, 2]


def test_run_each_keeps_failures_on_their_future():
    def explode(item):
        if item == "bad":
            raise ValueError(item)
        return item

    futures = run_each(explode, ["ok", "bad"])

    assert futures[0].result(timeout=1) == "ok"
    assert isinstance(futures[1].exception(timeout=1), ValueError)


def test_run_each_preserves_trace_id_in_worker_logs():
    clear_contextvars()

    with capture_logs(processors=[structlog.contextvars.merge_contextvars]) as logs:
        futures = run_each(lambda item: structlog.get_logger().info("patched", item=item), ["x"], trace_id="trace-789")
        futures[0].result(timeout=1)

    assert logs[0].get("event") == "patched"
    assert logs[0].get("trace_id") == "trace-789"

    clear_contextvars()
