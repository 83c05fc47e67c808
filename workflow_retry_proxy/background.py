"""Utilities for running work on the shared thread pool."""

from contextvars import copy_context
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Iterable, List

from structlog.contextvars import bind_contextvars, get_contextvars


_executor = ThreadPoolExecutor(max_workers=8)


def run_async(
    func: Callable[..., Any],
    /,
    *args: Any,
    trace_id: str | None = None,
    **kwargs: Any,
) -> Future:
    """Submit *func* to the shared thread pool and return a Future."""

    context = copy_context()

    if trace_id is not None:
        existing_trace = context.run(lambda: get_contextvars().get("trace_id"))

        if existing_trace != trace_id:

            context.run(lambda: bind_contextvars(trace_id=trace_id))

    def runner() -> Any:
        return context.run(func, *args, **kwargs)

    return _executor.submit(runner)


def run_each(func: Callable[[Any], Any], items: Iterable[Any], *, trace_id: str | None = None) -> List[Future]:
    """Submit ``func(item)`` for every item and return the futures in input order.

    Each submission gets its own copy of the caller's context so workers never
    share contextvars state.
    """

    return [run_async(func, item, trace_id=trace_id) for item in items]
