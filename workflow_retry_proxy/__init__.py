"""Workflow retry proxy package initialisation."""

from .background import run_async, run_each  # noqa: F401
from .config import AppSettings, get_settings  # noqa: F401
from .db import Base, get_engine, get_session_factory, session_scope  # noqa: F401
from .exceptions import ProxyError, RequestValidationError, StoreError  # noqa: F401
from .logging_config import configure_logging  # noqa: F401
from .models import FailedTool, Workflow, WorkflowRun  # noqa: F401

__all__ = [
    "AppSettings",
    "get_settings",
    "run_async",
    "run_each",
    "Base",
    "get_engine",
    "get_session_factory",
    "session_scope",
    "ProxyError",
    "RequestValidationError",
    "StoreError",
    "FailedTool",
    "Workflow",
    "WorkflowRun",
    "configure_logging",
]
