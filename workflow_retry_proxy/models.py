"""SQLAlchemy models mirroring the dashboard tracking tables."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workflow_retry_proxy.db import Base


class FailedTool(Base):
    """A toolkit action that failed its last test run."""

    __tablename__ = "failed_tools"
    __table_args__ = (
        UniqueConstraint("toolkit", "action_name", name="uq_failed_tools_toolkit_action"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    toolkit: Mapped[str] = mapped_column(String(128), nullable=False)
    action_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="failed")
    retry_workflow_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    retry_run_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    retried_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Workflow(Base):
    """An Integrator workflow and the connection it runs against."""

    __tablename__ = "workflows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workflow_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    app_name: Mapped[str] = mapped_column(String(128), nullable=False)
    linear_ticket: Mapped[str] = mapped_column(String(64), nullable=False, default="N/A")
    connection_id: Mapped[str] = mapped_column(String(128), nullable=False)
    environment: Mapped[str] = mapped_column(String(32), nullable=False, default="production")


class WorkflowRun(Base):
    """One execution attempt of a workflow.

    ``(workflow_id, run_number)`` is intentionally not unique: run numbers are
    computed read-then-insert and concurrent retries may collide.
    """

    __tablename__ = "workflow_runs"
    __table_args__ = (
        Index("ix_workflow_runs_workflow_run", "workflow_id", "run_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workflow_id: Mapped[str] = mapped_column(String(128), nullable=False)
    run_number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    execution_state: Mapped[str] = mapped_column(String(32), nullable=False)
    total: Mapped[int | None] = mapped_column(Integer, nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
