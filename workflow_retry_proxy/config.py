"""Pydantic-based configuration helpers for the workflow retry proxy."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Iterable, List, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

DEFAULT_INTEGRATOR_API_URL = "https://integrations-api.composio.io"
DEFAULT_LINEAR_ISSUE_BASE_URL = "https://linear.app/composio/issue/"


class AppSettings(BaseModel):
    """Settings read once at process start and handed to every handler."""

    integrator_api_url: str = Field(DEFAULT_INTEGRATOR_API_URL, alias="INTEGRATOR_API_URL")
    supabase_url: str | None = Field(None, alias="SUPABASE_URL")
    supabase_service_key: str | None = Field(None, alias="SUPABASE_SERVICE_KEY")
    supabase_anon_key: str | None = Field(None, alias="SUPABASE_ANON_KEY")
    store_backend: Literal["rest", "sql"] = Field("rest", alias="STORE_BACKEND")
    database_url: str | None = Field(None, alias="DATABASE_URL")
    linear_issue_base_url: str = Field(DEFAULT_LINEAR_ISSUE_BASE_URL, alias="LINEAR_ISSUE_BASE_URL")
    http_timeout_seconds: float | None = Field(None, alias="HTTP_TIMEOUT_SECONDS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator("integrator_api_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.rstrip("/")

    @field_validator("http_timeout_seconds")
    @classmethod
    def _ensure_positive(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("HTTP timeout must be greater than zero")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper() or "INFO"
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level {value!r}")
        return level

    @model_validator(mode="after")
    def _check_store_settings(self) -> "AppSettings":
        if self.store_backend == "rest":
            missing = [
                name
                for name, value in (
                    ("SUPABASE_URL", self.supabase_url),
                    ("SUPABASE_SERVICE_KEY", self.supabase_service_key),
                )
                if not value
            ]
            if missing:
                raise ValueError("Missing required environment variables: " + _format_missing(missing))
        elif not self.database_url:
            raise ValueError("Missing required environment variables: DATABASE_URL")
        return self


def _format_missing(fields: Iterable[str]) -> str:
    """Return a human-friendly comma-separated list of missing env vars."""

    unique: List[str] = []
    for field in fields:
        if field not in unique:
            unique.append(field)
    return ", ".join(unique)


@lru_cache()
def get_settings() -> AppSettings:
    """Fetch and cache settings from environment variables."""

    try:
        return AppSettings.model_validate(os.environ)
    except ValidationError as exc:
        problems = []
        for error in exc.errors():
            if error["loc"]:
                problems.append(f"{error['loc'][0]}: {error['msg']}")
            else:
                problems.append(error["msg"].removeprefix("Value error, "))
        raise RuntimeError("Invalid configuration: " + "; ".join(problems)) from exc
