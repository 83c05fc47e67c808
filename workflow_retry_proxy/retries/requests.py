"""Parsing and validation of dashboard request bodies."""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from workflow_retry_proxy.exceptions import RequestValidationError

RequestModelT = TypeVar("RequestModelT", bound="DashboardRequest")


class DashboardRequest(BaseModel):
    """Common behaviour for bodies posted by the dashboard.

    Required fields are checked for truthiness after parsing, so empty strings,
    zero and empty lists all count as missing.
    """

    model_config = ConfigDict(extra="ignore")

    required_fields: ClassVar[Tuple[str, ...]] = ()

    def missing_fields(self) -> List[str]:
        return [name for name in self.required_fields if not getattr(self, name)]

    @classmethod
    def error_payload(cls) -> Dict[str, Any]:
        return {"error": f"Missing required fields ({', '.join(cls.required_fields)})"}


class FailedActionsRequest(DashboardRequest):
    required_fields: ClassVar[Tuple[str, ...]] = ("workflow_id", "run_number")

    workflow_id: str | int | None = None
    run_number: int | str | None = None


class RetryActionsRequest(DashboardRequest):
    required_fields: ClassVar[Tuple[str, ...]] = ("toolkit", "connection_id", "action_names")

    toolkit: str | None = None
    connection_id: str | None = None
    action_names: List[str] | None = None
    linear_ticket: str | int | None = None
    environment: str | None = None

    @classmethod
    def error_payload(cls) -> Dict[str, Any]:
        return {
            "error": "Missing required fields",
            "required": ["toolkit", "connection_id", "action_names (array)"],
        }


class RetryRunRequest(DashboardRequest):
    required_fields: ClassVar[Tuple[str, ...]] = ("app_name", "workflow_id", "connection_id")

    app_name: str | None = None
    workflow_id: str | int | None = None
    connection_id: str | None = None
    environment: str | None = None
    linear_ticket: str | int | None = None
    failed_actions: List[Any] | None = None
    # Read by truthiness, like the dashboard sends it.
    complete_rerun: Any = None


def parse_request(model: Type[RequestModelT], body: Any) -> RequestModelT:
    """Validate *body* against *model* or raise :class:`RequestValidationError`."""

    if not isinstance(body, dict):
        raise RequestValidationError(model.error_payload())

    try:
        parsed = model.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(model.error_payload()) from exc

    if parsed.missing_fields():
        raise RequestValidationError(model.error_payload())
    return parsed
