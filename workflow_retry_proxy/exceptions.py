"""Exceptions raised by the proxy handlers and backing stores."""

from __future__ import annotations

from typing import Any, Dict


class ProxyError(Exception):
    """Base class for errors raised by this package."""


class RequestValidationError(ProxyError):
    """Raised when a request body is missing required fields.

    ``payload`` is the JSON body returned to the client with a 400 status.
    """

    def __init__(self, payload: Dict[str, Any]) -> None:
        super().__init__(payload.get("error", "Invalid request"))
        self.payload = payload


class StoreError(ProxyError):
    """Raised when the backing store cannot complete an operation."""
