"""Application entry point for the workflow retry proxy."""

from __future__ import annotations

from pathlib import Path
from uuid import uuid4

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars

from workflow_retry_proxy.config import AppSettings, get_settings
from workflow_retry_proxy.exceptions import StoreError
from workflow_retry_proxy.handlers import (
    ConfigHandler,
    FailedActionsHandler,
    Handler,
    RetryActionsHandler,
    RetryRunHandler,
)
from workflow_retry_proxy.integrator import IntegratorClient
from workflow_retry_proxy.logging_config import configure_logging
from workflow_retry_proxy.store import BackingStore, build_store

DEFAULT_CORS_METHODS = "GET, POST, OPTIONS"
_HTTP_ERROR_MESSAGES = {405: "Method not allowed"}


def _register_error_handlers(flask_app: Flask) -> None:
    """Register JSON error handlers; unexpected errors get a trace identifier."""

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):  # type: ignore[override]
        message = _HTTP_ERROR_MESSAGES.get(error.code, error.name)
        response = jsonify({"error": message})
        response.status_code = error.code or 500
        return response

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):  # type: ignore[override]
        trace_id = str(uuid4())
        flask_app.logger.exception(
            "Unhandled application error", extra={"trace_id": trace_id}, exc_info=error
        )
        response = jsonify({"error": "internal_server_error", "trace_id": trace_id})
        response.status_code = 500
        return response


def _register_cors(flask_app: Flask, cors_methods: dict[str, str]) -> None:
    @flask_app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = cors_methods.get(request.path, DEFAULT_CORS_METHODS)
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response


def _register_handler(flask_app: Flask, rule: str, handler: Handler, cors_methods: dict[str, str]) -> None:
    cors_methods[rule] = ", ".join(handler.allowed_methods)

    def view():
        if request.method == "OPTIONS":
            return "", 200

        trace_id = str(uuid4())
        bind_contextvars(trace_id=trace_id)
        log = structlog.get_logger().bind(trace_id=trace_id)
        try:
            log.info("request_received", handler=handler.name, method=request.method)
            body = request.get_json(force=True, silent=True) if request.method == "POST" else None
            result = handler.handle(body)
            log.info("request_completed", handler=handler.name, status=result.status)
        finally:
            unbind_contextvars("trace_id")

        if result.body is None:
            return "", result.status
        return jsonify(result.body), result.status

    flask_app.add_url_rule(rule, endpoint=handler.name, view_func=view, methods=list(handler.allowed_methods))


_LOGGING_CONFIGURED = False


def _load_version() -> str:
    version_file = Path(__file__).resolve().parent / "VERSION"
    if version_file.exists():
        return version_file.read_text(encoding="utf-8").strip()
    return "unknown"


def create_app(
    *,
    integrator: IntegratorClient | None = None,
    store: BackingStore | None = None,
) -> Flask:
    """Create and configure the Flask application.

    *integrator* and *store* default to clients built from the environment.
    """

    global _LOGGING_CONFIGURED
    settings: AppSettings = get_settings()
    if not _LOGGING_CONFIGURED:
        configure_logging(settings.log_level)
        _LOGGING_CONFIGURED = True

    integrator = integrator or IntegratorClient(
        base_url=settings.integrator_api_url,
        timeout=settings.http_timeout_seconds,
    )
    store = store or build_store(settings)

    flask_app = Flask(__name__)
    flask_app.config["APP_VERSION"] = _load_version()
    flask_app.logger.setLevel(settings.log_level)

    cors_methods: dict[str, str] = {}
    _register_error_handlers(flask_app)
    _register_cors(flask_app, cors_methods)
    _register_handler(flask_app, "/api/config", ConfigHandler(settings), cors_methods)
    _register_handler(flask_app, "/api/get-failed-actions", FailedActionsHandler(integrator), cors_methods)
    _register_handler(flask_app, "/api/retry-actions", RetryActionsHandler(settings, integrator, store), cors_methods)
    _register_handler(flask_app, "/api/retry", RetryRunHandler(settings, integrator, store), cors_methods)

    @flask_app.route("/healthz", methods=["GET"])
    def healthz():
        health: dict[str, object] = {"ok": True}
        health["version"] = flask_app.config.get("APP_VERSION", "unknown")
        try:
            store.ping()
            health["store"] = "up"
        except StoreError as exc:
            health["store"] = "down"
            health["store_error"] = str(exc)
            health["ok"] = False
        status = 200 if health["ok"] else 503
        return jsonify(health), status

    return flask_app


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    application = create_app()
    application.run(host="0.0.0.0", port=3000, debug=True)
