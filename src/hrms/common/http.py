"""JSON envelope shared by every API route: {success, message?, data?, error?}."""

from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import BusinessRuleError, DomainError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def to_json(value: Any) -> Any:
    """Serialize dataclasses/enums/dates into JSON-friendly values with camelCase keys."""
    if is_dataclass(value) and not isinstance(value, type):
        return to_json(asdict(value))
    if isinstance(value, dict):
        return {_camel(str(k)) if isinstance(k, str) else k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def api_response(
    data: Any = None,
    *,
    message: Optional[str] = None,
    status: int = 200,
    **extra: Any,
):
    body: dict[str, Any] = {"success": 200 <= status < 400}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = to_json(data)
    for k, v in extra.items():
        body[_camel(k)] = to_json(v)
    return jsonify(body), status


def api_error(message: str, *, status: int = 400, error: Optional[str] = None):
    body: dict[str, Any] = {"success": False, "message": message}
    if error:
        body["error"] = error
    return jsonify(body), status


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return api_error(str(e), status=400)

    @app.errorhandler(BusinessRuleError)
    def _business(e: BusinessRuleError):
        return api_error(str(e), status=400)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return api_error(str(e), status=404)

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return api_error(str(e), status=400)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return api_error(e.description or e.name, status=e.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return api_error("Internal server error", status=500, error=str(e))
