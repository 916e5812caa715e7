from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

from flask import jsonify

from ..core.enums import FailureKind
from ..core.exceptions import DomainError

HTTP_STATUS = {
    FailureKind.VALIDATION: 400,
    FailureKind.NOT_FOUND: 404,
    FailureKind.CONFLICT: 409,
    FailureKind.STORAGE: 500,
}


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, enums and dates into JSON-friendly values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def success_response(data: Any = None, message: str = "", status: int = 200):
    return jsonify({"success": True, "message": message, "data": to_jsonable(data)}), status


def failure_response(
    kind: FailureKind,
    message: str,
    *,
    reason: Optional[Enum] = None,
    errors: tuple[str, ...] = (),
    retryable: bool = False,
):
    body = {
        "success": False,
        "message": message,
        "data": None,
        "reason": to_jsonable(reason),
        "validationErrors": list(errors),
        "retryable": retryable,
    }
    return jsonify(body), HTTP_STATUS.get(kind, 500)


def error_response(error: DomainError):
    return failure_response(
        error.kind,
        error.message,
        reason=error.reason,
        errors=error.errors,
        retryable=error.retryable,
    )
