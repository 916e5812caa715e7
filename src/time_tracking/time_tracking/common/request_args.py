from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from flask import request

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date, parse_iso_datetime


def query_date(name: str) -> Optional[date]:
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a YYYY-MM-DD date", errors=[f"{name}: invalid date"])


def query_int(name: str) -> Optional[int]:
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", errors=[f"{name}: not an integer"])


def body_timestamp() -> Optional[datetime]:
    """``timestamp`` from the JSON body; offset-aware values are allowed."""
    payload = request.get_json(silent=True) or {}
    raw = payload.get("timestamp") if isinstance(payload, dict) else None
    if not raw:
        return None
    try:
        return parse_iso_datetime(str(raw))
    except ValueError:
        raise ValidationError("timestamp must be ISO-8601", errors=["timestamp: invalid datetime"])
