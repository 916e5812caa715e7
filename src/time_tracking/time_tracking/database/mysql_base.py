from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError, StorageError
from .connection import DatabaseConnection

_CONFLICT_ERRNOS = {
    errorcode.ER_DUP_ENTRY,
    errorcode.ER_LOCK_DEADLOCK,
    errorcode.ER_LOCK_WAIT_TIMEOUT,
}


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise connector errors as domain ConflictError/StorageError."""
    try:
        yield
    except mysql.connector.Error as e:
        if getattr(e, "errno", None) in _CONFLICT_ERRNOS:
            raise ConflictError("concurrent update detected, please retry") from e
        raise StorageError(f"database error: {e}") from e


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    bound = conn_factory.bound_connection()
    if bound is not None:
        # Inside a transaction: the transaction manager owns commit/rollback.
        with translate_errors():
            cur = bound.cursor(dictionary=dictionary)
            try:
                yield bound, cur
            finally:
                cur.close()
        return

    with translate_errors():
        conn = conn_factory.connect()
        try:
            cur = conn.cursor(dictionary=dictionary)
            try:
                yield conn, cur
                conn.commit()
            finally:
                cur.close()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_hours(value: Any) -> str:
    """DECIMAL(5,2) column to the "8.50" string representation."""
    if value is None:
        return "0.00"
    return f"{Decimal(str(value)):.2f}"


def dump_errors(errors) -> Optional[str]:
    errors = list(errors or ())
    return json.dumps(errors) if errors else None


def load_errors(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    return tuple(str(e) for e in json.loads(value))


def as_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
