from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import mysql.connector
import pytest
from mysql.connector import errorcode

from src.time_tracking.time_tracking.core.enums import SessionStatus
from src.time_tracking.time_tracking.core.exceptions import ConflictError, NotFoundError, StorageError
from src.time_tracking.time_tracking.database.mysql_base import (
    db_cursor,
    dump_errors,
    load_errors,
    normalize_hours,
    translate_errors,
)
from src.time_tracking.time_tracking.database.transaction import MySQLTransactionManager
from src.time_tracking.time_tracking.sessions.model import SessionCounts
from src.time_tracking.time_tracking.sessions.mysql_session_repository import MySQLWorkSessionRepository


class FakeConnFactory:
    """Stand-in for DatabaseConnection handing out one mock connection."""

    def __init__(self):
        self.conn = MagicMock(name="conn")
        self.cursor = MagicMock(name="cursor")
        self.conn.cursor.return_value = self.cursor
        self._bound = None

    def connect(self, *, database: bool = True):
        return self.conn

    def bound_connection(self):
        return self._bound

    def bind(self, conn):
        self._bound = conn

    def unbind(self):
        self._bound = None


def test_duplicate_key_becomes_conflict():
    with pytest.raises(ConflictError) as exc:
        with translate_errors():
            raise mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    assert exc.value.retryable


def test_other_errors_become_storage_errors():
    with pytest.raises(StorageError):
        with translate_errors():
            raise mysql.connector.OperationalError(msg="gone away", errno=errorcode.CR_SERVER_GONE_ERROR)


def test_db_cursor_commits_outside_transaction():
    factory = FakeConnFactory()
    with db_cursor(factory) as (_, cur):
        cur.execute("SELECT 1")

    factory.conn.commit.assert_called_once()
    factory.conn.close.assert_called_once()


def test_db_cursor_rolls_back_on_error():
    factory = FakeConnFactory()
    with pytest.raises(RuntimeError):
        with db_cursor(factory):
            raise RuntimeError("boom")

    factory.conn.rollback.assert_called_once()
    factory.conn.commit.assert_not_called()


def test_transaction_commits_once_for_all_writes():
    factory = FakeConnFactory()
    tx = MySQLTransactionManager(factory)

    with tx.atomic():
        with db_cursor(factory) as (_, cur):
            cur.execute("INSERT 1")
        with tx.atomic():
            with db_cursor(factory) as (_, cur):
                cur.execute("INSERT 2")
        factory.conn.commit.assert_not_called()

    factory.conn.start_transaction.assert_called_once_with(isolation_level="SERIALIZABLE")
    factory.conn.commit.assert_called_once()
    assert factory.bound_connection() is None


def test_transaction_rolls_back_on_error():
    factory = FakeConnFactory()
    tx = MySQLTransactionManager(factory)

    with pytest.raises(ConflictError):
        with tx.atomic():
            raise ConflictError("stale")

    factory.conn.rollback.assert_called_once()
    factory.conn.commit.assert_not_called()
    assert factory.bound_connection() is None


def _row(**overrides):
    row = {
        "session_id": 5,
        "user_id": 1,
        "work_date": date(2025, 3, 3),
        "status": "active",
        "clock_in_time": datetime(2025, 3, 3, 9),
        "clock_out_time": None,
        "lunch_start_time": None,
        "lunch_end_time": None,
        "total_work_minutes": 0,
        "total_lunch_minutes": 0,
        "total_work_hours": "0.00",
        "is_valid_session": 1,
        "validation_errors": None,
        "version": 2,
    }
    row.update(overrides)
    return row


def test_update_with_stale_version_is_conflict():
    factory = FakeConnFactory()
    factory.cursor.rowcount = 0
    factory.cursor.fetchone.return_value = _row()
    repo = MySQLWorkSessionRepository(factory)

    with pytest.raises(ConflictError):
        repo.update_session(5, {"status": SessionStatus.ON_LUNCH}, expected_version=1)

    sql, params = factory.cursor.execute.call_args_list[0].args
    assert "version=version+1" in sql
    assert params == ("on_lunch", 5, 1)


def test_update_missing_session_is_not_found():
    factory = FakeConnFactory()
    factory.cursor.rowcount = 0
    factory.cursor.fetchone.return_value = None
    repo = MySQLWorkSessionRepository(factory)

    with pytest.raises(NotFoundError):
        repo.update_session(5, {"status": SessionStatus.ACTIVE})


def test_update_returns_fresh_snapshot():
    factory = FakeConnFactory()
    factory.cursor.rowcount = 1
    factory.cursor.fetchone.return_value = _row(status="on_lunch", version=3, validation_errors='["late"]')
    repo = MySQLWorkSessionRepository(factory)

    session = repo.update_session(5, {"status": SessionStatus.ON_LUNCH}, expected_version=2)

    assert session.status == SessionStatus.ON_LUNCH
    assert session.version == 3
    assert session.validation_errors == ("late",)


def test_column_helpers():
    assert normalize_hours(None) == "0.00"
    assert normalize_hours("8.5") == "8.50"
    assert dump_errors([]) is None
    assert load_errors(dump_errors(["a", "b"])) == ("a", "b")


def test_summarize_sessions_builds_one_aggregate_query():
    factory = FakeConnFactory()
    factory.cursor.fetchone.return_value = {
        "total_sessions": 3,
        "active_sessions": 1,
        "completed_sessions": 2,
        "invalid_sessions": 1,
        "total_work_minutes": 1050,
        "total_overtime_minutes": Decimal("30"),
    }
    repo = MySQLWorkSessionRepository(factory)

    counts = repo.summarize_sessions(user_id=1, start_date=date(2025, 3, 1), end_date=date(2025, 3, 31))

    sql, params = factory.cursor.execute.call_args.args
    assert "GREATEST(total_work_minutes - %s, 0)" in sql
    assert "user_id=%s AND work_date >= %s AND work_date <= %s" in sql
    assert params == ("active", "on_lunch", "completed", 480, 1, date(2025, 3, 1), date(2025, 3, 31))
    assert counts == SessionCounts(
        total_sessions=3,
        active_sessions=1,
        completed_sessions=2,
        invalid_sessions=1,
        total_work_minutes=1050,
        total_overtime_minutes=30,
    )


def test_summarize_sessions_without_rows_is_zero():
    factory = FakeConnFactory()
    factory.cursor.fetchone.return_value = None
    repo = MySQLWorkSessionRepository(factory)

    assert repo.summarize_sessions() == SessionCounts()
    _, params = factory.cursor.execute.call_args.args
    assert params == ("active", "on_lunch", "completed", 480)


def test_list_session_ids_filters_by_user():
    factory = FakeConnFactory()
    factory.cursor.fetchall.return_value = [{"session_id": 4}, {"session_id": 9}]
    repo = MySQLWorkSessionRepository(factory)

    assert list(repo.list_session_ids(user_id=2)) == [4, 9]
    sql, params = factory.cursor.execute.call_args.args
    assert "ORDER BY work_date ASC, session_id ASC" in sql
    assert params == (2,)
