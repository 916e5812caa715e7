from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.constants import STANDARD_DAY_MINUTES
from ..core.enums import SessionStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_datetime, db_cursor, dump_errors, fetchall, fetchone, load_errors, normalize_hours
from .model import SESSION_PATCH_FIELDS, NewWorkSession, SessionCounts, SessionPatch, WorkSession
from .repository import WorkSessionRepository

_COLUMNS = """
    session_id, user_id, work_date, status,
    clock_in_time, clock_out_time, lunch_start_time, lunch_end_time,
    total_work_minutes, total_lunch_minutes, total_work_hours,
    is_valid_session, validation_errors, version
"""


def _to_session(r: dict) -> WorkSession:
    return WorkSession(
        session_id=int(r["session_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        status=SessionStatus(r["status"]),
        clock_in_time=as_datetime(r.get("clock_in_time")),
        clock_out_time=as_datetime(r.get("clock_out_time")),
        lunch_start_time=as_datetime(r.get("lunch_start_time")),
        lunch_end_time=as_datetime(r.get("lunch_end_time")),
        total_work_minutes=int(r.get("total_work_minutes") or 0),
        total_lunch_minutes=int(r.get("total_lunch_minutes") or 0),
        total_work_hours=normalize_hours(r.get("total_work_hours")),
        is_valid_session=bool(r.get("is_valid_session", True)),
        validation_errors=load_errors(r.get("validation_errors")),
        version=int(r.get("version") or 1),
    )


def _to_db_value(field_name: str, value: Any) -> Any:
    if field_name == "status":
        return SessionStatus(value).value
    if field_name == "validation_errors":
        return dump_errors(value)
    if field_name == "is_valid_session":
        return 1 if value else 0
    return value


def _filters(
    *,
    user_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> tuple[str, list[object]]:
    clauses = ["1=1"]
    params: list[object] = []
    if user_id is not None:
        clauses.append("user_id=%s")
        params.append(int(user_id))
    if start_date is not None:
        clauses.append("work_date >= %s")
        params.append(start_date)
    if end_date is not None:
        clauses.append("work_date <= %s")
        params.append(end_date)
    return " AND ".join(clauses), params


class MySQLWorkSessionRepository(WorkSessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, where: str, params: tuple) -> Optional[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_sessions WHERE {where} LIMIT 1", params)
            r = fetchone(cur)
            return _to_session(r) if r else None

    def find_session_by_id(self, session_id: int) -> Optional[WorkSession]:
        return self._select_one("session_id=%s", (int(session_id),))

    def find_session_by_user_and_date(self, user_id: int, work_date: date) -> Optional[WorkSession]:
        return self._select_one("user_id=%s AND work_date=%s", (int(user_id), work_date))

    def find_active_session_for_user(self, user_id: int) -> Optional[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM work_sessions
                WHERE user_id=%s AND status IN (%s, %s)
                ORDER BY work_date DESC
                LIMIT 1
                """,
                (int(user_id), SessionStatus.ACTIVE.value, SessionStatus.ON_LUNCH.value),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def create_session(self, data: NewWorkSession) -> WorkSession:
        # A duplicate (user_id, work_date) surfaces as ConflictError via ER_DUP_ENTRY.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO work_sessions(
                    user_id, work_date, status, clock_in_time,
                    total_work_minutes, total_lunch_minutes, total_work_hours,
                    is_valid_session, validation_errors, version
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    int(data.user_id),
                    data.work_date,
                    SessionStatus(data.status).value,
                    data.clock_in_time,
                    int(data.total_work_minutes),
                    int(data.total_lunch_minutes),
                    data.total_work_hours,
                    1 if data.is_valid_session else 0,
                    dump_errors(data.validation_errors),
                ),
            )
            session_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM work_sessions WHERE session_id=%s", (session_id,))
            return _to_session(fetchone(cur))

    def update_session(
        self,
        session_id: int,
        patch: SessionPatch,
        *,
        expected_version: Optional[int] = None,
    ) -> WorkSession:
        unknown = set(patch) - SESSION_PATCH_FIELDS
        if unknown:
            raise ValidationError(f"unknown session fields: {', '.join(sorted(unknown))}")

        assignments = [f"{name}=%s" for name in patch]
        params: list[object] = [_to_db_value(name, value) for name, value in patch.items()]
        assignments.append("version=version+1")

        where = "session_id=%s"
        params.append(int(session_id))
        if expected_version is not None:
            where += " AND version=%s"
            params.append(int(expected_version))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE work_sessions SET {', '.join(assignments)} WHERE {where}", tuple(params))
            updated = cur.rowcount > 0
            cur.execute(f"SELECT {_COLUMNS} FROM work_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)

        if not r:
            raise NotFoundError(f"work session {session_id} not found")
        if not updated:
            raise ConflictError(f"work session {session_id} was modified concurrently")
        return _to_session(r)

    def list_completed_sessions(self, user_id: int, *, start_date: date, end_date: date) -> Sequence[WorkSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM work_sessions
                WHERE user_id=%s AND status=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(user_id), SessionStatus.COMPLETED.value, start_date, end_date),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_sessions_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int,
        offset: int = 0,
    ) -> tuple[Sequence[WorkSession], int]:
        where, params = _filters(user_id=user_id, start_date=start_date, end_date=end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM work_sessions WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM work_sessions
                WHERE {where}
                ORDER BY work_date DESC, session_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            return [_to_session(r) for r in fetchall(cur)], total

    def list_session_ids(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[int]:
        where, params = _filters(user_id=user_id, start_date=start_date, end_date=end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT session_id FROM work_sessions WHERE {where} ORDER BY work_date ASC, session_id ASC",
                tuple(params),
            )
            return [int(r["session_id"]) for r in fetchall(cur)]

    def summarize_sessions(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        standard_day_minutes: int = STANDARD_DAY_MINUTES,
    ) -> SessionCounts:
        where, params = _filters(user_id=user_id, start_date=start_date, end_date=end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    COUNT(*) AS total_sessions,
                    COALESCE(SUM(status IN (%s, %s)), 0) AS active_sessions,
                    COALESCE(SUM(status = %s), 0) AS completed_sessions,
                    COALESCE(SUM(is_valid_session = 0), 0) AS invalid_sessions,
                    COALESCE(SUM(total_work_minutes), 0) AS total_work_minutes,
                    COALESCE(SUM(GREATEST(total_work_minutes - %s, 0)), 0) AS total_overtime_minutes
                FROM work_sessions
                WHERE {where}
                """,
                (
                    SessionStatus.ACTIVE.value,
                    SessionStatus.ON_LUNCH.value,
                    SessionStatus.COMPLETED.value,
                    int(standard_day_minutes),
                    *params,
                ),
            )
            r = fetchone(cur) or {}

        return SessionCounts(
            total_sessions=int(r.get("total_sessions") or 0),
            active_sessions=int(r.get("active_sessions") or 0),
            completed_sessions=int(r.get("completed_sessions") or 0),
            invalid_sessions=int(r.get("invalid_sessions") or 0),
            total_work_minutes=int(r.get("total_work_minutes") or 0),
            total_overtime_minutes=int(r.get("total_overtime_minutes") or 0),
        )
