from __future__ import annotations

from datetime import date
from typing import Sequence

from ..core.enums import EntryType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_datetime, db_cursor, fetchall, fetchone
from .model import NewTimeEntry, TimeEntry
from .repository import TimeEntryRepository

_COLUMNS = "entry_id, user_id, entry_type, entry_timestamp, work_date, timezone, is_valid, validation_notes"


def _to_entry(r: dict) -> TimeEntry:
    return TimeEntry(
        entry_id=int(r["entry_id"]),
        user_id=int(r["user_id"]),
        entry_type=EntryType(r["entry_type"]),
        timestamp=as_datetime(r["entry_timestamp"]),
        work_date=r["work_date"],
        timezone=r["timezone"],
        is_valid=bool(r.get("is_valid", True)),
        validation_notes=r.get("validation_notes"),
    )


class MySQLTimeEntryRepository(TimeEntryRepository):
    """Append-only: entries are never updated or deleted."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_entry(self, data: NewTimeEntry) -> TimeEntry:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(user_id, entry_type, entry_timestamp, work_date, timezone, is_valid, validation_notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(data.user_id),
                    EntryType(data.entry_type).value,
                    data.timestamp,
                    data.work_date,
                    data.timezone,
                    1 if data.is_valid else 0,
                    data.validation_notes,
                ),
            )
            entry_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM time_entries WHERE entry_id=%s", (entry_id,))
            return _to_entry(fetchone(cur))

    def list_entries(self, user_id: int, *, start_date: date, end_date: date) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_entries
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY entry_timestamp ASC, entry_id ASC
                """,
                (int(user_id), start_date, end_date),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def list_recent_entries(self, user_id: int, limit: int) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_entries
                WHERE user_id=%s
                ORDER BY entry_timestamp DESC, entry_id DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [_to_entry(r) for r in fetchall(cur)]
