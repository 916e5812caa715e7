from __future__ import annotations

from enum import Enum


class EntryType(str, Enum):
    """Clock action recorded on a time entry."""

    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    START_LUNCH = "start_lunch"
    RESUME_SHIFT = "resume_shift"


class SessionStatus(str, Enum):
    """Stored status of a daily work session."""

    ACTIVE = "active"
    ON_LUNCH = "on_lunch"
    COMPLETED = "completed"


class UserStatus(str, Enum):
    """User-facing status derived from today's session."""

    CLOCKED_OUT = "clocked_out"
    CLOCKED_IN = "clocked_in"
    ON_LUNCH = "on_lunch"


class FailureKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORAGE = "storage"


class FailureReason(str, Enum):
    """Machine-readable reasons carried by failures."""

    ALREADY_CLOCKED_IN = "already_clocked_in"
    CURRENTLY_ON_LUNCH = "currently_on_lunch"
    SESSION_COMPLETED = "session_completed"
    NO_ACTIVE_SESSION = "no_active_session"
    LUNCH_ALREADY_TAKEN = "lunch_already_taken"
    NOT_ON_LUNCH = "not_on_lunch"
    MUST_RESUME_BEFORE_CLOCK_OUT = "must_resume_before_clock_out"
    TIMESTAMP_OUT_OF_ORDER = "timestamp_out_of_order"
    INVALID_DATE_RANGE = "invalid_date_range"
    INVALID_INPUT = "invalid_input"
    USER_NOT_FOUND = "user_not_found"
    SESSION_NOT_FOUND = "session_not_found"
    CONCURRENT_MODIFICATION = "concurrent_modification"
    STORAGE_ERROR = "storage_error"
