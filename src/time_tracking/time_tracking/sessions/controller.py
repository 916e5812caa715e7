from __future__ import annotations

from flask import Flask, request

from ..common.request_args import body_timestamp, query_date
from ..common.responses import error_response, failure_response, success_response
from ..core.constants import DEFAULT_PAGE_SIZE, DEFAULT_RECENT_ACTIVITY_LIMIT
from ..core.enums import EntryType
from ..core.exceptions import DomainError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.time_tracking_service

    def clock_action(action: EntryType, user_id: int):
        try:
            timestamp = body_timestamp()
        except ValidationError as e:
            return error_response(e)

        handler = {
            EntryType.CLOCK_IN: service.clock_in,
            EntryType.CLOCK_OUT: service.clock_out,
            EntryType.START_LUNCH: service.start_lunch,
            EntryType.RESUME_SHIFT: service.resume_shift,
        }[action]
        outcome = handler(user_id, timestamp)

        if not outcome.success:
            return failure_response(
                outcome.kind,
                outcome.message,
                reason=outcome.reason,
                errors=outcome.validation_errors,
                retryable=outcome.retryable,
            )
        return success_response(
            {
                "session": outcome.session,
                "entry": outcome.entry,
                "buttonStates": outcome.button_states,
            },
            outcome.message,
        )

    @app.route("/api/users/<int:user_id>/time/clock-in", methods=["POST"], endpoint="time_clock_in")
    def clock_in(user_id: int):
        return clock_action(EntryType.CLOCK_IN, user_id)

    @app.route("/api/users/<int:user_id>/time/clock-out", methods=["POST"], endpoint="time_clock_out")
    def clock_out(user_id: int):
        return clock_action(EntryType.CLOCK_OUT, user_id)

    @app.route("/api/users/<int:user_id>/time/start-lunch", methods=["POST"], endpoint="time_start_lunch")
    def start_lunch(user_id: int):
        return clock_action(EntryType.START_LUNCH, user_id)

    @app.route("/api/users/<int:user_id>/time/resume-shift", methods=["POST"], endpoint="time_resume_shift")
    def resume_shift(user_id: int):
        return clock_action(EntryType.RESUME_SHIFT, user_id)

    @app.route("/api/users/<int:user_id>/time/current-status", methods=["GET"], endpoint="time_current_status")
    def current_status(user_id: int):
        try:
            status = service.get_current_status(user_id)
        except DomainError as e:
            return error_response(e)
        return success_response(status)

    @app.route("/api/users/<int:user_id>/time/today-session", methods=["GET"], endpoint="time_today_session")
    def today_session(user_id: int):
        try:
            today = service.get_today_session(user_id)
        except DomainError as e:
            return error_response(e)
        return success_response(today)

    @app.route("/api/users/<int:user_id>/time/recent-activities", methods=["GET"], endpoint="time_recent_activities")
    def recent_activities(user_id: int):
        try:
            limit = request.args.get("limit", DEFAULT_RECENT_ACTIVITY_LIMIT)
            entries = service.get_recent_activities(user_id, limit=limit)
        except DomainError as e:
            return error_response(e)
        return success_response(entries)

    @app.route("/api/users/<int:user_id>/time/sessions", methods=["GET"], endpoint="time_sessions")
    def sessions(user_id: int):
        try:
            page = service.get_user_sessions(
                user_id,
                page=request.args.get("page", 1),
                limit=request.args.get("limit", DEFAULT_PAGE_SIZE),
                start_date=query_date("startDate"),
                end_date=query_date("endDate"),
            )
        except DomainError as e:
            return error_response(e)
        return success_response(page)

    @app.route("/api/users/<int:user_id>/time/button-states", methods=["GET"], endpoint="time_button_states")
    def button_states(user_id: int):
        try:
            states = service.get_button_states(user_id)
        except DomainError as e:
            return error_response(e)
        return success_response(states)
