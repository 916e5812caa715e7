from __future__ import annotations

from flask import Flask

from ..common.request_args import query_date, query_int
from ..common.responses import error_response, success_response
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    admin = container.session_admin_service

    @app.route("/api/admin/work-sessions/statistics", methods=["GET"], endpoint="admin_session_statistics")
    def session_statistics():
        try:
            data = admin.get_session_statistics(
                user_id=query_int("userId"),
                start_date=query_date("startDate"),
                end_date=query_date("endDate"),
            )
        except DomainError as e:
            return error_response(e)
        return success_response(data)

    @app.route("/api/admin/work-sessions/<int:session_id>", methods=["GET"], endpoint="admin_get_session")
    def get_session(session_id: int):
        try:
            session = admin.get_session(session_id)
        except DomainError as e:
            return error_response(e)
        return success_response(session)

    @app.route(
        "/api/admin/work-sessions/<int:session_id>/revalidate",
        methods=["POST"],
        endpoint="admin_revalidate_session",
    )
    def revalidate(session_id: int):
        try:
            result = admin.revalidate_session(session_id)
        except DomainError as e:
            return error_response(e)
        message = "session is valid" if result.is_valid else "session has validation errors"
        return success_response(result, message)

    @app.route("/api/admin/time/revalidate-sessions", methods=["POST"], endpoint="admin_revalidate_sessions")
    def revalidate_sessions():
        try:
            result = admin.revalidate_sessions(
                user_id=query_int("userId"),
                start_date=query_date("startDate"),
                end_date=query_date("endDate"),
            )
        except DomainError as e:
            return error_response(e)
        return success_response(result, f"{result.processed} session(s) revalidated")
