from __future__ import annotations

from flask import Flask

from ..common.request_args import query_date
from ..common.responses import error_response, success_response
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    stats = container.statistics_service

    @app.route("/api/users/<int:user_id>/statistics/dashboard", methods=["GET"], endpoint="stats_dashboard")
    def dashboard(user_id: int):
        try:
            data = stats.get_dashboard_stats(user_id)
        except DomainError as e:
            return error_response(e)
        return success_response(data)

    @app.route("/api/users/<int:user_id>/statistics/weekly", methods=["GET"], endpoint="stats_weekly")
    def weekly(user_id: int):
        try:
            data = stats.get_weekly_stats(user_id, query_date("weekOf"))
        except DomainError as e:
            return error_response(e)
        return success_response(data)

    @app.route("/api/users/<int:user_id>/statistics/monthly", methods=["GET"], endpoint="stats_monthly")
    def monthly(user_id: int):
        try:
            data = stats.get_monthly_stats(user_id, query_date("monthOf"))
        except DomainError as e:
            return error_response(e)
        return success_response(data)

    @app.route("/api/users/<int:user_id>/statistics/compliance", methods=["GET"], endpoint="stats_compliance")
    def compliance(user_id: int):
        try:
            start, end = query_date("startDate"), query_date("endDate")
            score = stats.calculate_compliance_score(user_id, start, end)
        except DomainError as e:
            return error_response(e)
        return success_response({"startDate": start, "endDate": end, "complianceScore": score})

    @app.route("/api/users/<int:user_id>/statistics/period", methods=["GET"], endpoint="stats_period")
    def period(user_id: int):
        try:
            data = stats.get_period_stats(user_id, query_date("startDate"), query_date("endDate"))
        except DomainError as e:
            return error_response(e)
        return success_response(data)
