from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .database.connection import DBConfig, DatabaseConnection
from .database.transaction import MySQLTransactionManager
from .sessions.admin_service import SessionAdminService
from .sessions.mysql_entry_repository import MySQLTimeEntryRepository
from .sessions.mysql_session_repository import MySQLWorkSessionRepository
from .sessions.policy import TrackingPolicy
from .sessions.repository import TimeEntryRepository, TransactionManager, WorkSessionRepository
from .sessions.service import TimeTrackingService
from .statistics.compliance import StandardComplianceCalculator
from .statistics.service import StatisticsService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    sessions_repo: WorkSessionRepository
    entries_repo: TimeEntryRepository
    transactions: TransactionManager

    time_tracking_service: TimeTrackingService
    statistics_service: StatisticsService
    session_admin_service: SessionAdminService


def build_services(
    *,
    users_repo: UserRepository,
    sessions_repo: WorkSessionRepository,
    entries_repo: TimeEntryRepository,
    transactions: TransactionManager,
    policy: TrackingPolicy,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    time_tracking_service = TimeTrackingService(
        sessions_repo,
        entries_repo,
        transactions,
        users_repo,
        policy=policy,
    )
    statistics_service = StatisticsService(
        sessions_repo,
        compliance=StandardComplianceCalculator(),
        standard_day_minutes=policy.standard_day_minutes,
        timezone=policy.timezone,
    )
    session_admin_service = SessionAdminService(
        sessions_repo,
        entries_repo,
        transactions,
        standard_day_minutes=policy.standard_day_minutes,
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        sessions_repo=sessions_repo,
        entries_repo=entries_repo,
        transactions=transactions,
        time_tracking_service=time_tracking_service,
        statistics_service=statistics_service,
        session_admin_service=session_admin_service,
    )


def build_container(*, db_config: dict, policy: TrackingPolicy | None = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        users_repo=MySQLUserRepository(conn),
        sessions_repo=MySQLWorkSessionRepository(conn),
        entries_repo=MySQLTimeEntryRepository(conn),
        transactions=MySQLTransactionManager(conn),
        policy=policy or TrackingPolicy(),
        conn=conn,
    )
