from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import Callable, Optional

from .analytics.service import AttendanceAnalyticsService
from .attendance.factory import VerifierFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import CheckInService
from .attendance.window import CheckInWindow
from .common.datetime_utils import now_local
from .core.settings import CheckInSettings
from .database.connection import DBConfig, DatabaseConnection
from .enrollment.mysql_enrollment_repository import MySQLEnrollmentRepository
from .enrollment.repository import EnrollmentRepository
from .notifications.mysql_notifier import MySQLMessageNotifier
from .notifications.notifier import Notifier
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.mysql_token_repository import MySQLSessionTokenRepository
from .sessions.repository import SessionRepository, SessionTokenRepository
from .sessions.token_rotator import SessionTokenRotator, TokenRotationScheduler
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository


@dataclass(frozen=True)
class Container:
    settings: CheckInSettings
    clock: Callable[[], datetime]

    sessions_repo: SessionRepository
    tokens_repo: SessionTokenRepository
    attendance_repo: AttendanceRepository
    enrollments_repo: EnrollmentRepository
    users_repo: UserRepository

    window: CheckInWindow
    token_rotator: SessionTokenRotator
    rotation_scheduler: TokenRotationScheduler
    checkin_service: CheckInService
    analytics_service: AttendanceAnalyticsService


def build_services(
    *,
    settings: CheckInSettings,
    sessions_repo: SessionRepository,
    tokens_repo: SessionTokenRepository,
    attendance_repo: AttendanceRepository,
    enrollments_repo: EnrollmentRepository,
    users_repo: UserRepository,
    notifier: Optional[Notifier] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""
    clock = clock or partial(now_local, settings.timezone)

    window = CheckInWindow(
        grace_before=settings.grace_before,
        late_threshold=settings.late_threshold,
        timezone=settings.timezone,
    )
    verifiers = VerifierFactory.standard(
        tokens_repo,
        max_fix_age=settings.location_max_age,
        timezone=settings.timezone,
    )
    token_rotator = SessionTokenRotator(tokens_repo, interval=settings.token_rotation)
    rotation_scheduler = TokenRotationScheduler(token_rotator, sessions_repo, window, clock=clock)

    checkin_service = CheckInService(
        attendance_repo,
        sessions_repo,
        enrollments_repo,
        window=window,
        verifiers=verifiers,
        notifier=notifier,
        clock=clock,
        location_timeout=settings.location_timeout_seconds,
    )
    analytics_service = AttendanceAnalyticsService(
        attendance_repo,
        sessions_repo,
        enrollments_repo,
        users_repo,
        window=window,
        clock=clock,
        at_risk_threshold=settings.at_risk_threshold,
    )

    return Container(
        settings=settings,
        clock=clock,
        sessions_repo=sessions_repo,
        tokens_repo=tokens_repo,
        attendance_repo=attendance_repo,
        enrollments_repo=enrollments_repo,
        users_repo=users_repo,
        window=window,
        token_rotator=token_rotator,
        rotation_scheduler=rotation_scheduler,
        checkin_service=checkin_service,
        analytics_service=analytics_service,
    )


def build_container(*, db_config: dict, settings: Optional[CheckInSettings] = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return build_services(
        settings=settings or CheckInSettings(),
        sessions_repo=MySQLSessionRepository(conn),
        tokens_repo=MySQLSessionTokenRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        users_repo=MySQLUserRepository(conn),
        notifier=MySQLMessageNotifier(conn),
    )
