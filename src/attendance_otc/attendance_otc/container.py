from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceLedger
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_RATE_LIMIT, DEFAULT_RATE_WINDOW_SECONDS, OtcSettings
from .database.connection import DBConfig, DatabaseConnection
from .delivery.base import CodeDelivery, LoggingCodeDelivery
from .delivery.email_delivery import EmailCodeDelivery, MailSettings
from .members.mysql_member_repository import MySQLMemberRepository
from .members.repository import MemberRepository
from .otc.generator import CodeGenerator
from .otc.mysql_otc_repository import MySQLOneTimeCodeRepository
from .otc.repository import OneTimeCodeRepository
from .otc.service import OneTimeCodeService
from .reports.service import AttendanceReportService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionRegistry
from .staff.mysql_staff_repository import MySQLStaffRepository
from .staff.repository import StaffRepository
from .staff.service import AuthService
from .verification.rate_limit import SlidingWindowRateLimiter
from .verification.service import VerificationService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    staff_repo: StaffRepository
    members_repo: MemberRepository
    sessions_repo: SessionRepository
    codes_repo: OneTimeCodeRepository
    attendance_repo: AttendanceRepository

    delivery: CodeDelivery
    rate_limiter: SlidingWindowRateLimiter

    auth_service: AuthService
    session_registry: SessionRegistry
    code_service: OneTimeCodeService
    attendance_ledger: AttendanceLedger
    verification_service: VerificationService
    report_service: AttendanceReportService


def assemble(
    *,
    staff_repo: StaffRepository,
    members_repo: MemberRepository,
    sessions_repo: SessionRepository,
    codes_repo: OneTimeCodeRepository,
    attendance_repo: AttendanceRepository,
    delivery: CodeDelivery,
    otc_settings: Optional[OtcSettings] = None,
    generator: Optional[CodeGenerator] = None,
    rate_limiter: Optional[SlidingWindowRateLimiter] = None,
    clock: Callable[[], datetime] = now_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL or in-memory)."""
    otc_settings = otc_settings or OtcSettings()

    session_registry = SessionRegistry(sessions_repo, clock=clock)
    attendance_ledger = AttendanceLedger(attendance_repo, clock=clock)
    code_service = OneTimeCodeService(
        codes_repo,
        sessions_repo,
        attendance_repo,
        generator=generator,
        settings=otc_settings,
        clock=clock,
    )
    verification_service = VerificationService(
        members_repo,
        session_registry,
        code_service,
        attendance_ledger,
        delivery,
        clock=clock,
    )

    return Container(
        conn=conn,
        staff_repo=staff_repo,
        members_repo=members_repo,
        sessions_repo=sessions_repo,
        codes_repo=codes_repo,
        attendance_repo=attendance_repo,
        delivery=delivery,
        rate_limiter=rate_limiter or SlidingWindowRateLimiter(),
        auth_service=AuthService(staff_repo),
        session_registry=session_registry,
        code_service=code_service,
        attendance_ledger=attendance_ledger,
        verification_service=verification_service,
        report_service=AttendanceReportService(sessions_repo, members_repo, attendance_ledger),
    )


def build_delivery(mail_config: Optional[dict]) -> CodeDelivery:
    if not mail_config or not mail_config.get("server"):
        return LoggingCodeDelivery()
    return EmailCodeDelivery(
        MailSettings(
            server=str(mail_config["server"]),
            port=int(mail_config.get("port", 465)),
            username=str(mail_config.get("username", "")),
            password=str(mail_config.get("password", "")),
            use_ssl=bool(mail_config.get("use_ssl", True)),
            sender_name=str(mail_config.get("sender_name", "Attendance")),
        )
    )


def build_container(
    *,
    db_config: dict,
    otc_settings: Optional[OtcSettings] = None,
    mail_config: Optional[dict] = None,
    rate_limit: int = DEFAULT_RATE_LIMIT,
    rate_window_seconds: int = DEFAULT_RATE_WINDOW_SECONDS,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        staff_repo=MySQLStaffRepository(conn),
        members_repo=MySQLMemberRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        codes_repo=MySQLOneTimeCodeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        delivery=build_delivery(mail_config),
        otc_settings=otc_settings,
        rate_limiter=SlidingWindowRateLimiter(rate_limit, rate_window_seconds),
        conn=conn,
    )
