"""Shared in-memory repositories and fixtures.

The fakes hold a lock around every check-and-write so they behave like the
unique indexes and guarded UPDATEs of the MySQL repositories under threads.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

import pytest
from werkzeug.security import generate_password_hash

from src.attendance_otc.attendance_otc.attendance.model import AttendanceRecord, SessionRosterRow
from src.attendance_otc.attendance_otc.container import assemble
from src.attendance_otc.attendance_otc.core.constants import OtcSettings
from src.attendance_otc.attendance_otc.core.enums import AttendanceStatus, Role
from src.attendance_otc.attendance_otc.core.exceptions import (
    ConflictError,
    DeliveryFailedError,
    DuplicateAttendanceError,
    DuplicateRequestError,
)
from src.attendance_otc.attendance_otc.members.model import Member
from src.attendance_otc.attendance_otc.otc.model import OneTimeCode
from src.attendance_otc.attendance_otc.sessions.model import Session
from src.attendance_otc.attendance_otc.staff.model import Staff
from src.attendance_otc.attendance_otc.verification.rate_limit import SlidingWindowRateLimiter


class MutableClock:
    def __init__(self, start: datetime):
        self.now = start
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            return self.now

    def advance(self, **kwargs) -> datetime:
        with self._lock:
            self.now = self.now + timedelta(**kwargs)
            return self.now

    def set(self, value: datetime) -> None:
        with self._lock:
            self.now = value


class InMemoryMembers:
    def __init__(self, members: Sequence[Member] = ()):
        self._lock = threading.Lock()
        self._by_id = {m.member_id: m for m in members}

    def add(self, member: Member) -> Member:
        with self._lock:
            self._by_id[member.member_id] = member
        return member

    def get_by_id(self, member_id: int) -> Optional[Member]:
        with self._lock:
            return self._by_id.get(member_id)

    def find_active_by_registration_code(self, registration_code: str) -> Optional[Member]:
        with self._lock:
            for m in self._by_id.values():
                if m.registration_code == registration_code and m.is_active:
                    return m
        return None

    def list_active(self, *, year: Optional[str] = None) -> Sequence[Member]:
        with self._lock:
            items = [m for m in self._by_id.values() if m.is_active and (year is None or m.year == year)]
        return sorted(items, key=lambda m: m.registration_code)

    def save_streak(self, member: Member) -> None:
        with self._lock:
            current = self._by_id[member.member_id]
            self._by_id[member.member_id] = replace(
                current,
                current_streak=member.current_streak,
                longest_streak=member.longest_streak,
                last_attendance_date=member.last_attendance_date,
            )


class InMemoryStaff:
    def __init__(self, accounts: Sequence[Staff] = ()):
        self._by_id = {s.staff_id: s for s in accounts}

    def get_by_id(self, staff_id: int) -> Optional[Staff]:
        return self._by_id.get(staff_id)

    def get_by_username(self, username: str) -> Optional[Staff]:
        for s in self._by_id.values():
            if s.username == username:
                return s
        return None


class InMemorySessions:
    def __init__(self):
        self._lock = threading.Lock()
        self._rows: dict[int, Session] = {}
        self._next_id = 0

    def create_active(self, *, label: str, session_date: date, start_time: datetime, opened_by: int) -> Session:
        with self._lock:
            if any(s.is_active for s in self._rows.values()):
                raise ConflictError("An attendance session is already active. Please close it first.")
            self._next_id += 1
            session = Session(
                session_id=self._next_id,
                label=label,
                session_date=session_date,
                start_time=start_time,
                end_time=None,
                is_active=True,
                opened_by=opened_by,
            )
            self._rows[session.session_id] = session
            return session

    def close_if_active(self, *, session_id: int, end_time: datetime, closed_by: int) -> bool:
        with self._lock:
            current = self._rows.get(session_id)
            if not current or not current.is_active:
                return False
            self._rows[session_id] = replace(current, is_active=False, end_time=end_time, closed_by=closed_by)
            return True

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with self._lock:
            return self._rows.get(session_id)

    def get_active(self) -> Optional[Session]:
        with self._lock:
            for s in self._rows.values():
                if s.is_active:
                    return s
        return None

    def list_sessions(self, *, start_date=None, end_date=None, is_active=None) -> Sequence[Session]:
        with self._lock:
            items = list(self._rows.values())
        if start_date:
            items = [s for s in items if s.session_date >= start_date]
        if end_date:
            items = [s for s in items if s.session_date <= end_date]
        if is_active is not None:
            items = [s for s in items if s.is_active == is_active]
        return sorted(items, key=lambda s: (s.start_time, s.session_id), reverse=True)


class InMemoryCodes:
    def __init__(self):
        self._lock = threading.Lock()
        self._rows: dict[int, OneTimeCode] = {}
        self._next_id = 0

    def all(self) -> list[OneTimeCode]:
        with self._lock:
            return list(self._rows.values())

    def create_if_none_outstanding(self, *, member_id, session_id, code, expires_at, max_attempts, now) -> OneTimeCode:
        with self._lock:
            for row in self._rows.values():
                if (
                    row.member_id == member_id
                    and row.session_id == session_id
                    and not row.is_used
                    and row.expires_at >= now
                ):
                    raise DuplicateRequestError(
                        "Code already sent. Please check your email or wait for it to expire.",
                        expires_at=row.expires_at,
                    )
            self._next_id += 1
            row = OneTimeCode(
                code_id=self._next_id,
                member_id=member_id,
                session_id=session_id,
                code=code,
                expires_at=expires_at,
                created_at=now,
                max_attempts=max_attempts,
            )
            self._rows[row.code_id] = row
            return row

    def get_by_id(self, code_id: int) -> Optional[OneTimeCode]:
        with self._lock:
            return self._rows.get(code_id)

    def get_latest_unused(self, member_id: int, session_id: int) -> Optional[OneTimeCode]:
        with self._lock:
            items = [
                r for r in self._rows.values()
                if r.member_id == member_id and r.session_id == session_id and not r.is_used
            ]
        if not items:
            return None
        return max(items, key=lambda r: (r.created_at, r.code_id))

    def increment_attempts(self, code_id: int) -> Optional[int]:
        with self._lock:
            row = self._rows.get(code_id)
            if not row or row.is_used or row.attempts >= row.max_attempts:
                return None
            self._rows[code_id] = replace(row, attempts=row.attempts + 1)
            return row.attempts + 1

    def mark_used(self, code_id: int) -> bool:
        with self._lock:
            row = self._rows.get(code_id)
            if not row or row.is_used or row.attempts >= row.max_attempts:
                return False
            self._rows[code_id] = replace(row, is_used=True, is_verified=True)
            return True


class InMemoryAttendance:
    def __init__(self, members: InMemoryMembers):
        self._lock = threading.Lock()
        self._members = members
        self._rows: dict[tuple[int, int], AttendanceRecord] = {}
        self._next_id = 0
        self.fail_next_create: Optional[Exception] = None

    def create(self, *, member_id, session_id, status, marked_at, origin, marked_by=None, ip_address=None):
        with self._lock:
            if self.fail_next_create is not None:
                exc, self.fail_next_create = self.fail_next_create, None
                raise exc
            if (member_id, session_id) in self._rows:
                raise DuplicateAttendanceError("Attendance already marked for this session")
            self._next_id += 1
            record = AttendanceRecord(
                attendance_id=self._next_id,
                member_id=member_id,
                session_id=session_id,
                status=status,
                marked_at=marked_at,
                origin=origin,
                marked_by=marked_by,
                ip_address=ip_address,
            )
            self._rows[(member_id, session_id)] = record
            return record

    def get_for_member_and_session(self, member_id: int, session_id: int) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._rows.get((member_id, session_id))

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        with self._lock:
            items = [r for r in self._rows.values() if r.session_id == session_id]
        return sorted(items, key=lambda r: (r.marked_at, r.attendance_id))

    def roster_for_session(self, session_id: int) -> Sequence[SessionRosterRow]:
        rows = []
        for r in self.list_for_session(session_id):
            m = self._members.get_by_id(r.member_id)
            rows.append(
                SessionRosterRow(
                    attendance_id=r.attendance_id,
                    member_id=r.member_id,
                    registration_code=m.registration_code,
                    full_name=m.full_name,
                    email=m.email,
                    year=m.year,
                    gender=m.gender,
                    status=r.status,
                    marked_at=r.marked_at,
                    origin=r.origin,
                    marked_by=r.marked_by,
                )
            )
        return rows

    def count_present(self, member_id: int, session_ids: Sequence[int]) -> int:
        wanted = set(session_ids)
        with self._lock:
            return sum(
                1 for r in self._rows.values()
                if r.member_id == member_id and r.session_id in wanted and r.status == AttendanceStatus.PRESENT
            )

    def count_present_total(self, member_id: int) -> int:
        with self._lock:
            return sum(
                1 for r in self._rows.values()
                if r.member_id == member_id and r.status == AttendanceStatus.PRESENT
            )


class RecordingDelivery:
    def __init__(self):
        self._lock = threading.Lock()
        self.sent: list[dict] = []
        self.fail = False

    def deliver(self, address: str, code: str, member_name: str, expiry_minutes: int) -> None:
        if self.fail:
            raise DeliveryFailedError("Failed to send email")
        with self._lock:
            self.sent.append(
                {"address": address, "code": code, "member_name": member_name, "expiry_minutes": expiry_minutes}
            )

    def last_code(self) -> str:
        with self._lock:
            return self.sent[-1]["code"]


START = datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def clock():
    return MutableClock(START)


@pytest.fixture
def members_repo():
    return InMemoryMembers(
        [
            Member(1, "CS101", "Alice Nguyen", "alice@example.com", gender="Female", year="1"),
            Member(2, "CS102", "Bao Tran", "bao@example.com", gender="Male", year="1"),
            Member(3, "CS103", "Chi Le", "chi@example.com", gender="Female", year="2"),
            Member(4, "CS104", "Duc Pham", "duc@example.com", gender="Male", year="2", is_active=False),
        ]
    )


@pytest.fixture
def staff_repo():
    return InMemoryStaff(
        [
            Staff(1, "Admin Demo", "admin", generate_password_hash("admin123"), Role.ADMIN),
            Staff(2, "Staff Demo", "staff", generate_password_hash("staff123"), Role.STAFF),
            Staff(3, "Former Staff", "former", generate_password_hash("former123"), Role.STAFF, is_active=False),
        ]
    )


@pytest.fixture
def sessions_repo():
    return InMemorySessions()


@pytest.fixture
def codes_repo():
    return InMemoryCodes()


@pytest.fixture
def attendance_repo(members_repo):
    return InMemoryAttendance(members_repo)


@pytest.fixture
def delivery():
    return RecordingDelivery()


@pytest.fixture
def container(staff_repo, members_repo, sessions_repo, codes_repo, attendance_repo, delivery, clock):
    return assemble(
        staff_repo=staff_repo,
        members_repo=members_repo,
        sessions_repo=sessions_repo,
        codes_repo=codes_repo,
        attendance_repo=attendance_repo,
        delivery=delivery,
        otc_settings=OtcSettings(code_length=6, expiry_minutes=3, max_attempts=3),
        rate_limiter=SlidingWindowRateLimiter(5, 900),
        clock=clock,
    )


@pytest.fixture
def active_session(container):
    return container.session_registry.open_session("Lecture 1", None, 1)


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.attendance_otc.attendance_otc.main import create_app

    flask_app = create_app(container)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def staff_client(client):
    resp = client.post("/api/auth/login", json={"username": "staff", "password": "staff123"})
    assert resp.status_code == 200
    return client

