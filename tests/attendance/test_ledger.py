from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from src.attendance_otc.attendance_otc.core.enums import AttendanceOrigin, AttendanceStatus
from src.attendance_otc.attendance_otc.core.exceptions import DuplicateAttendanceError

PRESENT = AttendanceStatus.PRESENT
ABSENT = AttendanceStatus.ABSENT


def test_record_and_lookup(container, active_session, clock):
    ledger = container.attendance_ledger
    sid = active_session.session_id

    rec = ledger.record(1, sid, PRESENT, AttendanceOrigin.SELF, ip_address="10.0.0.1")

    assert rec.marked_at == clock.now
    assert rec.origin == AttendanceOrigin.SELF
    assert rec.marked_by is None
    assert rec.ip_address == "10.0.0.1"
    assert ledger.has_record(1, sid)
    assert not ledger.has_record(2, sid)


def test_second_record_fails_and_keeps_first(container, active_session):
    ledger = container.attendance_ledger
    sid = active_session.session_id
    first = ledger.record(1, sid, PRESENT, AttendanceOrigin.SELF)

    with pytest.raises(DuplicateAttendanceError):
        ledger.record(1, sid, ABSENT, AttendanceOrigin.STAFF, 2)

    assert list(ledger.list_for_session(sid)) == [first]


def test_concurrent_records_for_same_pair(container, active_session):
    ledger = container.attendance_ledger
    sid = active_session.session_id

    def attempt(i):
        origin = AttendanceOrigin.SELF if i % 2 else AttendanceOrigin.STAFF
        try:
            ledger.record(1, sid, PRESENT, origin, None if i % 2 else 2)
            return "ok"
        except DuplicateAttendanceError:
            return "dup"

    with ThreadPoolExecutor(max_workers=10) as pool:
        results = list(pool.map(attempt, range(20)))

    assert results.count("ok") == 1
    assert len(ledger.list_for_session(sid)) == 1


def test_roster_joins_member_fields_in_marking_order(container, active_session, clock):
    ledger = container.attendance_ledger
    sid = active_session.session_id
    ledger.record(3, sid, PRESENT, AttendanceOrigin.SELF)
    ledger.record(1, sid, ABSENT, AttendanceOrigin.STAFF, 2, marked_at=clock.now + timedelta(minutes=5))

    roster = ledger.roster(sid)

    assert [r.registration_code for r in roster] == ["CS103", "CS101"]
    assert roster[0].full_name == "Chi Le"
    assert roster[1].status == ABSENT
    assert roster[1].marked_by == 2


def test_count_present_ignores_absent_and_other_sessions(container, active_session):
    ledger = container.attendance_ledger
    s1 = active_session.session_id
    ledger.record(1, s1, PRESENT, AttendanceOrigin.SELF)
    ledger.record(2, s1, ABSENT, AttendanceOrigin.STAFF, 2)

    container.session_registry.close_session(s1, 1)
    s2 = container.session_registry.open_session("Lecture 2", None, 1).session_id
    ledger.record(1, s2, PRESENT, AttendanceOrigin.SELF)

    assert ledger.count_present(1, [s1]) == 1
    assert ledger.count_present(1, [s1, s2]) == 2
    assert ledger.count_present(2, [s1, s2]) == 0
    assert ledger.count_present(1, []) == 0
    assert ledger.count_present_total(1) == 2
