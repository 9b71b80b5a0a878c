from __future__ import annotations


def _open(client, label="Lecture 1"):
    return client.post("/api/attendance/sessions", json={"label": label})


def test_active_session_missing(client):
    resp = client.get("/api/attendance/sessions/active")

    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "message": "No active attendance session"}


def test_login_and_me(client):
    assert client.get("/api/auth/me").status_code == 401

    resp = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["role"] == "admin"

    me = client.get("/api/auth/me").get_json()
    assert me["data"]["username"] == "admin"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_login_rejected(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid username or password"


def test_open_session_requires_login(client):
    assert _open(client).status_code == 401


def test_open_and_close_session(staff_client):
    resp = _open(staff_client)
    assert resp.status_code == 201
    session = resp.get_json()["data"]
    assert session["is_active"] is True
    assert session["session_date"] == "2026-03-02"
    assert session["opened_by"] == 2

    conflict = _open(staff_client, "Lecture 2")
    assert conflict.status_code == 409
    assert "already active" in conflict.get_json()["message"]

    active = staff_client.get("/api/attendance/sessions/active").get_json()["data"]
    assert active["session_id"] == session["session_id"]

    closed = staff_client.put(f"/api/attendance/sessions/{session['session_id']}/close")
    assert closed.status_code == 200
    assert closed.get_json()["data"]["is_active"] is False

    again = staff_client.put(f"/api/attendance/sessions/{session['session_id']}/close")
    assert again.status_code == 400

    assert staff_client.put("/api/attendance/sessions/999/close").status_code == 404


def test_list_sessions(staff_client):
    _open(staff_client)

    resp = staff_client.get("/api/attendance/sessions?isActive=true&startDate=2026-03-01")
    assert resp.status_code == 200
    assert len(resp.get_json()["data"]) == 1

    bad = staff_client.get("/api/attendance/sessions?startDate=03/01/2026")
    assert bad.status_code == 400


def test_open_session_rejects_non_string_date(staff_client):
    resp = staff_client.post("/api/attendance/sessions", json={"label": "Morning", "date": 20260302})

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False
    assert staff_client.get("/api/attendance/sessions/active").status_code == 404


def test_self_check_in_flow(staff_client, delivery):
    _open(staff_client)

    resp = staff_client.post("/api/attendance/request-code", json={"registrationCode": "cs101"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["expiresIn"] == 3

    dup = staff_client.post("/api/attendance/request-code", json={"registrationCode": "CS101"})
    assert dup.status_code == 409
    assert "expiresAt" in dup.get_json()

    code = delivery.last_code()
    wrong = "000000" if code != "000000" else "111111"
    miss = staff_client.post("/api/attendance/verify-code", json={"registrationCode": "CS101", "code": wrong})
    assert miss.status_code == 400
    assert miss.get_json()["remainingAttempts"] == 2

    ok = staff_client.post("/api/attendance/verify-code", json={"registrationCode": "CS101", "code": code})
    assert ok.status_code == 200
    body = ok.get_json()
    assert body["message"] == "Attendance marked successfully"
    assert body["data"]["currentStreak"] == 1

    records = staff_client.get("/api/attendance/sessions/1/records").get_json()["data"]
    assert records["count"] == 1
    assert records["records"][0]["registration_code"] == "CS101"
    assert records["records"][0]["origin"] == "self"


def test_request_code_errors(client, container, delivery):
    assert client.post("/api/attendance/request-code", json={"registrationCode": "CS101"}).status_code == 400

    container.session_registry.open_session("Lecture 1", None, 1)
    missing = client.post("/api/attendance/request-code", json={"registrationCode": "XX1"})
    assert missing.status_code == 404
    assert missing.get_json()["message"] == "Member not found"

    delivery.fail = True
    failed = client.post("/api/attendance/request-code", json={"registrationCode": "CS102"})
    assert failed.status_code == 502


def test_request_code_rate_limited(client, container):
    container.session_registry.open_session("Lecture 1", None, 1)

    statuses = [
        client.post("/api/attendance/request-code", json={"registrationCode": "CS101"}).status_code
        for _ in range(6)
    ]

    assert statuses == [200, 409, 409, 409, 409, 429]
    last = client.post("/api/attendance/request-code", json={"registrationCode": "CS101"})
    assert last.status_code == 429
    assert int(last.headers["Retry-After"]) > 0

    # another registration code from the same address has its own window
    other = client.post("/api/attendance/request-code", json={"registrationCode": "CS102"})
    assert other.status_code == 200


def test_direct_mark(staff_client):
    _open(staff_client)

    resp = staff_client.post("/api/attendance/direct-mark", json={"registrationCode": "CS102", "status": "absent"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "Absent"
    assert resp.get_json()["message"] == "Attendance marked as Absent"

    dup = staff_client.post("/api/attendance/direct-mark", json={"registrationCode": "CS102"})
    assert dup.status_code == 409


def test_direct_mark_requires_staff(client, container):
    container.session_registry.open_session("Lecture 1", None, 1)

    resp = client.post("/api/attendance/direct-mark", json={"registrationCode": "CS102"})

    assert resp.status_code == 401


def test_report_and_member_stats(staff_client):
    _open(staff_client)
    staff_client.post("/api/attendance/direct-mark", json={"registrationCode": "CS101", "status": "Present"})

    report = staff_client.get("/api/attendance/report?year=1").get_json()["data"]
    assert report["total_sessions"] == 1
    assert [r["registration_code"] for r in report["rows"]] == ["CS101", "CS102"]
    assert report["rows"][0]["percentage"] == 100.0

    stats = staff_client.get("/api/members/1/stats")
    assert stats.status_code == 200
    assert stats.get_json()["data"]["current_streak"] == 1

    assert staff_client.get("/api/members/999/stats").status_code == 404
