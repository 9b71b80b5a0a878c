from __future__ import annotations

from pathlib import Path

from src.attendance_otc.attendance_otc.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_split_respects_quotes_and_comments():
    sql = """
    -- comment; with a semicolon
    INSERT INTO t VALUES ('a;b');
    INSERT INTO t VALUES ('it\\'s');
    SELECT 1
    """

    assert list(_iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        "INSERT INTO t VALUES ('it\\'s')",
        "SELECT 1",
    ]


def test_strip_create_db_and_use():
    sql = "CREATE DATABASE IF NOT EXISTS x;\nUSE x;\nCREATE TABLE t (id INT);"

    assert list(_iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (id INT)"]


def test_schema_declares_uniqueness_constraints():
    statements = list(_iter_sql_statements(_strip_create_db_and_use(SCHEMA.read_text(encoding="utf-8"))))
    text = "\n".join(statements)

    assert "uq_sessions_single_active" in text
    assert "UNIQUE KEY uq_attendance_member_session (member_id, session_id)" in text
    assert sum(s.upper().startswith("CREATE TABLE") for s in statements) == 5


def test_code_expiry_keeps_microseconds():
    text = SCHEMA.read_text(encoding="utf-8")

    assert "expires_at DATETIME(6) NOT NULL" in text
