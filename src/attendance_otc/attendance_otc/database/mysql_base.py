from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateKeyError, StorageError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


def _translate(exc: mysql.connector.Error) -> StorageError:
    if exc.errno == errorcode.ER_DUP_ENTRY:
        return DuplicateKeyError(str(exc))
    return StorageError(f"Database error: {exc}")


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor) inside one transaction.

    Commits when the block finishes, rolls back on any exception. Driver
    errors come out as StorageError (DuplicateKeyError for unique-index
    violations); domain errors raised inside the block pass through untouched.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("Could not connect to database: %s", exc)
        raise _translate(exc) from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        if exc.errno != errorcode.ER_DUP_ENTRY:
            logger.error("Database operation failed: %s", exc)
        raise _translate(exc) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values) -> str:
    """Placeholders for a non-empty IN (...) list."""
    return ", ".join(["%s"] * len(values))
