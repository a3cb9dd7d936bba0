from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from .connection import DatabaseConnection

Params = Sequence[Any]


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection per unit of work: commit on success, rollback on error."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def query_one(conn_factory: DatabaseConnection, sql: str, params: Params = ()) -> Optional[Dict[str, Any]]:
    with db_cursor(conn_factory) as cur:
        cur.execute(sql, tuple(params))
        return cur.fetchone() or None


def query_all(conn_factory: DatabaseConnection, sql: str, params: Params = ()) -> List[Dict[str, Any]]:
    with db_cursor(conn_factory) as cur:
        cur.execute(sql, tuple(params))
        return list(cur.fetchall() or [])


def execute(conn_factory: DatabaseConnection, sql: str, params: Params = ()) -> int:
    """Run a write statement; returns the affected row count."""
    with db_cursor(conn_factory) as cur:
        cur.execute(sql, tuple(params))
        return cur.rowcount
