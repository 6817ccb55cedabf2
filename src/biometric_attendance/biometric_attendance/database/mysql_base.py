from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, time, timedelta
from typing import Any, Optional

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One unit of work: yields ``(conn, cursor)``, commits on success and
    rolls back (then re-raises) on error."""

    conn = conn_factory.connect()
    cur = None
    try:
        cur = conn.cursor(dictionary=dictionary)
        yield conn, cur
        conn.commit()
    except Exception:
        logger.debug("Rolling back transaction", exc_info=True)
        conn.rollback()
        raise
    finally:
        if cur is not None:
            cur.close()
        conn.close()


def mysql_time(value: Any) -> Optional[time]:
    """TIME column value as ``time``; mysql-connector hands TIME back as a timedelta."""

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        return (datetime.min + value % timedelta(days=1)).time()
    return time.fromisoformat(str(value).strip())


def mysql_datetime(value: Any) -> Optional[datetime]:
    """DATETIME column value as ``datetime``; raw-mode cursors return text."""

    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("ascii")
    return datetime.fromisoformat(str(value).strip())
