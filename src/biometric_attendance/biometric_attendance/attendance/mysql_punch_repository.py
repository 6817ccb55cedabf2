from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import AttendancePunch
from .repository import AttendancePunchRepository


class MySQLAttendancePunchRepository(AttendancePunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, punch: AttendancePunch) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_punches(attendance_id, punch_time, punch_type, employee_number, device_id)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (punch.attendance_id, punch.time, punch.punch_type, punch.employee_number, punch.device_id),
            )
            return int(cur.lastrowid)
