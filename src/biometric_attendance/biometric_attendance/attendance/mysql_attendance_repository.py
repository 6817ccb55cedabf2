from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, mysql_datetime
from .model import Attendance, Statuses
from .repository import AttendanceRepository


def _dump_statuses(statuses: Statuses) -> str:
    return ",".join(s.value for s in statuses)


def _load_statuses(value: Optional[str]) -> Statuses:
    if not value:
        return (AttendanceStatus.DEFAULT,)
    return tuple(AttendanceStatus(part) for part in value.split(",") if part)


def _to_attendance(r: Dict[str, Any]) -> Attendance:
    return Attendance(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        schedule_id=int(r["schedule_id"]),
        work_date=r["work_date"],
        time_in=mysql_datetime(r.get("time_in")),
        time_out=mysql_datetime(r.get("time_out")),
        statuses=_load_statuses(r.get("statuses")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, employee_id, schedule_id, work_date, time_in, time_out, statuses
                FROM attendances
                WHERE employee_id=%s AND work_date=%s
                ORDER BY attendance_id
                LIMIT 1
                """,
                (int(employee_id), work_date),
            )
            r = cur.fetchone()
            return _to_attendance(r) if r else None

    def create(self, attendance: Attendance) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendances(employee_id, schedule_id, work_date, time_in, time_out, statuses)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    attendance.employee_id,
                    attendance.schedule_id,
                    attendance.work_date,
                    attendance.time_in,
                    attendance.time_out,
                    _dump_statuses(attendance.statuses),
                ),
            )
            return int(cur.lastrowid)

    def update(self, attendance: Attendance) -> bool:
        # time_out is only ever written once.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET time_out=%s, statuses=%s
                WHERE attendance_id=%s AND time_out IS NULL
                """,
                (attendance.time_out, _dump_statuses(attendance.statuses), int(attendance.attendance_id)),
            )
            return cur.rowcount > 0
