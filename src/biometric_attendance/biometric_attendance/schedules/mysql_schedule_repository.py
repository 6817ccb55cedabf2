from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, mysql_time
from ..shifts.model import Shift
from .model import Holiday, Schedule
from .repository import ScheduleRepository


def _to_schedule(r: Dict[str, Any]) -> Schedule:
    shift = Shift(
        shift_id=int(r["shift_id"]),
        shift_name=r["shift_name"],
        start_time=mysql_time(r["shift_start_time"]),
        end_time=mysql_time(r["shift_end_time"]),
    )
    holiday = None
    if r.get("holiday_id") is not None:
        holiday = Holiday(
            holiday_id=int(r["holiday_id"]),
            name=r["holiday_name"],
            holiday_date=r["holiday_date"],
        )
    return Schedule(
        schedule_id=int(r["schedule_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        shift=shift,
        start_time=mysql_time(r.get("start_time")),
        end_time=mysql_time(r.get("end_time")),
        holiday=holiday,
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    sc.schedule_id, sc.employee_id, sc.work_date, sc.start_time, sc.end_time,
                    s.shift_id, s.shift_name,
                    s.start_time AS shift_start_time, s.end_time AS shift_end_time,
                    h.holiday_id, h.name AS holiday_name, h.holiday_date
                FROM schedules sc
                JOIN shifts s ON s.shift_id = sc.shift_id
                LEFT JOIN holidays h ON h.holiday_id = sc.holiday_id
                WHERE sc.employee_id=%s AND sc.work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = cur.fetchone()
            return _to_schedule(r) if r else None
