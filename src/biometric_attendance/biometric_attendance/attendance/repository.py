from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import Attendance, AttendancePunch


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[Attendance]:
        raise NotImplementedError

    def create(self, attendance: Attendance) -> int:
        """Insert a new (open) attendance; returns attendance_id."""

        raise NotImplementedError

    def update(self, attendance: Attendance) -> bool:
        raise NotImplementedError


class AttendancePunchRepository(Protocol):
    def create(self, punch: AttendancePunch) -> int:
        raise NotImplementedError
