from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from src.biometric_attendance.biometric_attendance.attendance.model import Attendance, AttendancePunch
from src.biometric_attendance.biometric_attendance.devices.model import BiometricDevice
from src.biometric_attendance.biometric_attendance.employees.model import Employee
from src.biometric_attendance.biometric_attendance.policy.model import AttendanceConfiguration
from src.biometric_attendance.biometric_attendance.schedules.model import Holiday, Schedule
from src.biometric_attendance.biometric_attendance.shifts.model import Shift


class InMemoryAttendance:
    def __init__(self):
        self.by_employee_date: dict[tuple[int, date], Attendance] = {}
        self.updates = 0
        self._id = 0

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[Attendance]:
        return self.by_employee_date.get((employee_id, work_date))

    def create(self, attendance: Attendance) -> int:
        self._id += 1
        self.by_employee_date[(attendance.employee_id, attendance.work_date)] = replace(attendance, attendance_id=self._id)
        return self._id

    def update(self, attendance: Attendance) -> bool:
        key = (attendance.employee_id, attendance.work_date)
        current = self.by_employee_date.get(key)
        if current is None or current.time_out is not None:
            return False
        self.by_employee_date[key] = attendance
        self.updates += 1
        return True


class InMemoryPunches:
    def __init__(self):
        self.rows: list[AttendancePunch] = []

    def create(self, punch: AttendancePunch) -> int:
        self.rows.append(replace(punch, punch_id=len(self.rows) + 1))
        return len(self.rows)


class InMemoryEmployees:
    def __init__(self, *employees: Employee):
        self.by_number = {e.employee_number: e for e in employees}

    def get_by_employee_number(self, employee_number: int) -> Optional[Employee]:
        return self.by_number.get(employee_number)


class InMemorySchedules:
    def __init__(self, *schedules: Schedule):
        self.by_employee_date = {(s.employee_id, s.work_date): s for s in schedules}

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[Schedule]:
        return self.by_employee_date.get((employee_id, work_date))


class InMemoryDevices:
    def __init__(self, *devices: BiometricDevice):
        self.by_id = {d.device_id: d for d in devices}

    def get_by_id(self, device_id: str) -> Optional[BiometricDevice]:
        return self.by_id.get(device_id)

    def list_active(self):
        return [d for d in self.by_id.values() if d.is_active]


class InMemoryConfigurations:
    def __init__(self, *configs: AttendanceConfiguration):
        self.rows: dict[int, AttendanceConfiguration] = {}
        self._id = 0
        for config in configs:
            self.create(config)

    def get_global(self) -> Optional[AttendanceConfiguration]:
        for config in self.rows.values():
            if config.organization_id is None:
                return config
        return None

    def get_for_organization(self, organization_id: int) -> Optional[AttendanceConfiguration]:
        for config in self.rows.values():
            if config.organization_id == organization_id:
                return config
        return None

    def create(self, config: AttendanceConfiguration) -> int:
        self._id += 1
        self.rows[self._id] = replace(config, config_id=self._id)
        return self._id

    def update(self, config: AttendanceConfiguration) -> bool:
        if config.config_id not in self.rows:
            return False
        self.rows[config.config_id] = config
        return True


class RecordingAcknowledger:
    def __init__(self, error: Optional[Exception] = None):
        self.calls: list[str] = []
        self.amounts: list[Optional[int]] = []
        self.error = error

    def acknowledge(self, device: BiometricDevice, amount: Optional[int] = None) -> int:
        self.calls.append(device.device_id)
        self.amounts.append(amount)
        if self.error is not None:
            raise self.error
        return 0


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 3, 9, 0, 0)


@pytest.fixture
def default_policy() -> AttendanceConfiguration:
    return AttendanceConfiguration(config_id=1)


@pytest.fixture
def day_shift() -> Shift:
    return Shift(shift_id=1, shift_name="Day", start_time=time(9, 0), end_time=time(17, 0))


@pytest.fixture
def workday_schedule(day_shift, fixed_now) -> Schedule:
    return Schedule(schedule_id=10, employee_id=1, work_date=fixed_now.date(), shift=day_shift)


@pytest.fixture
def holiday_schedule(day_shift, fixed_now) -> Schedule:
    return Schedule(
        schedule_id=11,
        employee_id=1,
        work_date=fixed_now.date(),
        shift=day_shift,
        holiday=Holiday(holiday_id=1, name="Founders Day", holiday_date=fixed_now.date()),
    )
