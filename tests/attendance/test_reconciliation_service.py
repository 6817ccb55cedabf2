from __future__ import annotations

from datetime import date, datetime, time

import pytest

from conftest import (
    InMemoryAttendance,
    InMemoryConfigurations,
    InMemoryDevices,
    InMemoryEmployees,
    InMemoryPunches,
    InMemorySchedules,
    RecordingAcknowledger,
)
from src.biometric_attendance.biometric_attendance.attendance.model import PunchBatch, RawPunch
from src.biometric_attendance.biometric_attendance.attendance.service import AttendanceReconciliationService
from src.biometric_attendance.biometric_attendance.core.enums import AttendanceStatus, TransitionAction
from src.biometric_attendance.biometric_attendance.core.exceptions import DeviceClearError, NotFoundError
from src.biometric_attendance.biometric_attendance.devices.model import BiometricDevice
from src.biometric_attendance.biometric_attendance.employees.model import Employee
from src.biometric_attendance.biometric_attendance.policy.model import AttendanceConfiguration
from src.biometric_attendance.biometric_attendance.policy.service import AttendanceConfigurationService
from src.biometric_attendance.biometric_attendance.schedules.model import Schedule
from src.biometric_attendance.biometric_attendance.shifts.model import Shift

DEVICE = BiometricDevice(device_id="dev-1", name="Lobby", host="10.0.0.5", organization_id=3)


class Harness:
    def __init__(self, schedules, *, acknowledger=None, configs=(), employees=None):
        self.attendance = InMemoryAttendance()
        self.punches = InMemoryPunches()
        self.acknowledger = acknowledger or RecordingAcknowledger()
        self.events = []
        self.service = AttendanceReconciliationService(
            self.attendance,
            self.punches,
            employees or InMemoryEmployees(Employee(employee_id=1, employee_number=1042)),
            InMemorySchedules(*schedules),
            InMemoryDevices(DEVICE),
            AttendanceConfigurationService(InMemoryConfigurations(AttendanceConfiguration(), *configs)),
            self.acknowledger,
            listeners=[self.events.append],
        )

    def run(self, *punches, downloaded=None):
        return self.service.process_batch(
            PunchBatch(
                attendances=[RawPunch(user_id=u, timestamp=t) for u, t in punches],
                device_id="dev-1",
                downloaded=downloaded,
            )
        )


def test_check_in_then_check_out(workday_schedule):
    h = Harness([workday_schedule])

    h.run(("1042", "2025-03-03T09:12:00"))
    h.run(("1042", "2025-03-03T17:45:00"))

    record = h.attendance.get_for_employee_and_date(1, workday_schedule.work_date)
    assert record.time_in == datetime(2025, 3, 3, 9, 12)
    assert record.time_out == datetime(2025, 3, 3, 17, 45)
    assert record.statuses == (AttendanceStatus.LATE, AttendanceStatus.OVERTIME)
    assert [p.time for p in h.punches.rows] == [datetime(2025, 3, 3, 9, 12), datetime(2025, 3, 3, 17, 45)]
    assert h.acknowledger.calls == ["dev-1", "dev-1"]


def test_duplicate_checkout_is_idempotent(workday_schedule):
    h = Harness([workday_schedule])
    h.run(("1042", "2025-03-03T09:00:00"), ("1042", "2025-03-03T17:00:00"))
    closed = h.attendance.get_for_employee_and_date(1, workday_schedule.work_date)

    result = h.run(("1042", "2025-03-03T17:00:00"))

    assert h.attendance.get_for_employee_and_date(1, workday_schedule.work_date) == closed
    assert h.attendance.updates == 1
    assert result.outcomes[0].action == TransitionAction.IGNORE
    assert len(h.punches.rows) == 3


def test_bad_record_does_not_abort_batch(workday_schedule, day_shift):
    employees = InMemoryEmployees(*(Employee(employee_id=n, employee_number=100 + n) for n in range(1, 6)))
    schedules = [
        Schedule(schedule_id=n, employee_id=n, work_date=workday_schedule.work_date, shift=day_shift) for n in range(1, 6)
    ]
    h = Harness(schedules, employees=employees)

    result = h.run(
        ("101", "2025-03-03T09:00:00"),
        ("102", "2025-03-03T09:00:00"),
        ("ABC", "2025-03-03T09:00:00"),
        ("104", "2025-03-03T09:00:00"),
        ("105", "2025-03-03T09:00:00"),
    )

    assert result.processed == 4
    assert result.skipped == 1
    assert result.failed == 0
    assert result.outcomes[2].reason.startswith("invalid user id")
    assert len(h.attendance.by_employee_date) == 4
    assert result.acknowledged
    assert h.acknowledger.calls == ["dev-1"]


def test_unknown_employee_and_missing_schedule_are_skipped(workday_schedule):
    h = Harness([workday_schedule])

    result = h.run(("999", "2025-03-03T09:00:00"), ("1042", "2025-03-04T09:00:00"))

    assert result.skipped == 2
    assert h.attendance.by_employee_date == {}
    assert h.punches.rows == []


def test_holiday_check_in_is_overtime(holiday_schedule):
    h = Harness([holiday_schedule])

    h.run(("1042", "2025-03-03T10:30:00"))

    record = h.attendance.get_for_employee_and_date(1, holiday_schedule.work_date)
    assert record.statuses == (AttendanceStatus.OVERTIME,)


def test_device_organization_policy_applies(workday_schedule):
    lenient = AttendanceConfiguration(organization_id=3, grace_period_minutes=30)
    h = Harness([workday_schedule], configs=[lenient])

    h.run(("1042", "2025-03-03T09:20:00"))

    assert h.attendance.get_for_employee_and_date(1, workday_schedule.work_date).statuses == (AttendanceStatus.DEFAULT,)


def test_epoch_timestamps_are_accepted(workday_schedule):
    h = Harness([workday_schedule])
    at = datetime(2025, 3, 3, 9, 0)

    h.run(("1042", int(at.timestamp() * 1000)))

    assert h.attendance.get_for_employee_and_date(1, workday_schedule.work_date).time_in == at


def test_clear_happens_after_persistence(workday_schedule):
    h = Harness([workday_schedule])
    seen = []

    class CheckingAcknowledger:
        def acknowledge(self, device, amount=None):
            seen.append(len(h.punches.rows))
            return 0

    h.service._acknowledger = CheckingAcknowledger()
    h.run(("1042", "2025-03-03T09:00:00"), ("1042", "2025-03-03T17:00:00"))

    assert seen == [2]


def test_clear_failure_is_raised_after_records_persist(workday_schedule):
    h = Harness([workday_schedule], acknowledger=RecordingAcknowledger(error=DeviceClearError("dev-1", OSError("reset"))))

    with pytest.raises(DeviceClearError):
        h.run(("1042", "2025-03-03T09:00:00"))

    assert h.attendance.get_for_employee_and_date(1, workday_schedule.work_date) is not None


def test_failed_record_skips_clear(workday_schedule):
    h = Harness([workday_schedule])

    def broken_create(attendance):
        raise RuntimeError("db down")

    h.attendance.create = broken_create
    result = h.run(("1042", "2025-03-03T09:00:00"))

    assert result.failed == 1
    assert result.outcomes[0].failed
    assert not result.acknowledged
    assert h.acknowledger.calls == []


def test_unknown_device_processes_nothing(workday_schedule):
    h = Harness([workday_schedule])

    with pytest.raises(NotFoundError):
        h.service.process_batch(PunchBatch(attendances=[RawPunch("1042", "2025-03-03T09:00:00")], device_id="nope"))

    assert h.punches.rows == []
    assert h.acknowledger.calls == []


def test_listener_failure_is_not_raised(workday_schedule):
    h = Harness([workday_schedule])

    def broken(event):
        raise RuntimeError("listener")

    h.service.subscribe(broken)
    result = h.run(("1042", "2025-03-03T09:00:00"))

    assert result.processed == 1
    assert h.events[0].transition.action == TransitionAction.CREATE
    assert h.events[0].transition.attendance.attendance_id == 1


NIGHT = Shift(shift_id=2, shift_name="Night", start_time=time(22, 0), end_time=time(6, 0))


def _night(schedule_id, work_date):
    return Schedule(schedule_id=schedule_id, employee_id=1, work_date=work_date, shift=NIGHT)


def test_overnight_checkout_closes_previous_day():
    h = Harness([_night(20, date(2025, 3, 3))])

    h.run(("1042", "2025-03-03T22:00:00"))
    result = h.run(("1042", "2025-03-04T06:40:00"))

    record = h.attendance.get_for_employee_and_date(1, date(2025, 3, 3))
    assert result.outcomes[0].action == TransitionAction.CLOSE
    assert record.time_out == datetime(2025, 3, 4, 6, 40)
    assert record.statuses == (AttendanceStatus.OVERTIME,)
    assert h.attendance.get_for_employee_and_date(1, date(2025, 3, 4)) is None
    assert h.punches.rows[1].attendance_id == record.attendance_id


def test_overnight_checkout_before_next_night_shift():
    h = Harness([_night(20, date(2025, 3, 3)), _night(21, date(2025, 3, 4))])

    h.run(("1042", "2025-03-03T21:55:00"), ("1042", "2025-03-04T06:05:00"), ("1042", "2025-03-04T22:10:00"))

    first = h.attendance.get_for_employee_and_date(1, date(2025, 3, 3))
    second = h.attendance.get_for_employee_and_date(1, date(2025, 3, 4))
    assert first.time_out == datetime(2025, 3, 4, 6, 5)
    assert second.time_in == datetime(2025, 3, 4, 22, 10)
    assert second.time_out is None
    assert second.statuses == (AttendanceStatus.LATE,)


def test_open_night_does_not_swallow_next_day_check_in(day_shift):
    day = Schedule(schedule_id=22, employee_id=1, work_date=date(2025, 3, 4), shift=day_shift)
    h = Harness([_night(20, date(2025, 3, 3)), day])

    h.run(("1042", "2025-03-03T22:00:00"), ("1042", "2025-03-04T08:55:00"))

    assert h.attendance.get_for_employee_and_date(1, date(2025, 3, 3)).time_out is None
    assert h.attendance.get_for_employee_and_date(1, date(2025, 3, 4)).time_in == datetime(2025, 3, 4, 8, 55)


def test_inactive_employee_is_skipped(workday_schedule):
    employees = InMemoryEmployees(Employee(employee_id=1, employee_number=1042, is_active=False))
    h = Harness([workday_schedule], employees=employees)

    result = h.run(("1042", "2025-03-03T09:00:00"))

    assert result.skipped == 1
    assert "inactive" in result.outcomes[0].reason
    assert h.attendance.by_employee_date == {}
    assert result.acknowledged


def test_clear_covers_the_downloaded_records(workday_schedule):
    h = Harness([workday_schedule])

    h.run(("1042", "2025-03-03T09:00:00"), downloaded=3)

    assert h.acknowledger.amounts == [3]
