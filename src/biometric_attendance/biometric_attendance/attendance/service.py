from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence, Tuple

from ..common.datetime_utils import parse_punch_timestamp
from ..common.validators import parse_employee_number
from ..core.constants import DEFAULT_OVERTIME_CHECKOUT_MINUTES, OVERNIGHT_CHECKOUT_HOURS
from ..core.enums import AttendanceState, TransitionAction
from ..core.exceptions import NotFoundError
from ..devices.acknowledgement import DeviceRecordAcknowledger
from ..devices.model import BiometricDevice
from ..devices.repository import DeviceRepository
from ..employees.repository import EmployeeRepository
from ..policy.service import AttendanceConfigurationService
from ..schedules.model import Schedule
from ..schedules.repository import ScheduleRepository
from .factory import AttendanceStrategyFactory
from .model import Attendance, AttendanceProcessedEvent, AttendancePunch, BatchResult, PunchBatch, PunchOutcome, RawPunch
from .repository import AttendancePunchRepository, AttendanceRepository
from .state_machine import reconcile

logger = logging.getLogger(__name__)

AttendanceListener = Callable[[AttendanceProcessedEvent], None]


class AttendanceReconciliationService:
    """Turns a batch of raw device punches into attendance and punch rows.

    Records are handled one after another so two punches of one employee never
    race to open the same day. A bad record is logged and skipped; it never
    aborts the batch. Once every record has been handled the device buffer is
    cleared, and a failure there is raised to the caller.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        punches: AttendancePunchRepository,
        employees: EmployeeRepository,
        schedules: ScheduleRepository,
        devices: DeviceRepository,
        policies: AttendanceConfigurationService,
        acknowledger: DeviceRecordAcknowledger,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        overtime_checkout_minutes: int = DEFAULT_OVERTIME_CHECKOUT_MINUTES,
        listeners: Sequence[AttendanceListener] = (),
    ):
        self._attendance = attendance
        self._punches = punches
        self._employees = employees
        self._schedules = schedules
        self._devices = devices
        self._policies = policies
        self._acknowledger = acknowledger
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._overtime_checkout_minutes = int(overtime_checkout_minutes)
        self._listeners = list(listeners)

    def subscribe(self, listener: AttendanceListener) -> None:
        self._listeners.append(listener)

    def process_batch(self, batch: PunchBatch) -> BatchResult:
        logger.info("Handling %s attendance record(s) from device %s", len(batch.attendances), batch.device_id)

        device = self._devices.get_by_id(batch.device_id)
        if not device:
            logger.error("Biometric device %s not found", batch.device_id)
            raise NotFoundError(f"Biometric device {batch.device_id} not found")

        result = BatchResult(device_id=device.device_id)
        for record in batch.attendances:
            try:
                outcome = self._process_record(device, record)
            except Exception as exc:
                logger.exception("Error processing attendance record %r from device %s", record, device.device_id)
                outcome = PunchOutcome(user_id=str(record.user_id), processed=False, reason=f"error: {exc}", failed=True)
                result.failed += 1
            else:
                if outcome.processed:
                    result.processed += 1
                else:
                    result.skipped += 1
            result.outcomes.append(outcome)

        if result.failed:
            # Records that failed to persist are still on the device; keep them for the next poll.
            logger.warning(
                "Not clearing device %s: %s of %s record(s) failed",
                device.device_id,
                result.failed,
                result.total,
            )
            return result

        self._acknowledger.acknowledge(device, batch.downloaded)
        result.acknowledged = True
        logger.info(
            "Batch from device %s done: processed=%s skipped=%s",
            device.device_id,
            result.processed,
            result.skipped,
        )
        return result

    def _skip(self, record: RawPunch, reason: str) -> PunchOutcome:
        logger.warning("Skipping record %r: %s", record.user_id, reason)
        return PunchOutcome(user_id=str(record.user_id), processed=False, reason=reason)

    def _resolve_day(
        self, employee_id: int, punch_time: datetime
    ) -> Tuple[date, Optional[Schedule], Optional[Attendance]]:
        """Work day a punch belongs to, with its schedule and current record.

        Normally that is the punch's own date. A punch on a date with no record
        yet may instead be the checkout of an overnight shift still open from
        the day before: it is claimed by that shift when it falls within
        ``OVERNIGHT_CHECKOUT_HOURS`` of the shift end and, if the punch's date
        has its own schedule, lies closer to the old shift end than to the new
        shift start.
        """

        work_date = punch_time.date()
        current = self._attendance.get_for_employee_and_date(employee_id, work_date)
        schedule = self._schedules.get_for_employee_and_date(employee_id=employee_id, work_date=work_date)
        if current is not None:
            return work_date, schedule, current

        previous_date = work_date - timedelta(days=1)
        previous = self._attendance.get_for_employee_and_date(employee_id, previous_date)
        if previous is None or previous.state != AttendanceState.OPEN:
            return work_date, schedule, current
        previous_schedule = self._schedules.get_for_employee_and_date(employee_id=employee_id, work_date=previous_date)
        if previous_schedule is None or not previous_schedule.is_overnight:
            return work_date, schedule, current

        shift_end = previous_schedule.window(previous_date).end
        if punch_time - shift_end > timedelta(hours=OVERNIGHT_CHECKOUT_HOURS):
            return work_date, schedule, current
        if schedule is not None and punch_time - shift_end >= schedule.window(work_date).start - punch_time:
            return work_date, schedule, current

        logger.debug("Punch at %s closes the overnight shift of %s", punch_time, previous_date)
        return previous_date, previous_schedule, previous

    def _process_record(self, device: BiometricDevice, record: RawPunch) -> PunchOutcome:
        logger.debug("Raw userId from device: %r", record.user_id)

        employee_number = parse_employee_number(record.user_id)
        if employee_number is None:
            return self._skip(record, "invalid user id format, must be numeric")

        try:
            punch_time = parse_punch_timestamp(record.timestamp)
        except (TypeError, ValueError, OverflowError, OSError):
            return self._skip(record, f"unparseable timestamp {record.timestamp!r}")

        employee = self._employees.get_by_employee_number(employee_number)
        if not employee:
            return self._skip(record, f"no employee with number {employee_number}")
        if not employee.is_active:
            return self._skip(record, f"employee {employee.employee_id} is inactive")

        work_date, schedule, current = self._resolve_day(employee.employee_id, punch_time)
        if not schedule:
            return self._skip(record, f"no schedule for employee {employee.employee_id} on {work_date}")

        organization_id = employee.organization_id if employee.organization_id is not None else device.organization_id
        config = self._policies.get_for_organization(organization_id)

        transition = reconcile(
            current,
            employee_id=employee.employee_id,
            schedule=schedule,
            punch_time=punch_time,
            config=config,
            factory=self._factory,
            overtime_checkout_minutes=self._overtime_checkout_minutes,
        )

        attendance = transition.attendance
        if transition.action == TransitionAction.CREATE:
            attendance_id = self._attendance.create(attendance)
            attendance = replace(attendance, attendance_id=attendance_id)
            transition = replace(transition, attendance=attendance)
            logger.info(
                "Created attendance %s for employee %s on %s with statuses %s",
                attendance_id,
                employee.employee_id,
                work_date,
                [s.value for s in attendance.statuses],
            )
        elif transition.action == TransitionAction.CLOSE:
            attendance_id = attendance.attendance_id
            self._attendance.update(attendance)
            logger.info(
                "Closed attendance %s for employee %s at %s with statuses %s",
                attendance_id,
                employee.employee_id,
                punch_time.strftime("%H:%M:%S"),
                [s.value for s in attendance.statuses],
            )
        else:
            attendance_id = attendance.attendance_id
            logger.info(
                "Attendance %s for employee %s left unchanged (%s day)",
                attendance_id,
                employee.employee_id,
                attendance.state.value.lower(),
            )

        for deviation in transition.deviations:
            logger.info(
                "Employee %s %s: %s min (reported %s min)",
                employee.employee_id,
                deviation.kind.value,
                deviation.raw_minutes,
                deviation.reported_minutes,
            )

        self._punches.create(
            AttendancePunch(
                attendance_id=int(attendance_id),
                time=punch_time,
                punch_type=str(record.punch_type),
                employee_number=employee_number,
                device_id=device.device_id,
            )
        )

        self._notify(
            AttendanceProcessedEvent(
                device_id=device.device_id,
                employee_id=employee.employee_id,
                employee_number=employee_number,
                transition=transition,
            )
        )

        return PunchOutcome(
            user_id=str(record.user_id),
            processed=True,
            attendance_id=int(attendance_id),
            action=transition.action,
            statuses=attendance.statuses,
        )

    def _notify(self, event: AttendanceProcessedEvent) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Attendance listener %r failed", listener)
