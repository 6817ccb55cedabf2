"""Per employee-day attendance state machine.

    NONE --punch--> OPEN --punch--> CLOSED --punch--> CLOSED (ignored)

Transitions are pure: they take the current record (or None), the punch and
the policy, and return the next record without touching storage.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_OVERTIME_CHECKOUT_MINUTES
from ..core.enums import AttendanceState, TransitionAction
from ..policy.model import AttendanceConfiguration
from ..schedules.model import Schedule
from .factory import AttendanceStrategyFactory
from .model import Attendance, Transition


def state_of(current: Optional[Attendance]) -> AttendanceState:
    return AttendanceState.NONE if current is None else current.state


def open_attendance(
    *,
    employee_id: int,
    schedule: Schedule,
    punch_time: datetime,
    config: AttendanceConfiguration,
    factory: AttendanceStrategyFactory,
) -> Transition:
    """NONE -> OPEN: the first punch of the day is the check-in."""

    window = schedule.window(punch_time.date())
    decision = factory.for_schedule(schedule).decide_checkin(punch_time=punch_time, window=window, config=config)
    attendance = Attendance(
        attendance_id=None,
        employee_id=employee_id,
        schedule_id=schedule.schedule_id,
        work_date=punch_time.date(),
        time_in=punch_time,
        time_out=None,
        statuses=decision.statuses,
    )
    return Transition(action=TransitionAction.CREATE, attendance=attendance, deviations=decision.deviations)


def close_attendance(
    current: Attendance,
    *,
    schedule: Schedule,
    punch_time: datetime,
    config: AttendanceConfiguration,
    factory: AttendanceStrategyFactory,
    overtime_checkout_minutes: int = DEFAULT_OVERTIME_CHECKOUT_MINUTES,
) -> Transition:
    """OPEN -> CLOSED: set time_out and overwrite statuses with the checkout set.

    An early leave or overtime is appended to the check-in tags; a checkout
    with neither resets the day to DEFAULT.
    """

    if current.state != AttendanceState.OPEN:
        return Transition(action=TransitionAction.IGNORE, attendance=current)
    # Re-delivered check-in (or an older punch arriving late) must not close the day.
    if current.time_in is not None and punch_time <= current.time_in:
        return Transition(action=TransitionAction.IGNORE, attendance=current)

    window = schedule.window(current.work_date)
    decision = factory.for_schedule(schedule).decide_checkout(
        punch_time=punch_time,
        window=window,
        config=config,
        current=current.statuses,
        overtime_checkout_minutes=overtime_checkout_minutes,
    )
    closed = replace(current, time_out=punch_time, statuses=decision.statuses)
    return Transition(action=TransitionAction.CLOSE, attendance=closed, deviations=decision.deviations)


def reconcile(
    current: Optional[Attendance],
    *,
    employee_id: int,
    schedule: Schedule,
    punch_time: datetime,
    config: AttendanceConfiguration,
    factory: Optional[AttendanceStrategyFactory] = None,
    overtime_checkout_minutes: int = DEFAULT_OVERTIME_CHECKOUT_MINUTES,
) -> Transition:
    """Decide what one punch does to the employee's record for the day.

    A CLOSED day is terminal: further punches leave it untouched.
    """

    factory = factory or AttendanceStrategyFactory()
    state = state_of(current)

    if state == AttendanceState.NONE:
        return open_attendance(
            employee_id=employee_id,
            schedule=schedule,
            punch_time=punch_time,
            config=config,
            factory=factory,
        )
    if state == AttendanceState.OPEN:
        return close_attendance(
            current,
            schedule=schedule,
            punch_time=punch_time,
            config=config,
            factory=factory,
            overtime_checkout_minutes=overtime_checkout_minutes,
        )
    return Transition(action=TransitionAction.IGNORE, attendance=current)
