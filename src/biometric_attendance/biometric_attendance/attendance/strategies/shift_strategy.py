from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import minutes_between
from ...core.enums import AttendanceStatus, DeviationKind
from ...policy.engine import evaluate
from ...policy.model import AttendanceConfiguration
from ...schedules.model import ShiftWindow
from ..model import Statuses, merge_statuses
from .base import AttendanceStrategy, StatusDecision


class ShiftStrategy(AttendanceStrategy):
    """Regular work day: lateness on check-in, under-time/overtime on check-out."""

    def decide_checkin(self, *, punch_time: datetime, window: ShiftWindow, config: AttendanceConfiguration) -> StatusDecision:
        if punch_time > window.start:
            late = evaluate(DeviationKind.LATE, minutes_between(punch_time, window.start), config)
            if late.violated:
                return StatusDecision(statuses=(AttendanceStatus.LATE,), deviations=(late,))
        elif punch_time < window.start:
            early = evaluate(DeviationKind.EARLY_TIME, minutes_between(window.start, punch_time), config)
            if early.violated and config.consider_early_time_as_overtime:
                return StatusDecision(statuses=(AttendanceStatus.OVERTIME,), deviations=(early,))
            if early.violated:
                return StatusDecision(statuses=(AttendanceStatus.DEFAULT,), deviations=(early,))
        return StatusDecision(statuses=(AttendanceStatus.DEFAULT,))

    def decide_checkout(
        self,
        *,
        punch_time: datetime,
        window: ShiftWindow,
        config: AttendanceConfiguration,
        current: Statuses,
        overtime_checkout_minutes: int,
    ) -> StatusDecision:
        if punch_time < window.end:
            under = evaluate(DeviationKind.UNDER_TIME, minutes_between(window.end, punch_time), config)
            if under.violated:
                return StatusDecision(statuses=merge_statuses(current, (AttendanceStatus.EARLY_LEAVE,)), deviations=(under,))
        elif punch_time > window.end:
            # Checkout overtime uses its own fixed trigger, not overtime_threshold_minutes.
            over = evaluate(
                DeviationKind.OVERTIME,
                minutes_between(punch_time, window.end),
                config,
                threshold_override=overtime_checkout_minutes,
            )
            if over.violated:
                return StatusDecision(statuses=merge_statuses(current, (AttendanceStatus.OVERTIME,)), deviations=(over,))
        # No deviation at checkout: the day is overwritten with the plain status.
        return StatusDecision(statuses=(AttendanceStatus.DEFAULT,))
