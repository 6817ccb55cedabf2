from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...policy.model import AttendanceConfiguration
from ...schedules.model import ShiftWindow
from .base import StatusDecision
from .shift_strategy import ShiftStrategy


class HolidayStrategy(ShiftStrategy):
    """Holiday work is always overtime; no lateness check on check-in."""

    def decide_checkin(self, *, punch_time: datetime, window: ShiftWindow, config: AttendanceConfiguration) -> StatusDecision:
        return StatusDecision(statuses=(AttendanceStatus.OVERTIME,))
