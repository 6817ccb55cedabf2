from __future__ import annotations

from dataclasses import dataclass

from ..schedules.model import Schedule
from .strategies.base import AttendanceStrategy
from .strategies.holiday_strategy import HolidayStrategy
from .strategies.shift_strategy import ShiftStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on the schedule."""

    def for_schedule(self, schedule: Schedule) -> AttendanceStrategy:
        if schedule.is_holiday:
            return HolidayStrategy()
        return ShiftStrategy()
