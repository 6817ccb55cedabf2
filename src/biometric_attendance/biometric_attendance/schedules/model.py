from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..shifts.model import Shift


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    name: str
    holiday_date: date


@dataclass(frozen=True)
class ShiftWindow:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Schedule:
    """One employee's concrete assignment for one date."""

    schedule_id: int
    employee_id: int
    work_date: date
    shift: Shift
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    holiday: Optional[Holiday] = None

    @property
    def effective_start(self) -> time:
        return self.start_time if self.start_time is not None else self.shift.start_time

    @property
    def effective_end(self) -> time:
        return self.end_time if self.end_time is not None else self.shift.end_time

    @property
    def is_holiday(self) -> bool:
        return self.holiday is not None

    @property
    def is_overnight(self) -> bool:
        return self.effective_end <= self.effective_start

    def window(self, on: date) -> ShiftWindow:
        """Absolute shift bounds on the punch's calendar date.

        An end time at or before the start time belongs to the next day.
        """

        start = datetime.combine(on, self.effective_start)
        end = datetime.combine(on, self.effective_end)
        if end <= start:
            end += timedelta(days=1)
        return ShiftWindow(start=start, end=end)
