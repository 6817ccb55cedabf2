from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence, Tuple, Union

from ..core.enums import AttendanceState, AttendanceStatus, TransitionAction
from ..policy.model import PolicyDecision

Statuses = Tuple[AttendanceStatus, ...]


def merge_statuses(*groups: Sequence[AttendanceStatus]) -> Statuses:
    """Ordered set union; DEFAULT is dropped once any other tag is present."""

    merged: list[AttendanceStatus] = []
    for group in groups:
        for status in group:
            status = AttendanceStatus(status)
            if status not in merged:
                merged.append(status)
    if len(merged) > 1 and AttendanceStatus.DEFAULT in merged:
        merged.remove(AttendanceStatus.DEFAULT)
    return tuple(merged) or (AttendanceStatus.DEFAULT,)


@dataclass(frozen=True)
class RawPunch:
    """Punch as delivered by the device poller (not persisted as-is)."""

    user_id: str
    timestamp: Union[str, int, float, datetime]
    punch_type: Union[int, str] = 0


@dataclass(frozen=True)
class PunchBatch:
    attendances: Sequence[RawPunch]
    device_id: str
    # Records pulled off the device for this batch, filtered ones included.
    # None means the batch did not come from a download and the whole buffer is cleared.
    downloaded: Optional[int] = None


@dataclass(frozen=True)
class Attendance:
    """Per-employee-per-day aggregate."""

    attendance_id: Optional[int]
    employee_id: int
    schedule_id: int
    work_date: date
    time_in: Optional[datetime]
    time_out: Optional[datetime] = None
    statuses: Statuses = (AttendanceStatus.DEFAULT,)

    @property
    def state(self) -> AttendanceState:
        if self.time_out is not None:
            return AttendanceState.CLOSED
        return AttendanceState.OPEN


@dataclass(frozen=True)
class AttendancePunch:
    """Immutable audit row for one processed device punch."""

    attendance_id: int
    time: datetime
    punch_type: str
    employee_number: int
    device_id: str
    punch_id: Optional[int] = None


@dataclass(frozen=True)
class Transition:
    action: TransitionAction
    attendance: Attendance
    deviations: Tuple[PolicyDecision, ...] = ()

    @property
    def changed(self) -> bool:
        return self.action != TransitionAction.IGNORE


@dataclass(frozen=True)
class PunchOutcome:
    user_id: str
    processed: bool
    reason: Optional[str] = None
    failed: bool = False
    attendance_id: Optional[int] = None
    action: Optional[TransitionAction] = None
    statuses: Statuses = ()


@dataclass
class BatchResult:
    device_id: str
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    acknowledged: bool = False
    outcomes: list[PunchOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.processed + self.skipped + self.failed


@dataclass(frozen=True)
class AttendanceProcessedEvent:
    """Published after a punch changed or touched an attendance record."""

    device_id: str
    employee_id: int
    employee_number: int
    transition: Transition
