from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from ...policy.model import AttendanceConfiguration, PolicyDecision
from ...schedules.model import ShiftWindow
from ..model import Statuses


@dataclass(frozen=True)
class StatusDecision:
    statuses: Statuses
    deviations: Tuple[PolicyDecision, ...] = ()


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how a punch is classified."""

    @abstractmethod
    def decide_checkin(self, *, punch_time: datetime, window: ShiftWindow, config: AttendanceConfiguration) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(
        self,
        *,
        punch_time: datetime,
        window: ShiftWindow,
        config: AttendanceConfiguration,
        current: Statuses,
        overtime_checkout_minutes: int,
    ) -> StatusDecision:
        raise NotImplementedError
