from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import DeviationKind


@dataclass(frozen=True)
class AttendanceConfiguration:
    """Tenant policy: which deviations count, their thresholds and rounding.

    ``organization_id`` None marks the global fallback row.
    """

    config_id: Optional[int] = None
    organization_id: Optional[int] = None

    allow_early_time: bool = False
    allow_late: bool = True
    allow_under_time: bool = True
    allow_overtime: bool = True

    early_time_threshold_minutes: int = 15
    grace_period_minutes: int = 5
    under_time_threshold_minutes: int = 0
    overtime_threshold_minutes: int = 30

    round_down_early_time: bool = False
    round_down_early_time_minutes: int = 30
    round_up_late: bool = False
    round_up_late_minutes: int = 30
    round_down_under_time: bool = False
    round_down_under_time_minutes: int = 30
    round_up_overtime: bool = False
    round_up_overtime_minutes: int = 30

    consider_early_time_as_overtime: bool = False

    no_time_in_deduction: bool = True
    no_time_in_deduction_minutes: int = 60
    no_time_out_deduction: bool = True
    no_time_out_deduction_minutes: int = 60

    @property
    def is_global(self) -> bool:
        return self.organization_id is None


@dataclass(frozen=True)
class PolicyDecision:
    violated: bool
    kind: DeviationKind
    raw_minutes: int
    reported_minutes: int
