"""Pure policy decisions: minute deltas in, classified deviations out."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..core.enums import DeviationKind, RoundingDirection
from ..core.exceptions import ValidationError
from .model import AttendanceConfiguration, PolicyDecision


@dataclass(frozen=True)
class _Rule:
    allow: str
    threshold: str
    round_flag: str
    round_unit: str
    direction: RoundingDirection


_RULES = {
    DeviationKind.EARLY_TIME: _Rule(
        "allow_early_time", "early_time_threshold_minutes",
        "round_down_early_time", "round_down_early_time_minutes", RoundingDirection.DOWN,
    ),
    DeviationKind.LATE: _Rule(
        "allow_late", "grace_period_minutes",
        "round_up_late", "round_up_late_minutes", RoundingDirection.UP,
    ),
    DeviationKind.UNDER_TIME: _Rule(
        "allow_under_time", "under_time_threshold_minutes",
        "round_down_under_time", "round_down_under_time_minutes", RoundingDirection.DOWN,
    ),
    DeviationKind.OVERTIME: _Rule(
        "allow_overtime", "overtime_threshold_minutes",
        "round_up_overtime", "round_up_overtime_minutes", RoundingDirection.UP,
    ),
}


def round_minutes(minutes: int, unit: int, direction: RoundingDirection) -> int:
    """Round to a multiple of ``unit``; a non-positive unit leaves minutes as is."""

    if unit <= 0:
        return minutes
    if direction == RoundingDirection.UP:
        return math.ceil(minutes / unit) * unit
    return math.floor(minutes / unit) * unit


def evaluate(
    kind: DeviationKind,
    raw_minutes: int,
    config: AttendanceConfiguration,
    *,
    threshold_override: Optional[int] = None,
) -> PolicyDecision:
    """Classify a non-negative minute delta for one deviation kind.

    The threshold is an exclusive lower bound: only a delta strictly greater
    than it is a violation. ``threshold_override`` replaces the configured
    threshold but keeps the kind's allow flag and rounding.
    """

    if raw_minutes < 0:
        raise ValidationError(f"Deviation minutes must be >= 0, got {raw_minutes}")

    rule = _RULES[DeviationKind(kind)]
    if not getattr(config, rule.allow):
        return PolicyDecision(violated=False, kind=kind, raw_minutes=raw_minutes, reported_minutes=0)

    threshold = getattr(config, rule.threshold) if threshold_override is None else threshold_override
    if raw_minutes <= threshold:
        return PolicyDecision(violated=False, kind=kind, raw_minutes=raw_minutes, reported_minutes=0)

    reported = raw_minutes
    if getattr(config, rule.round_flag):
        reported = round_minutes(raw_minutes, int(getattr(config, rule.round_unit)), rule.direction)
    return PolicyDecision(violated=True, kind=kind, raw_minutes=raw_minutes, reported_minutes=reported)
