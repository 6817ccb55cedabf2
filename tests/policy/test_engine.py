from dataclasses import replace

import pytest

from src.biometric_attendance.biometric_attendance.core.enums import DeviationKind, RoundingDirection
from src.biometric_attendance.biometric_attendance.core.exceptions import ValidationError
from src.biometric_attendance.biometric_attendance.policy.engine import evaluate, round_minutes
from src.biometric_attendance.biometric_attendance.policy.model import AttendanceConfiguration


def test_late_at_grace_boundary_is_not_violation():
    config = AttendanceConfiguration(grace_period_minutes=5)

    assert not evaluate(DeviationKind.LATE, 5, config).violated
    decision = evaluate(DeviationKind.LATE, 6, config)
    assert decision.violated
    assert decision.reported_minutes == 6


def test_late_rounds_up_to_unit():
    config = AttendanceConfiguration(grace_period_minutes=10, round_up_late=True, round_up_late_minutes=15)

    decision = evaluate(DeviationKind.LATE, 27, config)

    assert decision.violated
    assert decision.raw_minutes == 27
    assert decision.reported_minutes == 30


def test_under_time_rounds_down():
    config = AttendanceConfiguration(round_down_under_time=True, round_down_under_time_minutes=15)

    assert evaluate(DeviationKind.UNDER_TIME, 29, config).reported_minutes == 15


def test_disallowed_kind_never_violates():
    config = AttendanceConfiguration(allow_late=False)

    decision = evaluate(DeviationKind.LATE, 120, config)

    assert not decision.violated
    assert decision.reported_minutes == 0


def test_early_time_is_disallowed_by_default():
    assert not evaluate(DeviationKind.EARLY_TIME, 90, AttendanceConfiguration()).violated


def test_threshold_override_keeps_rounding():
    config = AttendanceConfiguration(overtime_threshold_minutes=0, round_up_overtime=True, round_up_overtime_minutes=30)

    assert not evaluate(DeviationKind.OVERTIME, 30, config, threshold_override=30).violated
    assert evaluate(DeviationKind.OVERTIME, 31, config, threshold_override=30).reported_minutes == 60


def test_overtime_respects_allow_flag_with_override():
    config = replace(AttendanceConfiguration(), allow_overtime=False)

    assert not evaluate(DeviationKind.OVERTIME, 90, config, threshold_override=30).violated


def test_negative_minutes_rejected():
    with pytest.raises(ValidationError):
        evaluate(DeviationKind.LATE, -1, AttendanceConfiguration())


@pytest.mark.parametrize(
    "minutes, unit, direction, expected",
    [
        (27, 15, RoundingDirection.UP, 30),
        (30, 15, RoundingDirection.UP, 30),
        (27, 15, RoundingDirection.DOWN, 15),
        (14, 15, RoundingDirection.DOWN, 0),
        (7, 0, RoundingDirection.UP, 7),
    ],
)
def test_round_minutes(minutes, unit, direction, expected):
    assert round_minutes(minutes, unit, direction) == expected