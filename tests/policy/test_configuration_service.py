import pytest

from conftest import InMemoryConfigurations
from src.biometric_attendance.biometric_attendance.core.exceptions import ValidationError
from src.biometric_attendance.biometric_attendance.policy.model import AttendanceConfiguration
from src.biometric_attendance.biometric_attendance.policy.service import AttendanceConfigurationService


def test_seed_global_creates_once():
    repo = InMemoryConfigurations()
    svc = AttendanceConfigurationService(repo)

    first = svc.seed_global()
    second = svc.seed_global()

    assert first.config_id == second.config_id
    assert first.is_global
    assert len(repo.rows) == 1


def test_organization_falls_back_to_global():
    repo = InMemoryConfigurations(AttendanceConfiguration(grace_period_minutes=7))
    svc = AttendanceConfigurationService(repo)

    assert svc.get_for_organization(42).grace_period_minutes == 7
    assert svc.get_for_organization(None).grace_period_minutes == 7


def test_update_for_organization_copies_global_first():
    repo = InMemoryConfigurations(AttendanceConfiguration(grace_period_minutes=7))
    svc = AttendanceConfigurationService(repo)

    created = svc.update_for_organization(42, allow_early_time=True)
    updated = svc.update_for_organization(42, grace_period_minutes=3)

    assert created.config_id == updated.config_id
    assert created.grace_period_minutes == 7
    assert svc.get_for_organization(42).grace_period_minutes == 3
    assert svc.get_for_organization(42).allow_early_time
    assert svc.get_global().grace_period_minutes == 7
    assert len(repo.rows) == 2


def test_update_global():
    svc = AttendanceConfigurationService(InMemoryConfigurations())

    svc.update_global(round_up_late=True, round_up_late_minutes=15)

    assert svc.get_global().round_up_late_minutes == 15


@pytest.mark.parametrize(
    "changes",
    [
        {"grace_period_minutes": -1},
        {"round_up_late_minutes": 0},
        {"organization_id": 5},
        {"unknown_flag": True},
    ],
)
def test_invalid_updates_are_rejected(changes):
    svc = AttendanceConfigurationService(InMemoryConfigurations())

    with pytest.raises(ValidationError):
        svc.update_global(**changes)
