from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Optional

from ..common.validators import require_non_negative, require_positive
from ..core.exceptions import ValidationError
from .model import AttendanceConfiguration
from .repository import AttendanceConfigurationRepository

logger = logging.getLogger(__name__)

_IMMUTABLE = {"config_id", "organization_id"}
_EDITABLE = {f.name for f in fields(AttendanceConfiguration)} - _IMMUTABLE


def _validate(config: AttendanceConfiguration) -> AttendanceConfiguration:
    for name in (
        "early_time_threshold_minutes",
        "grace_period_minutes",
        "under_time_threshold_minutes",
        "overtime_threshold_minutes",
        "no_time_in_deduction_minutes",
        "no_time_out_deduction_minutes",
    ):
        require_non_negative(getattr(config, name), name)
    for name in (
        "round_down_early_time_minutes",
        "round_up_late_minutes",
        "round_down_under_time_minutes",
        "round_up_overtime_minutes",
    ):
        require_positive(getattr(config, name), name)
    return config


class AttendanceConfigurationService:
    """Resolves and maintains attendance policies.

    Exactly one global configuration (organization None) exists as fallback
    and at most one per organization. Configurations are never deleted.
    """

    def __init__(self, configurations: AttendanceConfigurationRepository):
        self._configurations = configurations

    def seed_global(self) -> AttendanceConfiguration:
        """Create the global configuration with defaults if it is missing."""

        existing = self._configurations.get_global()
        if existing:
            return existing
        config_id = self._configurations.create(AttendanceConfiguration())
        logger.info("Global attendance configuration seeded (config_id=%s)", config_id)
        return replace(AttendanceConfiguration(), config_id=config_id)

    def get_global(self) -> AttendanceConfiguration:
        return self.seed_global()

    def get_for_organization(self, organization_id: Optional[int]) -> AttendanceConfiguration:
        if organization_id is None:
            return self.get_global()
        config = self._configurations.get_for_organization(int(organization_id))
        if config:
            return config
        return self.get_global()

    def update_global(self, **changes) -> AttendanceConfiguration:
        current = self.get_global()
        updated = self._apply(current, changes)
        self._configurations.update(updated)
        logger.info("Global attendance configuration updated: %s", sorted(changes))
        return updated

    def update_for_organization(self, organization_id: int, **changes) -> AttendanceConfiguration:
        """Update an organization's policy, creating it from the global one first."""

        organization_id = int(organization_id)
        current = self._configurations.get_for_organization(organization_id)
        if current is None:
            base = replace(self.get_global(), config_id=None, organization_id=organization_id)
            updated = self._apply(base, changes)
            config_id = self._configurations.create(updated)
            logger.info("Attendance configuration created for organization %s", organization_id)
            return replace(updated, config_id=config_id)

        updated = self._apply(current, changes)
        self._configurations.update(updated)
        logger.info("Attendance configuration for organization %s updated: %s", organization_id, sorted(changes))
        return updated

    def _apply(self, config: AttendanceConfiguration, changes: dict) -> AttendanceConfiguration:
        unknown = set(changes) - _EDITABLE
        if unknown:
            raise ValidationError(f"Unknown or read-only configuration fields: {', '.join(sorted(unknown))}")
        return _validate(replace(config, **changes))
