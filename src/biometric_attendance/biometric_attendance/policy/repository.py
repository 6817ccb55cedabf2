from __future__ import annotations

from typing import Optional, Protocol

from .model import AttendanceConfiguration


class AttendanceConfigurationRepository(Protocol):
    def get_global(self) -> Optional[AttendanceConfiguration]:
        raise NotImplementedError

    def get_for_organization(self, organization_id: int) -> Optional[AttendanceConfiguration]:
        raise NotImplementedError

    def create(self, config: AttendanceConfiguration) -> int:
        """Insert and return config_id."""

        raise NotImplementedError

    def update(self, config: AttendanceConfiguration) -> bool:
        raise NotImplementedError
