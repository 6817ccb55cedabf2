from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import BiometricDevice


class DeviceRepository(Protocol):
    def get_by_id(self, device_id: str) -> Optional[BiometricDevice]:
        raise NotImplementedError

    def list_active(self) -> Sequence[BiometricDevice]:
        raise NotImplementedError
