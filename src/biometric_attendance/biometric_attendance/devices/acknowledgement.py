from __future__ import annotations

import logging
from typing import Optional

from ..core.enums import ClearMode
from ..core.exceptions import DeviceClearError, ProtocolError
from .model import BiometricDevice
from .registry import DeviceClientRegistry

logger = logging.getLogger(__name__)


class DeviceRecordAcknowledger:
    """Clears a terminal's record buffer once a batch has been persisted.

    With an ``amount`` only that many new-record flags are cleared, so punches
    taken after the download stay flagged for the next poll. Without one the
    configured ``mode`` is used.
    """

    def __init__(self, registry: DeviceClientRegistry, *, mode: ClearMode = ClearMode.ALL):
        self._registry = registry
        self._mode = mode

    def acknowledge(self, device: BiometricDevice, amount: Optional[int] = None) -> int:
        if amount is not None and amount <= 0:
            logger.debug("Nothing downloaded from device %s, not clearing", device.device_id)
            return 0
        try:
            client = self._registry.client_for(device)
            if amount is None:
                cleared = client.clear_records(self._mode)
            else:
                cleared = client.clear_records(ClearMode.NEW_FLAGS_AMOUNT, amount)
        except (ProtocolError, OSError) as exc:
            logger.error("Clearing records on device %s failed: %s", device.device_id, exc)
            raise DeviceClearError(device.device_id, exc) from exc
        logger.info("Cleared %s record(s) on device %s", cleared, device.device_id)
        return cleared
