from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.constants import DEFAULT_DEVICE_PORT
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import BiometricDevice
from .repository import DeviceRepository

_COLUMNS = "device_id, name, host, port, channel, organization_id, is_active"


def _to_device(r: Dict[str, Any], default_port: int = DEFAULT_DEVICE_PORT) -> BiometricDevice:
    return BiometricDevice(
        device_id=str(r["device_id"]),
        name=r["name"],
        host=r["host"],
        port=int(r.get("port") or default_port),
        channel=int(r.get("channel") or 0),
        organization_id=int(r["organization_id"]) if r.get("organization_id") is not None else None,
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLDeviceRepository(DeviceRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, default_port: int = DEFAULT_DEVICE_PORT):
        self._conn_factory = conn_factory
        self._default_port = int(default_port)

    def get_by_id(self, device_id: str) -> Optional[BiometricDevice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM biometric_devices WHERE device_id=%s", (device_id,))
            r = cur.fetchone()
            return _to_device(r, self._default_port) if r else None

    def list_active(self) -> Sequence[BiometricDevice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM biometric_devices WHERE is_active=1 ORDER BY device_id")
            return [_to_device(r, self._default_port) for r in cur.fetchall()]
