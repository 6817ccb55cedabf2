from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..core.constants import DEFAULT_DEVICE_PORT


@dataclass(frozen=True)
class BiometricDevice:
    """Registered terminal and how to reach it."""

    device_id: str
    name: str
    host: str
    port: int = DEFAULT_DEVICE_PORT
    channel: int = 0
    organization_id: Optional[int] = None
    is_active: bool = True


@dataclass(frozen=True)
class DeviceInfo:
    firmware_version: str
    password: str
    sleep_time: int
    volume: int
    language: int
    date_format: int
    attendance_state: int
    language_setting_flag: int
    cmd_version: int


@dataclass(frozen=True)
class NetworkConfig:
    ip: Tuple[int, int, int, int]
    mask: Tuple[int, int, int, int]
    mac: Tuple[int, int, int, int, int, int]
    gateway: Tuple[int, int, int, int]
    server_ip: Tuple[int, int, int, int]
    far_limit: int
    com_port: int
    mode: int
    dhcp_limit: int


@dataclass(frozen=True)
class RecordInfo:
    user_count: int
    fingerprint_count: int
    password_count: int
    card_count: int
    record_count: int
    new_record_count: int


@dataclass(frozen=True)
class DeviceRecord:
    """One 14-byte attendance record as stored on the terminal."""

    user_id: str
    timestamp: datetime
    backup_code: int
    record_type: int
    work_type: int
