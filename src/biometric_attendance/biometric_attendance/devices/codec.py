"""Payload codecs for the typed device operations."""

from __future__ import annotations

import struct
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..core.constants import DEVICE_EPOCH_YEAR, MAX_DOWNLOAD_COUNT, RECORD_SIZE
from ..core.enums import ClearMode, DownloadMode
from ..core.exceptions import MalformedFrameError, ValidationError
from .model import DeviceInfo, DeviceRecord, NetworkConfig, RecordInfo

# Record timestamps count seconds from this instant (terminal local time).
RECORD_EPOCH = datetime(DEVICE_EPOCH_YEAR, 1, 2)

DEVICE_INFO_SIZE = 18
SET_DEVICE_INFO_SIZE = 10
DATETIME_SIZE = 6
NETWORK_SIZE = 27
RECORD_INFO_SIZE = 18
UNSET = 0xFF


def _require(data: bytes, size: int, what: str) -> None:
    if len(data) < size:
        raise MalformedFrameError(f"malformed frame: {what} needs {size} bytes, got {len(data)}")


def _u24(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset:offset + 3], "big")


# Device info (0x30 / 0x31)

def encode_password(password: str) -> bytes:
    """Length nibble plus a 20-bit numeric value, 3 bytes."""

    if not password.isdigit() or len(password) > 6:
        raise ValidationError("Device password must be 1-6 digits")
    value = (len(password) << 20) | int(password)
    return value.to_bytes(3, "big")


def decode_password(raw: bytes) -> str:
    if raw == b"\xff\xff\xff":
        return ""
    value = int.from_bytes(raw, "big")
    length = value >> 20
    if length == 0:
        return ""
    return str(value & 0xFFFFF).zfill(length)


def decode_device_info(data: bytes) -> DeviceInfo:
    _require(data, DEVICE_INFO_SIZE, "device info")
    return DeviceInfo(
        firmware_version=data[0:8].split(b"\x00", 1)[0].decode("ascii", errors="replace").strip(),
        password=decode_password(data[8:11]),
        sleep_time=data[11],
        volume=data[12],
        language=data[13],
        date_format=data[14],
        attendance_state=data[15],
        language_setting_flag=data[16],
        cmd_version=data[17],
    )


def encode_device_info(
    *,
    password: Optional[str] = None,
    sleep_time: Optional[int] = None,
    volume: Optional[int] = None,
    language: Optional[int] = None,
    date_format: Optional[int] = None,
    attendance_state: Optional[int] = None,
    language_setting_flag: Optional[int] = None,
) -> bytes:
    """Fields left as None are sent as 0xFF, which the terminal keeps unchanged."""

    data = bytearray([UNSET] * SET_DEVICE_INFO_SIZE)
    if password is not None:
        data[0:3] = encode_password(password)
    for offset, value in (
        (3, sleep_time),
        (4, volume),
        (5, language),
        (6, date_format),
        (7, attendance_state),
        (8, language_setting_flag),
    ):
        if value is not None:
            if not 0 <= int(value) <= 0xFE:
                raise ValidationError(f"Device setting out of range: {value}")
            data[offset] = int(value)
    return bytes(data)


# Date/time (0x38 / 0x39)

def encode_datetime(value: datetime) -> bytes:
    year = value.year - DEVICE_EPOCH_YEAR
    if not 0 <= year <= 0xFF:
        raise ValidationError(f"Year {value.year} cannot be stored on the device")
    return bytes([year, value.month, value.day, value.hour, value.minute, value.second])


def decode_datetime(data: bytes) -> datetime:
    _require(data, DATETIME_SIZE, "date/time")
    year, month, day, hour, minute, second = data[:DATETIME_SIZE]
    try:
        return datetime(DEVICE_EPOCH_YEAR + year, month, day, hour, minute, second)
    except ValueError as exc:
        raise MalformedFrameError(f"malformed frame: invalid device date/time {list(data[:6])}") from exc


# Network parameters (0x3A / 0x3B)

def _octets(values: Sequence[int], size: int, what: str) -> bytes:
    if len(values) != size:
        raise ValidationError(f"{what} must have {size} octets")
    try:
        return bytes(values)
    except ValueError as exc:
        raise ValidationError(f"{what} octets must be 0-255") from exc


def decode_network_config(data: bytes) -> NetworkConfig:
    _require(data, NETWORK_SIZE, "network parameters")
    return NetworkConfig(
        ip=tuple(data[0:4]),
        mask=tuple(data[4:8]),
        mac=tuple(data[8:14]),
        gateway=tuple(data[14:18]),
        server_ip=tuple(data[18:22]),
        far_limit=struct.unpack(">H", data[22:24])[0],
        com_port=data[24],
        mode=data[25],
        dhcp_limit=data[26],
    )


def encode_network_config(config: NetworkConfig) -> bytes:
    return (
        _octets(config.ip, 4, "ip")
        + _octets(config.mask, 4, "mask")
        + _octets(config.mac, 6, "mac")
        + _octets(config.gateway, 4, "gateway")
        + _octets(config.server_ip, 4, "server_ip")
        + struct.pack(">HBBB", config.far_limit, config.com_port, config.mode, config.dhcp_limit)
    )


# Record info (0x3C)

def decode_record_info(data: bytes) -> RecordInfo:
    _require(data, RECORD_INFO_SIZE, "record info")
    return RecordInfo(
        user_count=_u24(data, 0),
        fingerprint_count=_u24(data, 3),
        password_count=_u24(data, 6),
        card_count=_u24(data, 9),
        record_count=_u24(data, 12),
        new_record_count=_u24(data, 15),
    )


# Attendance records (0x40 / 0x4E)

def encode_download_request(mode: DownloadMode, count: int) -> bytes:
    if not 1 <= int(count) <= MAX_DOWNLOAD_COUNT:
        raise ValidationError(f"count must be 1-{MAX_DOWNLOAD_COUNT}, got {count}")
    return bytes([DownloadMode(mode).value, int(count)])


def decode_record(raw: bytes) -> DeviceRecord:
    if len(raw) != RECORD_SIZE:
        raise MalformedFrameError(f"malformed frame: record must be {RECORD_SIZE} bytes, got {len(raw)}")
    user_id = int.from_bytes(raw[0:5], "big")
    (seconds,) = struct.unpack(">I", raw[5:9])
    return DeviceRecord(
        user_id=str(user_id),
        timestamp=RECORD_EPOCH + timedelta(seconds=seconds),
        backup_code=raw[9],
        record_type=raw[10],
        work_type=_u24(raw, 11),
    )


def encode_record(record: DeviceRecord) -> bytes:
    seconds = int((record.timestamp - RECORD_EPOCH).total_seconds())
    return (
        int(record.user_id).to_bytes(5, "big")
        + struct.pack(">IBB", seconds, record.backup_code, record.record_type)
        + int(record.work_type).to_bytes(3, "big")
    )


def decode_records(data: bytes) -> list[DeviceRecord]:
    """Valid-count byte followed by fixed-size records."""

    _require(data, 1, "record download")
    valid = data[0]
    _require(data, 1 + valid * RECORD_SIZE, f"{valid} records")
    return [
        decode_record(data[1 + i * RECORD_SIZE:1 + (i + 1) * RECORD_SIZE])
        for i in range(valid)
    ]


def encode_clear_request(mode: ClearMode = ClearMode.ALL, amount: int = 0) -> bytes:
    if not 0 <= int(amount) <= 0xFFFFFF:
        raise ValidationError(f"Clear amount out of range: {amount}")
    return bytes([ClearMode(mode).value]) + int(amount).to_bytes(3, "big")


def decode_clear_response(data: bytes) -> int:
    if len(data) < 3:
        return 0
    return _u24(data, 0)
