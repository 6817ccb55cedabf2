"""Frame encoding/decoding.

Request:  [STX:1][CHANNEL:4][CMD:1][LEN:2 BE][DATA:LEN][CRC:2 BE]
Response: [STX:1][CHANNEL:4][ACK:1][RET:1][LEN:2 BE][DATA:LEN][CRC:2 BE]

ACK is ``CMD | 0x80`` and RET is the device return code.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Union

from ..core.constants import (
    ACK_FLAG,
    FRAME_CHANNEL_SIZE,
    FRAME_CRC_SIZE,
    FRAME_HEADER_SIZE,
    FRAME_STX,
    MAX_PAYLOAD_SIZE,
    RESPONSE_HEADER_SIZE,
)
from ..core.enums import ReturnCode
from ..core.exceptions import AckMismatchError, DeviceReturnError, FrameSizeError, MalformedFrameError, ValidationError
from .crc import frame_checksum

ChannelLike = Union[bytes, bytearray, int]


@dataclass(frozen=True)
class Frame:
    channel: bytes
    command: int
    data: bytes = b""


@dataclass(frozen=True)
class Response:
    channel: bytes
    ack: int
    ret: int
    data: bytes = b""


def channel_bytes(channel: ChannelLike) -> bytes:
    if isinstance(channel, int):
        if not 0 <= channel <= 0xFFFFFFFF:
            raise ValidationError(f"Channel out of range: {channel}")
        return struct.pack(">I", channel)
    channel = bytes(channel)
    if len(channel) != FRAME_CHANNEL_SIZE:
        raise ValidationError(f"Channel must be {FRAME_CHANNEL_SIZE} bytes, got {len(channel)}")
    return channel


def expected_ack(command: int) -> int:
    return (int(command) | ACK_FLAG) & 0xFF


def encode_frame(channel: ChannelLike, command: int, data: bytes = b"") -> bytes:
    data = bytes(data)
    if len(data) > MAX_PAYLOAD_SIZE:
        raise FrameSizeError(f"Payload too large: {len(data)} > {MAX_PAYLOAD_SIZE} bytes")
    if not 0 <= int(command) <= 0xFF:
        raise ValidationError(f"Command out of range: {command}")

    body = (
        struct.pack(">B", FRAME_STX)
        + channel_bytes(channel)
        + struct.pack(">BH", int(command), len(data))
        + data
    )
    return body + struct.pack(">H", frame_checksum(body))


def _check_crc(raw: bytes) -> None:
    body, trailer = raw[:-FRAME_CRC_SIZE], raw[-FRAME_CRC_SIZE:]
    (received,) = struct.unpack(">H", trailer)
    calculated = frame_checksum(body)
    if received != calculated:
        raise MalformedFrameError(f"malformed frame: crc mismatch (0x{received:04X} != 0x{calculated:04X})")


def decode_frame(raw: bytes) -> Frame:
    """Parse a request frame produced by ``encode_frame``."""

    raw = bytes(raw)
    if len(raw) < FRAME_HEADER_SIZE + FRAME_CRC_SIZE:
        raise MalformedFrameError(f"malformed frame: {len(raw)} bytes is shorter than a header")
    if raw[0] != FRAME_STX:
        raise MalformedFrameError(f"malformed frame: bad STX 0x{raw[0]:02X}")

    command, length = struct.unpack(">BH", raw[5:FRAME_HEADER_SIZE])
    if len(raw) != FRAME_HEADER_SIZE + length + FRAME_CRC_SIZE:
        raise MalformedFrameError(f"malformed frame: declared length {length} does not match {len(raw)} bytes")
    _check_crc(raw)
    return Frame(channel=raw[1:5], command=command, data=raw[FRAME_HEADER_SIZE:FRAME_HEADER_SIZE + length])


def response_length(header: bytes) -> int:
    """Total response size given at least the first nine bytes."""

    if len(header) < RESPONSE_HEADER_SIZE:
        raise MalformedFrameError("malformed frame: incomplete response header")
    if header[0] != FRAME_STX:
        raise MalformedFrameError(f"malformed frame: bad STX 0x{header[0]:02X}")
    (length,) = struct.unpack(">H", header[7:RESPONSE_HEADER_SIZE])
    return RESPONSE_HEADER_SIZE + length + FRAME_CRC_SIZE


def decode_response(raw: bytes, command: int) -> Response:
    """Validate a response to ``command`` and return its fields.

    Checks run in order: STX, ACK, declared length, CRC, RET.
    """

    raw = bytes(raw)
    if not raw or raw[0] != FRAME_STX:
        first = f"0x{raw[0]:02X}" if raw else "<empty>"
        raise MalformedFrameError(f"malformed frame: bad STX {first}")
    if len(raw) < RESPONSE_HEADER_SIZE + FRAME_CRC_SIZE:
        raise MalformedFrameError(f"malformed frame: {len(raw)} bytes is shorter than a response header")

    ack, ret, length = struct.unpack(">BBH", raw[5:RESPONSE_HEADER_SIZE])
    if ack != expected_ack(command):
        raise AckMismatchError(expected_ack(command), ack)
    if len(raw) != RESPONSE_HEADER_SIZE + length + FRAME_CRC_SIZE:
        raise MalformedFrameError(f"malformed frame: declared length {length} does not match {len(raw)} bytes")
    _check_crc(raw)
    if ret != ReturnCode.SUCCESS:
        raise DeviceReturnError(ret)

    return Response(
        channel=raw[1:5],
        ack=ack,
        ret=ret,
        data=raw[RESPONSE_HEADER_SIZE:RESPONSE_HEADER_SIZE + length],
    )


def encode_response(channel: ChannelLike, command: int, data: bytes = b"", *, ret: int = ReturnCode.SUCCESS) -> bytes:
    """Build a device-side response frame (used by simulators and tests)."""

    data = bytes(data)
    if len(data) > MAX_PAYLOAD_SIZE:
        raise FrameSizeError(f"Payload too large: {len(data)} > {MAX_PAYLOAD_SIZE} bytes")
    body = (
        struct.pack(">B", FRAME_STX)
        + channel_bytes(channel)
        + struct.pack(">BBH", expected_ack(command), int(ret), len(data))
        + data
    )
    return body + struct.pack(">H", frame_checksum(body))
