"""CRC-16 routines for the terminal wire protocol.

The terminal uses the reflected CCITT polynomial (0x1021, processed LSB first
as 0x8408) seeded with 0xFFFF. ``crc16_x25`` is the catalogued CRC-16/X-25
(final xor 0xFFFF, check value 0x906E). Frames carry the register without the
final xor and with its bytes swapped, see ``frame_checksum``.
"""

from __future__ import annotations

_POLY_REFLECTED = 0x8408


def _build_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ _POLY_REFLECTED
            else:
                crc >>= 1
        table.append(crc)
    return tuple(table)


_TABLE = _build_table()


def crc16_register(data: bytes, *, init: int = 0xFFFF) -> int:
    """Run the reflected CCITT register over ``data`` without a final xor."""
    crc = init
    for byte in data:
        crc = (crc >> 8) ^ _TABLE[(crc ^ byte) & 0xFF]
    return crc & 0xFFFF


def crc16_x25(data: bytes) -> int:
    return crc16_register(data) ^ 0xFFFF


def swap_bytes(value: int) -> int:
    return ((value & 0xFF) << 8) | ((value >> 8) & 0xFF)


def frame_checksum(data: bytes) -> int:
    """Checksum as written (big-endian) in the last two bytes of a frame."""
    return swap_bytes(crc16_register(data))
