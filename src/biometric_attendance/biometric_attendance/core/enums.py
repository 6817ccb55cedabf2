from __future__ import annotations

from enum import Enum, IntEnum


class AttendanceStatus(str, Enum):
    """Classification tags stored on an attendance record."""

    DEFAULT = "DEFAULT"
    LATE = "LATE"
    EARLY_LEAVE = "EARLY_LEAVE"
    OVERTIME = "OVERTIME"


class AttendanceState(str, Enum):
    """Lifecycle of one employee-day."""

    NONE = "NONE"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class DeviationKind(str, Enum):
    EARLY_TIME = "EARLY_TIME"
    LATE = "LATE"
    UNDER_TIME = "UNDER_TIME"
    OVERTIME = "OVERTIME"


class RoundingDirection(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


class TransitionAction(str, Enum):
    CREATE = "CREATE"
    CLOSE = "CLOSE"
    IGNORE = "IGNORE"


class Command(IntEnum):
    """Device op-codes (request CMD byte)."""

    GET_DEVICE_INFO = 0x30
    SET_DEVICE_INFO = 0x31
    GET_DATETIME = 0x38
    SET_DATETIME = 0x39
    GET_NETWORK = 0x3A
    SET_NETWORK = 0x3B
    GET_RECORD_INFO = 0x3C
    DOWNLOAD_RECORDS = 0x40
    CLEAR_RECORDS = 0x4E


class ReturnCode(IntEnum):
    """RET byte reported by the device in every response."""

    SUCCESS = 0x00
    FAIL = 0x01
    FULL = 0x04
    EMPTY = 0x05
    NO_USER = 0x06
    TIME_OUT = 0x08
    USER_OCCUPIED = 0x0A
    FINGER_OCCUPIED = 0x0B


class DownloadMode(IntEnum):
    ALL = 0x00
    NEW = 0x01
    ALL_FROM_START = 0x02
    NEW_FROM_START = 0x10


class ClearMode(IntEnum):
    ALL = 0x00
    NEW_FLAGS = 0x01
    NEW_FLAGS_AMOUNT = 0x02
