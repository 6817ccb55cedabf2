from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class ProtocolError(DomainError):
    """Base class for failures talking to a biometric terminal."""


class FrameSizeError(ProtocolError):
    """Payload does not fit in a single frame."""


class MalformedFrameError(ProtocolError):
    """Received bytes do not form a valid frame."""


class AckMismatchError(ProtocolError):
    """Response ACK byte does not belong to the request that was sent."""

    def __init__(self, expected: int, received: int):
        super().__init__(f"unexpected ack/out-of-order response: expected 0x{expected:02X}, got 0x{received:02X}")
        self.expected = expected
        self.received = received


class DeviceReturnError(ProtocolError):
    """Device answered with a non-success RET code."""

    def __init__(self, code: int):
        super().__init__(f"device reported error RET=0x{code:02X}")
        self.code = code


class DeviceTimeoutError(ProtocolError):
    """No response arrived within the command timeout."""


class DeviceConnectionError(ProtocolError):
    """Connecting to the device failed or the transport broke."""


class DeviceBusyError(ProtocolError):
    """Another request is still outstanding on the same connection."""


class DeviceClearError(DomainError):
    """Clearing the device buffer after a batch failed."""

    def __init__(self, device_id: str, cause: Optional[BaseException] = None):
        super().__init__(f"failed to clear records on device {device_id}: {cause}")
        self.device_id = device_id
        self.cause = cause
