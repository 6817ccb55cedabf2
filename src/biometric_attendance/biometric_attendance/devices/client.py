from __future__ import annotations

import logging
import socket
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..core.constants import DEFAULT_COMMAND_TIMEOUT, DEFAULT_CONNECT_TIMEOUT, DEFAULT_DEVICE_PORT, RESPONSE_HEADER_SIZE
from ..core.enums import ClearMode, Command, DownloadMode
from ..core.exceptions import DeviceBusyError, DeviceConnectionError, DeviceTimeoutError, MalformedFrameError
from . import codec
from .frames import ChannelLike, channel_bytes, decode_response, encode_frame, response_length
from .model import DeviceInfo, DeviceRecord, NetworkConfig, RecordInfo

logger = logging.getLogger(__name__)

SocketFactory = Callable[..., socket.socket]


@dataclass(frozen=True)
class PendingRequest:
    """The single outstanding request of a connection."""

    command: int
    deadline: float


class DeviceClient:
    """Request/response client for one terminal over a persistent TCP stream.

    The stream carries no request ids, so a connection owns exactly one
    pending-request slot. Callers on other threads wait for the slot up to the
    command timeout and then get ``DeviceBusyError``; the slot is never
    overwritten. Failures are raised as typed ``ProtocolError`` subclasses and
    nothing is retried here.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_DEVICE_PORT,
        *,
        channel: ChannelLike = 0,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
        socket_factory: SocketFactory = socket.create_connection,
    ):
        self._host = host
        self._port = int(port)
        self._channel = channel_bytes(channel)
        self._connect_timeout = float(connect_timeout)
        self._command_timeout = float(command_timeout)
        self._socket_factory = socket_factory
        self._sock: Optional[socket.socket] = None
        self._lock = threading.Lock()
        self._pending: Optional[PendingRequest] = None

    def __repr__(self) -> str:
        return f"DeviceClient({self._host}:{self._port}, channel={self._channel.hex()})"

    @property
    def is_connected(self) -> bool:
        return self._sock is not None

    @property
    def pending(self) -> Optional[PendingRequest]:
        return self._pending

    def connect(self) -> None:
        with self._lock:
            if self._sock is not None:
                return
            try:
                sock = self._socket_factory((self._host, self._port), timeout=self._connect_timeout)
            except socket.timeout as exc:
                raise DeviceConnectionError(f"Connect timeout to {self._host}:{self._port}") from exc
            except OSError as exc:
                raise DeviceConnectionError(f"Cannot connect to {self._host}:{self._port}: {exc}") from exc
            self._sock = sock
        logger.info("Connected to device %s:%s", self._host, self._port)

    def close(self) -> None:
        sock, self._sock = self._sock, None
        if sock is None:
            return
        try:
            sock.close()
        except OSError:
            logger.debug("Ignoring error while closing %s:%s", self._host, self._port, exc_info=True)

    def __enter__(self) -> "DeviceClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Request primitive

    def execute(self, command: int, data: bytes = b"", *, timeout: Optional[float] = None) -> bytes:
        """Send one command and return the response DATA bytes."""

        frame = encode_frame(self._channel, command, data)
        timeout = self._command_timeout if timeout is None else float(timeout)

        if not self._lock.acquire(timeout=timeout):
            pending = self._pending
            if pending is not None:
                raise DeviceBusyError(f"{self!r} still waiting on 0x{pending.command:02X}")
            raise DeviceBusyError(f"{self!r} is busy")
        try:
            if self._sock is None:
                raise DeviceConnectionError(f"Not connected to {self._host}:{self._port}")

            self._pending = PendingRequest(command=int(command), deadline=time.monotonic() + timeout)
            logger.debug("-> %s cmd=0x%02X %s", self._host, int(command), frame.hex())
            try:
                self._sock.sendall(frame)
                raw = self._read_response(self._pending.deadline)
            except socket.timeout as exc:
                # A late answer would be taken for the next request's response.
                self._drop_connection()
                raise DeviceTimeoutError(f"Response timeout for cmd 0x{int(command):02X} after {timeout:.1f}s") from exc
            except MalformedFrameError:
                self._drop_connection()
                raise
            except OSError as exc:
                self._drop_connection()
                raise DeviceConnectionError(f"Transport error on {self._host}:{self._port}: {exc}") from exc
            finally:
                self._pending = None
        finally:
            self._lock.release()

        logger.debug("<- %s %s", self._host, raw.hex())
        return decode_response(raw, command).data

    def _drop_connection(self) -> None:
        logger.warning("Dropping connection to %s:%s", self._host, self._port)
        self.close()

    def _read_exact(self, size: int, deadline: float) -> bytes:
        chunks = []
        remaining = size
        while remaining > 0:
            left = deadline - time.monotonic()
            if left <= 0:
                raise socket.timeout("response deadline exceeded")
            self._sock.settimeout(left)
            chunk = self._sock.recv(remaining)
            if not chunk:
                raise ConnectionResetError("connection closed by device")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _read_response(self, deadline: float) -> bytes:
        header = self._read_exact(RESPONSE_HEADER_SIZE, deadline)
        total = response_length(header)
        return header + self._read_exact(total - RESPONSE_HEADER_SIZE, deadline)

    # Typed operations

    def get_device_info(self) -> DeviceInfo:
        return codec.decode_device_info(self.execute(Command.GET_DEVICE_INFO))

    def set_device_info(self, **fields) -> None:
        self.execute(Command.SET_DEVICE_INFO, codec.encode_device_info(**fields))

    def get_datetime(self) -> datetime:
        return codec.decode_datetime(self.execute(Command.GET_DATETIME))

    def set_datetime(self, value: datetime) -> None:
        self.execute(Command.SET_DATETIME, codec.encode_datetime(value))

    def get_network_config(self) -> NetworkConfig:
        return codec.decode_network_config(self.execute(Command.GET_NETWORK))

    def set_network_config(self, config: NetworkConfig) -> None:
        self.execute(Command.SET_NETWORK, codec.encode_network_config(config))

    def get_record_info(self) -> RecordInfo:
        return codec.decode_record_info(self.execute(Command.GET_RECORD_INFO))

    def download_records(self, mode: DownloadMode = DownloadMode.NEW, count: int = 25) -> list[DeviceRecord]:
        payload = codec.encode_download_request(mode, count)
        return codec.decode_records(self.execute(Command.DOWNLOAD_RECORDS, payload))

    def clear_records(self, mode: ClearMode = ClearMode.ALL, amount: int = 0) -> int:
        """Clear buffered records; returns the amount the device reports."""
        return codec.decode_clear_response(self.execute(Command.CLEAR_RECORDS, codec.encode_clear_request(mode, amount)))
