from __future__ import annotations

import logging
import threading
from typing import Callable, Dict

from ..core.constants import DEFAULT_COMMAND_TIMEOUT, DEFAULT_CONNECT_TIMEOUT
from .client import DeviceClient
from .model import BiometricDevice

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., DeviceClient]


class DeviceClientRegistry:
    """One client (and therefore one connection and pending slot) per device.

    Different devices can be driven from different threads at the same time.
    """

    def __init__(
        self,
        *,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
        client_factory: ClientFactory = DeviceClient,
    ):
        self._connect_timeout = connect_timeout
        self._command_timeout = command_timeout
        self._client_factory = client_factory
        self._clients: Dict[str, DeviceClient] = {}
        self._lock = threading.Lock()

    def client_for(self, device: BiometricDevice) -> DeviceClient:
        """Return the device's client, connecting it if needed."""

        with self._lock:
            client = self._clients.get(device.device_id)
            if client is None:
                client = self._client_factory(
                    device.host,
                    device.port,
                    channel=device.channel,
                    connect_timeout=self._connect_timeout,
                    command_timeout=self._command_timeout,
                )
                self._clients[device.device_id] = client
        client.connect()
        return client

    def discard(self, device_id: str) -> None:
        with self._lock:
            client = self._clients.pop(device_id, None)
        if client is not None:
            client.close()

    def close_all(self) -> None:
        with self._lock:
            clients = list(self._clients.items())
            self._clients.clear()
        for device_id, client in clients:
            logger.info("Closing connection to device %s", device_id)
            client.close()
