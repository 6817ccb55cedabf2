from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Callable, Optional

from ..attendance.model import BatchResult, PunchBatch, RawPunch
from ..common.datetime_utils import now_local
from ..core.constants import (
    DEFAULT_RECORD_CACHE_SIZE,
    DEFAULT_RECORD_MAX_ATTEMPTS,
    DEFAULT_RECORD_MAX_YEAR_DRIFT,
    MAX_DOWNLOAD_COUNT,
)
from ..core.enums import DownloadMode
from ..core.exceptions import DeviceClearError, NotFoundError
from .model import DeviceRecord
from .registry import DeviceClientRegistry
from .repository import DeviceRepository

logger = logging.getLogger(__name__)

BatchHandler = Callable[[PunchBatch], BatchResult]


class RecordCache:
    """Bounded set of record keys already handed to reconciliation.

    When it grows past ``max_size`` the oldest half is forgotten. Failed
    attempts are counted per key until the record succeeds or is given up on.
    """

    def __init__(self, max_size: int = DEFAULT_RECORD_CACHE_SIZE):
        self._max_size = max(2, int(max_size))
        self._keys: "OrderedDict[str, None]" = OrderedDict()
        self._failures: "OrderedDict[str, int]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: str) -> bool:
        return key in self._keys

    def add(self, key: str) -> bool:
        """Remember ``key``; returns False when it was already known."""

        if key in self._keys:
            return False
        self._keys[key] = None
        if len(self._keys) > self._max_size:
            for _ in range(len(self._keys) - self._max_size // 2):
                self._keys.popitem(last=False)
        return True

    def discard(self, key: str) -> None:
        self._keys.pop(key, None)

    def record_failure(self, key: str) -> int:
        """Count one more failed attempt for ``key`` and return the total."""

        attempts = self._failures.pop(key, 0) + 1
        self._failures[key] = attempts
        while len(self._failures) > self._max_size:
            self._failures.popitem(last=False)
        return attempts

    def clear_failures(self, key: str) -> None:
        self._failures.pop(key, None)


def record_key(device_id: str, record: DeviceRecord) -> str:
    return f"{device_id}-{record.user_id}-{record.timestamp.isoformat()}-{record.record_type}"


class DevicePollingService:
    """Downloads new records from a terminal and feeds them to reconciliation.

    A record whose processing fails stays out of the cache so the next poll
    retries it. After ``max_attempts`` failures it is kept in the cache and
    so dropped from later downloads, which lets the device buffer be cleared.
    """

    def __init__(
        self,
        devices: DeviceRepository,
        registry: DeviceClientRegistry,
        handler: BatchHandler,
        *,
        page_size: int = MAX_DOWNLOAD_COUNT,
        max_year_drift: int = DEFAULT_RECORD_MAX_YEAR_DRIFT,
        max_attempts: int = DEFAULT_RECORD_MAX_ATTEMPTS,
        cache: Optional[RecordCache] = None,
        clock: Callable = now_local,
    ):
        self._devices = devices
        self._registry = registry
        self._handler = handler
        self._page_size = max(1, min(int(page_size), MAX_DOWNLOAD_COUNT))
        self._max_year_drift = int(max_year_drift)
        self._max_attempts = max(1, int(max_attempts))
        self._cache = cache if cache is not None else RecordCache()
        self._clock = clock

    def poll(self, device_id: str) -> Optional[BatchResult]:
        device = self._devices.get_by_id(device_id)
        if not device:
            raise NotFoundError(f"Biometric device {device_id} not found")

        client = self._registry.client_for(device)
        pending = client.get_record_info().new_record_count
        if pending <= 0:
            logger.debug("[%s] no new records", device_id)
            return None

        records: list[DeviceRecord] = []
        while len(records) < pending:
            page = client.download_records(DownloadMode.NEW, min(self._page_size, pending - len(records)))
            records.extend(page)
            if len(page) < self._page_size:
                break

        accepted = self._filter(device.device_id, records)
        if accepted:
            logger.info("[%s] Processing %s new attendance record(s)", device_id, len(accepted))
        else:
            # Still hand over an empty batch so the terminal buffer gets cleared.
            logger.info("[%s] %s record(s) downloaded, none new", device_id, len(records))

        batch = PunchBatch(
            attendances=[
                RawPunch(user_id=r.user_id.strip(), timestamp=r.timestamp, punch_type=r.record_type)
                for r in accepted
            ],
            device_id=device.device_id,
            downloaded=len(records),
        )
        keys = [record_key(device.device_id, r) for r in accepted]
        for key in keys:
            self._cache.add(key)
        try:
            result = self._handler(batch)
        except DeviceClearError:
            # Persisted already; the re-delivered copies must be dropped next time.
            raise
        except Exception:
            for key in keys:
                self._cache.discard(key)
            raise
        for key, outcome in zip(keys, result.outcomes):
            if outcome.failed:
                self._retry_or_give_up(device.device_id, key)
            else:
                self._cache.clear_failures(key)
        return result

    def poll_all(self) -> dict:
        """Poll every active device; a failing device does not stop the others."""

        results = {}
        for device in self._devices.list_active():
            try:
                results[device.device_id] = self.poll(device.device_id)
            except DeviceClearError as exc:
                logger.error("Device %s still holds processed records: %s", exc.device_id, exc.cause)
                self._registry.discard(device.device_id)
                results[device.device_id] = None
            except Exception:
                logger.exception("Polling error for %s", device.device_id)
                self._registry.discard(device.device_id)
                results[device.device_id] = None
        return results

    def _retry_or_give_up(self, device_id: str, key: str) -> None:
        attempts = self._cache.record_failure(key)
        if attempts < self._max_attempts:
            self._cache.discard(key)
            return
        logger.error("[%s] giving up on record %s after %s failed attempt(s)", device_id, key, attempts)
        self._cache.clear_failures(key)

    def _filter(self, device_id: str, records: list[DeviceRecord]) -> list[DeviceRecord]:
        current_year = self._clock().year
        accepted = []
        seen = set()
        for record in records:
            if not record.user_id or not record.user_id.strip():
                continue
            if abs(record.timestamp.year - current_year) > self._max_year_drift:
                logger.debug("[%s] dropping record with implausible time %s", device_id, record.timestamp)
                continue
            key = record_key(device_id, record)
            if key in self._cache or key in seen:
                continue
            seen.add(key)
            accepted.append(record)
        return accepted
