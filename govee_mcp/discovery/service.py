"""
Discovery Service - caches LAN scan results.

Wraps a scanner with a time-bounded cache and single-flight coalescing:
every tool call that needs a device address goes through discover(), so
concurrent callers share one scan instead of flooding the network.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..exceptions import DeviceNotFoundError
from .scanners import BaseScanner, LanDevice

logger = logging.getLogger("govee.discovery.service")

CACHE_TTL = 5 * 60.0


@dataclass(frozen=True)
class _CacheEntry:
    devices: tuple[LanDevice, ...]
    expires_at: float


def _consume_result(task: asyncio.Task) -> None:
    # a scan can outlive all of its waiters; its error is consumed here
    if not task.cancelled():
        task.exception()


class DiscoveryService:
    """
    Owns the discovery cache and the in-flight scan.

    States: idle (no entry), scanning (pending task), cached (fresh entry).
    A failed scan leaves the service idle; the next call scans again.
    """

    def __init__(
        self,
        scanner: BaseScanner,
        cache_ttl: float = CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._scanner = scanner
        self._cache_ttl = cache_ttl
        self._clock = clock
        self._cache: Optional[_CacheEntry] = None
        self._pending: Optional[asyncio.Task] = None

    @property
    def is_scanning(self) -> bool:
        return self._pending is not None

    @property
    def cached_devices(self) -> Optional[list[LanDevice]]:
        """Copy of the fresh cache entry, None if never scanned or expired."""
        if self._cache is None or self._clock() >= self._cache.expires_at:
            return None
        return list(self._cache.devices)

    async def discover(self) -> list[LanDevice]:
        """
        Return the current device list, scanning if the cache is stale.

        Raises:
            TransportError: if the scan could not be performed
        """
        cached = self.cached_devices
        if cached is not None:
            return cached

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._scan())
            self._pending.add_done_callback(_consume_result)
        else:
            logger.debug("Joining in-flight LAN scan")

        # shield: a cancelled waiter must not abort the scan for the others
        devices = await asyncio.shield(self._pending)
        return list(devices)

    async def _scan(self) -> tuple[LanDevice, ...]:
        try:
            devices = tuple(await self._scanner.scan())
            # expiry counts from the end of the collection window
            self._cache = _CacheEntry(devices=devices, expires_at=self._clock() + self._cache_ttl)
            return devices
        finally:
            self._pending = None

    async def find_device(self, device_id: str) -> LanDevice:
        """
        Look a device up in the discovery results.

        A miss does not force a rescan.

        Raises:
            DeviceNotFoundError: if no device with that id answered
        """
        for device in await self.discover():
            if device.device_id == device_id:
                return device
        raise DeviceNotFoundError(device_id)

    def invalidate(self) -> None:
        """Drop the cached scan result."""
        self._cache = None

    async def aclose(self) -> None:
        """Cancel an in-flight scan and drop the cache."""
        pending = self._pending
        if pending is not None:
            pending.cancel()
            await asyncio.wait({pending})
            # a task cancelled before its first step never runs _scan's finally
            if self._pending is pending:
                self._pending = None
        self.invalidate()
