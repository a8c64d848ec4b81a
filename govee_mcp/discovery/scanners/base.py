"""
Base scanner protocol for device discovery.

All network scanners must implement this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class LanDevice:
    """A device that answered a LAN scan. Identity is device_id."""

    ip: str
    device_id: str
    sku: str

    # Firmware versions reported in the scan answer
    ble_version_hard: str = ""
    ble_version_soft: str = ""
    wifi_version_hard: str = ""
    wifi_version_soft: str = ""


class BaseScanner(ABC):
    """
    Abstract base class for network scanners.

    A scanner performs one bounded discovery cycle; caching and
    coalescing of concurrent requests live in the discovery service.
    """

    @property
    @abstractmethod
    def protocol_name(self) -> str:
        """Name of the discovery protocol (e.g., 'govee-lan')."""
        ...

    @abstractmethod
    async def scan(self) -> list[LanDevice]:
        """
        Perform a network scan and return discovered devices.

        Returns:
            Devices in the order their first answer arrived
        """
        ...
