"""
Network scanners for device discovery.

- Govee LAN: JSON scan request on a UDP multicast group, unicast answers
"""

from .base import BaseScanner, LanDevice
from .lan import LanScanner

__all__ = [
    "BaseScanner",
    "LanDevice",
    "LanScanner",
]
