"""
Local network device discovery.

Finds Govee devices on the LAN with a multicast scan and caches the
result for the control channel.
"""

from .scanners import BaseScanner, LanDevice, LanScanner
from .service import DiscoveryService
from .transport import DatagramCollector, DatagramEndpoints

__all__ = [
    "BaseScanner",
    "DatagramCollector",
    "DatagramEndpoints",
    "DiscoveryService",
    "LanDevice",
    "LanScanner",
]
