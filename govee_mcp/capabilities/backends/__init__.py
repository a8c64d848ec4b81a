"""
Communication backends for Govee devices.

Backends handle the actual communication with devices
(v1 REST, v2 REST, local UDP).
"""

from .base import Backend
from .cloud_v1 import GoveeV1Backend
from .cloud_v2 import GoveeV2Backend
from .lan import ControlChannel, LanBackend

__all__ = [
    "Backend",
    "ControlChannel",
    "GoveeV1Backend",
    "GoveeV2Backend",
    "LanBackend",
]
