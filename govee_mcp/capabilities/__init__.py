"""
Capability system for Govee device control.

This module provides:
- The abstract command vocabulary and normalized state types
- Per-backend translators between commands and wire formats
- The backend router resolving backend names to instances
"""

from .backends import Backend, ControlChannel, GoveeV1Backend, GoveeV2Backend, LanBackend
from .protocols import (
    ALL_COMMANDS,
    AbstractCommand,
    CommandName,
    DeviceInfo,
    DeviceState,
    Scene,
)
from .router import BACKENDS, BackendRouter, is_valid_backend

__all__ = [
    # Protocols
    "ALL_COMMANDS",
    "AbstractCommand",
    "CommandName",
    "DeviceInfo",
    "DeviceState",
    "Scene",
    # Backends
    "Backend",
    "ControlChannel",
    "GoveeV1Backend",
    "GoveeV2Backend",
    "LanBackend",
    # Router
    "BACKENDS",
    "BackendRouter",
    "is_valid_backend",
]
