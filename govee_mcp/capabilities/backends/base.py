"""
Base protocol for communication backends.
"""

from typing import Any, Protocol, runtime_checkable

from ..protocols import AbstractCommand, DeviceInfo, DeviceState, Scene


@runtime_checkable
class Backend(Protocol):
    """
    Protocol for communication backends.

    Backends handle the actual communication with devices
    (Govee v1 REST, v2 REST, local UDP). Operations a backend does not
    implement raise UnsupportedByBackendError without doing any I/O.
    """

    @property
    def backend_type(self) -> str:
        """Identifier for this backend (e.g., 'v1', 'lan')."""
        ...

    async def list_devices(self) -> list[DeviceInfo]:
        """List the devices reachable through this backend."""
        ...

    async def get_device_state(self, device_id: str, model: str) -> DeviceState:
        """Query the current normalized state of one device."""
        ...

    async def control_device(
        self,
        device_id: str,
        model: str,
        command: AbstractCommand,
    ) -> Any:
        """
        Send a command to a device.

        Args:
            device_id: Backend device identifier (MAC-like string)
            model: Device SKU
            command: Abstract command to translate and send

        Returns:
            Backend response payload (empty for fire-and-forget backends)
        """
        ...

    async def list_scenes(self, device_id: str, model: str) -> list[Scene]:
        """List built-in light scenes."""
        ...

    async def list_diy_scenes(self, device_id: str, model: str) -> list[Scene]:
        """List user-defined DIY scenes."""
        ...

    async def activate_scene(
        self,
        device_id: str,
        model: str,
        scene_type: str,
        value: Any,
    ) -> Any:
        """Activate a light ('light') or DIY ('diy') scene."""
        ...

    async def aclose(self) -> None:
        """Release backend resources."""
        ...
