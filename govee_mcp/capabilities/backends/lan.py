"""
Govee LAN backend.

Controls devices on the local segment over UDP. Devices must have been
found by a LAN scan; commands are fire-and-forget and state queries wait
for a single devStatus answer.
"""

import asyncio
import logging
from typing import Any, Optional

from ...discovery import DiscoveryService, LanDevice
from ...discovery.messages import DEV_STATUS, build_message, encode_message, parse_status_response
from ...discovery.transport import DatagramEndpoints, send_datagram
from ...exceptions import DeviceTimeoutError, TransportError, UnsupportedByBackendError
from ..protocols import ALL_COMMANDS, AbstractCommand, DeviceInfo, DeviceState, Scene
from ..translators import lan_command, lan_state

logger = logging.getLogger("govee.backends.lan")

CONTROL_PORT = 4003
RESPONSE_TIMEOUT = 3.0


class ControlChannel:
    """
    Short-lived datagram exchanges with one known device.

    Each call opens its own socket and closes it on every exit path;
    nothing is shared between calls.
    """

    def __init__(
        self,
        endpoints: Optional[DatagramEndpoints] = None,
        control_port: int = CONTROL_PORT,
        response_timeout: float = RESPONSE_TIMEOUT,
    ):
        self._endpoints = endpoints or DatagramEndpoints()
        self.control_port = control_port
        self.response_timeout = response_timeout

    async def query_state(self, device: LanDevice) -> list[dict[str, Any]]:
        """
        Ask a device for its status and normalize the answer.

        Raises:
            DeviceTimeoutError: if no devStatus answer arrives in time
            TransportError: if the socket cannot be opened or used
        """
        loop = asyncio.get_running_loop()
        answer: asyncio.Future = loop.create_future()

        def on_datagram(data: bytes, addr: tuple) -> None:
            status = parse_status_response(data)
            if status is None:
                # unrelated traffic; keep waiting
                return
            if not answer.done():
                answer.set_result(status)

        transport, protocol = await self._endpoints.open(0, on_datagram)
        try:
            send_datagram(
                transport,
                protocol,
                encode_message(build_message(DEV_STATUS)),
                (device.ip, self.control_port),
            )

            done, _ = await asyncio.wait(
                {answer, protocol.failure},
                timeout=self.response_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )

            if answer in done:
                status = answer.result()
                return lan_state(
                    on_off=status.on_off,
                    brightness=status.brightness,
                    color=status.color.model_dump() if status.color else None,
                    color_tem_kelvin=status.color_tem_kelvin,
                )
            if protocol.failure in done and not protocol.failure.cancelled():
                raise TransportError(f"status query to {device.ip}", protocol.failure.result())
            raise DeviceTimeoutError(device.ip, self.response_timeout)
        finally:
            for fut in (answer, protocol.failure):
                if not fut.done():
                    fut.cancel()
            transport.close()

    async def send_command(self, device: LanDevice, message: dict[str, Any]) -> None:
        """
        Hand one command datagram to the network.

        There is no acknowledgment; success does not mean the device
        applied the change.
        """

        def on_datagram(data: bytes, addr: tuple) -> None:
            pass

        transport, protocol = await self._endpoints.open(0, on_datagram)
        try:
            send_datagram(transport, protocol, encode_message(message), (device.ip, self.control_port))
            logger.debug("Sent %s to %s", message["msg"]["cmd"], device.ip)
        finally:
            if not protocol.failure.done():
                protocol.failure.cancel()
            transport.close()


class LanBackend:
    """Local UDP backend built on a discovery service and a control channel."""

    def __init__(
        self,
        discovery: DiscoveryService,
        channel: Optional[ControlChannel] = None,
    ):
        self._discovery = discovery
        self._channel = channel or ControlChannel()

    @property
    def backend_type(self) -> str:
        return "lan"

    @property
    def discovery(self) -> DiscoveryService:
        return self._discovery

    async def list_devices(self) -> list[DeviceInfo]:
        devices = await self._discovery.discover()
        return [
            DeviceInfo(
                device_id=d.device_id,
                model=d.sku,
                device_name=d.device_id,
                controllable=True,
                retrievable=False,
                supported_commands=list(ALL_COMMANDS),
            )
            for d in devices
        ]

    async def get_device_state(self, device_id: str, model: str) -> DeviceState:
        device = await self._discovery.find_device(device_id)
        properties = await self._channel.query_state(device)
        return DeviceState(device_id=device_id, model=model, properties=properties)

    async def control_device(
        self,
        device_id: str,
        model: str,
        command: AbstractCommand,
    ) -> dict[str, Any]:
        # Translate first: an unknown command fails before any I/O
        message = lan_command(command)
        device = await self._discovery.find_device(device_id)
        await self._channel.send_command(device, message)
        return {}

    async def list_scenes(self, device_id: str, model: str) -> list[Scene]:
        raise UnsupportedByBackendError("list_scenes", self.backend_type)

    async def list_diy_scenes(self, device_id: str, model: str) -> list[Scene]:
        raise UnsupportedByBackendError("list_diy_scenes", self.backend_type)

    async def activate_scene(self, device_id: str, model: str, scene_type: str, value: Any) -> Any:
        raise UnsupportedByBackendError("activate_scene", self.backend_type)

    async def aclose(self) -> None:
        await self._discovery.aclose()
