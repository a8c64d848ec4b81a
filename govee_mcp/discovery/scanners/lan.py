"""
Govee LAN scanner.

Broadcasts a scan request to the Govee multicast group and collects the
unicast answers devices send back to the listen port.
"""

import asyncio
import logging
from typing import Optional

from ..messages import SCAN, build_message, encode_message, parse_scan_response
from ..transport import DatagramEndpoints, send_datagram
from ...exceptions import TransportError
from .base import BaseScanner, LanDevice

logger = logging.getLogger("govee.discovery.scanners.lan")

# Govee LAN multicast address and ports
MULTICAST_ADDR = "239.255.255.250"
SCAN_PORT = 4001
LISTEN_PORT = 4002

DISCOVERY_WINDOW = 3.0

SCAN_REQUEST = build_message(SCAN, {"account_topic": "reserve"})


class LanScanner(BaseScanner):
    """
    Govee LAN multicast scanner.

    The protocol has no "all devices answered" signal, so every scan
    listens for the full collection window.
    """

    def __init__(
        self,
        endpoints: Optional[DatagramEndpoints] = None,
        multicast_addr: str = MULTICAST_ADDR,
        scan_port: int = SCAN_PORT,
        listen_port: int = LISTEN_PORT,
        window: float = DISCOVERY_WINDOW,
    ):
        self._endpoints = endpoints or DatagramEndpoints()
        self.multicast_addr = multicast_addr
        self.scan_port = scan_port
        self.listen_port = listen_port
        self.window = window

    @property
    def protocol_name(self) -> str:
        return "govee-lan"

    async def scan(self) -> list[LanDevice]:
        """
        Run one broadcast-and-collect cycle.

        Returns:
            Deduplicated devices; an empty list when nobody answered

        Raises:
            TransportError: if the listen socket cannot be bound or the
                scan request cannot be sent
        """
        logger.info("Starting LAN scan (window=%.1fs)", self.window)

        # keyed by device id; first answer wins
        devices: dict[str, LanDevice] = {}

        def on_datagram(data: bytes, addr: tuple) -> None:
            response = parse_scan_response(data)
            if response is None:
                logger.debug("Ignoring datagram from %s", addr[0] if addr else "?")
                return
            if response.device in devices:
                logger.debug("Duplicate scan answer for %s", response.device)
                return
            devices[response.device] = LanDevice(
                ip=response.ip,
                device_id=response.device,
                sku=response.sku,
                ble_version_hard=response.bleVersionHard,
                ble_version_soft=response.bleVersionSoft,
                wifi_version_hard=response.wifiVersionHard,
                wifi_version_soft=response.wifiVersionSoft,
            )
            logger.debug("Scan answer from %s (%s) at %s", response.device, response.sku, response.ip)

        transport, protocol = await self._endpoints.open(self.listen_port, on_datagram)
        try:
            send_datagram(
                transport,
                protocol,
                encode_message(SCAN_REQUEST),
                (self.multicast_addr, self.scan_port),
            )

            done, _ = await asyncio.wait({protocol.failure}, timeout=self.window)
            if done and not protocol.failure.cancelled():
                raise TransportError("LAN scan", protocol.failure.result())
        finally:
            if not protocol.failure.done():
                protocol.failure.cancel()
            transport.close()

        results = list(devices.values())
        logger.info("LAN scan complete: found %d devices", len(results))
        return results
