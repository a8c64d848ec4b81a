"""
UDP endpoints for the LAN protocol.

Sockets are created and bound here, then handed to the running asyncio
loop so all receive/send progress is callback driven. Tests swap the
DatagramEndpoints instance for a fake that never touches the network.
"""

import asyncio
import logging
import socket
from typing import Callable, Optional

from ..exceptions import TransportError

logger = logging.getLogger("govee.discovery.transport")

DatagramHandler = Callable[[bytes, tuple], None]


class DatagramCollector(asyncio.DatagramProtocol):
    """
    Forwards every received datagram to a handler.

    The first socket error is stored on ``failure`` (as a result, not an
    exception) so waiters can race it against their own timers.
    """

    def __init__(self, on_datagram: DatagramHandler):
        self._on_datagram = on_datagram
        self.failure: asyncio.Future = asyncio.get_running_loop().create_future()

    def datagram_received(self, data: bytes, addr: tuple) -> None:
        self._on_datagram(data, addr)

    def error_received(self, exc: Exception) -> None:
        logger.debug("UDP socket error: %s", exc)
        if not self.failure.done():
            self.failure.set_result(exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if not self.failure.done():
            self.failure.cancel()


class DatagramEndpoints:
    """Opens UDP sockets bound to a local port and wraps them in a transport."""

    def __init__(self, multicast_ttl: int = 2):
        self._multicast_ttl = multicast_ttl

    async def open(
        self,
        local_port: int,
        on_datagram: DatagramHandler,
    ) -> tuple[asyncio.DatagramTransport, DatagramCollector]:
        """
        Bind a UDP socket on ``local_port`` (0 = ephemeral).

        Raises:
            TransportError: if the socket cannot be created or bound
        """
        loop = asyncio.get_running_loop()

        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, self._multicast_ttl)
            sock.setblocking(False)
            sock.bind(("", local_port))
            transport, protocol = await loop.create_datagram_endpoint(
                lambda: DatagramCollector(on_datagram),
                sock=sock,
            )
        except OSError as e:
            sock.close()
            raise TransportError(f"bind to UDP port {local_port}", e) from e

        logger.debug("Opened UDP endpoint on %s", transport.get_extra_info("sockname"))
        return transport, protocol


def send_datagram(
    transport: asyncio.DatagramTransport,
    protocol: DatagramCollector,
    payload: bytes,
    addr: tuple[str, int],
) -> None:
    """
    Send one datagram, surfacing immediate failures as TransportError.

    Selector transports report send errors through error_received rather
    than raising, so the collector's failure slot is checked as well.
    """
    try:
        transport.sendto(payload, addr)
    except OSError as e:
        raise TransportError(f"send to {addr[0]}:{addr[1]}", e) from e

    if protocol.failure.done() and not protocol.failure.cancelled():
        raise TransportError(f"send to {addr[0]}:{addr[1]}", protocol.failure.result())
