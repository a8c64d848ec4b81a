"""
Shared fixtures: an in-memory stand-in for the UDP endpoint factory.

FakeEndpoints hands out FakeTransports wired to real DatagramCollector
protocols, records every datagram sent, and lets a responder callback
schedule answers as if they came from the network.
"""

import asyncio
import json
from typing import Any, Callable, Optional

import pytest

from govee_mcp.discovery.transport import DatagramCollector
from govee_mcp.exceptions import TransportError


class FakeTransport:
    def __init__(self, endpoints: "FakeEndpoints", local_port: int, protocol: DatagramCollector):
        self._endpoints = endpoints
        self.local_port = local_port
        self.protocol = protocol
        self.sent: list[tuple[bytes, tuple]] = []
        self.closed = False

    def sendto(self, data: bytes, addr: tuple) -> None:
        self.sent.append((data, addr))
        if self._endpoints.send_error is not None:
            # selector transports report send errors through the protocol
            self.protocol.error_received(self._endpoints.send_error)
            return
        if self._endpoints.responder is not None:
            self._endpoints.responder(self, data, addr)

    def close(self) -> None:
        self.closed = True

    def get_extra_info(self, name: str, default: Any = None) -> Any:
        return default

    def reply(self, message: Any, addr: tuple = ("10.0.0.5", 4003), delay: float = 0.0) -> None:
        """Schedule an inbound datagram (dict is JSON-encoded, bytes sent as-is)."""
        data = message if isinstance(message, bytes) else json.dumps(message).encode()
        loop = asyncio.get_running_loop()

        def deliver() -> None:
            if not self.closed:
                self.protocol.datagram_received(data, addr)

        loop.call_later(delay, deliver)


class FakeEndpoints:
    def __init__(
        self,
        responder: Optional[Callable[[FakeTransport, bytes, tuple], None]] = None,
        bind_error: Optional[OSError] = None,
        send_error: Optional[OSError] = None,
    ):
        self.responder = responder
        self.bind_error = bind_error
        self.send_error = send_error
        self.opened: list[FakeTransport] = []

    async def open(self, local_port, on_datagram):
        if self.bind_error is not None:
            raise TransportError(f"bind to UDP port {local_port}", self.bind_error)
        protocol = DatagramCollector(on_datagram)
        transport = FakeTransport(self, local_port, protocol)
        self.opened.append(transport)
        return transport, protocol

    @property
    def sent(self) -> list[tuple[bytes, tuple]]:
        return [s for t in self.opened for s in t.sent]

    def sent_to(self, port: int) -> list[tuple[bytes, tuple]]:
        return [s for s in self.sent if s[1][1] == port]


def scan_answer(device: str, ip: str, sku: str = "H6160", **extra) -> dict:
    return {"msg": {"cmd": "scan", "data": {"device": device, "ip": ip, "sku": sku, **extra}}}


def status_answer(**data) -> dict:
    return {"msg": {"cmd": "devStatus", "data": data}}


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()
