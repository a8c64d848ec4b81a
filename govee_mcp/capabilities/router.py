"""
Router for the configured backends.

Holds one backend instance per enabled name and resolves per-call
overrides against the configured default. The mapping is fixed at
construction.
"""

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Optional

from ..discovery import DatagramEndpoints, DiscoveryService, LanScanner
from ..exceptions import BackendDisabledError
from .backends import Backend, ControlChannel, GoveeV1Backend, GoveeV2Backend, LanBackend

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger("govee.capabilities.router")

BACKENDS = ("v1", "v2", "lan")


def is_valid_backend(name: str) -> bool:
    return name in BACKENDS


class BackendRouter:
    """
    Resolves backend names to instances.

    Supports:
    - Lookup by explicit name
    - Fallback to the configured default when no name is given
    """

    def __init__(self, backends: Mapping[str, Backend], default: str):
        if default not in backends:
            raise BackendDisabledError(default)
        self._backends = MappingProxyType(dict(backends))
        self._default = default
        for name, backend in self._backends.items():
            logger.info("Registered backend: %s (%s)", name, type(backend).__name__)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "BackendRouter":
        """Instantiate the backends enabled by configuration."""
        govee, lan = settings.govee, settings.lan
        backends: dict[str, Backend] = {}

        if govee.api_key:
            backends["v1"] = GoveeV1Backend(
                govee.api_key,
                base_url=govee.v1_base_url,
                timeout=govee.request_timeout,
            )
            backends["v2"] = GoveeV2Backend(
                govee.api_key,
                base_url=govee.v2_base_url,
                timeout=govee.request_timeout,
            )
        else:
            logger.warning("GOVEE_API_KEY not set; cloud backends disabled")

        if govee.lan_enabled:
            endpoints = DatagramEndpoints()
            scanner = LanScanner(
                endpoints,
                multicast_addr=lan.multicast_addr,
                scan_port=lan.scan_port,
                listen_port=lan.listen_port,
                window=lan.discovery_window,
            )
            backends["lan"] = LanBackend(
                DiscoveryService(scanner, cache_ttl=lan.cache_ttl),
                ControlChannel(
                    endpoints,
                    control_port=lan.control_port,
                    response_timeout=lan.response_timeout,
                ),
            )

        return cls(backends, default=govee.api_backend)

    @property
    def default(self) -> str:
        return self._default

    @property
    def names(self) -> list[str]:
        return list(self._backends)

    def get(self, name: Optional[str] = None) -> Backend:
        """
        Resolve a backend.

        Args:
            name: Explicit backend name, or None for the default

        Raises:
            BackendDisabledError: if the name is not configured
        """
        key = name if name is not None else self._default
        backend = self._backends.get(key)
        if backend is None:
            raise BackendDisabledError(key)
        return backend

    async def aclose(self) -> None:
        """Close every backend."""
        for backend in self._backends.values():
            await backend.aclose()
