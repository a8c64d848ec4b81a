"""
Govee v1 developer REST API backend.

Untyped name/value commands; no scene support.
"""

import logging
from typing import Any, Optional

import httpx

from ...exceptions import GoveeApiError, UnsupportedByBackendError
from ..protocols import AbstractCommand, DeviceInfo, DeviceState, Scene
from ..translators import v1_command, v1_state

logger = logging.getLogger("govee.backends.v1")

GOVEE_V1_BASE = "https://developer-api.govee.com/v1"


class GoveeV1Backend:
    """Govee v1 REST API backend."""

    def __init__(
        self,
        api_key: str,
        base_url: str = GOVEE_V1_BASE,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Govee-API-Key": api_key,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def backend_type(self) -> str:
        return "v1"

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        resp = await self._client.request(method, path, **kwargs)
        if resp.is_error:
            raise GoveeApiError("v1", resp.text, status=resp.status_code)
        try:
            return resp.json()
        except ValueError:
            raise GoveeApiError("v1", "response body is not JSON") from None

    async def list_devices(self) -> list[DeviceInfo]:
        data = await self._request("GET", "/devices")
        devices = (data.get("data") or {}).get("devices")
        if not isinstance(devices, list):
            raise GoveeApiError("v1", "missing devices array")

        return [
            DeviceInfo(
                device_id=d["device"],
                model=d["model"],
                device_name=d.get("deviceName", d["device"]),
                controllable=bool(d.get("controllable", True)),
                retrievable=bool(d.get("retrievable", True)),
                supported_commands=list(d.get("supportCmds", [])),
            )
            for d in devices
        ]

    async def get_device_state(self, device_id: str, model: str) -> DeviceState:
        data = await self._request(
            "GET",
            "/devices/state",
            params={"device": device_id, "model": model},
        )
        payload = data.get("data")
        if not isinstance(payload, dict):
            raise GoveeApiError("v1", "missing state data")

        return DeviceState(
            device_id=device_id,
            model=model,
            properties=v1_state(payload.get("properties", [])),
        )

    async def control_device(
        self,
        device_id: str,
        model: str,
        command: AbstractCommand,
    ) -> dict[str, Any]:
        cmd = v1_command(command)
        result = await self._request(
            "PUT",
            "/devices/control",
            json={"device": device_id, "model": model, "cmd": cmd},
        )
        logger.info("v1 control %s on %s", cmd["name"], device_id)
        return result

    async def list_scenes(self, device_id: str, model: str) -> list[Scene]:
        raise UnsupportedByBackendError("list_scenes", self.backend_type)

    async def list_diy_scenes(self, device_id: str, model: str) -> list[Scene]:
        raise UnsupportedByBackendError("list_diy_scenes", self.backend_type)

    async def activate_scene(self, device_id: str, model: str, scene_type: str, value: Any) -> Any:
        raise UnsupportedByBackendError("activate_scene", self.backend_type)

    async def aclose(self) -> None:
        await self._client.aclose()
