"""
Govee v2 (router) open API backend.

Typed capabilities: commands become {"type", "instance", "value"} records
and every POST carries a fresh requestId. Supports light and DIY scenes.
"""

import logging
from typing import Any, Optional
from uuid import uuid4

import httpx

from ...exceptions import GoveeApiError
from ..protocols import AbstractCommand, DeviceInfo, DeviceState, Scene
from ..translators import (
    DIY_SCENE,
    DYNAMIC_SCENE,
    LIGHT_SCENE,
    v2_capability,
    v2_scene_capability,
    v2_state,
    v2_supported_commands,
)

logger = logging.getLogger("govee.backends.v2")

GOVEE_V2_BASE = "https://openapi.api.govee.com/router/api/v1"


class GoveeV2Backend:
    """Govee v2 REST API backend."""

    def __init__(
        self,
        api_key: str,
        base_url: str = GOVEE_V2_BASE,
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
        return "v2"

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        resp = await self._client.request(method, path, **kwargs)
        if resp.is_error:
            raise GoveeApiError("v2", resp.text, status=resp.status_code)
        try:
            return resp.json()
        except ValueError:
            raise GoveeApiError("v2", "response body is not JSON") from None

    async def _post(
        self,
        path: str,
        device_id: str,
        model: str,
        extra: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"sku": model, "device": device_id}
        if extra:
            payload.update(extra)
        return await self._request(
            "POST",
            path,
            json={"requestId": str(uuid4()), "payload": payload},
        )

    @staticmethod
    def _capabilities(data: dict[str, Any]) -> list[dict[str, Any]]:
        payload = data.get("payload")
        if not isinstance(payload, dict):
            raise GoveeApiError("v2", "missing payload")
        return payload.get("capabilities") or []

    async def list_devices(self) -> list[DeviceInfo]:
        data = await self._request("GET", "/user/devices")
        devices = data.get("data")
        if not isinstance(devices, list):
            raise GoveeApiError("v2", "missing devices array")

        return [
            DeviceInfo(
                device_id=d["device"],
                model=d["sku"],
                device_name=d.get("deviceName", d["device"]),
                controllable=True,
                retrievable=True,
                supported_commands=v2_supported_commands(d.get("capabilities")),
            )
            for d in devices
        ]

    async def get_device_state(self, device_id: str, model: str) -> DeviceState:
        data = await self._post("/device/state", device_id, model)
        return DeviceState(
            device_id=device_id,
            model=model,
            properties=v2_state(self._capabilities(data)),
        )

    async def control_device(
        self,
        device_id: str,
        model: str,
        command: AbstractCommand,
    ) -> dict[str, Any]:
        capability = v2_capability(command)
        result = await self._post("/device/control", device_id, model, {"capability": capability})
        logger.info("v2 control %s on %s", capability["instance"], device_id)
        return result

    async def _scene_options(
        self,
        path: str,
        instance: str,
        device_id: str,
        model: str,
    ) -> list[dict[str, Any]]:
        data = await self._post(path, device_id, model)
        for cap in self._capabilities(data):
            if cap.get("type") == DYNAMIC_SCENE and cap.get("instance") == instance:
                return (cap.get("parameters") or {}).get("options") or []
        return []

    async def list_scenes(self, device_id: str, model: str) -> list[Scene]:
        options = await self._scene_options("/device/scenes", LIGHT_SCENE, device_id, model)
        return [Scene(name=o["name"], value=o["value"]) for o in options]

    async def list_diy_scenes(self, device_id: str, model: str) -> list[Scene]:
        options = await self._scene_options("/device/diy-scenes", DIY_SCENE, device_id, model)
        return [Scene(name=o["name"], value=o["value"]) for o in options]

    async def activate_scene(
        self,
        device_id: str,
        model: str,
        scene_type: str,
        value: Any,
    ) -> dict[str, Any]:
        capability = v2_scene_capability(scene_type, value)
        return await self._post("/device/control", device_id, model, {"capability": capability})

    async def aclose(self) -> None:
        await self._client.aclose()
