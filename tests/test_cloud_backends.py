"""
Tests for the v1 and v2 cloud backends against a mocked HTTP transport.
"""

import json
import uuid

import httpx
import pytest

from govee_mcp.capabilities import AbstractCommand, GoveeV1Backend, GoveeV2Backend
from govee_mcp.exceptions import GoveeApiError, UnknownCapabilityError, UnsupportedByBackendError


class Recorder:
    """httpx handler that records requests and replies from a route table."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.routes.get((request.method, request.url.path))
        if reply is None:
            return httpx.Response(404, text="no route")
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def _v1(routes: dict) -> tuple[GoveeV1Backend, Recorder]:
    recorder = Recorder(routes)
    backend = GoveeV1Backend("test-key", transport=httpx.MockTransport(recorder))
    return backend, recorder


def _v2(routes: dict) -> tuple[GoveeV2Backend, Recorder]:
    recorder = Recorder(routes)
    backend = GoveeV2Backend("test-key", transport=httpx.MockTransport(recorder))
    return backend, recorder


# ===========================================================================
# v1
# ===========================================================================

class TestGoveeV1Backend:
    @pytest.mark.asyncio
    async def test_list_devices(self):
        backend, recorder = _v1({
            ("GET", "/v1/devices"): {
                "code": 200,
                "data": {
                    "devices": [
                        {
                            "device": "AA:BB",
                            "model": "H6160",
                            "deviceName": "Desk strip",
                            "controllable": True,
                            "retrievable": True,
                            "supportCmds": ["turn", "brightness", "color", "colorTem"],
                        }
                    ]
                },
            }
        })
        devices = await backend.list_devices()

        assert [d.to_dict() for d in devices] == [
            {
                "device_id": "AA:BB",
                "model": "H6160",
                "name": "Desk strip",
                "controllable": True,
                "retrievable": True,
                "supported_commands": ["turn", "brightness", "color", "colorTem"],
            }
        ]
        assert recorder.requests[0].headers["Govee-API-Key"] == "test-key"
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_get_device_state(self):
        backend, recorder = _v1({
            ("GET", "/v1/devices/state"): {
                "data": {
                    "device": "AA:BB",
                    "model": "H6160",
                    "properties": [
                        {"online": "true"},
                        {"powerState": "off"},
                        {"brightness": 12},
                        {"colorTem": 4000},
                    ],
                }
            }
        })
        state = await backend.get_device_state("AA:BB", "H6160")

        assert state.properties == [{"powerState": "off"}, {"brightness": 12}, {"colorTem": 4000}]
        params = recorder.requests[0].url.params
        assert params["device"] == "AA:BB"
        assert params["model"] == "H6160"
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_control_device_body(self):
        backend, recorder = _v1({("PUT", "/v1/devices/control"): {"code": 200, "message": "Success"}})
        result = await backend.control_device("AA:BB", "H6160", AbstractCommand("turn", "on"))

        assert result == {"code": 200, "message": "Success"}
        assert recorder.body() == {
            "device": "AA:BB",
            "model": "H6160",
            "cmd": {"name": "turn", "value": "on"},
        }
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        backend, _ = _v1({("GET", "/v1/devices"): httpx.Response(401, text="invalid key")})

        with pytest.raises(GoveeApiError) as exc_info:
            await backend.list_devices()
        assert exc_info.value.status == 401
        assert "invalid key" in str(exc_info.value)
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self):
        backend, _ = _v1({("GET", "/v1/devices"): httpx.Response(200, text="<html>")})
        with pytest.raises(GoveeApiError, match="not JSON"):
            await backend.list_devices()
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_unknown_command_sends_nothing(self):
        backend, recorder = _v1({})
        with pytest.raises(UnknownCapabilityError):
            await backend.control_device("AA:BB", "H6160", AbstractCommand("scene", 3))
        assert recorder.requests == []
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_scenes_unsupported(self):
        backend, recorder = _v1({})
        with pytest.raises(UnsupportedByBackendError):
            await backend.list_scenes("AA:BB", "H6160")
        with pytest.raises(UnsupportedByBackendError):
            await backend.activate_scene("AA:BB", "H6160", "light", 1)
        assert recorder.requests == []
        await backend.aclose()


# ===========================================================================
# v2
# ===========================================================================

SCENE_CAPS = {
    "payload": {
        "sku": "H6160",
        "device": "AA:BB",
        "capabilities": [
            {
                "type": "devices.capabilities.dynamic_scene",
                "instance": "lightScene",
                "parameters": {
                    "dataType": "ENUM",
                    "options": [
                        {"name": "Sunrise", "value": {"id": 1, "paramId": 11}},
                        {"name": "Aurora", "value": {"id": 2, "paramId": 22}},
                    ],
                },
            }
        ],
    }
}


class TestGoveeV2Backend:
    @pytest.mark.asyncio
    async def test_list_devices_maps_capabilities(self):
        backend, _ = _v2({
            ("GET", "/router/api/v1/user/devices"): {
                "code": 200,
                "data": [
                    {
                        "sku": "H6160",
                        "device": "AA:BB",
                        "deviceName": "Desk strip",
                        "capabilities": [
                            {"type": "devices.capabilities.on_off", "instance": "powerSwitch"},
                            {"type": "devices.capabilities.color_setting", "instance": "colorRgb"},
                        ],
                    }
                ],
            }
        })
        [device] = await backend.list_devices()

        assert device.device_id == "AA:BB"
        assert device.model == "H6160"
        assert device.device_name == "Desk strip"
        assert device.supported_commands == ["turn", "color"]
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_control_packs_color(self):
        backend, recorder = _v2({("POST", "/router/api/v1/device/control"): {"code": 200, "msg": "success"}})
        await backend.control_device("AA:BB", "H6160", AbstractCommand("color", {"r": 255, "g": 128, "b": 0}))

        body = recorder.body()
        uuid.UUID(body["requestId"])
        assert body["payload"] == {
            "sku": "H6160",
            "device": "AA:BB",
            "capability": {
                "type": "devices.capabilities.color_setting",
                "instance": "colorRgb",
                "value": 16744448,
            },
        }
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_request_ids_are_fresh(self):
        backend, recorder = _v2({("POST", "/router/api/v1/device/control"): {"code": 200}})
        for _ in range(3):
            await backend.control_device("AA:BB", "H6160", AbstractCommand("brightness", 50))

        ids = {json.loads(r.content)["requestId"] for r in recorder.requests}
        assert len(ids) == 3
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_get_device_state(self):
        backend, recorder = _v2({
            ("POST", "/router/api/v1/device/state"): {
                "payload": {
                    "capabilities": [
                        {"type": "devices.capabilities.online", "instance": "online", "state": {"value": True}},
                        {"type": "devices.capabilities.on_off", "instance": "powerSwitch", "state": {"value": 1}},
                        {"type": "devices.capabilities.color_setting", "instance": "colorRgb", "state": {"value": 255}},
                    ]
                }
            }
        })
        state = await backend.get_device_state("AA:BB", "H6160")

        assert state.to_dict() == {
            "device": "AA:BB",
            "model": "H6160",
            "properties": [{"powerState": "on"}, {"color": {"r": 0, "g": 0, "b": 255}}],
        }
        assert recorder.body()["payload"] == {"sku": "H6160", "device": "AA:BB"}
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_missing_payload_raises(self):
        backend, _ = _v2({("POST", "/router/api/v1/device/state"): {"code": 400}})
        with pytest.raises(GoveeApiError, match="payload"):
            await backend.get_device_state("AA:BB", "H6160")
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_list_scenes(self):
        backend, _ = _v2({("POST", "/router/api/v1/device/scenes"): SCENE_CAPS})
        scenes = await backend.list_scenes("AA:BB", "H6160")

        assert [s.to_dict() for s in scenes] == [
            {"name": "Sunrise", "value": {"id": 1, "paramId": 11}},
            {"name": "Aurora", "value": {"id": 2, "paramId": 22}},
        ]
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_list_diy_scenes_empty_when_instance_missing(self):
        backend, _ = _v2({("POST", "/router/api/v1/device/diy-scenes"): SCENE_CAPS})
        assert await backend.list_diy_scenes("AA:BB", "H6160") == []
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_activate_scene(self):
        backend, recorder = _v2({("POST", "/router/api/v1/device/control"): {"code": 200}})
        await backend.activate_scene("AA:BB", "H6160", "light", {"id": 2, "paramId": 22})

        assert recorder.body()["payload"]["capability"] == {
            "type": "devices.capabilities.dynamic_scene",
            "instance": "lightScene",
            "value": {"id": 2, "paramId": 22},
        }
        await backend.aclose()

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        backend, _ = _v2({("POST", "/router/api/v1/device/control"): httpx.Response(503, text="busy")})
        with pytest.raises(GoveeApiError) as exc_info:
            await backend.control_device("AA:BB", "H6160", AbstractCommand("turn", "off"))
        assert exc_info.value.status == 503
        await backend.aclose()
