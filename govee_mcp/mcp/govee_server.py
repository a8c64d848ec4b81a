"""
Govee MCP Server.

Exposes Govee smart lights to any MCP-compatible client (Claude Desktop,
Cursor, custom agents, etc.) through one command surface backed by three
interchangeable backends:

    v1   — Govee developer REST API (default)     GOVEE_API_KEY
    v2   — Govee router/open REST API, scenes     GOVEE_API_KEY
    lan  — local UDP protocol, same network only  GOVEE_LAN_ENABLED=true

The default backend is chosen with GOVEE_API_BACKEND; every tool also
accepts a per-call ``backend`` override.

Tools:
    list_devices           — list devices and the commands they support
    get_device_state       — read power, brightness, color, temperature
    set_power              — turn a device on or off
    set_brightness         — set brightness 0-100
    set_color              — set an RGB color
    set_color_temperature  — set white temperature 2000-9000K
    list_scenes            — list built-in light scenes (v2)
    list_diy_scenes        — list DIY scenes (v2)
    activate_scene         — activate a light or DIY scene by name (v2)

Run:
    python -m govee_mcp.mcp.govee_server          # stdio (Claude Desktop / Cursor)
"""

import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Optional

from mcp.server.fastmcp import FastMCP

from ..capabilities import BACKENDS, AbstractCommand, Backend, BackendRouter, is_valid_backend
from ..config import settings
from ..exceptions import GoveeError

logger = logging.getLogger("govee.mcp.server")

_router: Optional[BackendRouter] = None


def get_router() -> BackendRouter:
    """Get or create the process-wide backend router."""
    global _router
    if _router is None:
        _router = BackendRouter.from_settings(settings)
    return _router


@asynccontextmanager
async def _lifespan(server):
    """Build the backend router on startup, close it on shutdown."""
    router = get_router()
    logger.info("Govee MCP: backends %s (default %s)", router.names, router.default)
    yield
    await router.aclose()


mcp = FastMCP(
    "govee",
    instructions=(
        "Control Govee smart lights. "
        "Call list_devices first: device_id and model from its output are "
        "required by every other tool. "
        "The 'lan' backend only sees devices on the local network and cannot "
        "report state for devices it has not discovered. "
        "Scenes are only available through the v2 backend."
    ),
    lifespan=_lifespan,
)


class _ToolError(Exception):
    """Invalid tool arguments; reported to the client without a backend call."""


def _error(message: str) -> str:
    return json.dumps({"error": message})


def _validate_int(value: Any, name: str, minimum: int, maximum: int) -> Optional[str]:
    if value is None:
        return f"{name} is required"
    if isinstance(value, bool) or not isinstance(value, int):
        return f"{name} must be an integer"
    if value < minimum or value > maximum:
        return f"{name} must be between {minimum} and {maximum}"
    return None


def _resolve_backend(backend: Optional[str], fallback: Optional[str] = None) -> Backend:
    name = backend or fallback
    if name is not None and not is_valid_backend(name):
        choices = ", ".join(f"'{b}'" for b in BACKENDS)
        raise _ToolError(f"Invalid backend '{name}'. Must be {choices}.")
    return get_router().get(name)


def _device_backend(
    device_id: Optional[str],
    model: Optional[str],
    backend: Optional[str],
    fallback: Optional[str] = None,
) -> Backend:
    if not device_id or not model:
        raise _ToolError("device_id and model are required")
    return _resolve_backend(backend, fallback)


async def _run(tool: str, call: Callable[[], Awaitable[str]]) -> str:
    try:
        return await call()
    except (_ToolError, GoveeError) as exc:
        return _error(str(exc))
    except Exception as exc:
        logger.exception("%s error", tool)
        return _error(str(exc))


# ---------------------------------------------------------------------------
# Tool: list_devices
# ---------------------------------------------------------------------------


@mcp.tool()
async def list_devices(backend: Optional[str] = None) -> str:
    """List all Govee devices reachable through the selected backend.

    Returns a JSON array with device_id, model, name, controllable,
    retrievable and supported_commands for each device.
    """

    async def call() -> str:
        devices = await _resolve_backend(backend).list_devices()
        return json.dumps([d.to_dict() for d in devices], indent=2)

    return await _run("list_devices", call)


# ---------------------------------------------------------------------------
# Tool: get_device_state
# ---------------------------------------------------------------------------


@mcp.tool()
async def get_device_state(
    device_id: Optional[str] = None,
    model: Optional[str] = None,
    backend: Optional[str] = None,
) -> str:
    """Get the current state of a device.

    Returns JSON with device, model and a properties list holding any of
    powerState, brightness, color and colorTem.
    """

    async def call() -> str:
        api = _device_backend(device_id, model, backend)
        state = await api.get_device_state(device_id, model)
        return json.dumps(state.to_dict(), indent=2)

    return await _run("get_device_state", call)


# ---------------------------------------------------------------------------
# Control tools
# ---------------------------------------------------------------------------


@mcp.tool()
async def set_power(
    device_id: Optional[str] = None,
    model: Optional[str] = None,
    state: Optional[str] = None,
    backend: Optional[str] = None,
) -> str:
    """Turn a device on or off. state must be 'on' or 'off'."""

    async def call() -> str:
        api = _device_backend(device_id, model, backend)
        if not state:
            raise _ToolError("state is required")
        if state not in ("on", "off"):
            raise _ToolError("state must be 'on' or 'off'")

        await api.control_device(device_id, model, AbstractCommand("turn", state))
        return json.dumps({"success": True, "message": f"Device turned {state} successfully."})

    return await _run("set_power", call)


@mcp.tool()
async def set_brightness(
    device_id: Optional[str] = None,
    model: Optional[str] = None,
    brightness: Optional[int] = None,
    backend: Optional[str] = None,
) -> str:
    """Set device brightness as a percentage (0-100)."""

    async def call() -> str:
        api = _device_backend(device_id, model, backend)
        err = _validate_int(brightness, "brightness", 0, 100)
        if err:
            raise _ToolError(err)

        await api.control_device(device_id, model, AbstractCommand("brightness", brightness))
        return json.dumps({"success": True, "message": f"Brightness set to {brightness}%."})

    return await _run("set_brightness", call)


@mcp.tool()
async def set_color(
    device_id: Optional[str] = None,
    model: Optional[str] = None,
    r: Optional[int] = None,
    g: Optional[int] = None,
    b: Optional[int] = None,
    backend: Optional[str] = None,
) -> str:
    """Set an RGB color; each channel is an integer 0-255."""

    async def call() -> str:
        api = _device_backend(device_id, model, backend)
        err = (
            _validate_int(r, "r", 0, 255)
            or _validate_int(g, "g", 0, 255)
            or _validate_int(b, "b", 0, 255)
        )
        if err:
            raise _ToolError(err)

        await api.control_device(device_id, model, AbstractCommand("color", {"r": r, "g": g, "b": b}))
        return json.dumps({"success": True, "message": f"Color set to RGB({r}, {g}, {b})."})

    return await _run("set_color", call)


@mcp.tool()
async def set_color_temperature(
    device_id: Optional[str] = None,
    model: Optional[str] = None,
    temperature: Optional[int] = None,
    backend: Optional[str] = None,
) -> str:
    """Set white color temperature in Kelvin (2000-9000)."""

    async def call() -> str:
        api = _device_backend(device_id, model, backend)
        err = _validate_int(temperature, "temperature", 2000, 9000)
        if err:
            raise _ToolError(err)

        await api.control_device(device_id, model, AbstractCommand("colorTem", temperature))
        return json.dumps({"success": True, "message": f"Color temperature set to {temperature}K."})

    return await _run("set_color_temperature", call)


# ---------------------------------------------------------------------------
# Scene tools (v2 unless another backend is named)
# ---------------------------------------------------------------------------


@mcp.tool()
async def list_scenes(
    device_id: Optional[str] = None,
    model: Optional[str] = None,
    backend: Optional[str] = None,
) -> str:
    """List the built-in light scenes of a device."""

    async def call() -> str:
        api = _device_backend(device_id, model, backend, fallback="v2")
        scenes = await api.list_scenes(device_id, model)
        return json.dumps([s.to_dict() for s in scenes], indent=2)

    return await _run("list_scenes", call)


@mcp.tool()
async def list_diy_scenes(
    device_id: Optional[str] = None,
    model: Optional[str] = None,
    backend: Optional[str] = None,
) -> str:
    """List the user-created DIY scenes of a device."""

    async def call() -> str:
        api = _device_backend(device_id, model, backend, fallback="v2")
        scenes = await api.list_diy_scenes(device_id, model)
        return json.dumps([s.to_dict() for s in scenes], indent=2)

    return await _run("list_diy_scenes", call)


@mcp.tool()
async def activate_scene(
    device_id: Optional[str] = None,
    model: Optional[str] = None,
    scene_name: Optional[str] = None,
    scene_type: Optional[str] = None,
    backend: Optional[str] = None,
) -> str:
    """Activate a scene by name. scene_type is 'light' or 'diy'.

    Use list_scenes / list_diy_scenes to find valid scene names.
    """

    async def call() -> str:
        api = _device_backend(device_id, model, backend, fallback="v2")
        if not scene_name:
            raise _ToolError("scene_name is required")
        if scene_type not in ("light", "diy"):
            raise _ToolError("scene_type must be 'light' or 'diy'")

        is_diy = scene_type == "diy"
        label = "DIY scene" if is_diy else "Scene"
        scenes = await (api.list_diy_scenes if is_diy else api.list_scenes)(device_id, model)
        scene = next((s for s in scenes if s.name == scene_name), None)
        if scene is None:
            raise _ToolError(f"{label} '{scene_name}' not found")

        await api.activate_scene(device_id, model, scene_type, scene.value)
        return json.dumps({"success": True, "message": f"{label} '{scene_name}' activated."})

    return await _run("activate_scene", call)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    # stdout carries the MCP stream; logs go to stderr
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
