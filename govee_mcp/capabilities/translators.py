"""
Capability translators.

Pure functions mapping an AbstractCommand onto each backend's wire shape
and mapping reported state back to normalized property records. No I/O.
"""

from typing import Any, Mapping, Optional

from ..exceptions import UnknownCapabilityError
from .protocols import AbstractCommand, CommandName

# v2 capability types and instances
ON_OFF = "devices.capabilities.on_off"
RANGE = "devices.capabilities.range"
COLOR_SETTING = "devices.capabilities.color_setting"
DYNAMIC_SCENE = "devices.capabilities.dynamic_scene"

POWER_SWITCH = "powerSwitch"
BRIGHTNESS = "brightness"
COLOR_RGB = "colorRgb"
COLOR_TEMPERATURE_K = "colorTemperatureK"
LIGHT_SCENE = "lightScene"
DIY_SCENE = "diyScene"

_NORMALIZED_KEYS = ("powerState", "brightness", "color", "colorTem")


def _command_name(command: AbstractCommand) -> CommandName:
    try:
        return CommandName(command.name)
    except ValueError:
        raise UnknownCapabilityError(command.name) from None


def _power_flag(value: Any) -> int:
    """Map an on/off token to the 1/0 flag both typed protocols use."""
    if isinstance(value, str):
        return 1 if value.lower() == "on" else 0
    return 1 if value is True or value == 1 else 0


def _power_token(flag: Any) -> str:
    return "on" if flag == 1 else "off"


def _rgb(value: Any) -> dict[str, int]:
    try:
        return {"r": int(value["r"]), "g": int(value["g"]), "b": int(value["b"])}
    except (KeyError, TypeError) as e:
        raise ValueError(f"color must be an {{r, g, b}} mapping, got {value!r}") from e


def pack_rgb(color: Mapping[str, int]) -> int:
    """Pack an {r, g, b} mapping into a single 24-bit integer."""
    c = _rgb(color)
    return ((c["r"] & 0xFF) << 16) | ((c["g"] & 0xFF) << 8) | (c["b"] & 0xFF)


def unpack_rgb(value: int) -> dict[str, int]:
    """Inverse of pack_rgb."""
    value = int(value)
    return {"r": (value >> 16) & 0xFF, "g": (value >> 8) & 0xFF, "b": value & 0xFF}


# ---------------------------------------------------------------------------
# LAN (UDP JSON envelope)
# ---------------------------------------------------------------------------


def lan_command(command: AbstractCommand) -> dict[str, Any]:
    """Translate a command into a LAN {"msg": {"cmd", "data"}} envelope."""
    name = _command_name(command)

    if name is CommandName.TURN:
        cmd, data = "turn", {"value": _power_flag(command.value)}
    elif name is CommandName.BRIGHTNESS:
        cmd, data = "brightness", {"value": command.value}
    elif name is CommandName.COLOR:
        # colorwc carries both fields; a zero temperature selects the RGB value
        cmd, data = "colorwc", {"color": _rgb(command.value), "colorTemInKelvin": 0}
    else:
        cmd, data = "colorwc", {
            "color": {"r": 0, "g": 0, "b": 0},
            "colorTemInKelvin": command.value,
        }

    return {"msg": {"cmd": cmd, "data": data}}


def lan_state(
    on_off: Optional[int] = None,
    brightness: Optional[int] = None,
    color: Optional[Mapping[str, int]] = None,
    color_tem_kelvin: Optional[int] = None,
) -> list[dict[str, Any]]:
    """Normalize the fields of a LAN devStatus response."""
    properties: list[dict[str, Any]] = []
    if on_off is not None:
        properties.append({"powerState": _power_token(on_off)})
    if brightness is not None:
        properties.append({"brightness": brightness})
    if color:
        properties.append({"color": _rgb(color)})
    if color_tem_kelvin:
        properties.append({"colorTem": color_tem_kelvin})
    return properties


# ---------------------------------------------------------------------------
# v1 REST (untyped name/value commands)
# ---------------------------------------------------------------------------


def v1_command(command: AbstractCommand) -> dict[str, Any]:
    """Translate a command into the v1 {"name", "value"} shape."""
    name = _command_name(command)

    if name is CommandName.TURN:
        return {"name": name.value, "value": _power_token(_power_flag(command.value))}
    if name is CommandName.COLOR:
        return {"name": name.value, "value": _rgb(command.value)}
    return {"name": name.value, "value": command.value}


def v1_state(properties: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Keep the recognised single-key properties of a v1 state response."""
    normalized: list[dict[str, Any]] = []
    for prop in properties or []:
        for key in _NORMALIZED_KEYS:
            if key in prop:
                normalized.append({key: prop[key]})
    return normalized


# ---------------------------------------------------------------------------
# v2 REST (typed capabilities)
# ---------------------------------------------------------------------------


def v2_capability(command: AbstractCommand) -> dict[str, Any]:
    """Translate a command into a v2 {"type", "instance", "value"} capability."""
    name = _command_name(command)

    if name is CommandName.TURN:
        return {"type": ON_OFF, "instance": POWER_SWITCH, "value": _power_flag(command.value)}
    if name is CommandName.BRIGHTNESS:
        return {"type": RANGE, "instance": BRIGHTNESS, "value": command.value}
    if name is CommandName.COLOR:
        return {"type": COLOR_SETTING, "instance": COLOR_RGB, "value": pack_rgb(command.value)}
    return {"type": COLOR_SETTING, "instance": COLOR_TEMPERATURE_K, "value": command.value}


def v2_scene_capability(scene_type: str, value: Any) -> dict[str, Any]:
    """Build the dynamic_scene capability activating a light or DIY scene."""
    instance = DIY_SCENE if scene_type == "diy" else LIGHT_SCENE
    return {"type": DYNAMIC_SCENE, "instance": instance, "value": value}


def _state_value(capability: Mapping[str, Any]) -> Any:
    state = capability.get("state")
    if isinstance(state, Mapping) and "value" in state:
        return state["value"]
    return state


def _int_state(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def v2_state(capabilities: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Decode v2 capability states into normalized properties."""
    properties: list[dict[str, Any]] = []
    for cap in capabilities or []:
        kind, instance = cap.get("type"), cap.get("instance")
        value = _state_value(cap)

        if kind == ON_OFF:
            properties.append({"powerState": _power_token(value)})
            continue

        # numeric states that are missing or not integers are not reported
        number = _int_state(value)
        if number is None:
            continue
        if kind == RANGE and instance == BRIGHTNESS:
            properties.append({"brightness": number})
        elif kind == COLOR_SETTING and instance == COLOR_RGB:
            properties.append({"color": unpack_rgb(number)})
        elif kind == COLOR_SETTING and instance == COLOR_TEMPERATURE_K:
            properties.append({"colorTem": number})
    return properties


def v2_supported_commands(capabilities: list[Mapping[str, Any]]) -> list[str]:
    """Derive the abstract commands a device supports from its capability list."""
    commands: list[str] = []
    if not isinstance(capabilities, list):
        return commands
    for cap in capabilities:
        kind, instance = cap.get("type"), cap.get("instance")
        if kind == ON_OFF:
            commands.append(CommandName.TURN.value)
        elif kind == RANGE and instance == BRIGHTNESS:
            commands.append(CommandName.BRIGHTNESS.value)
        elif kind == COLOR_SETTING and instance == COLOR_RGB:
            commands.append(CommandName.COLOR.value)
        elif kind == COLOR_SETTING and instance == COLOR_TEMPERATURE_K:
            commands.append(CommandName.COLOR_TEM.value)
    return commands
