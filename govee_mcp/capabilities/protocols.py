"""
Protocol definitions for the capability/command system.

One abstract command vocabulary drives every backend; translators map it
onto each backend's wire format.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CommandName(str, Enum):
    """Abstract command names understood by every backend."""
    TURN = "turn"
    BRIGHTNESS = "brightness"
    COLOR = "color"
    COLOR_TEM = "colorTem"


ALL_COMMANDS = [c.value for c in CommandName]


@dataclass(frozen=True)
class AbstractCommand:
    """A single backend-independent command, built per call."""
    name: str
    value: Any


@dataclass
class DeviceInfo:
    """A controllable device as reported by a backend."""
    device_id: str
    model: str
    device_name: str
    controllable: bool = True
    retrievable: bool = True
    supported_commands: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "device_id": self.device_id,
            "model": self.model,
            "name": self.device_name,
            "controllable": self.controllable,
            "retrievable": self.retrievable,
            "supported_commands": self.supported_commands,
        }


@dataclass
class DeviceState:
    """Normalized device state: ordered single-key property records."""
    device_id: str
    model: str
    properties: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "device": self.device_id,
            "model": self.model,
            "properties": self.properties,
        }


@dataclass
class Scene:
    """A light or DIY scene offered by a backend."""
    name: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}
