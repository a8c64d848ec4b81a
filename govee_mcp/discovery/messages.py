"""
LAN wire messages.

Every datagram is a JSON object {"msg": {"cmd": <str>, "data": <object>}}.
Parsing is a typed, fallible step: anything that does not match a known
shape comes back as None and is dropped by the caller.
"""

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

SCAN = "scan"
DEV_STATUS = "devStatus"


class LanMessage(BaseModel):
    """Inner message of the envelope."""

    cmd: str
    data: dict[str, Any] = Field(default_factory=dict)


class LanEnvelope(BaseModel):
    msg: LanMessage


class RGB(BaseModel):
    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)


class ScanResponse(BaseModel):
    """data of a scan answer."""

    model_config = ConfigDict(extra="ignore")

    device: str = Field(min_length=1)
    ip: str = Field(min_length=1)
    sku: str = ""
    bleVersionHard: str = ""
    bleVersionSoft: str = ""
    wifiVersionHard: str = ""
    wifiVersionSoft: str = ""

    @field_validator("sku", "bleVersionHard", "bleVersionSoft", "wifiVersionHard", "wifiVersionSoft", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class StatusResponse(BaseModel):
    """data of a devStatus answer. All fields are optional."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    on_off: Optional[int] = Field(default=None, alias="onOff")
    brightness: Optional[int] = None
    color: Optional[RGB] = None
    color_tem_kelvin: Optional[int] = Field(default=None, alias="colorTemInKelvin")


def encode_message(message: dict[str, Any]) -> bytes:
    """Serialize an envelope for the wire."""
    return json.dumps(message, separators=(",", ":")).encode("utf-8")


def build_message(cmd: str, data: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    return {"msg": {"cmd": cmd, "data": data if data is not None else {}}}


def parse_message(datagram: bytes) -> Optional[LanMessage]:
    """Parse a raw datagram into its inner message, or None if malformed."""
    try:
        return LanEnvelope.model_validate(json.loads(datagram)).msg
    except (ValueError, ValidationError, RecursionError):
        # RecursionError: pathologically nested JSON
        return None


def parse_scan_response(datagram: bytes) -> Optional[ScanResponse]:
    message = parse_message(datagram)
    if message is None or message.cmd != SCAN:
        return None
    try:
        return ScanResponse.model_validate(message.data)
    except ValidationError:
        return None


def parse_status_response(datagram: bytes) -> Optional[StatusResponse]:
    message = parse_message(datagram)
    if message is None or message.cmd != DEV_STATUS:
        return None
    try:
        return StatusResponse.model_validate(message.data)
    except ValidationError:
        return None
