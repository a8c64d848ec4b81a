"""
Centralized configuration management using Pydantic Settings.

Configuration is loaded from environment variables with sensible defaults.
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BackendName = Literal["v1", "v2", "lan"]


class GoveeConfig(BaseSettings):
    """Govee account and backend selection."""

    model_config = SettingsConfigDict(env_prefix="GOVEE_", env_file=".env", extra="ignore")

    api_key: Optional[str] = Field(
        default=None,
        description="Govee developer API key (Govee Home app: Settings > About Us > Apply for API Key)",
    )
    api_backend: BackendName = Field(default="v1", description="Backend used when a tool call names none")
    lan_enabled: bool = Field(default=False, description="Enable the local UDP backend")
    request_timeout: float = Field(default=30.0, description="HTTP timeout for cloud API calls (seconds)")
    v1_base_url: str = Field(
        default="https://developer-api.govee.com/v1",
        description="Base URL of the v1 developer API",
    )
    v2_base_url: str = Field(
        default="https://openapi.api.govee.com/router/api/v1",
        description="Base URL of the v2 (router) open API",
    )


class LanConfig(BaseSettings):
    """Local network protocol configuration."""

    model_config = SettingsConfigDict(env_prefix="GOVEE_LAN_", env_file=".env", extra="ignore")

    multicast_addr: str = Field(default="239.255.255.250", description="Scan multicast group")
    scan_port: int = Field(default=4001, description="Port devices listen on for scan requests")
    listen_port: int = Field(default=4002, description="Local port scan responses arrive on")
    control_port: int = Field(default=4003, description="Port devices accept commands on")
    discovery_window: float = Field(default=3.0, description="Scan response collection window (seconds)")
    response_timeout: float = Field(default=3.0, description="Status query response window (seconds)")
    cache_ttl: float = Field(default=300.0, description="Seconds a scan result stays valid")


class Settings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(
        env_prefix="GOVEE_MCP_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Nested configs
    govee: GoveeConfig = Field(default_factory=GoveeConfig)
    lan: LanConfig = Field(default_factory=LanConfig)


# Singleton settings instance
settings = Settings()
