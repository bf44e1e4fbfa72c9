"""Configuration management for the SSDP agent."""

import ipaddress
import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SSDP_MULTICAST_GROUP = "239.255.255.250"
SSDP_PORT = 1900
SSDP_SEARCH_ALL = "ssdp:all"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "console")


class DiscoveryConfig(BaseModel):
    """Configuration for the multicast socket, receive loop and queries."""

    multicast_group: str = Field(default=SSDP_MULTICAST_GROUP, description="Multicast group queries are sent to and joined for responses.")
    port: int = Field(default=SSDP_PORT, ge=1, le=65535, description="UDP port bound on the wildcard address and used as query destination.")
    multicast_ttl: int = Field(default=2, ge=1, le=255, description="Outbound multicast hop limit. Small values keep queries on the local segment.")
    mx_seconds: int = Field(default=3, ge=1, le=5, description="MX header: upper bound on the response delay requested from devices.")
    search_target: str = Field(default=SSDP_SEARCH_ALL, description="Default ST used by the CLI search command.")

    receive_buffer_size: int = Field(default=8192, ge=512, le=65507, description="Largest datagram accepted. Larger datagrams are discarded, not truncated.")
    receive_timeout_seconds: float = Field(default=0.5, gt=0, le=30, description="Socket receive timeout; the receive loop checks for shutdown at this interval.")
    stop_timeout_seconds: float = Field(default=2.0, gt=0, le=60, description="How long stop() waits for the receive loop thread to exit.")

    network_interface: Optional[str] = Field(default=None, description="Interface to join the multicast group on (e.g. 'eth0'). If empty, the OS default is used.")

    @field_validator("multicast_group")
    @classmethod
    def validate_multicast_group(cls, value: str) -> str:
        try:
            address = ipaddress.IPv4Address(value)
        except ValueError as e:
            raise ValueError(f"multicast_group must be an IPv4 address: {e}") from e
        if not address.is_multicast:
            raise ValueError(f"{value} is not a multicast address")
        return value


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format ('json' or 'console')")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level

    @field_validator("format")
    @classmethod
    def validate_format(cls, value: str) -> str:
        log_format = value.lower()
        if log_format not in LOG_FORMATS:
            raise ValueError(f"format must be one of {', '.join(LOG_FORMATS)}, got {value!r}")
        return log_format


class Config(BaseSettings):
    """Main configuration for the SSDP agent. Loads from environment variables prefixed with SSDP_AGENT_."""

    model_config = SettingsConfigDict(
        env_prefix='SSDP_AGENT_',
        env_nested_delimiter='__', # e.g., SSDP_AGENT_DISCOVERY__MULTICAST_TTL
        extra='ignore',
        env_file='.env',
        env_file_encoding='utf-8'
    )

    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    agent_name: str = Field(default="SSDPAgent", description="Name bound to the agent's log records.")

    @classmethod
    def from_file(cls, file_path: Path) -> "Config":
        """Create configuration strictly from a JSON file.
        Environment variables are not layered on top.
        """
        with open(file_path) as f:
            config_data = json.load(f)
        return cls.model_validate(config_data)
