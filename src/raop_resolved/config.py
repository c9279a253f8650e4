"""Configuration management for raop-resolved."""

import json
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AddressFamily(str, Enum):
    IPV4 = "ipv4"
    IPV6 = "ipv6"


class DiscoveryConfig(BaseModel): # Nested under Config (BaseSettings)
    """Configuration for browsing and resolving RAOP advertisements."""

    service_name: str = Field(default="_raop._tcp.local", description="DNS-SD service type browsed with a PTR query.")
    poll_interval_seconds: float = Field(default=3.0, gt=0, le=300, description="Sleep between two polling cycles of the presence and resolver loops.")
    presence_retries: int = Field(default=8, ge=0, le=1000, description="Consecutive missed cycles a host survives before being declared removed.")
    # RAOP sink does not accept link-local IPv6 addresses, hence the IPv4 default.
    address_family: AddressFamily = Field(default=AddressFamily.IPV4, description="Address family requested when resolving services ('ipv4' or 'ipv6').")
    enable_presence: bool = Field(default=True, description="Run the hysteretic presence loop alongside the resolver loop.")


class ResolverConfig(BaseModel):
    """Configuration for the systemd-resolved D-Bus client."""

    bus_name: str = Field(default="org.freedesktop.resolve1", description="D-Bus destination of the resolver service.")
    object_path: str = Field(default="/org/freedesktop/resolve1", description="Object path of the resolver manager.")
    call_timeout_seconds: float = Field(default=2.0, gt=0, le=60, description="Timeout for a single resolver method call.")


class SinkConfig(BaseModel):
    """Configuration for sink creation and the registry tick."""

    module_name: str = Field(default="libpipewire-module-raop-sink", description="Name of the external module loaded once per endpoint.")
    pw_cli_path: str = Field(default="pw-cli", description="pw-cli executable used to load the module.")
    drain_initial_delay_seconds: float = Field(default=0.001, ge=0, description="Delay before the first registry tick.")
    drain_interval_seconds: float = Field(default=3.0, gt=0, description="Interval between two registry ticks; each tick takes at most one endpoint.")
    slow_tick_threshold_seconds: float = Field(default=0.001, ge=0, description="Ticks slower than this are logged with their duration.")


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format ('json' or 'console')")
    file: Optional[Path] = Field(default=None, description="Log file path")


class Config(BaseSettings):
    """Main configuration for raop-resolved. Loads from environment variables prefixed with RAOP_RESOLVED_."""

    model_config = SettingsConfigDict(
        env_prefix='RAOP_RESOLVED_',
        env_nested_delimiter='__', # e.g., RAOP_RESOLVED_DISCOVERY__POLL_INTERVAL_SECONDS
        extra='ignore',
        env_file='.env',
        env_file_encoding='utf-8'
    )

    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    sink: SinkConfig = Field(default_factory=SinkConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, file_path: Path) -> "Config":
        """Create configuration strictly from a JSON file.
        Note: This does not layer with environment variables.
        """
        with open(file_path) as f:
            config_data = json.load(f)
        return cls.model_validate(config_data)
