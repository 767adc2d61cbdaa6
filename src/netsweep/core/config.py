"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from netsweep.core.exceptions import ConfigError


class ResolverSettings(BaseSettings):
    """Target resolution configuration."""

    ambiguous_policy: Literal["reject", "cidr_with_hostname"] = Field(
        default="reject",
        description="How to treat 'cidr,hostname' input: reject it, or pair the block with the hostname"
    )

    lookup_timeout: float = Field(
        default=5.0,
        gt=0,
        le=60.0,
        description="Seconds the runner waits for a hostname lookup"
    )

    lookup_concurrency: int = Field(
        default=16,
        ge=1,
        le=256,
        description="Hostname lookups the runner performs at once"
    )

    max_addresses: int = Field(
        default=65536,
        ge=1,
        description="Largest number of addresses a single target may expand to"
    )


class ProberSettings(BaseSettings):
    """Prober module configuration."""

    mode: Literal["tcp", "http"] = Field(
        default="tcp",
        description="Probe type: raw TCP connect or HTTP GET"
    )

    port: int = Field(
        default=80,
        ge=1,
        le=65535,
        description="Destination port"
    )

    connect_timeout: float = Field(
        default=3.0,
        gt=0,
        le=60.0,
        description="Connect timeout in seconds"
    )

    read_timeout: float = Field(
        default=3.0,
        gt=0,
        le=60.0,
        description="Read/write timeout in seconds"
    )

    read_banner: int = Field(
        default=0,
        ge=0,
        le=65536,
        description="Bytes to read after a TCP connect (0 disables banner reads)"
    )

    concurrency: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Maximum simultaneous probes"
    )

    verify_ssl: bool = Field(
        default=False,
        description="Verify TLS certificates in http mode"
    )

    user_agent: str = Field(
        default="netsweep/1.0",
        description="User-Agent header for http mode"
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Log level"
    )

    json_format: bool = Field(
        default=False,
        description="Emit JSON log lines"
    )

    log_file: str | None = Field(
        default=None,
        description="Optional log file path"
    )


class Settings(BaseSettings):
    """Main configuration container."""

    model_config = SettingsConfigDict(
        env_prefix="NETSWEEP_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    prober: ProberSettings = Field(default_factory=ProberSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from a YAML configuration file."""
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Top level of {path} must be a mapping")

        return cls(**data)

    @classmethod
    def from_file_or_default(cls, path: Path | None = None) -> "Settings":
        """Load from file if exists, otherwise return defaults."""
        default_paths = [
            Path("netsweep.yaml"),
            Path("netsweep.yml"),
            Path(".netsweep.yaml"),
            Path.home() / ".config" / "netsweep" / "config.yaml",
        ]

        if path and path.exists():
            return cls.from_yaml(path)

        for default_path in default_paths:
            if default_path.exists():
                return cls.from_yaml(default_path)

        return cls()
