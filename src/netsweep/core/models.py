"""Data models for netsweep."""

from __future__ import annotations

from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Outcome(str, Enum):
    """Classified result of one connection attempt.

    Members may be appended; existing values never change meaning.
    """

    SUCCESS = "success"
    CONNECTION_TIMEOUT = "connection-timeout"
    IO_TIMEOUT = "io-timeout"
    UNKNOWN_ERROR = "unknown-error"


class NetworkPrefix(BaseModel):
    """An address plus an optional prefix length.

    A missing prefix length means the prefix covers a single host.
    """

    model_config = ConfigDict(frozen=True)

    address: IPv4Address | IPv6Address
    prefix_length: int | None = None

    @model_validator(mode="after")
    def _check_prefix_length(self) -> "NetworkPrefix":
        if self.prefix_length is not None and not (
            0 <= self.prefix_length <= self.address.max_prefixlen
        ):
            raise ValueError(
                f"prefix length {self.prefix_length} out of range for "
                f"IPv{self.address.version}"
            )
        return self

    @property
    def is_single_host(self) -> bool:
        return self.prefix_length is None

    @property
    def size(self) -> int:
        """Number of addresses this prefix covers."""
        if self.prefix_length is None:
            return 1
        return 2 ** (self.address.max_prefixlen - self.prefix_length)

    def base_bytes(self) -> bytearray:
        """Return a fresh mutable buffer holding the packed base address."""
        return bytearray(self.address.packed)

    def __str__(self) -> str:
        if self.prefix_length is None:
            return str(self.address)
        return f"{self.address}/{self.prefix_length}"


class TargetSpec(BaseModel):
    """A resolved target: a network prefix, a hostname, or both."""

    model_config = ConfigDict(frozen=True)

    raw: str = Field(default="", description="Original target specification")
    prefix: NetworkPrefix | None = Field(
        default=None,
        description="Address or CIDR block to scan",
    )
    hostname: str | None = Field(
        default=None,
        description="Name paired with the address, or left for the caller to resolve",
    )

    @model_validator(mode="after")
    def _require_prefix_or_hostname(self) -> "TargetSpec":
        if self.prefix is None and not self.hostname:
            raise ValueError("target must carry an address or a hostname")
        return self

    @property
    def address(self) -> IPv4Address | IPv6Address | None:
        return self.prefix.address if self.prefix else None

    def describe(self) -> dict[str, Any]:
        """Flat, JSON-friendly view used by reports and the CLI."""
        return {
            "raw": self.raw,
            "address": str(self.prefix.address) if self.prefix else None,
            "prefix_length": self.prefix.prefix_length if self.prefix else None,
            "hostname": self.hostname,
        }


class ProbeResult(BaseModel):
    """Result of probing one address."""

    address: str
    port: int
    hostname: str | None = None
    outcome: Outcome
    error: str | None = None
    banner: str | None = None
    http_status: int | None = None
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.outcome == Outcome.SUCCESS
