"""Target specification parsing and resolution.

Accepts:
  "10.0.0.1"                  -> single host, no hostname
  "example.com"               -> first looked-up address + hostname
  "10.0.0.0/24"               -> network prefix, no hostname
  "10.0.0.1, example.com"     -> address + trimmed hostname
  "not-an-ip,example.com"     -> hostname only, address left to the caller
  "10.0.0.0/24,example.com"   -> depends on ResolverSettings.ambiguous_policy

Rejects:
  "", "a,b,c", "10.0.0.0/33", "10.0.0.0/255.255.255.0", unresolvable hostnames
"""

from __future__ import annotations

import socket
from ipaddress import IPv4Address, IPv6Address, ip_address, ip_network
from typing import Callable

from netsweep.core.config import ResolverSettings
from netsweep.core.exceptions import (
    AmbiguousTargetError,
    CIDRParseError,
    LookupFailedError,
    MalformedTargetError,
)
from netsweep.core.logging import get_logger
from netsweep.core.models import NetworkPrefix, TargetSpec

logger = get_logger(__name__)

LookupFunc = Callable[[str], list[str]]


def system_lookup(hostname: str) -> list[str]:
    """Resolve ``hostname`` with the system resolver, keeping resolver order."""
    addresses: list[str] = []
    for family, _, _, _, sockaddr in socket.getaddrinfo(
        hostname, None, proto=socket.IPPROTO_TCP
    ):
        if family not in (socket.AF_INET, socket.AF_INET6):
            continue
        if sockaddr[0] not in addresses:
            addresses.append(sockaddr[0])
    return addresses


def _parse_ip(text: str) -> IPv4Address | IPv6Address | None:
    try:
        return ip_address(text)
    except ValueError:
        return None


class TargetResolver:
    """
    Turn a raw target string into a TargetSpec.

    The form is picked by the first comma and first slash in the input.
    Every failure raises a TargetError subclass straight away; there is no
    retry, so timeouts and retry policy stay with the caller. The resolver
    holds no mutable state and is safe to share between threads.
    """

    def __init__(
        self,
        settings: ResolverSettings | None = None,
        lookup: LookupFunc | None = None,
    ):
        self.settings = settings or ResolverSettings()
        self._lookup = lookup or system_lookup

    def resolve(self, text: str) -> TargetSpec:
        """Resolve a target string. Raises TargetError on any invalid input."""
        if not isinstance(text, str) or not text.strip():
            raise MalformedTargetError("Target specification is empty", target=text)

        comma = text.find(",")
        slash = text.find("/")

        if comma == -1 and slash == -1:
            return self._resolve_literal(text)
        if comma == -1:
            return TargetSpec(raw=text, prefix=self._parse_cidr(text))
        if slash == -1:
            return self._resolve_pair(text)
        return self._resolve_cidr_pair(text)

    def lookup(self, hostname: str) -> TargetSpec:
        """Resolve a bare hostname or IP, without the comma and slash forms."""
        if not isinstance(hostname, str) or not hostname.strip():
            raise MalformedTargetError("Hostname is empty", target=hostname)
        return self._resolve_literal(hostname)

    def _resolve_literal(self, text: str) -> TargetSpec:
        ip = _parse_ip(text)
        if ip is not None:
            return TargetSpec(raw=text, prefix=NetworkPrefix(address=ip))

        try:
            addresses = self._lookup(text)
        except (OSError, UnicodeError) as e:
            logger.debug("lookup_failed", hostname=text, error=str(e))
            raise LookupFailedError(f"Lookup of {text!r} failed: {e}", target=text) from e

        if not addresses:
            raise LookupFailedError(f"Lookup of {text!r} returned no addresses", target=text)

        # Only the first address is used. Callers rely on one address per
        # hostname; multi-address expansion is deliberately not done here.
        first = _parse_ip(addresses[0])
        if first is None:
            raise LookupFailedError(
                f"Lookup of {text!r} returned unusable address {addresses[0]!r}",
                target=text,
            )
        logger.debug("lookup_succeeded", hostname=text, address=str(first), total=len(addresses))
        return TargetSpec(raw=text, prefix=NetworkPrefix(address=first), hostname=text)

    def _parse_cidr(self, text: str) -> NetworkPrefix:
        bits = text.partition("/")[2]
        try:
            # Netmask and hostmask suffixes are not prefix lengths
            if not (bits.isascii() and bits.isdigit()):
                raise ValueError(f"prefix length {bits!r} is not a decimal number")
            network = ip_network(text, strict=False)
        except ValueError as e:
            raise CIDRParseError(f"Invalid CIDR block {text!r}: {e}", target=text) from e
        return NetworkPrefix(address=network.network_address, prefix_length=network.prefixlen)

    def _split_pair(self, text: str) -> tuple[str, str | None]:
        parts = text.split(",")
        if len(parts) != 2:
            raise MalformedTargetError(
                f"Malformed input {text!r}: expected 'address,hostname'",
                target=text,
            )
        return parts[0], parts[1].strip() or None

    def _resolve_pair(self, text: str) -> TargetSpec:
        left, hostname = self._split_pair(text)
        ip = _parse_ip(left)
        if ip is None and hostname is None:
            raise MalformedTargetError(
                f"Malformed input {text!r}: no address and no hostname",
                target=text,
            )
        # A non-IP left part leaves the address empty; resolving the
        # hostname becomes the caller's job.
        prefix = NetworkPrefix(address=ip) if ip is not None else None
        return TargetSpec(raw=text, prefix=prefix, hostname=hostname)

    def _resolve_cidr_pair(self, text: str) -> TargetSpec:
        if self.settings.ambiguous_policy == "reject":
            logger.debug("ambiguous_target_rejected", target=text)
            raise AmbiguousTargetError(
                f"Ambiguous input {text!r}: CIDR blocks cannot carry a hostname",
                target=text,
            )

        left, hostname = self._split_pair(text)
        return TargetSpec(raw=text, prefix=self._parse_cidr(left), hostname=hostname)


def resolve_target(text: str, settings: ResolverSettings | None = None) -> TargetSpec:
    """Resolve one target with a fresh resolver."""
    return TargetResolver(settings).resolve(text)
