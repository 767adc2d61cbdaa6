"""Address arithmetic and lazy enumeration of network prefixes.

Addresses are plain ``bytearray`` buffers (4 bytes for IPv4, 16 for IPv6).
``increment_address`` mutates its argument, so anything handed to a caller
is produced with ``copy_address`` first.
"""

from __future__ import annotations

from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Iterator

from netsweep.core.models import NetworkPrefix, TargetSpec

Address = bytearray


def increment_address(addr: Address) -> None:
    """Add one to ``addr`` in place, carrying from the last byte to the first.

    Past the all-255 address this wraps to all zeros without signalling;
    callers bound enumeration by prefix size instead.
    """
    for i in range(len(addr) - 1, -1, -1):
        addr[i] = (addr[i] + 1) & 0xFF
        if addr[i] != 0:
            break


def copy_address(addr: Address) -> Address:
    """Return an independent byte-for-byte duplicate of ``addr``."""
    dup = bytearray(len(addr))
    dup[:] = addr
    return dup


def format_address(addr: Address) -> str:
    """Render a 4- or 16-byte buffer in its usual text form."""
    return str(ip_address(bytes(addr)))


class AddressRange:
    """
    Lazy, finite, restartable sequence of the addresses in a prefix.

    Each iteration starts again from the prefix base. Every yielded buffer
    is a fresh copy, so callers may keep addresses across concurrent
    connection attempts.
    """

    def __init__(self, prefix: NetworkPrefix):
        self.prefix = prefix

    def __len__(self) -> int:
        return self.prefix.size

    def __bool__(self) -> bool:
        # len() overflows for large IPv6 prefixes
        return True

    def __iter__(self) -> Iterator[Address]:
        cursor = self.prefix.base_bytes()
        for _ in range(self.prefix.size):
            yield copy_address(cursor)
            increment_address(cursor)

    def hosts(self) -> Iterator[IPv4Address | IPv6Address]:
        """Same sequence as iteration, as ``ipaddress`` objects."""
        for addr in self:
            yield ip_address(bytes(addr))

    def __repr__(self) -> str:
        return f"AddressRange({self.prefix}, size={self.prefix.size})"


def expand(spec: TargetSpec) -> AddressRange | tuple[()]:
    """Addresses covered by a target; empty for hostname-only targets."""
    if spec.prefix is None:
        return ()
    return AddressRange(spec.prefix)
