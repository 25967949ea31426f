"""CIDR and prefix matching helpers.

IPv4 membership uses 32-bit integer masks. IPv6 membership is a lowercase textual
prefix comparison (``fe80:``, ``fc``, ``2001:db8:``); no bit-level IPv6 arithmetic is done.
"""

from __future__ import annotations

from typing import Tuple

_MASK_32 = 0xFFFFFFFF


def ip_to_int(address: str) -> int:
    """Convert a dotted-quad IPv4 address to an unsigned 32-bit integer (big-endian).

    Raises:
        ValueError: If the address does not have four octets in 0-255
    """
    parts = address.strip().split(".")
    if len(parts) != 4:
        raise ValueError(f"Invalid IPv4 address: {address!r}")

    value = 0
    for part in parts:
        if not part.isdigit():
            raise ValueError(f"Invalid IPv4 octet {part!r} in {address!r}")
        octet = int(part)
        if octet > 255:
            raise ValueError(f"IPv4 octet out of range {part!r} in {address!r}")
        value = (value << 8) | octet
    return value


def parse_cidr(cidr: str) -> Tuple[int, int]:
    """Split ``base/prefixLength`` into (base as integer, prefix length).

    A missing prefix length means a single host (/32).

    Raises:
        ValueError: If the base is not IPv4 or the prefix length is outside 0-32
    """
    base, _, bits = cidr.strip().partition("/")
    prefix_length = 32
    if bits:
        if not bits.isdigit():
            raise ValueError(f"Invalid prefix length in {cidr!r}")
        prefix_length = int(bits)
    if not 0 <= prefix_length <= 32:
        raise ValueError(f"Prefix length must be between 0 and 32, got {prefix_length}")
    return ip_to_int(base), prefix_length


def prefix_mask(prefix_length: int) -> int:
    """Return the 32-bit mask with the high ``prefix_length`` bits set."""
    if prefix_length == 0:
        return 0
    return (_MASK_32 << (32 - prefix_length)) & _MASK_32


def in_range(address: str, cidr: str) -> bool:
    """Return True when an IPv4 address lies inside an IPv4 CIDR block.

    Example:
        >>> in_range("172.31.255.255", "172.16.0.0/12")
        True
        >>> in_range("172.32.0.0", "172.16.0.0/12")
        False
    """
    base, prefix_length = parse_cidr(cidr)
    mask = prefix_mask(prefix_length)
    return (ip_to_int(address) & mask) == (base & mask)


def has_prefix(address: str, prefix: str) -> bool:
    """Case-insensitive textual prefix test used for IPv6 blocks."""
    return address.lower().startswith(prefix.lower())
