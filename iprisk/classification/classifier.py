"""Special-purpose address detection.

Classifies a single address into one category and decides whether it can be sent to
geolocation providers. IPv4 blocks are checked with CIDR masks in priority order; IPv6
blocks are recognised by their textual prefix.

Example:
    >>> from iprisk.classification import classify
    >>> classify("8.8.8.8").geolocation_eligible
    True
    >>> classify("fe80::1").category.value
    'link_local'
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

from .models import AddressCategory, AddressClassification, InvalidAddress
from .ranges import has_prefix, in_range

_OCTET = r"(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
IPV4_PATTERN = re.compile(rf"^{_OCTET}\.{_OCTET}\.{_OCTET}\.{_OCTET}$")

_V4_TAIL = r"((25[0-5]|(2[0-4]|1{0,1}[0-9]){0,1}[0-9])\.){3}(25[0-5]|(2[0-4]|1{0,1}[0-9]){0,1}[0-9])"
IPV6_PATTERN = re.compile(
    r"^("
    r"([0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}|"
    r"([0-9a-fA-F]{1,4}:){1,7}:|"
    r"([0-9a-fA-F]{1,4}:){1,6}:[0-9a-fA-F]{1,4}|"
    r"([0-9a-fA-F]{1,4}:){1,5}(:[0-9a-fA-F]{1,4}){1,2}|"
    r"([0-9a-fA-F]{1,4}:){1,4}(:[0-9a-fA-F]{1,4}){1,3}|"
    r"([0-9a-fA-F]{1,4}:){1,3}(:[0-9a-fA-F]{1,4}){1,4}|"
    r"([0-9a-fA-F]{1,4}:){1,2}(:[0-9a-fA-F]{1,4}){1,5}|"
    r"[0-9a-fA-F]{1,4}:((:[0-9a-fA-F]{1,4}){1,6})|"
    r":((:[0-9a-fA-F]{1,4}){1,7}|:)|"
    r"fe80:(:[0-9a-fA-F]{0,4}){0,4}%[0-9a-zA-Z]{1,}|"
    rf"::(ffff(:0{{1,4}}){{0,1}}:){{0,1}}{_V4_TAIL}|"
    rf"([0-9a-fA-F]{{1,4}}:){{1,4}}:{_V4_TAIL}"
    r")$"
)

BROADCAST_ADDRESS = "255.255.255.255"

# (cidr, category, message, special purpose label), first match wins
IPV4_RULES: Tuple[Tuple[str, AddressCategory, str, str], ...] = (
    ("192.0.2.0/24", AddressCategory.DOCUMENTATION, "Reserved for documentation/testing (RFC 5737)", "TEST-NET"),
    ("198.51.100.0/24", AddressCategory.DOCUMENTATION, "Reserved for documentation/testing (RFC 5737)", "TEST-NET"),
    ("203.0.113.0/24", AddressCategory.DOCUMENTATION, "Reserved for documentation/testing (RFC 5737)", "TEST-NET"),
    ("10.0.0.0/8", AddressCategory.PRIVATE, "Private network IP address (RFC 1918)", "Private Network"),
    ("172.16.0.0/12", AddressCategory.PRIVATE, "Private network IP address (RFC 1918)", "Private Network"),
    ("192.168.0.0/16", AddressCategory.PRIVATE, "Private network IP address (RFC 1918)", "Private Network"),
    ("127.0.0.0/8", AddressCategory.LOOPBACK, "Loopback address (localhost)", "Loopback"),
    ("169.254.0.0/16", AddressCategory.LINK_LOCAL, "Link-local address (APIPA)", "Link-Local"),
    ("224.0.0.0/4", AddressCategory.MULTICAST, "Multicast address", "Multicast"),
)

RESERVED_RANGE = "240.0.0.0/4"

# (textual prefixes, network range, category, message, special purpose label)
IPV6_RULES: Tuple[Tuple[Tuple[str, ...], str, AddressCategory, str, str], ...] = (
    (("fe80:",), "fe80::/10", AddressCategory.LINK_LOCAL, "IPv6 link-local address", "Link-Local"),
    (("fc", "fd"), "fc00::/7", AddressCategory.PRIVATE, "IPv6 unique local address", "Private/ULA"),
    (("ff",), "ff00::/8", AddressCategory.MULTICAST, "IPv6 multicast address", "Multicast"),
    (
        ("2001:db8:",),
        "2001:db8::/32",
        AddressCategory.DOCUMENTATION,
        "IPv6 documentation address (RFC 3849)",
        "Documentation",
    ),
)

IPV6_LOOPBACK_FORMS = frozenset({"::1", "0:0:0:0:0:0:0:1"})

# Extra context returned for special addresses
SPECIAL_HINTS: Dict[AddressCategory, Dict[str, str]] = {
    AddressCategory.DOCUMENTATION: {
        "usage": "Used in documentation and examples only. Never appears on the Internet.",
        "rfc": "RFC 5737 (IPv4) or RFC 3849 (IPv6)",
    },
    AddressCategory.PRIVATE: {
        "usage": "Used within private networks. Not routable on the Internet.",
        "rfc": "RFC 1918 (IPv4) or RFC 4193 (IPv6)",
    },
    AddressCategory.LOOPBACK: {
        "usage": "Loopback address. Routes traffic to the local machine.",
        "location": "localhost (your computer)",
    },
    AddressCategory.LINK_LOCAL: {
        "usage": "Link-local address. Used for local network only.",
    },
}


def is_valid_address(address: Optional[str]) -> bool:
    """Return True when ``address`` is a syntactically valid IPv4 or IPv6 literal."""
    if not address or not isinstance(address, str):
        return False
    candidate = address.strip()
    return bool(IPV4_PATTERN.fullmatch(candidate) or IPV6_PATTERN.fullmatch(candidate))


def classify(address: str) -> AddressClassification:
    """Classify an address into exactly one category.

    Args:
        address: IPv4 or IPv6 literal; surrounding whitespace is ignored

    Returns:
        AddressClassification with category, eligibility and matched range

    Raises:
        InvalidAddress: If the string is not a valid IPv4 or IPv6 literal
    """
    if not is_valid_address(address):
        raise InvalidAddress(address)

    candidate = address.strip()
    if ":" in candidate:
        return _classify_ipv6(candidate)
    return _classify_ipv4(candidate)


def _classify_ipv4(address: str) -> AddressClassification:
    for cidr, category, message, label in IPV4_RULES:
        if in_range(address, cidr):
            return _special(address, 4, category, cidr, message, label)

    if in_range(address, RESERVED_RANGE):
        return _special(address, 4, AddressCategory.RESERVED, RESERVED_RANGE, "Reserved for future use", "Reserved")

    # shadowed by the 240.0.0.0/4 reserved block above
    if address == BROADCAST_ADDRESS:
        return _special(address, 4, AddressCategory.BROADCAST, None, "Broadcast address", "Broadcast")

    return AddressClassification(
        address=address,
        ip_version=4,
        category=AddressCategory.PUBLIC,
        geolocation_eligible=True,
        matched_range=None,
        human_message="Public IP address",
    )


def _classify_ipv6(address: str) -> AddressClassification:
    lowered = address.lower()
    if lowered in IPV6_LOOPBACK_FORMS:
        return _special(
            address, 6, AddressCategory.LOOPBACK, None, "IPv6 loopback address (::1)", "Loopback"
        )

    for prefixes, network, category, message, label in IPV6_RULES:
        if any(has_prefix(lowered, prefix) for prefix in prefixes):
            return _special(address, 6, category, network, message, label)

    return AddressClassification(
        address=address,
        ip_version=6,
        category=AddressCategory.PUBLIC,
        geolocation_eligible=True,
        matched_range=None,
        human_message="Public IPv6 address",
    )


def _special(
    address: str,
    ip_version: int,
    category: AddressCategory,
    matched_range: Optional[str],
    message: str,
    label: str,
) -> AddressClassification:
    return AddressClassification(
        address=address,
        ip_version=ip_version,
        category=category,
        geolocation_eligible=False,
        matched_range=matched_range,
        human_message=message,
        special_purpose=label,
    )


def special_address_response(classification: AddressClassification) -> Optional[Dict[str, Any]]:
    """Build the user-facing payload for an address that cannot be geolocated.

    Returns:
        Response dict for special-purpose addresses, None for public addresses
    """
    if classification.geolocation_eligible:
        return None

    response: Dict[str, Any] = {
        "ip": classification.address,
        "ipVersion": f"IPv{classification.ip_version}",
        "type": classification.category.value,
        "specialPurpose": classification.special_purpose,
        "message": classification.human_message,
        "canGeolocate": False,
        "geolocationAvailable": False,
    }
    if classification.matched_range:
        response["networkRange"] = classification.matched_range
    response.update(SPECIAL_HINTS.get(classification.category, {}))
    return response
