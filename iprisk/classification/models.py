"""Data models for address classification.

This module provides the category enum, the immutable classification result, and the
error raised for strings that are not IP literals.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AddressCategory(str, Enum):
    """Address categories assigned by the classifier.

    Only PUBLIC addresses are routable on the Internet and therefore eligible for
    geolocation. Every other category is a special-purpose block.

    Attributes:
        PUBLIC: Globally routable address
        PRIVATE: RFC 1918 (IPv4) or unique local fc00::/7 (IPv6)
        LOOPBACK: 127.0.0.0/8 or ::1
        LINK_LOCAL: 169.254.0.0/16 (APIPA) or fe80::/10
        MULTICAST: 224.0.0.0/4 or ff00::/8
        RESERVED: 240.0.0.0/4
        DOCUMENTATION: RFC 5737 TEST-NET blocks or 2001:db8::/32
        BROADCAST: 255.255.255.255 (classified as RESERVED, which is checked first)
    """

    PUBLIC = "public"
    PRIVATE = "private"
    LOOPBACK = "loopback"
    LINK_LOCAL = "link_local"
    MULTICAST = "multicast"
    RESERVED = "reserved"
    DOCUMENTATION = "documentation"
    BROADCAST = "broadcast"


class InvalidAddress(ValueError):
    """Raised when a string is neither an IPv4 nor an IPv6 literal."""

    def __init__(self, address: object, reason: str = "not a valid IPv4 or IPv6 address") -> None:
        self.address = address
        self.reason = reason
        super().__init__(f"Invalid IP address {address!r}: {reason}")


@dataclass(slots=True, frozen=True)
class AddressClassification:
    """Immutable classification of a single address.

    Attributes:
        address: The address exactly as classified (whitespace stripped)
        ip_version: 4 or 6
        category: Assigned category, exactly one per address
        geolocation_eligible: True if and only if category is PUBLIC
        matched_range: CIDR or prefix that matched, when one applies
        human_message: Human readable description of the category
        special_purpose: Short label for special-purpose blocks (e.g. "TEST-NET")

    Raises:
        ValueError: If ip_version is not 4 or 6, or eligibility disagrees with category

    Example:
        >>> from iprisk.classification import classify
        >>> result = classify("10.1.2.3")
        >>> result.category.value, result.geolocation_eligible
        ('private', False)
    """

    address: str
    ip_version: int
    category: AddressCategory
    geolocation_eligible: bool
    matched_range: Optional[str]
    human_message: str
    special_purpose: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate version and the eligibility/category pairing."""
        if self.ip_version not in (4, 6):
            raise ValueError(f"ip_version must be 4 or 6, got {self.ip_version}")
        if self.geolocation_eligible != (self.category is AddressCategory.PUBLIC):
            raise ValueError(
                f"geolocation_eligible={self.geolocation_eligible} is inconsistent with category "
                f"{self.category.value}"
            )

    @property
    def is_special(self) -> bool:
        """True for every category except PUBLIC."""
        return not self.geolocation_eligible
