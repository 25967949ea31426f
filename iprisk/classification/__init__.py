"""Address classification.

Detects special-purpose IPv4 and IPv6 blocks (private, loopback, documentation, ...)
and decides which addresses may be geolocated.

Example:
    >>> from iprisk.classification import classify
    >>> result = classify("192.168.1.10")
    >>> print(f"{result.category.value}: {result.human_message}")
    private: Private network IP address (RFC 1918)
"""

from .classifier import classify, is_valid_address, special_address_response
from .models import AddressCategory, AddressClassification, InvalidAddress
from .ranges import has_prefix, in_range, ip_to_int

__all__ = [
    "AddressCategory",
    "AddressClassification",
    "InvalidAddress",
    "classify",
    "has_prefix",
    "in_range",
    "ip_to_int",
    "is_valid_address",
    "special_address_response",
]
