"""Connection type classification from ISP names."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

MOBILE_KEYWORDS: Tuple[str, ...] = ("mobile", "cellular", "4g", "5g", "lte", "wireless")
DATACENTER_KEYWORDS: Tuple[str, ...] = ("hosting", "datacenter", "cloud")
BROADBAND_KEYWORDS: Tuple[str, ...] = ("broadband", "fiber", "cable")
VPN_KEYWORDS: Tuple[str, ...] = ("vpn",)

# (connection type, category, keywords); the VPN row also fires on the is_vpn flag
_RULES: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = (
    ("mobile", "mobile", MOBILE_KEYWORDS),
    ("datacenter", "business", DATACENTER_KEYWORDS),
    ("broadband", "residential", BROADBAND_KEYWORDS),
    ("vpn", "anonymizer", VPN_KEYWORDS),
)


@dataclass(slots=True, frozen=True)
class ConnectionProfile:
    """Connection type and category for an address.

    Attributes:
        connection_type: mobile, datacenter, broadband, vpn or residential
        connection_category: mobile, business, residential or anonymizer
    """

    connection_type: str
    connection_category: str

    @property
    def is_mobile(self) -> bool:
        return self.connection_type == "mobile"

    @property
    def is_datacenter(self) -> bool:
        return self.connection_type == "datacenter"

    @property
    def is_residential(self) -> bool:
        return self.connection_type == "residential"

    @property
    def is_business(self) -> bool:
        return self.connection_category == "business"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connectionType": self.connection_type,
            "connectionCategory": self.connection_category,
            "isMobile": self.is_mobile,
            "isDatacenter": self.is_datacenter,
            "isResidential": self.is_residential,
            "isBusiness": self.is_business,
        }


def classify_connection(isp: Optional[str], is_vpn: bool = False) -> ConnectionProfile:
    """Classify the connection behind an ISP name.

    Keywords are checked in order mobile, datacenter, broadband, VPN; anything else
    is residential.

    Example:
        >>> classify_connection("Verizon Wireless").connection_type
        'mobile'
        >>> classify_connection("Comcast", is_vpn=True).connection_category
        'anonymizer'
    """
    lowered = (isp or "").lower()
    for connection_type, category, keywords in _RULES:
        if any(keyword in lowered for keyword in keywords):
            return ConnectionProfile(connection_type, category)
        if connection_type == "vpn" and is_vpn:
            return ConnectionProfile(connection_type, category)
    return ConnectionProfile("residential", "residential")
