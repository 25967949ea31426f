"""Data models shared by geolocation providers."""

from __future__ import annotations

from dataclasses import dataclass


class ProviderError(RuntimeError):
    """Raised when a single geolocation provider cannot answer for an address."""

    def __init__(self, provider: str, address: str, reason: str) -> None:
        self.provider = provider
        self.address = address
        self.reason = reason
        super().__init__(f"{provider} failed for {address}: {reason}")


@dataclass(slots=True)
class GeoRecord:
    """Geolocation and network attributes resolved for one address.

    Attributes:
        address: The address that was looked up
        country: Country name
        country_code: ISO 3166-1 alpha-2 code ("XX" when unknown)
        region: Region or state name
        region_code: Region or state code
        city: City name
        zip_code: Postal code
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        timezone: IANA timezone name
        currency: ISO 4217 currency code, empty when the provider does not report one
        isp: ISP name
        org: Organisation name
        asn: ASN identifier such as ``AS15169``
        confidence: Confidence in the location (0.0 to 1.0)
        proxy: Provider flagged the address as a proxy
        hosting: Provider flagged the address as hosting
        mobile: Provider flagged the address as mobile
        source: Provider identifier ("ip-api.com", "ipapi.co", "maxmind", "fallback_data", "estimated")
    """

    address: str
    country: str = "Unknown"
    country_code: str = "XX"
    region: str = "Unknown"
    region_code: str = ""
    city: str = "Unknown"
    zip_code: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    timezone: str = "UTC"
    currency: str = ""
    isp: str = "Unknown ISP"
    org: str = "Unknown"
    asn: str = "Unknown"
    confidence: float = 0.7
    proxy: bool = False
    hosting: bool = False
    mobile: bool = False
    source: str = "unknown"

    def __post_init__(self) -> None:
        """Validate confidence range."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be between 0.0 and 1.0, got {self.confidence}")
