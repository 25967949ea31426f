"""Geolocation providers and the fallback chain that combines them.

Providers are tried in configured order. The first one that answers wins; if all
fail, built-in records for a few well-known resolvers are used, and finally a coarse
estimate based on the first IPv4 octet.

Example:
    >>> from iprisk.lookup.providers import create_provider_chain
    >>> from iprisk.settings import LookupSettings
    >>> chain = create_provider_chain(LookupSettings())
    >>> record = chain.resolve("8.8.8.8")
    >>> print(f"{record.city}, {record.country_code} via {record.source}")
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Protocol

import requests

from ..settings import LookupSettings
from .maxmind_client import MaxMindClient
from .models import GeoRecord, ProviderError
from .rate_limiting import RateLimitedSession, with_retries

logger = logging.getLogger(__name__)

IP_API_URL = "http://ip-api.com/json/{address}"
IP_API_FIELDS = (
    "status,message,country,countryCode,region,regionName,city,zip,lat,lon,timezone,"
    "isp,org,as,proxy,hosting,mobile,query"
)
IPAPI_CO_URL = "https://ipapi.co/{address}/json/"

ESTIMATED_CONFIDENCE = 0.3

_US_WEST = {
    "country": "United States",
    "country_code": "US",
    "region": "California",
    "region_code": "CA",
    "timezone": "America/Los_Angeles",
    "currency": "USD",
    "confidence": 0.95,
}
_GOOGLE = {**_US_WEST, "city": "Mountain View", "zip_code": "94043", "latitude": 37.4056, "longitude": -122.0775,
           "isp": "Google LLC", "org": "Google LLC", "asn": "AS15169"}  # fmt: skip
_CLOUDFLARE = {**_US_WEST, "city": "San Francisco", "zip_code": "94107", "latitude": 37.7621, "longitude": -122.3971,
               "isp": "Cloudflare Inc", "org": "Cloudflare Inc", "asn": "AS13335"}  # fmt: skip
_OPENDNS = {**_US_WEST, "city": "San Jose", "zip_code": "95101", "latitude": 37.3382, "longitude": -121.8863,
            "isp": "Cisco OpenDNS LLC", "org": "Cisco OpenDNS LLC", "asn": "AS36692"}  # fmt: skip

FALLBACK_RECORDS: Dict[str, Dict[str, Any]] = {
    "8.8.8.8": _GOOGLE,
    "1.1.1.1": _CLOUDFLARE,
    "208.67.222.222": _OPENDNS,
    "2001:4860:4860::8888": _GOOGLE,
    "2606:4700:4700::1111": _CLOUDFLARE,
}


class GeoProvider(Protocol):
    """A single geolocation source."""

    name: str

    def lookup(self, address: str) -> GeoRecord:
        """Return a record for the address or raise ProviderError."""
        ...


def _as_float(value: Any) -> float:
    try:
        return float(value) if value not in (None, "") else 0.0
    except (TypeError, ValueError):
        return 0.0


def _text(value: Any, default: str) -> str:
    return str(value) if value not in (None, "") else default


class _HttpProvider(ABC):
    """Shared HTTP plumbing: rate limited session, timeout and retries."""

    name = "http"

    def __init__(self, session: Any, timeout: float = 5.0, max_retries: int = 2) -> None:
        self.session = session
        self.timeout = timeout
        self.max_retries = max_retries

    @abstractmethod
    def _url(self, address: str) -> str:
        """Return the request URL for an address."""

    def _params(self) -> Optional[Dict[str, str]]:
        return None

    def _fetch(self, address: str) -> Any:
        response = self.session.get(self._url(address), params=self._params(), timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _get_payload(self, address: str) -> Dict[str, Any]:
        try:
            payload = with_retries(max_retries=self.max_retries)(self._fetch)(address)
        except requests.RequestException as e:
            raise ProviderError(self.name, address, str(e)) from e
        except ValueError as e:
            raise ProviderError(self.name, address, f"invalid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise ProviderError(self.name, address, "unexpected payload type")
        return payload


class IpApiProvider(_HttpProvider):
    """ip-api.com JSON API (free tier, 45 requests per minute)."""

    name = "ip-api.com"

    def _url(self, address: str) -> str:
        return IP_API_URL.format(address=address)

    def _params(self) -> Optional[Dict[str, str]]:
        return {"fields": IP_API_FIELDS}

    def lookup(self, address: str) -> GeoRecord:
        return self.parse(address, self._get_payload(address))

    def parse(self, address: str, data: Dict[str, Any]) -> GeoRecord:
        """Convert an ip-api.com payload into a GeoRecord.

        Raises:
            ProviderError: If the payload status is not ``success``
        """
        if data.get("status") != "success":
            raise ProviderError(self.name, address, _text(data.get("message"), "status fail"))

        as_field = _text(data.get("as"), "")
        isp = _text(data.get("isp"), "Unknown ISP")
        return GeoRecord(
            address=address,
            country=_text(data.get("country"), "Unknown"),
            country_code=_text(data.get("countryCode"), "XX"),
            region=_text(data.get("regionName"), "Unknown"),
            region_code=_text(data.get("region"), ""),
            city=_text(data.get("city"), "Unknown"),
            zip_code=_text(data.get("zip"), ""),
            latitude=_as_float(data.get("lat")),
            longitude=_as_float(data.get("lon")),
            timezone=_text(data.get("timezone"), "UTC"),
            isp=isp,
            org=_text(data.get("org"), isp if isp != "Unknown ISP" else "Unknown"),
            asn=as_field.split(" ")[0] if as_field else "Unknown",
            confidence=0.95,
            proxy=bool(data.get("proxy", False)),
            hosting=bool(data.get("hosting", False)),
            mobile=bool(data.get("mobile", False)),
            source=self.name,
        )


class IpApiCoProvider(_HttpProvider):
    """ipapi.co JSON API."""

    name = "ipapi.co"

    def _url(self, address: str) -> str:
        return IPAPI_CO_URL.format(address=address)

    def lookup(self, address: str) -> GeoRecord:
        return self.parse(address, self._get_payload(address))

    def parse(self, address: str, data: Dict[str, Any]) -> GeoRecord:
        """Convert an ipapi.co payload into a GeoRecord.

        Raises:
            ProviderError: If the payload carries ``error: true``
        """
        if data.get("error"):
            raise ProviderError(self.name, address, _text(data.get("reason"), "error response"))

        return GeoRecord(
            address=address,
            country=_text(data.get("country_name"), "Unknown"),
            country_code=_text(data.get("country_code"), "XX"),
            region=_text(data.get("region"), "Unknown"),
            region_code=_text(data.get("region_code"), "XX"),
            city=_text(data.get("city"), "Unknown"),
            zip_code=_text(data.get("postal"), ""),
            latitude=_as_float(data.get("latitude")),
            longitude=_as_float(data.get("longitude")),
            timezone=_text(data.get("timezone"), "UTC"),
            currency=_text(data.get("currency"), ""),
            isp=_text(data.get("org"), "Unknown ISP"),
            org=_text(data.get("org"), "Unknown"),
            asn=_text(data.get("asn"), "Unknown"),
            confidence=0.9,
            source=self.name,
        )


class MaxMindProvider:
    """Offline GeoLite2 lookups through :class:`MaxMindClient`."""

    name = "maxmind"

    def __init__(self, client: MaxMindClient) -> None:
        self.client = client

    def lookup(self, address: str) -> GeoRecord:
        result = self.client.lookup_ip(address)
        if result is None:
            raise ProviderError(self.name, address, "address not found in GeoLite2 databases")

        isp = result.asn_org or "Unknown ISP"
        return GeoRecord(
            address=address,
            country=result.country_name or "Unknown",
            country_code=result.country_code or "XX",
            region=result.region or "Unknown",
            region_code=result.region_code or "",
            city=result.city or "Unknown",
            zip_code=result.postal_code or "",
            latitude=result.latitude if result.latitude is not None else 0.0,
            longitude=result.longitude if result.longitude is not None else 0.0,
            timezone=result.time_zone or "UTC",
            isp=isp,
            org=result.asn_org or "Unknown",
            asn=f"AS{result.asn}" if result.asn else "Unknown",
            confidence=0.85,
            source=self.name,
        )


def fallback_record(address: str) -> Optional[GeoRecord]:
    """Return the built-in record for a well-known resolver address."""
    data = FALLBACK_RECORDS.get(address.strip().lower())
    if data is None:
        return None
    return GeoRecord(address=address, source="fallback_data", **data)


def estimate_location(address: str) -> GeoRecord:
    """Coarse region guess from the first IPv4 octet (1-126 US, 128-191 EU, else AS)."""
    if ":" in address:
        return GeoRecord(address=address, confidence=ESTIMATED_CONFIDENCE, source="estimated")

    first_octet = int(address.strip().split(".")[0])
    if 1 <= first_octet <= 126:
        country, code, lat, lon = "United States", "US", 37.0902, -95.7129
    elif 128 <= first_octet <= 191:
        country, code, lat, lon = "Europe", "EU", 50.1109, 8.6821
    else:
        country, code, lat, lon = "Asia", "AS", 34.0522, 100.4966

    return GeoRecord(
        address=address,
        country=country,
        country_code=code,
        latitude=lat,
        longitude=lon,
        confidence=ESTIMATED_CONFIDENCE,
        source="estimated",
    )


class ProviderChain:
    """Try providers in order, then built-in fallback data, then an estimate.

    ``resolve`` never raises for a valid address: provider failures are logged and
    counted, and the chain moves on.
    """

    def __init__(
        self,
        providers: Iterable[GeoProvider],
        use_fallback_data: bool = True,
        closeables: Iterable[Any] = (),
    ) -> None:
        self.providers: List[GeoProvider] = list(providers)
        self.use_fallback_data = use_fallback_data
        self._closeables: List[Any] = list(closeables)
        self.stats: Dict[str, int] = {"resolved": 0, "fallback": 0, "estimated": 0, "provider_errors": 0}

    def resolve(self, address: str) -> GeoRecord:
        for provider in self.providers:
            try:
                record = provider.lookup(address)
            except ProviderError as e:
                self.stats["provider_errors"] += 1
                logger.warning(f"{e}; trying next source")
                continue
            self.stats["resolved"] += 1
            logger.debug(f"Resolved {address} via {provider.name}")
            return record

        if self.use_fallback_data:
            record = fallback_record(address)
            if record is not None:
                self.stats["fallback"] += 1
                logger.warning(f"Using fallback data for {address}")
                return record

        self.stats["estimated"] += 1
        logger.warning(f"All providers failed for {address}; using estimated location")
        return estimate_location(address)

    def get_stats(self) -> Dict[str, int]:
        return dict(self.stats)

    def close(self) -> None:
        """Close sessions and database readers created for this chain."""
        for resource in self._closeables:
            resource.close()
        self._closeables.clear()


def create_provider_chain(
    settings: LookupSettings,
    session: Any | None = None,
    maxmind_client: MaxMindClient | None = None,
) -> ProviderChain:
    """Build the provider chain described by ``settings.provider_chain``.

    Args:
        settings: Lookup settings (provider order, timeout, rate limits, MaxMind directory)
        session: Object with a requests-style ``get``; a RateLimitedSession is created when omitted
        maxmind_client: Pre-built client; created from ``settings.maxmind_db_dir`` when omitted

    Returns:
        ProviderChain over the configured providers
    """
    providers: List[GeoProvider] = []
    owned: List[Any] = []
    http_session = session

    for name in settings.provider_chain:
        if name == "maxmind":
            client = maxmind_client
            if client is None and settings.maxmind_db_dir is not None:
                client = MaxMindClient(settings.maxmind_db_dir)
                owned.append(client)
            if client is None or not client.available:
                logger.warning("MaxMind provider requested but no GeoLite2 database is available; skipping")
                continue
            providers.append(MaxMindProvider(client))
            continue

        if http_session is None:
            http_session = RateLimitedSession(settings.rate_limit, settings.rate_burst, settings.user_agent)
            owned.append(http_session)
        provider_cls = IpApiProvider if name == "ip-api" else IpApiCoProvider
        providers.append(provider_cls(http_session, timeout=settings.request_timeout, max_retries=settings.max_retries))

    logger.info(f"Provider chain: {', '.join(p.name for p in providers) or 'fallback only'}")
    return ProviderChain(providers, closeables=owned)


__all__ = [
    "FALLBACK_RECORDS",
    "GeoProvider",
    "IpApiCoProvider",
    "IpApiProvider",
    "MaxMindProvider",
    "ProviderChain",
    "create_provider_chain",
    "estimate_location",
    "fallback_record",
]
