"""IP lookup service composing classification, geolocation and risk scoring.

Lookup pipeline:
1. Classify the address (invalid input raises InvalidAddress)
2. Special-purpose addresses short-circuit with an explanatory response
3. Cached responses are returned when still within the TTL
4. The provider chain resolves geolocation and network data
5. Heuristic features are extracted from ISP, ASN and hostname, then scored
6. Static mappers add continent, currency, ASN organisation and privacy regime

Example:
    >>> from iprisk.service import IPLookupService
    >>> with IPLookupService() as service:
    ...     result = service.lookup("8.8.8.8")
    ...     print(result["location"]["city"], result["risk"]["riskLevel"])
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, Iterable, Optional

from .classification import AddressClassification, InvalidAddress, classify, special_address_response
from .lookup.accuracy import calculate_accuracy
from .lookup.cache import LookupCache
from .lookup.models import GeoRecord
from .lookup.providers import ProviderChain, create_provider_chain
from .lookup.reverse_dns import ReverseDNSResolver
from .mappers import asn_organization, continent_of, currency_of, extract_asn_number, gdpr_info
from .risk import (
    FeatureBag,
    analyze_threats,
    check_threat_indicators,
    classify_connection,
    extract_features,
    risk_summary,
    risk_to_100_scale,
    score,
)
from .settings import LookupSettings

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "lookup"
PROVIDER_PROXY_FACTOR = "provider_proxy_flag"


class IPLookupService:
    """Resolve an address into location, network, privacy and risk attributes.

    Not thread-safe: the cache counters, provider chain and HTTP session are
    per-instance. Use one service per thread.
    """

    def __init__(
        self,
        settings: Optional[LookupSettings] = None,
        provider_chain: Optional[ProviderChain] = None,
        cache: Optional[LookupCache] = None,
        resolver: Optional[ReverseDNSResolver] = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Lookup settings; loaded from the environment when omitted
            provider_chain: Pre-built provider chain; built from settings when omitted
            cache: Response cache; created under ``settings.cache_dir`` when caching is enabled
            resolver: Reverse DNS resolver; created when ``settings.reverse_dns`` is set
        """
        self.settings = settings if settings is not None else LookupSettings.from_sources()
        self.provider_chain = provider_chain if provider_chain is not None else create_provider_chain(self.settings)

        self.cache = cache
        if self.cache is None and self.settings.enable_cache:
            self.cache = LookupCache(self.settings.cache_dir, self.settings.cache_ttl_seconds)

        self.resolver = resolver
        if self.resolver is None and self.settings.reverse_dns:
            self.resolver = ReverseDNSResolver(timeout=self.settings.request_timeout)

        self._stats = {
            "lookups": 0,
            "cache_hits": 0,
            "cache_misses": 0,
            "special_addresses": 0,
            "invalid_addresses": 0,
        }
        logger.info(
            f"IP lookup service ready (cache={'on' if self.cache else 'off'}, "
            f"reverse_dns={'on' if self.resolver else 'off'})"
        )

    def lookup(self, address: str) -> Dict[str, Any]:
        """Look up one address.

        Args:
            address: IPv4 or IPv6 literal

        Returns:
            Response dictionary; ``cached`` tells whether it came from the cache

        Raises:
            InvalidAddress: If the string is not a valid IP address
        """
        self._stats["lookups"] += 1
        try:
            classification = classify(address)
        except InvalidAddress:
            self._stats["invalid_addresses"] += 1
            raise

        special = special_address_response(classification)
        if special is not None:
            self._stats["special_addresses"] += 1
            logger.debug(f"{classification.address} is {classification.category.value}; skipping geolocation")
            special["cached"] = False
            return special

        key = classification.address
        if self.cache is not None:
            cached = self.cache.get(CACHE_NAMESPACE, key)
            if cached is not None:
                self._stats["cache_hits"] += 1
                cached["cached"] = True
                return cached
            self._stats["cache_misses"] += 1

        record = self.provider_chain.resolve(key)
        hostname = self.resolver.lookup(key) if self.resolver is not None else None
        features = self._features_for(record, hostname)
        response = self._build_response(classification, record, hostname, features)

        if self.cache is not None:
            self.cache.store(CACHE_NAMESPACE, key, response)

        response["cached"] = False
        return response

    def bulk_lookup(self, addresses: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Look up several addresses; invalid ones map to an error entry instead of raising."""
        results: Dict[str, Dict[str, Any]] = {}
        for address in addresses:
            try:
                results[address] = self.lookup(address)
            except InvalidAddress as e:
                results[address] = {"error": True, "ip": address, "type": "invalid", "message": str(e)}
        return results

    def _features_for(self, record: GeoRecord, hostname: Optional[str]) -> FeatureBag:
        features = extract_features(record.address, isp=record.isp, asn=record.asn, hostname=hostname)
        if record.proxy:
            features = dataclasses.replace(
                features,
                is_proxy=True,
                matched_factors=features.matched_factors + (PROVIDER_PROXY_FACTOR,),
            )
        return features

    def _build_response(
        self,
        classification: AddressClassification,
        record: GeoRecord,
        hostname: Optional[str],
        features: FeatureBag,
    ) -> Dict[str, Any]:
        verdict = score(features)
        risk = risk_summary(features, verdict)
        risk["riskScore"] = risk_to_100_scale(verdict.score)
        risk["riskScoreRaw"] = verdict.score

        return {
            "ip": classification.address,
            "ipVersion": f"IPv{classification.ip_version}",
            "type": classification.category.value,
            "canGeolocate": True,
            "location": {
                "country": record.country,
                "countryCode": record.country_code,
                "region": record.region,
                "regionCode": record.region_code,
                "city": record.city,
                "zipCode": record.zip_code,
                "latitude": record.latitude,
                "longitude": record.longitude,
                "timezone": record.timezone,
                "continent": continent_of(record.country_code),
            },
            "currency": record.currency or currency_of(record.country_code),
            "network": {
                "isp": record.isp,
                "org": record.org,
                "asn": record.asn,
                "asnNumber": extract_asn_number(record.asn),
                "asnOrganization": asn_organization(record.asn),
                "hostname": hostname,
            },
            "connection": classify_connection(record.isp, is_vpn=features.vpn_detected).to_dict(),
            "privacy": gdpr_info(record.country_code).to_dict(),
            "accuracy": calculate_accuracy(record.confidence),
            "threat": {
                **check_threat_indicators(classification.address).to_dict(),
                "analysis": analyze_threats(classification.address),
            },
            "risk": risk,
            "dataSource": record.source,
        }

    def get_stats(self) -> Dict[str, Any]:
        """Return service, provider chain and cache statistics."""
        stats: Dict[str, Any] = dict(self._stats)
        stats["providers"] = self.provider_chain.get_stats()
        if self.cache is not None:
            stats["cache"] = self.cache.snapshot()
        return stats

    def close(self) -> None:
        """Close HTTP sessions and database readers held by the provider chain."""
        self.provider_chain.close()

    def __enter__(self) -> IPLookupService:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()


__all__ = ["IPLookupService"]
