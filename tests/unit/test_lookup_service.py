"""Unit tests for the IP lookup service."""

from __future__ import annotations

from pathlib import Path
from typing import Callable
from unittest.mock import Mock

import pytest

from iprisk.classification import InvalidAddress
from iprisk.lookup.cache import LookupCache
from iprisk.lookup.models import GeoRecord
from iprisk.lookup.providers import ProviderChain
from iprisk.service import IPLookupService
from iprisk.settings import LookupSettings


@pytest.fixture
def settings(tmp_path: Path) -> LookupSettings:
    """Settings with caching disabled."""
    return LookupSettings(cache_dir=tmp_path / "cache", enable_cache=False)


class TestLookup:
    """Test the lookup pipeline."""

    def test_public_address_response(
        self, settings: LookupSettings, static_chain: Callable[..., ProviderChain], google_record: GeoRecord
    ) -> None:
        """A public address is geolocated, enriched and scored."""
        service = IPLookupService(settings, provider_chain=static_chain(record=google_record))

        result = service.lookup("8.8.8.8")

        assert result["ip"] == "8.8.8.8"
        assert result["ipVersion"] == "IPv4"
        assert result["type"] == "public"
        assert result["canGeolocate"] is True
        assert result["cached"] is False
        assert result["location"]["city"] == "Mountain View"
        assert result["location"]["continent"] == "North America"
        assert result["currency"] == "USD"
        assert result["network"]["asnNumber"] == 15169
        assert result["network"]["asnOrganization"] == "Google LLC"
        assert result["network"]["hostname"] is None
        assert result["privacy"]["dataProtectionLaw"] == "CCPA"
        assert result["accuracy"]["accuracyRadiusKm"] == 10
        assert result["threat"]["isThreat"] is False
        assert result["threat"]["analysis"]["threatDetected"] is False
        assert result["dataSource"] == "ip-api.com"

    def test_legitimate_service_scores_low(
        self, settings: LookupSettings, static_chain: Callable[..., ProviderChain], google_record: GeoRecord
    ) -> None:
        """Google DNS triggers the legitimate-service override."""
        service = IPLookupService(settings, provider_chain=static_chain(record=google_record))

        risk = service.lookup("8.8.8.8")["risk"]

        assert risk["factors"] == ["legitimate_service"]
        assert risk["isVpn"] is False
        assert risk["riskScore"] == 0
        assert risk["riskScoreRaw"] == 0.0
        assert risk["riskLevel"] == "low"
        assert risk["confidence"] == 0.9

    def test_vpn_hosting_scores_on_100_scale(
        self, settings: LookupSettings, static_chain: Callable[..., ProviderChain]
    ) -> None:
        """Risk scores are reported on a 0-100 scale with the raw value alongside."""
        record = GeoRecord(
            address="104.131.0.1",
            country_code="NL",
            isp="DigitalOcean, LLC",
            asn="AS14061",
            confidence=0.95,
            source="ip-api.com",
        )
        service = IPLookupService(settings, provider_chain=static_chain(record=record))

        result = service.lookup("104.131.0.1")

        assert result["risk"]["riskScore"] == 65
        assert result["risk"]["riskScoreRaw"] == 0.65
        assert result["risk"]["vpnService"] == "DigitalOcean (VPN Hosting)"
        assert result["connection"]["connectionType"] == "vpn"
        assert result["currency"] == "EUR"
        assert result["privacy"]["gdprApplicable"] is True

    def test_provider_proxy_flag(self, settings: LookupSettings, static_chain: Callable[..., ProviderChain]) -> None:
        """A provider proxy flag sets isProxy and adds a factor."""
        record = GeoRecord(address="5.6.7.8", isp="Example Telecom", proxy=True, source="ip-api.com")
        service = IPLookupService(settings, provider_chain=static_chain(record=record))

        risk = service.lookup("5.6.7.8")["risk"]

        assert risk["isProxy"] is True
        assert risk["factors"] == ["provider_proxy_flag"]
        assert risk["riskScore"] == 40
        assert risk["anonymityLevel"] == "medium"

    def test_special_address_skips_providers(self, settings: LookupSettings) -> None:
        """Special-purpose addresses never reach the provider chain."""
        chain = Mock()
        service = IPLookupService(settings, provider_chain=chain)

        result = service.lookup("192.168.1.1")

        assert result["type"] == "private"
        assert result["canGeolocate"] is False
        assert result["cached"] is False
        chain.resolve.assert_not_called()
        assert service.get_stats()["special_addresses"] == 1

    def test_invalid_address_raises(self, settings: LookupSettings) -> None:
        """Invalid input raises InvalidAddress and is counted."""
        service = IPLookupService(settings, provider_chain=Mock())

        with pytest.raises(InvalidAddress):
            service.lookup("999.1.1.1")

        assert service.get_stats()["invalid_addresses"] == 1

    def test_estimated_location_when_providers_fail(
        self, settings: LookupSettings, static_chain: Callable[..., ProviderChain]
    ) -> None:
        """Provider failures fall back to an estimate instead of raising."""
        service = IPLookupService(settings, provider_chain=static_chain(error="timeout"))

        result = service.lookup("5.6.7.8")

        assert result["dataSource"] == "estimated"
        assert result["location"]["countryCode"] == "US"
        assert result["accuracy"]["dataQuality"] == "low"

    def test_reverse_dns_hostname_feeds_heuristics(
        self, settings: LookupSettings, static_chain: Callable[..., ProviderChain]
    ) -> None:
        """A PTR hostname is reported and used for VPN pattern matching."""
        record = GeoRecord(address="5.6.7.8", isp="Example Telecom", source="ip-api.com")
        resolver = Mock()
        resolver.lookup.return_value = "node-12.vpn.example.net"
        service = IPLookupService(settings, provider_chain=static_chain(record=record), resolver=resolver)

        result = service.lookup("5.6.7.8")

        assert result["network"]["hostname"] == "node-12.vpn.example.net"
        assert result["risk"]["isVpn"] is True
        assert result["risk"]["factors"] == ["vpn_pattern_match"]


class TestCaching:
    """Test response caching."""

    def test_second_lookup_is_cached(
        self,
        settings: LookupSettings,
        lookup_cache: LookupCache,
        static_chain: Callable[..., ProviderChain],
        google_record: GeoRecord,
    ) -> None:
        """A repeated lookup is served from the cache."""
        chain = static_chain(record=google_record)
        service = IPLookupService(settings, provider_chain=chain, cache=lookup_cache)

        first = service.lookup("8.8.8.8")
        second = service.lookup("8.8.8.8")

        assert first["cached"] is False
        assert second["cached"] is True
        assert second["location"] == first["location"]
        assert chain.providers[0].calls == ["8.8.8.8"]
        stats = service.get_stats()
        assert stats["cache_hits"] == 1
        assert stats["cache_misses"] == 1
        assert stats["cache"]["stores"] == 1

    def test_cached_response_keeps_requested_spelling(
        self,
        settings: LookupSettings,
        lookup_cache: LookupCache,
        static_chain: Callable[..., ProviderChain],
        google_record: GeoRecord,
    ) -> None:
        """A zero-padded spelling is not served the entry stored for the plain one."""
        service = IPLookupService(settings, provider_chain=static_chain(record=google_record), cache=lookup_cache)

        service.lookup("8.8.8.8")
        padded = service.lookup("08.8.8.8")

        assert padded["ip"] == "08.8.8.8"
        assert padded["cached"] is False

    def test_cache_created_from_settings(self, tmp_path: Path) -> None:
        """Caching is enabled by default under settings.cache_dir."""
        service = IPLookupService(LookupSettings(cache_dir=tmp_path / "c"), provider_chain=Mock())

        assert service.cache is not None
        assert service.cache.base_dir == tmp_path / "c"
        assert service.resolver is None


class TestBulkLookup:
    """Test bulk lookups."""

    def test_invalid_entries_do_not_abort(
        self, settings: LookupSettings, static_chain: Callable[..., ProviderChain], google_record: GeoRecord
    ) -> None:
        """Invalid addresses become error entries."""
        service = IPLookupService(settings, provider_chain=static_chain(record=google_record))

        results = service.bulk_lookup(["8.8.8.8", "not-an-ip", "10.0.0.1"])

        assert list(results) == ["8.8.8.8", "not-an-ip", "10.0.0.1"]
        assert results["not-an-ip"]["error"] is True
        assert results["not-an-ip"]["type"] == "invalid"
        assert results["10.0.0.1"]["type"] == "private"
        assert results["8.8.8.8"]["type"] == "public"


class TestLifecycle:
    """Test close and context manager behaviour."""

    def test_context_manager_closes_chain(self, settings: LookupSettings) -> None:
        """Exiting the context closes the provider chain."""
        chain = Mock()

        with IPLookupService(settings, provider_chain=chain):
            pass

        chain.close.assert_called_once_with()
