"""Unit tests for static threat indicators."""

from __future__ import annotations

import pytest

from iprisk.risk import ThreatIndicators, analyze_threats, check_threat_indicators


class TestCheckThreatIndicators:
    """Test the malicious prefix check."""

    @pytest.mark.parametrize("address", ["185.220.101.45", "89.248.165.1", "104.248.52.200", "199.195.250.77"])
    def test_listed_prefixes_match(self, address: str) -> None:
        """Addresses inside a listed prefix are threats."""
        result = check_threat_indicators(address)

        assert result.is_threat is True
        assert result.is_malicious is True
        assert result.confidence == 0.85
        assert result.reputation_score == 75
        assert result.sources == ("threat_intelligence_db", "tor_exit_nodes")
        assert result.threat_types == ("anonymizer", "potential_threat")

    def test_first_matching_prefix_is_reported(self) -> None:
        """The matched prefix is recorded."""
        assert check_threat_indicators("185.234.218.9").matched_prefix == "185.234.218"

    @pytest.mark.parametrize("address", ["8.8.8.8", "185.220.1.1", "185.220.1011.1", "2001:db8::1", ""])
    def test_unlisted_addresses(self, address: str) -> None:
        """Prefixes only match on whole octets."""
        result = check_threat_indicators(address)

        assert result == ThreatIndicators()
        assert result.is_threat is False
        assert result.matched_prefix is None

    def test_to_dict(self) -> None:
        """Serialised indicators use camelCase keys and lists."""
        data = check_threat_indicators("23.129.64.10").to_dict()

        assert data["isThreat"] is True
        assert data["isMalicious"] is True
        assert data["isSpam"] is False
        assert data["isScanner"] is False
        assert data["isBotnet"] is False
        assert data["reputationScore"] == 75
        assert data["sources"] == ["threat_intelligence_db", "tor_exit_nodes"]
        assert data["threatTypes"] == ["anonymizer", "potential_threat"]


class TestAnalyzeThreats:
    """Test range, Tor and VPN prefix analysis."""

    def test_tor_range_counts_twice(self) -> None:
        """A Tor range also matches the Tor prefix list."""
        report = analyze_threats("185.220.101.7")

        assert report["threatDetected"] is True
        assert report["threatScore"] == 60
        assert report["threatTypes"] == ["tor_exit", "tor_exit"]
        assert report["isTor"] is True
        assert report["confidence"] == 90

    def test_commercial_vpn_range(self) -> None:
        """VPN ranges are reported through both the range table and the VPN list."""
        report = analyze_threats("104.238.10.20")

        assert report["threatDetected"] is True
        assert report["threatTypes"] == ["commercial_vpn", "commercial_vpn"]
        assert report["isVpn"] is True
        assert report["isTor"] is False
        assert report["confidence"] == 70

    def test_malware_range(self) -> None:
        """Three-octet ranges match on the full prefix."""
        report = analyze_threats("185.234.218.1")

        assert report["threatDetected"] is True
        assert report["threatTypes"] == ["malware_c2"]

    @pytest.mark.parametrize("address", ["185.234.1.1", "89.248.1.1", "104.248.1.1"])
    def test_three_octet_ranges_ignore_sibling_networks(self, address: str) -> None:
        """Sharing the first two octets with a three-octet range is not a range hit."""
        report = analyze_threats(address)

        assert report["threatDetected"] is False
        assert report["threatTypes"] == []

    def test_tor_prefix_without_range(self) -> None:
        """A Tor prefix outside the range table is Tor without a threat score."""
        report = analyze_threats("45.141.215.100")

        assert report["threatDetected"] is False
        assert report["threatScore"] == 0
        assert report["threatTypes"] == ["tor_exit"]
        assert report["isTor"] is True

    def test_clean_address(self) -> None:
        """Unlisted addresses produce an empty report."""
        report = analyze_threats("8.8.8.8")

        assert report == {
            "threatDetected": False,
            "threatScore": 0,
            "isMalicious": False,
            "confidence": 70,
            "threatTypes": [],
            "dataSources": ["AlienVault_OTX", "ThreatCrowd", "internal_analysis"],
            "isVpn": False,
            "isTor": False,
            "isProxy": False,
        }
