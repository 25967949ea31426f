"""Unit tests for risk score aggregation."""

from __future__ import annotations

import pytest

from iprisk.risk import AnonymityLevel, FeatureBag, RiskLevel, analyze_risk, risk_summary, risk_to_100_scale, score
from iprisk.risk.scoring import anonymity_level, risk_level


class TestRiskLevel:
    """Test score to level thresholds."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0.0, RiskLevel.LOW),
            (0.39, RiskLevel.LOW),
            (0.4, RiskLevel.MEDIUM),
            (0.69, RiskLevel.MEDIUM),
            (0.7, RiskLevel.HIGH),
            (1.0, RiskLevel.HIGH),
        ],
    )
    def test_thresholds(self, value: float, expected: RiskLevel) -> None:
        """Thresholds are inclusive at 0.4 and 0.7."""
        assert risk_level(value) is expected

    def test_category_label(self) -> None:
        """Each level has a ``<level>_risk`` category."""
        assert RiskLevel.HIGH.category == "high_risk"
        assert RiskLevel.LOW.category == "low_risk"


class TestAnonymityLevel:
    """Test anonymity derivation."""

    def test_strongest_detection_wins(self) -> None:
        """Tor outranks VPN, which outranks proxy, which outranks hosting."""
        assert anonymity_level(FeatureBag(is_tor=True, vpn_detected=True, is_hosting=True)) is AnonymityLevel.VERY_HIGH
        assert anonymity_level(FeatureBag(vpn_detected=True, is_proxy=True)) is AnonymityLevel.HIGH
        assert anonymity_level(FeatureBag(is_proxy=True, is_hosting=True)) is AnonymityLevel.MEDIUM
        assert anonymity_level(FeatureBag(is_hosting=True)) is AnonymityLevel.LOW
        assert anonymity_level(FeatureBag()) is AnonymityLevel.NONE


class TestScore:
    """Test weighted scoring."""

    def test_empty_bag_scores_zero(self) -> None:
        """No detections means a zero, low risk score."""
        verdict = score(FeatureBag())

        assert verdict.score == 0.0
        assert verdict.level is RiskLevel.LOW
        assert verdict.category == "low_risk"
        assert verdict.anonymity_level is AnonymityLevel.NONE

    def test_tor_alone_is_medium(self) -> None:
        """Tor weight alone is 0.50."""
        verdict = score(FeatureBag(is_tor=True))

        assert verdict.score == 0.5
        assert verdict.level is RiskLevel.MEDIUM

    def test_identical_inputs_identical_verdicts(self) -> None:
        """Scoring is deterministic."""
        bag = FeatureBag(vpn_detected=True, is_hosting=True)

        assert score(bag) == score(bag)

    def test_tor_with_vpn(self) -> None:
        """Tor plus VPN adds 0.50 and 0.35."""
        verdict = score(FeatureBag(is_tor=True, vpn_detected=True))

        assert verdict.score == 0.85
        assert verdict.level is RiskLevel.HIGH

    def test_vpn_and_hosting_sum_exactly(self) -> None:
        """Sums are free of float noise."""
        verdict = score(FeatureBag(vpn_detected=True, is_hosting=True))

        assert verdict.score == 0.6
        assert verdict.level is RiskLevel.MEDIUM

    def test_suspicious_asn_factor_adds_weight(self) -> None:
        """The suspicious_asn factor contributes 0.30 on top of VPN."""
        verdict = score(FeatureBag(vpn_detected=True, matched_factors=("suspicious_asn",)))

        assert verdict.score == 0.65
        assert verdict.level is RiskLevel.MEDIUM

    def test_proxy_alone_is_medium(self) -> None:
        """Proxy weight alone reaches the medium threshold."""
        assert score(FeatureBag(is_proxy=True)).level is RiskLevel.MEDIUM

    def test_clamped_to_one(self) -> None:
        """Every detection together is clamped to 1.0."""
        bag = FeatureBag(
            is_tor=True,
            vpn_detected=True,
            is_proxy=True,
            is_hosting=True,
            matched_factors=("tor_exit_node", "suspicious_asn"),
        )

        assert score(bag).score == 1.0

    def test_hosting_only(self) -> None:
        """Hosting alone is low risk."""
        verdict = score(FeatureBag(is_hosting=True))

        assert verdict.score == 0.25
        assert verdict.level is RiskLevel.LOW
        assert verdict.anonymity_level is AnonymityLevel.LOW


class TestRiskSummary:
    """Test the flattened risk block."""

    def test_summary_fields(self) -> None:
        """The summary mirrors features and verdict."""
        bag = FeatureBag(vpn_detected=True, confidence=0.8, matched_factors=("known_vpn_asn",), vpn_service_name="X")
        summary = risk_summary(bag, score(bag))

        assert summary["riskScore"] == 0.35
        assert summary["riskLevel"] == "low"
        assert summary["riskCategory"] == "low_risk"
        assert summary["isVpn"] is True
        assert summary["isBot"] is False
        assert summary["isMalicious"] is False
        assert summary["factors"] == ["known_vpn_asn"]
        assert summary["vpnService"] == "X"
        assert summary["anonymityLevel"] == "high"
        assert summary["confidence"] == 0.8

    def test_malicious_is_strictly_above_threshold(self) -> None:
        """A score of exactly 0.7 is high risk but not malicious."""
        at_threshold = FeatureBag(is_proxy=True, matched_factors=("suspicious_asn",))
        above = FeatureBag(is_tor=True, vpn_detected=True)

        assert risk_summary(at_threshold, score(at_threshold))["isMalicious"] is False
        assert score(at_threshold).level is RiskLevel.HIGH
        assert risk_summary(above, score(above))["isMalicious"] is True

    def test_vpn_with_proxy_is_malicious(self) -> None:
        """VPN plus proxy without Tor lands on 0.75, which is malicious."""
        bag = FeatureBag(vpn_detected=True, is_proxy=True)
        summary = risk_summary(bag, score(bag))

        assert summary["riskScore"] == 0.75
        assert summary["riskLevel"] == "high"
        assert summary["isMalicious"] is True


class TestAnalyzeRisk:
    """Test the extract-and-score helper."""

    def test_tor_exit(self) -> None:
        """A known Tor exit is high risk with very high anonymity."""
        summary = analyze_risk("185.220.101.1")

        assert summary["isTor"] is True
        assert summary["riskLevel"] == "high"
        assert summary["anonymityLevel"] == "very_high"

    def test_clean_residential(self) -> None:
        """A residential ISP is low risk."""
        summary = analyze_risk("98.97.96.95", isp="Comcast Cable Communications", asn="AS7922")

        assert summary["riskScore"] == 0.0
        assert summary["factors"] == []


class TestScale:
    """Test 0-100 conversion."""

    @pytest.mark.parametrize("value,expected", [(0.0, 0), (0.35, 35), (0.85, 85), (1.0, 100), (0.655, 66)])
    def test_risk_to_100_scale(self, value: float, expected: int) -> None:
        """Scores are rounded to whole points."""
        assert risk_to_100_scale(value) == expected
