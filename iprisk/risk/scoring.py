"""Risk score aggregation.

Combines a FeatureBag into a single score with a fixed weighted sum, clamped to
[0.0, 1.0], then maps the score to a risk level and the detections to an anonymity level.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .features import extract_features
from .models import AnonymityLevel, FeatureBag, RiskLevel, RiskVerdict

TOR_WEIGHT = 0.50
VPN_WEIGHT = 0.35
PROXY_WEIGHT = 0.40
HOSTING_WEIGHT = 0.25
SUSPICIOUS_ASN_WEIGHT = 0.30

HIGH_THRESHOLD = 0.7
MEDIUM_THRESHOLD = 0.4
MALICIOUS_THRESHOLD = 0.7


def risk_level(value: float) -> RiskLevel:
    """Map a score to its level: >= 0.7 high, >= 0.4 medium, else low."""
    if value >= HIGH_THRESHOLD:
        return RiskLevel.HIGH
    if value >= MEDIUM_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def anonymity_level(features: FeatureBag) -> AnonymityLevel:
    """Return the anonymity implied by the strongest detection (Tor first)."""
    if features.is_tor:
        return AnonymityLevel.VERY_HIGH
    if features.vpn_detected:
        return AnonymityLevel.HIGH
    if features.is_proxy:
        return AnonymityLevel.MEDIUM
    if features.is_hosting:
        return AnonymityLevel.LOW
    return AnonymityLevel.NONE


def score(features: FeatureBag) -> RiskVerdict:
    """Score a FeatureBag.

    Weights: Tor 0.50, VPN 0.35, proxy 0.40, hosting 0.25, suspicious ASN 0.30.

    Example:
        >>> from iprisk.risk import FeatureBag, score
        >>> verdict = score(FeatureBag(is_tor=True, vpn_detected=True))
        >>> verdict.score, verdict.level.value
        (0.85, 'high')
    """
    total = 0.0
    if features.is_tor:
        total += TOR_WEIGHT
    if features.vpn_detected:
        total += VPN_WEIGHT
    if features.is_proxy:
        total += PROXY_WEIGHT
    if features.is_hosting:
        total += HOSTING_WEIGHT
    if "suspicious_asn" in features.matched_factors:
        total += SUSPICIOUS_ASN_WEIGHT

    # Strip float noise from sums such as 0.35 + 0.25
    clamped = round(min(max(total, 0.0), 1.0), 10)
    level = risk_level(clamped)
    return RiskVerdict(
        score=clamped,
        level=level,
        category=level.category,
        anonymity_level=anonymity_level(features),
    )


def risk_to_100_scale(value: float) -> int:
    """Convert a 0-1 risk score to a 0-100 integer."""
    return int(round(value * 100))


def analyze_risk(
    address: str,
    isp: Optional[str] = None,
    asn: Optional[object] = None,
    hostname: Optional[str] = None,
) -> Dict[str, Any]:
    """Extract features and score them, returning the flat risk summary used in responses."""
    features = extract_features(address, isp=isp, asn=asn, hostname=hostname)
    return risk_summary(features, score(features))


def risk_summary(features: FeatureBag, verdict: RiskVerdict) -> Dict[str, Any]:
    """Flatten a FeatureBag and its verdict into a response block."""
    return {
        "riskScore": verdict.score,
        "riskLevel": verdict.level.value,
        "riskCategory": verdict.category,
        "isVpn": features.vpn_detected,
        "isTor": features.is_tor,
        "isProxy": features.is_proxy,
        "isHosting": features.is_hosting,
        "isBot": False,
        "isMalicious": verdict.score > MALICIOUS_THRESHOLD,
        "confidence": features.confidence,
        "factors": list(features.matched_factors),
        "vpnService": features.vpn_service_name,
        "anonymityLevel": verdict.anonymity_level.value,
    }
