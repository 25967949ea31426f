"""Heuristic risk scoring.

Static keyword, ASN and prefix tables are evaluated against an address and its
network metadata, then combined into a weighted risk score.

Example:
    >>> from iprisk.risk import extract_features, score
    >>> verdict = score(extract_features("185.220.101.1"))
    >>> print(f"{verdict.level.value} ({verdict.anonymity_level.value})")
    high (very_high)
"""

from .connection import ConnectionProfile, classify_connection
from .features import extract_features, normalize_asn
from .models import AnonymityLevel, FeatureBag, RiskLevel, RiskVerdict
from .scoring import analyze_risk, risk_summary, risk_to_100_scale, score
from .threat_intel import ThreatIndicators, analyze_threats, check_threat_indicators

__all__ = [
    "AnonymityLevel",
    "ConnectionProfile",
    "FeatureBag",
    "RiskLevel",
    "RiskVerdict",
    "ThreatIndicators",
    "analyze_risk",
    "analyze_threats",
    "check_threat_indicators",
    "classify_connection",
    "extract_features",
    "normalize_asn",
    "risk_summary",
    "risk_to_100_scale",
    "score",
]
