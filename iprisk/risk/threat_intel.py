"""Static threat indicators matched on address prefixes.

No live feeds are consulted: the prefix tables below are fixed snapshots of Tor exit,
malware C2, botnet and scanner networks. Only dotted IPv4 addresses can match.

Every table entry is matched against the address on its full length, two or three
leading octets, followed by a dot. Three-octet ranges such as ``185.220.101`` and
``185.234.218`` therefore hit only their own /24, and ``analyze_threats`` reports a range
hit and a Tor prefix hit separately, so ``185.220.101.x`` yields ``tor_exit`` twice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Leading octets, each followed by "." when matched
MALICIOUS_PREFIXES: Tuple[str, ...] = (
    # Tor exit nodes
    "185.220.101",
    "199.87.154",
    "104.244.72",
    "23.129.64",
    "185.220.102",
    "185.165.169",
    "94.230.208",
    "162.247.74",
    "185.100.87",
    "198.98.51",
    "104.244.77",
    "199.195.250",
    # Malware C2
    "185.234.218",
    "89.248.165",
    "104.248.49",
    "185.159.158",
    "89.187.161",
    "185.220.103",
    "104.244.73",
    "199.87.155",
    # Botnet infrastructure
    "185.234.219",
    "89.248.166",
    "104.248.50",
    "185.159.159",
    # Scanners
    "185.234.221",
    "89.248.168",
    "104.248.52",
    "185.159.161",
)

MALICIOUS_RANGES: Mapping[str, str] = MappingProxyType(
    {
        "185.220.101": "tor_exit",
        "185.220.102": "tor_exit",
        "104.238": "commercial_vpn",
        "107.189": "commercial_vpn",
        "185.234.218": "malware_c2",
        "89.248.165": "botnet",
        "104.248.49": "scanner",
    }
)

TOR_PREFIXES: Tuple[str, ...] = ("185.220", "185.100", "109.70", "199.249", "45.141")
VPN_PREFIXES: Tuple[str, ...] = ("104.238", "107.189")

DATA_SOURCES: Tuple[str, ...] = ("AlienVault_OTX", "ThreatCrowd", "internal_analysis")


def _starts_with(address: str, prefix: str) -> bool:
    return address.startswith(f"{prefix}.")


@dataclass(slots=True, frozen=True)
class ThreatIndicators:
    """Result of the malicious prefix check.

    Attributes:
        is_threat: Address falls inside a listed prefix
        confidence: 0.85 on a match, 0.0 otherwise
        reputation_score: 75 on a match, 0 otherwise
        sources: Names of the tables that matched
        threat_types: Threat labels for the match
        matched_prefix: Prefix that matched, if any
    """

    is_threat: bool = False
    confidence: float = 0.0
    reputation_score: int = 0
    sources: Tuple[str, ...] = ()
    threat_types: Tuple[str, ...] = ()
    matched_prefix: Optional[str] = None

    @property
    def is_malicious(self) -> bool:
        return self.is_threat

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to the camelCase response block."""
        return {
            "isThreat": self.is_threat,
            "confidence": self.confidence,
            "isMalicious": self.is_malicious,
            "isSpam": False,
            "isScanner": False,
            "isBotnet": False,
            "sources": list(self.sources),
            "threatTypes": list(self.threat_types),
            "reputationScore": self.reputation_score,
        }


def check_threat_indicators(address: str) -> ThreatIndicators:
    """Check an address against the malicious prefix list (first match wins)."""
    candidate = (address or "").strip()
    for prefix in MALICIOUS_PREFIXES:
        if _starts_with(candidate, prefix):
            return ThreatIndicators(
                is_threat=True,
                confidence=0.85,
                reputation_score=75,
                sources=("threat_intelligence_db", "tor_exit_nodes"),
                threat_types=("anonymizer", "potential_threat"),
                matched_prefix=prefix,
            )
    return ThreatIndicators()


@dataclass(slots=True)
class _ThreatReport:
    threat_detected: bool = False
    threat_score: int = 0
    confidence: int = 70
    threat_types: List[str] = field(default_factory=list)
    is_vpn: bool = False
    is_tor: bool = False


def analyze_threats(address: str) -> Dict[str, Any]:
    """Summarise range, Tor and VPN prefix hits for an address.

    Example:
        >>> analyze_threats("185.220.101.7")["threatTypes"]
        ['tor_exit', 'tor_exit']
    """
    candidate = (address or "").strip()
    report = _ThreatReport()

    for prefix, threat_type in MALICIOUS_RANGES.items():
        if _starts_with(candidate, prefix):
            report.threat_detected = True
            report.threat_score = 60
            report.threat_types.append(threat_type)
            break

    if any(_starts_with(candidate, prefix) for prefix in TOR_PREFIXES):
        report.is_tor = True
        report.threat_types.append("tor_exit")
        report.confidence = 90

    if any(_starts_with(candidate, prefix) for prefix in VPN_PREFIXES):
        report.is_vpn = True
        report.threat_types.append("commercial_vpn")

    return {
        "threatDetected": report.threat_detected,
        "threatScore": report.threat_score,
        "isMalicious": False,
        "confidence": report.confidence,
        "threatTypes": report.threat_types,
        "dataSources": list(DATA_SOURCES),
        "isVpn": report.is_vpn,
        "isTor": report.is_tor,
        "isProxy": False,
    }
