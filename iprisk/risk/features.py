"""Heuristic feature extraction.

Evaluates the static tables in :mod:`iprisk.risk.tables` against an address plus the
network metadata resolved for it (ISP name, ASN, hostname) and produces a FeatureBag.

Rules run in a fixed order. Each rule may only raise confidence, with one exception:
the legitimate-service override resets VPN detection, replaces the matched factors
with ``legitimate_service`` and pins confidence to 0.90. Hosting detection runs after
the override, so both factors can appear together.

Example:
    >>> from iprisk.risk import extract_features
    >>> bag = extract_features("1.2.3.4", isp="NordVPN Services")
    >>> bag.vpn_detected, bag.matched_factors
    (True, ('vpn_pattern_match',))
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from .models import FeatureBag
from .tables import (
    HOSTING_PATTERNS,
    KNOWN_VPN_ASNS,
    LEGITIMATE_DNS_ASNS,
    LEGITIMATE_ISP_NAMES,
    SUSPICIOUS_ASNS,
    TOR_EXIT_NODES,
    VPN_PATTERNS,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.5

_ASN_PATTERN = re.compile(r"^(?:AS)?(\d+)\b", re.IGNORECASE)


def normalize_asn(asn: Optional[object]) -> str:
    """Normalise an ASN identifier to ``AS<digits>``.

    Accepts ``15169``, ``"as15169"`` and provider strings such as ``"AS15169 Google LLC"``.
    Anything else (None, "Unknown", empty) becomes an empty string.
    """
    if asn is None:
        return ""
    match = _ASN_PATTERN.match(str(asn).strip())
    if not match:
        return ""
    return f"AS{int(match.group(1))}"


@dataclass(slots=True, frozen=True)
class _Inputs:
    address: str
    isp: str
    asn: str
    hostname: str


@dataclass(slots=True)
class _Draft:
    vpn_detected: bool = False
    is_tor: bool = False
    is_hosting: bool = False
    confidence: float = DEFAULT_CONFIDENCE
    factors: List[str] = field(default_factory=list)
    vpn_service_name: Optional[str] = None

    def raise_confidence(self, value: float) -> None:
        self.confidence = max(self.confidence, value)


def _is_tor_exit(inputs: _Inputs) -> bool:
    return inputs.address in TOR_EXIT_NODES


def _mark_tor(inputs: _Inputs, draft: _Draft) -> None:
    draft.is_tor = True
    draft.vpn_detected = True
    draft.factors.append("tor_exit_node")
    draft.raise_confidence(0.95)


def _matches_vpn_pattern(inputs: _Inputs) -> bool:
    # any() stops at the first matching pattern, so the factor is appended once
    return any(pattern.search(inputs.isp) or pattern.search(inputs.hostname) for pattern in VPN_PATTERNS)


def _mark_vpn_pattern(inputs: _Inputs, draft: _Draft) -> None:
    draft.vpn_detected = True
    draft.factors.append("vpn_pattern_match")
    draft.raise_confidence(0.75)


def _is_suspicious_asn(inputs: _Inputs) -> bool:
    return inputs.asn in SUSPICIOUS_ASNS


def _mark_suspicious_asn(inputs: _Inputs, draft: _Draft) -> None:
    draft.vpn_detected = True
    draft.factors.append("suspicious_asn")
    draft.raise_confidence(0.70)


def _is_known_vpn_asn(inputs: _Inputs) -> bool:
    return inputs.asn in KNOWN_VPN_ASNS


def _mark_known_vpn_asn(inputs: _Inputs, draft: _Draft) -> None:
    draft.vpn_detected = True
    draft.vpn_service_name = KNOWN_VPN_ASNS[inputs.asn]
    draft.factors.append("known_vpn_asn")
    draft.raise_confidence(0.80)


def _is_legitimate_service(inputs: _Inputs) -> bool:
    return any(name in inputs.isp for name in LEGITIMATE_ISP_NAMES) or inputs.asn in LEGITIMATE_DNS_ASNS


def _override_legitimate_service(inputs: _Inputs, draft: _Draft) -> None:
    draft.vpn_detected = False
    draft.factors = ["legitimate_service"]
    draft.confidence = 0.90


def _is_hosting(inputs: _Inputs) -> bool:
    return any(pattern.search(inputs.isp) for pattern in HOSTING_PATTERNS)


def _mark_hosting(inputs: _Inputs, draft: _Draft) -> None:
    draft.is_hosting = True
    draft.factors.append("hosting_provider")


Rule = Tuple[str, Callable[[_Inputs], bool], Callable[[_Inputs, _Draft], None]]

# Evaluated in order; the override must stay after the detections it resets
RULES: Tuple[Rule, ...] = (
    ("tor_exit_node", _is_tor_exit, _mark_tor),
    ("vpn_pattern_match", _matches_vpn_pattern, _mark_vpn_pattern),
    ("suspicious_asn", _is_suspicious_asn, _mark_suspicious_asn),
    ("known_vpn_asn", _is_known_vpn_asn, _mark_known_vpn_asn),
    ("legitimate_service", _is_legitimate_service, _override_legitimate_service),
    ("hosting_provider", _is_hosting, _mark_hosting),
)


def extract_features(
    address: str,
    isp: Optional[str] = None,
    asn: Optional[object] = None,
    hostname: Optional[str] = None,
) -> FeatureBag:
    """Run every detection rule against an address and its network metadata.

    Args:
        address: IP address the metadata belongs to
        isp: ISP or organisation name reported by a geolocation provider
        asn: ASN identifier (``AS15169``, ``15169`` or ``AS15169 Google LLC``)
        hostname: Reverse DNS hostname

    Returns:
        FeatureBag describing every rule that fired

    Note:
        Missing metadata is treated as an empty string, never as an error.
    """
    inputs = _Inputs(
        address=(address or "").strip(),
        isp=(isp or "").lower(),
        asn=normalize_asn(asn),
        hostname=(hostname or "").lower(),
    )
    draft = _Draft()

    for name, predicate, effect in RULES:
        if predicate(inputs):
            logger.debug(f"Rule {name} matched for {inputs.address}")
            effect(inputs, draft)

    return FeatureBag(
        vpn_detected=draft.vpn_detected,
        is_tor=draft.is_tor,
        is_hosting=draft.is_hosting,
        confidence=draft.confidence,
        matched_factors=tuple(draft.factors),
        vpn_service_name=draft.vpn_service_name,
    )
