"""Data models for heuristic risk scoring."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class RiskLevel(str, Enum):
    """Discrete risk level derived from the risk score.

    Thresholds: score >= 0.7 is HIGH, score >= 0.4 is MEDIUM, anything lower is LOW.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def category(self) -> str:
        """Category label, e.g. ``high_risk``."""
        return f"{self.value}_risk"


class AnonymityLevel(str, Enum):
    """How strongly the address hides its user, from NONE to VERY_HIGH (Tor)."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


@dataclass(slots=True, frozen=True)
class FeatureBag:
    """Immutable set of heuristic detections for one address.

    Attributes:
        vpn_detected: VPN, proxy or Tor infrastructure indicators matched
        is_tor: Address is a known Tor exit node
        is_hosting: ISP name looks like a hosting or datacenter provider
        is_proxy: Upstream provider flagged the address as a proxy
        confidence: Detection confidence (0.0 to 1.0), 0.5 when nothing matched
        matched_factors: Names of the rules that fired, in firing order
        vpn_service_name: Operator name for known VPN hosting ASNs

    Raises:
        ValueError: If confidence is not between 0.0 and 1.0
    """

    vpn_detected: bool = False
    is_tor: bool = False
    is_hosting: bool = False
    is_proxy: bool = False
    confidence: float = 0.5
    matched_factors: Tuple[str, ...] = ()
    vpn_service_name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate confidence and normalise factors to a tuple."""
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be between 0.0 and 1.0, got {self.confidence}")
        if not isinstance(self.matched_factors, tuple):
            # Use object.__setattr__ because dataclass is frozen
            object.__setattr__(self, "matched_factors", tuple(self.matched_factors))


@dataclass(slots=True, frozen=True)
class RiskVerdict:
    """Immutable scoring result.

    Attributes:
        score: Weighted sum of detections clamped to [0.0, 1.0]
        level: Risk level for the score
        category: ``<level>_risk`` label
        anonymity_level: Anonymity implied by the strongest detection
    """

    score: float
    level: RiskLevel
    category: str
    anonymity_level: AnonymityLevel

    def __post_init__(self) -> None:
        """Validate the score range."""
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"score must be between 0.0 and 1.0, got {self.score}")
