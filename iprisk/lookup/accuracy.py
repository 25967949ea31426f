"""Accuracy radius and data quality derived from provider confidence."""

from __future__ import annotations

from typing import Any, Dict, Optional

KM_TO_MILES = 0.621371

# (confidence strictly above, radius in km), first match wins
RADIUS_STEPS = ((0.9, 10), (0.8, 25), (0.7, 50))
DEFAULT_RADIUS_KM = 100


def accuracy_radius_km(confidence: float) -> int:
    for threshold, radius in RADIUS_STEPS:
        if confidence > threshold:
            return radius
    return DEFAULT_RADIUS_KM


def calculate_accuracy(confidence: Optional[float] = None) -> Dict[str, Any]:
    """Describe how precise a location is likely to be.

    A missing or zero confidence is treated as 0.7.

    Example:
        >>> calculate_accuracy(0.95)["accuracyRadiusKm"]
        10
        >>> calculate_accuracy(0.3)["dataQuality"]
        'low'
    """
    value = confidence or 0.7
    radius = accuracy_radius_km(value)
    if value > 0.85:
        quality = "high"
    elif value > 0.7:
        quality = "medium"
    else:
        quality = "low"
    return {
        "accuracyRadiusKm": radius,
        "accuracyRadiusMiles": round(radius * KM_TO_MILES),
        "confidenceScore": round(value * 100),
        "dataQuality": quality,
        "geolocationAccuracy": "precise" if value > 0.9 else "approximate",
    }
