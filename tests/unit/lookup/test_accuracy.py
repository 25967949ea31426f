"""Unit tests for accuracy scoring."""

from __future__ import annotations

import pytest

from iprisk.lookup.accuracy import accuracy_radius_km, calculate_accuracy


@pytest.mark.parametrize(
    "confidence,radius",
    [(0.95, 10), (0.91, 10), (0.9, 25), (0.85, 25), (0.8, 50), (0.75, 50), (0.7, 100), (0.3, 100)],
)
def test_accuracy_radius_steps(confidence: float, radius: int) -> None:
    """Radius thresholds are strict lower bounds."""
    assert accuracy_radius_km(confidence) == radius


def test_high_confidence_is_precise() -> None:
    """Provider confidence of 0.95 gives a precise, high quality location."""
    assert calculate_accuracy(0.95) == {
        "accuracyRadiusKm": 10,
        "accuracyRadiusMiles": 6,
        "confidenceScore": 95,
        "dataQuality": "high",
        "geolocationAccuracy": "precise",
    }


def test_medium_quality() -> None:
    """Confidence between 0.7 and 0.85 is medium quality."""
    result = calculate_accuracy(0.85)

    assert result["dataQuality"] == "medium"
    assert result["accuracyRadiusKm"] == 25
    assert result["accuracyRadiusMiles"] == 16
    assert result["geolocationAccuracy"] == "approximate"


def test_estimated_location_is_low_quality() -> None:
    """Estimated locations are low quality with a 100 km radius."""
    result = calculate_accuracy(0.3)

    assert result["dataQuality"] == "low"
    assert result["accuracyRadiusKm"] == 100
    assert result["confidenceScore"] == 30


@pytest.mark.parametrize("confidence", [None, 0.0])
def test_missing_confidence_defaults(confidence: float | None) -> None:
    """Missing or zero confidence is treated as 0.7."""
    result = calculate_accuracy(confidence)

    assert result["confidenceScore"] == 70
    assert result["accuracyRadiusKm"] == 100
    assert result["dataQuality"] == "low"
