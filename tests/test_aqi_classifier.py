"""
Tests for AQIClassifier component.

Tests cover:
- Equivalence classes: one value inside each EPA tier
- Boundary value analysis: every tier edge
- Edge cases: negative, missing, NaN and out-of-scale values
"""

import pytest
from breathroute.aqi_classifier import AQIClassifier, AQILevel


class TestAQIClassifier:
    """Test suite for AQIClassifier component."""

    @pytest.fixture
    def classifier(self):
        """Fixture providing an AQIClassifier instance."""
        return AQIClassifier()

    # ==================== Equivalence Classes ====================

    @pytest.mark.parametrize("aqi,level,grade", [
        (25, "Good", "A+"),
        (75, "Moderate", "A"),
        (125, "Unhealthy for Sensitive Groups", "B"),
        (175, "Unhealthy", "C"),
        (250, "Very Unhealthy", "D"),
        (400, "Hazardous", "F"),
    ])
    def test_value_inside_each_tier(self, classifier, aqi, level, grade):
        """Equivalence class: one representative AQI per tier."""
        result = classifier.classify(aqi)
        assert result.level == level
        assert result.grade == grade

    def test_colors_follow_epa_palette(self, classifier):
        """Equivalence class: each tier carries its display color."""
        assert classifier.classify(10).color == "#00E400"
        assert classifier.classify(60).color == "#FFFF00"
        assert classifier.classify(110).color == "#FF7E00"
        assert classifier.classify(160).color == "#FF0000"
        assert classifier.classify(210).color == "#8F3F97"
        assert classifier.classify(310).color == "#7E0023"

    # ==================== Boundary Value Analysis ====================

    @pytest.mark.parametrize("aqi,grade", [
        (0, "A+"), (50, "A+"), (51, "A"),
        (100, "A"), (101, "B"),
        (150, "B"), (151, "C"),
        (200, "C"), (201, "D"),
        (300, "D"), (301, "F"),
        (500, "F"),
    ])
    def test_tier_boundaries(self, classifier, aqi, grade):
        """Boundary: upper bounds are inclusive."""
        assert classifier.classify(aqi).grade == grade

    def test_fractional_value_just_above_boundary(self, classifier):
        """Boundary: 50.5 is above the Good tier."""
        assert classifier.classify(50.5).level == "Moderate"

    # ==================== Edge Cases ====================

    def test_negative_aqi_resolves_to_lowest_tier(self, classifier):
        """Edge case: negative AQI does not raise."""
        assert classifier.classify(-5).level == "Good"

    def test_missing_aqi_resolves_to_lowest_tier(self, classifier):
        """Edge case: None is floored at Good."""
        assert classifier.classify(None).grade == "A+"

    def test_nan_resolves_to_lowest_tier(self, classifier):
        """Edge case: NaN is floored at Good."""
        assert classifier.classify(float("nan")).grade == "A+"

    def test_above_scale_is_hazardous(self, classifier):
        """Edge case: readings above 500 still classify."""
        assert classifier.classify(999) == AQIClassifier.HAZARDOUS

    def test_to_dict(self, classifier):
        """AQILevel serializes its three fields."""
        assert classifier.classify(75).to_dict() == {"level": "Moderate", "color": "#FFFF00", "grade": "A"}

    def test_classification_is_deterministic(self, classifier):
        """Same input yields an equal result."""
        assert classifier.classify(180) == classifier.classify(180) == AQILevel("Unhealthy", "#FF0000", "C")
