"""
Tests for TimeOfDayRecommender component.

Tests cover:
- Equivalence classes: diurnal multiplier per period
- Boundary value analysis: hour range, recommendation tiers
- Edge cases: invalid hours, no optimal hour
- Decision path coverage: optimal time selection and message
"""

import pytest
from breathroute.time_recommender import OptimalTime, TimeOfDayRecommender


class TestTimeOfDayRecommender:
    """Test suite for TimeOfDayRecommender component."""

    @pytest.fixture
    def recommender(self):
        """Fixture providing a TimeOfDayRecommender instance."""
        return TimeOfDayRecommender()

    # ==================== Equivalence Classes ====================

    @pytest.mark.parametrize("hour,multiplier", [
        (8, 1.3), (18, 1.4), (23, 0.7), (3, 0.7), (13, 1.1), (6, 1.0), (21, 1.0),
    ])
    def test_multiplier_per_period(self, recommender, hour, multiplier):
        """Equivalence class: one hour per diurnal period."""
        assert recommender.multiplier_for(hour) == multiplier

    def test_morning_rush_prediction(self, recommender):
        """avgAQI 100 at 08:00 predicts 130, acceptable with precautions."""
        result = recommender.recommend(100, 8)

        assert result.hourly_predictions[8].aqi == 130
        assert result.current_hour == 8
        assert result.current_recommendation == "Acceptable conditions with precautions"

    # ==================== Boundary Value Analysis ====================

    @pytest.mark.parametrize("hour,multiplier", [
        (5, 0.7), (6, 1.0), (7, 1.3), (10, 1.3), (11, 1.1),
        (16, 1.1), (17, 1.4), (20, 1.4), (21, 1.0), (22, 0.7), (0, 0.7),
    ])
    def test_period_edges(self, recommender, hour, multiplier):
        """Boundary: first and last hour of each period."""
        assert recommender.multiplier_for(hour) == multiplier

    @pytest.mark.parametrize("aqi,text", [
        (49, "Excellent time to travel"),
        (50, "Good conditions for travel"),
        (99, "Good conditions for travel"),
        (100, "Acceptable conditions with precautions"),
        (150, "Consider postponing if possible"),
        (200, "Avoid travel if not essential"),
    ])
    def test_recommendation_tiers(self, recommender, aqi, text):
        """Boundary: recommendation tiers use strict upper bounds."""
        assert recommender.recommendation_for(aqi) == text

    # ==================== Edge Cases ====================

    @pytest.mark.parametrize("hour", [-1, 24, 100])
    def test_invalid_hour_raises(self, recommender, hour):
        """Edge case: hours outside 0-23 are rejected."""
        with pytest.raises(ValueError):
            recommender.recommend(100, hour)

    def test_zero_average_has_no_optimal_time(self, recommender):
        """Edge case: nothing beats an AQI of 0."""
        result = recommender.recommend(0, 12)
        assert result.optimal_times == []
        assert result.message is None
        assert result.current_recommendation == "Excellent time to travel"

    def test_predictions_cover_full_day(self, recommender):
        result = recommender.recommend(80, 0)
        assert [p.hour for p in result.hourly_predictions] == list(range(24))

    # ==================== Decision Path Coverage ====================

    def test_optimal_times_are_night_hours(self, recommender):
        """Path: the three lowest night hours, earliest first on ties."""
        result = recommender.recommend(100, 8)

        assert result.optimal_times == [
            OptimalTime(hour=0, aqi=70, improvement=30),
            OptimalTime(hour=1, aqi=70, improvement=30),
            OptimalTime(hour=2, aqi=70, improvement=30),
        ]
        assert result.message == "Better air quality expected at 0:00 (AQI 70)"

    def test_optimal_flag_matches_threshold(self, recommender):
        """Path: an hour is optimal only if at least 20% below the average."""
        result = recommender.recommend(100, 8)
        optimal_hours = {p.hour for p in result.hourly_predictions if p.is_optimal}
        assert optimal_hours == {22, 23, 0, 1, 2, 3, 4, 5}

    def test_predicted_aqi_is_floored(self, recommender):
        result = recommender.recommend(133, 13)
        assert result.hourly_predictions[13].aqi == 146  # 133 * 1.1 = 146.3

    def test_to_dict_uses_wire_keys(self, recommender):
        data = recommender.recommend(100, 8).to_dict()
        assert data["currentRecommendation"] == "Acceptable conditions with precautions"
        assert data["optimalTimes"][0]["time"] == "0:00"
        assert data["hourlyPredictions"][0]["isOptimal"] is True
