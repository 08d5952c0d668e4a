"""
Time-of-day recommender module for the Breathable Routes engine.

This module contains the TimeOfDayRecommender which projects a route's
average AQI across the 24 hours of the day using fixed diurnal multipliers
(rush hours are worse, nights are cleaner) and suggests better departure
windows. It is a pure function of the average AQI and the caller-supplied
current hour, so results never depend on the wall clock.
"""

import math
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class HourlyPrediction:
    """Projected AQI for one hour of the day."""

    hour: int
    aqi: int
    recommendation: str
    is_optimal: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "hour": self.hour,
            "aqi": self.aqi,
            "recommendation": self.recommendation,
            "isOptimal": self.is_optimal,
        }


@dataclass(frozen=True)
class OptimalTime:
    """A recommended departure hour and how much better it is than the average."""

    hour: int
    aqi: int
    improvement: int

    @property
    def time(self) -> str:
        return f"{self.hour}:00"

    def to_dict(self) -> dict[str, object]:
        return {"time": self.time, "hour": self.hour, "aqi": self.aqi, "improvement": self.improvement}


@dataclass(frozen=True)
class TimeRecommendations:
    """
    Hourly projections and departure advice for one route.

    Attributes:
        current_hour: Hour the recommendation was computed for
        current_recommendation: Advice for departing at `current_hour`
        hourly_predictions: One projection per hour, 0-23
        optimal_times: Up to three best hours, lowest predicted AQI first
        message: Summary pointing at the best hour, or None if no hour is
                 at least 20% better than the average
    """

    current_hour: int
    current_recommendation: str
    hourly_predictions: list[HourlyPrediction] = field(default_factory=list)
    optimal_times: list[OptimalTime] = field(default_factory=list)
    message: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "currentHour": self.current_hour,
            "currentRecommendation": self.current_recommendation,
            "hourlyPredictions": [p.to_dict() for p in self.hourly_predictions],
            "optimalTimes": [t.to_dict() for t in self.optimal_times],
            "message": self.message,
        }


class TimeOfDayRecommender:
    """
    Recommends departure times from diurnal traffic/pollution patterns.
    """

    MORNING_RUSH = (range(7, 11), 1.3)
    EVENING_RUSH = (range(17, 21), 1.4)
    NIGHT = ((22, 23, 0, 1, 2, 3, 4, 5), 0.7)
    AFTERNOON = (range(11, 17), 1.1)

    # An hour is optimal if it is at least 20% better than the average
    OPTIMAL_RATIO = 0.8
    MAX_OPTIMAL_TIMES = 3

    def multiplier_for(self, hour: int) -> float:
        """Returns the diurnal AQI multiplier for an hour of the day."""
        for hours, multiplier in (self.MORNING_RUSH, self.EVENING_RUSH, self.NIGHT, self.AFTERNOON):
            if hour in hours:
                return multiplier
        return 1.0

    def recommendation_for(self, aqi: float) -> str:
        if aqi < 50:
            return "Excellent time to travel"
        if aqi < 100:
            return "Good conditions for travel"
        if aqi < 150:
            return "Acceptable conditions with precautions"
        if aqi < 200:
            return "Consider postponing if possible"
        return "Avoid travel if not essential"

    def recommend(self, avg_aqi: float, current_hour: int) -> TimeRecommendations:
        """
        Projects the average AQI over the day and picks better departure hours.

        Args:
            avg_aqi: The route's average AQI
            current_hour: Hour of the day (0-23) to give current advice for

        Returns:
            TimeRecommendations for the route

        Raises:
            ValueError: If current_hour is outside 0-23
        """
        if not 0 <= current_hour <= 23:
            raise ValueError(f"current_hour must be between 0 and 23, got {current_hour}")

        predictions = []
        for hour in range(24):
            predicted = math.floor(avg_aqi * self.multiplier_for(hour))
            predictions.append(HourlyPrediction(
                hour=hour,
                aqi=predicted,
                recommendation=self.recommendation_for(predicted),
                is_optimal=predicted < avg_aqi * self.OPTIMAL_RATIO,
            ))

        # sorted() is stable, so equal AQIs keep hour order
        best = sorted((p for p in predictions if p.is_optimal), key=lambda p: p.aqi)[:self.MAX_OPTIMAL_TIMES]
        optimal_times = [
            OptimalTime(hour=p.hour, aqi=p.aqi, improvement=math.floor(avg_aqi - p.aqi))
            for p in best
        ]

        message = None
        if optimal_times:
            first = optimal_times[0]
            message = f"Better air quality expected at {first.time} (AQI {first.aqi})"

        return TimeRecommendations(
            current_hour=current_hour,
            current_recommendation=predictions[current_hour].recommendation,
            hourly_predictions=predictions,
            optimal_times=optimal_times,
            message=message,
        )
