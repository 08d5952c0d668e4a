"""
Breathability scoring module for the Breathable Routes engine.

This module defines the BreathabilityScore dataclass and the
BreathabilityScorer which aggregates the AQI readings sampled along a route
into a single 0-100 score with a letter grade. Within each AQI tier the score
decreases linearly as the average AQI approaches the tier's worse boundary,
so two routes in the same tier can still be told apart.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from .aqi_sample import AQISample


@dataclass(frozen=True)
class BreathabilityScore:
    """
    Aggregate air-quality judgment for a route or route segment.

    Attributes:
        score: Breathability score, 0-100 (higher is better)
        grade: Letter grade, one of A+, A, B, C, D, F, or N/A without data
        analysis: Human-readable summary of the tier
        avg_aqi: Floored mean AQI over the samples
        max_aqi: Highest sampled AQI
        min_aqi: Lowest sampled AQI
        variability: max_aqi - min_aqi
    """

    score: int
    grade: str
    analysis: str
    avg_aqi: Optional[int] = None
    max_aqi: Optional[int] = None
    min_aqi: Optional[int] = None
    variability: Optional[int] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "score": self.score,
            "grade": self.grade,
            "avgAQI": self.avg_aqi,
            "maxAQI": self.max_aqi,
            "minAQI": self.min_aqi,
            "variability": self.variability,
            "analysis": self.analysis,
        }


class BreathabilityScorer:
    """
    Aggregates a sequence of AQI samples into a BreathabilityScore.

    Each tier is (upper bound, grade, base score, analysis). The score inside
    a tier is `base + (upper bound - avg) / 10`, floored; the Hazardous tier
    counts down from 30 instead and never goes below 0.
    """

    TIERS = [
        (50, "A+", 95, "Excellent air quality throughout the route"),
        (100, "A", 85, "Good air quality with minimal health concerns"),
        (150, "B", 70, "Moderate air quality, consider precautions for sensitive individuals"),
        (200, "C", 50, "Unhealthy air quality, take protective measures"),
        (300, "D", 30, "Very unhealthy air quality, avoid if possible"),
    ]
    HAZARDOUS_ANALYSIS = "Hazardous air quality, emergency conditions"

    EMPTY = BreathabilityScore(score=0, grade="N/A", analysis="No data available")

    def score(self, samples: Sequence[AQISample]) -> BreathabilityScore:
        """
        Computes the breathability score for a set of samples.

        Args:
            samples: AQI samples along the route (order does not matter)

        Returns:
            A new BreathabilityScore; the N/A score if `samples` is empty
        """
        if not samples:
            return self.EMPTY

        values = [sample.aqi for sample in samples]
        avg_aqi = sum(values) / len(values)
        max_aqi = max(values)
        min_aqi = min(values)

        grade, raw_score, analysis = self.grade_for(avg_aqi)

        return BreathabilityScore(
            score=max(0, min(100, raw_score)),
            grade=grade,
            analysis=analysis,
            avg_aqi=math.floor(avg_aqi),
            max_aqi=math.floor(max_aqi),
            min_aqi=math.floor(min_aqi),
            variability=math.floor(max_aqi - min_aqi),
        )

    def grade_for(self, avg_aqi: float) -> tuple[str, int, str]:
        """
        Maps an average AQI to (grade, unclamped score, analysis).

        The grade depends on `avg_aqi` alone.
        """
        for upper_bound, grade, base, analysis in self.TIERS:
            if avg_aqi <= upper_bound:
                return (grade, math.floor(base + (upper_bound - avg_aqi) / 10), analysis)

        return ("F", math.floor(max(0, 30 - (avg_aqi - 300) / 10)), self.HAZARDOUS_ANALYSIS)
