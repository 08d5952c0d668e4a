"""
Health impact module for the Breathable Routes engine.

This module defines the HealthImpact dataclass and the HealthImpactCalculator
which personalizes a route's air-quality exposure for a rider. Profile risk
factors add up to a risk multiplier that scales the route's average AQI into
an "adjusted" AQI; the risk level, recommendations and recovery time are all
bucketed on that adjusted value.

Note that `health_score` is a separate 0-100 scale from the breathability
score: it penalizes the adjusted AQI tier and the profile risk factors
independently.
"""

import math
from dataclasses import dataclass, field
from typing import Sequence

from .aqi_sample import AQISample
from .health_profile import HealthProfile


@dataclass(frozen=True)
class HealthImpact:
    """
    Personalized exposure assessment for one route.

    Attributes:
        avg_aqi: Floored mean AQI over the samples
        adjusted_aqi: Floored avg AQI x risk multiplier
        max_aqi: Highest sampled AQI
        min_aqi: Lowest sampled AQI
        health_score: Personalized score, 0-100 (higher is better)
        risk_level: One of "low", "moderate", "high", "very-high"
        risk_multiplier: Additive profile risk factor, >= 1.0
        recommendations: Ordered list of actionable advice
        recovery_time: Suggested recovery time after the trip
        estimated_pm25_exposure: Rough PM2.5 estimate derived from avg AQI
    """

    avg_aqi: int
    adjusted_aqi: int
    max_aqi: int
    min_aqi: int
    health_score: int
    risk_level: str
    risk_multiplier: float
    recovery_time: str
    estimated_pm25_exposure: int
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "avgAQI": self.avg_aqi,
            "adjustedAQI": self.adjusted_aqi,
            "maxAQI": self.max_aqi,
            "minAQI": self.min_aqi,
            "healthScore": self.health_score,
            "riskLevel": self.risk_level,
            "riskMultiplier": self.risk_multiplier,
            "recommendations": list(self.recommendations),
            "estimatedPM25Exposure": self.estimated_pm25_exposure,
            "recoveryTime": self.recovery_time,
        }


class HealthImpactCalculator:
    """
    Combines aggregate AQI with a HealthProfile into a HealthImpact.

    Bucket tables hold (inclusive upper bound, value); the final entry uses
    infinity as its bound.
    """

    # Risk multiplier contributions
    RESPIRATORY_RISK = 0.5
    HEART_RISK = 0.4
    PREGNANCY_RISK = 0.3
    AGE_RISK = 0.2
    VERY_SENSITIVE_RISK = 0.3
    SENSITIVE_RISK = 0.2

    # Health score penalties: only the highest matching AQI tier applies
    AQI_PENALTIES = [(300, 70), (200, 50), (150, 30), (100, 15), (50, 5)]
    RESPIRATORY_PENALTY = 10
    HEART_PENALTY = 8
    PREGNANCY_PENALTY = 6
    AGE_PENALTY = 5

    # Both <=50 and <=100 are "low"; they differ only in their advice
    RISK_BUCKETS = [
        (50, "low", [
            "Excellent conditions for travel",
            "No special precautions needed",
            "Great time for outdoor activities",
        ]),
        (100, "low", [
            "Good conditions for most people",
            "Stay hydrated during travel",
            "Monitor air quality if you're sensitive",
        ]),
        (150, "moderate", [
            "Consider closing car windows in high AQI areas",
            "Use A/C recirculation mode",
            "Limit outdoor stops if possible",
        ]),
        (200, "high", [
            "Wear N95 mask if traveling by two-wheeler",
            "Keep windows closed and use A/C recirculation",
            "Consider postponing travel if possible",
            "Use air purifier for 2+ hours post-trip",
        ]),
        (math.inf, "very-high", [
            "Strongly consider postponing non-essential travel",
            "If travel is necessary, wear N95 mask",
            "Keep all windows closed",
            "Use air purifier for 3+ hours post-trip",
            "Monitor for respiratory symptoms",
        ]),
    ]

    RECOVERY_BUCKETS = [
        (50, "0 hours"),
        (100, "30 minutes"),
        (150, "1-2 hours"),
        (200, "2-3 hours"),
        (300, "3-4 hours"),
        (math.inf, "4+ hours"),
    ]

    def assess(self, samples: Sequence[AQISample], profile: HealthProfile) -> HealthImpact:
        """
        Assesses the personalized health impact of a route.

        Empty `samples` is not an error: all aggregates are 0, which yields a
        well-defined low-risk result. Callers that need real data must check
        for it upstream.

        Args:
            samples: AQI samples along the route
            profile: The rider's health profile

        Returns:
            A new HealthImpact
        """
        if samples:
            values = [sample.aqi for sample in samples]
            avg_aqi = sum(values) / len(values)
            max_aqi = max(values)
            min_aqi = min(values)
        else:
            avg_aqi = max_aqi = min_aqi = 0

        risk_multiplier = self.risk_multiplier(profile)
        adjusted_aqi = avg_aqi * risk_multiplier

        risk_level, recommendations = self._risk_bucket(adjusted_aqi)

        return HealthImpact(
            avg_aqi=math.floor(avg_aqi),
            adjusted_aqi=math.floor(adjusted_aqi),
            max_aqi=math.floor(max_aqi),
            min_aqi=math.floor(min_aqi),
            health_score=self.health_score(adjusted_aqi, profile),
            risk_level=risk_level,
            risk_multiplier=round(risk_multiplier, 2),
            recommendations=list(recommendations),
            recovery_time=self.recovery_time(adjusted_aqi),
            estimated_pm25_exposure=math.floor(avg_aqi * 0.6),
        )

    def risk_multiplier(self, profile: HealthProfile) -> float:
        """Sums the additive risk contributions of each applicable profile factor."""
        multiplier = 1.0
        if profile.has_respiratory_conditions:
            multiplier += self.RESPIRATORY_RISK
        if profile.has_heart_conditions:
            multiplier += self.HEART_RISK
        if profile.is_pregnant:
            multiplier += self.PREGNANCY_RISK
        if profile.is_age_at_risk():
            multiplier += self.AGE_RISK
        if profile.sensitivity_level == "very-sensitive":
            multiplier += self.VERY_SENSITIVE_RISK
        elif profile.sensitivity_level == "sensitive":
            multiplier += self.SENSITIVE_RISK
        return multiplier

    def health_score(self, adjusted_aqi: float, profile: HealthProfile) -> int:
        """
        Computes the 0-100 personalized health score.

        Starts at 100, subtracts the penalty of the highest AQI tier the
        adjusted AQI exceeds, then the profile deductions, and clamps.
        """
        score = 100

        for threshold, penalty in self.AQI_PENALTIES:
            if adjusted_aqi > threshold:
                score -= penalty
                break

        if profile.has_respiratory_conditions:
            score -= self.RESPIRATORY_PENALTY
        if profile.has_heart_conditions:
            score -= self.HEART_PENALTY
        if profile.is_pregnant:
            score -= self.PREGNANCY_PENALTY
        if profile.is_age_at_risk():
            score -= self.AGE_PENALTY

        return max(0, min(100, score))

    def recovery_time(self, adjusted_aqi: float) -> str:
        """Recommended recovery time after exposure at the given adjusted AQI."""
        for upper_bound, label in self.RECOVERY_BUCKETS:
            if adjusted_aqi <= upper_bound:
                return label
        return self.RECOVERY_BUCKETS[-1][1]

    def _risk_bucket(self, adjusted_aqi: float) -> tuple[str, list[str]]:
        for upper_bound, risk_level, recommendations in self.RISK_BUCKETS:
            if adjusted_aqi <= upper_bound:
                return (risk_level, recommendations)
        # NaN never satisfies <=; treat it as the worst bucket
        return (self.RISK_BUCKETS[-1][1], self.RISK_BUCKETS[-1][2])
