"""
Route analysis result module for the Breathable Routes engine.

This module defines the records the RouteComparator hands back to its caller:
RouteAnalysis (everything computed for one candidate route),
RouteRecommendation (the natural-language verdict over the ranked routes)
and RouteComparison (the ranked list plus that verdict). They are built once
and never mutated; `to_dict()` produces the JSON shape served to the browser
client.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import pandas as pd

from .alerts import Alert
from .aqi_sample import AQISample
from .breathability import BreathabilityScore
from .health_impact import HealthImpact
from .route_geometry import RouteGeometry
from .time_recommender import TimeRecommendations


@dataclass(frozen=True)
class RouteAnalysis:
    """
    Full analysis of one candidate route.

    Attributes:
        route_id: Identity of the route (provider id or endpoint hash)
        route: The analysed geometry
        air_quality_data: Readings at the sampled coordinates, in route order
        breathability_score: Aggregate air-quality score
        health_impact: Personalized assessment
        alerts: Proactive alerts along the route
        time_recommendations: Departure-time advice
        overall_score: Preference-weighted ranking score, 0-100
        preference: Route preference the overall score was computed for
        analysis_timestamp: When the analysis was produced
    """

    route_id: str
    route: RouteGeometry
    air_quality_data: list[AQISample]
    breathability_score: BreathabilityScore
    health_impact: HealthImpact
    alerts: list[Alert]
    time_recommendations: TimeRecommendations
    overall_score: float
    preference: str
    analysis_timestamp: datetime

    @property
    def uses_fallback_data(self) -> bool:
        """True if any reading along the route was synthesized."""
        return any(sample.is_fallback for sample in self.air_quality_data)

    def to_dict(self) -> dict[str, object]:
        """
        Converts the analysis to a serializable dictionary.

        The raw provider route is included under "route" when available so
        the client can draw it.
        """
        return {
            "routeId": self.route_id,
            "route": self.route.raw or {"summary": self.route.summary},
            "airQualityData": [sample.to_dict() for sample in self.air_quality_data],
            "breathabilityScore": self.breathability_score.to_dict(),
            "healthImpact": self.health_impact.to_dict(),
            "alerts": [alert.to_dict() for alert in self.alerts],
            "timeRecommendations": self.time_recommendations.to_dict(),
            "overallScore": self.overall_score,
            "preference": self.preference,
            "analysisTimestamp": self.analysis_timestamp.isoformat(),
        }


@dataclass(frozen=True)
class RouteRecommendation:
    """
    Verdict over a set of ranked routes.

    Attributes:
        type: "single", "strong-preference", "moderate-preference" or "similar"
        message: Text shown to the rider
        recommended_route: Index of the recommended route in the ranked list
        benefit: Exposure saved by taking the recommended route
        note: Extra guidance when routes are similar
        score: Overall score of the only route ("single" only)
    """

    type: str
    message: str
    recommended_route: Optional[int] = None
    benefit: Optional[str] = None
    note: Optional[str] = None
    score: Optional[float] = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"type": self.type, "message": self.message}
        if self.recommended_route is not None:
            data["recommendedRoute"] = self.recommended_route
        if self.benefit is not None:
            data["benefit"] = self.benefit
        if self.note is not None:
            data["note"] = self.note
        if self.score is not None:
            data["score"] = self.score
        return data


@dataclass(frozen=True)
class RouteComparison:
    """Ranked route analyses with the overall recommendation."""

    ranked_routes: list[RouteAnalysis]
    recommendation: RouteRecommendation
    comparison_timestamp: datetime = field(default_factory=datetime.now)

    @property
    def best(self) -> RouteAnalysis:
        return self.ranked_routes[0]

    def to_dict(self) -> dict[str, object]:
        return {
            "routes": [analysis.to_dict() for analysis in self.ranked_routes],
            "recommendation": self.recommendation.to_dict(),
            "comparisonTimestamp": self.comparison_timestamp.isoformat(),
        }

    def to_frame(self) -> pd.DataFrame:
        """
        Summarizes the ranked routes as a DataFrame, one row per route.

        Columns: rank, route_id, summary, overall_score, score, grade,
        avg_aqi, max_aqi, health_score, risk_level, alerts, distance_m,
        duration_s.
        """
        rows = []
        for rank, analysis in enumerate(self.ranked_routes, start=1):
            rows.append({
                "rank": rank,
                "route_id": analysis.route_id,
                "summary": analysis.route.summary,
                "overall_score": round(analysis.overall_score, 1),
                "score": analysis.breathability_score.score,
                "grade": analysis.breathability_score.grade,
                "avg_aqi": analysis.breathability_score.avg_aqi,
                "max_aqi": analysis.breathability_score.max_aqi,
                "health_score": analysis.health_impact.health_score,
                "risk_level": analysis.health_impact.risk_level,
                "alerts": len(analysis.alerts),
                "distance_m": analysis.route.distance_m,
                "duration_s": analysis.route.duration_s,
            })
        return pd.DataFrame(rows, columns=[
            "rank", "route_id", "summary", "overall_score", "score", "grade", "avg_aqi",
            "max_aqi", "health_score", "risk_level", "alerts", "distance_m", "duration_s",
        ])
