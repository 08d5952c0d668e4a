"""
Proactive alert module for the Breathable Routes engine.

This module contains the Alert dataclass and the ProactiveAlertGenerator
which walks the ORDERED readings along a route and emits positional notices:
high-pollution zones, advisories for sensitive riders, and points where the
air improves sharply. It is the only scoring component that depends on the
order of the samples rather than on aggregate statistics.

Alert distances use a fixed 2 km step per sample index. This is an
approximation, not the true distance along the route.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from .aqi_classifier import AQIClassifier
from .aqi_sample import AQISample, Coordinate
from .health_profile import HealthProfile


@dataclass(frozen=True)
class Alert:
    """
    A positional, typed notice tied to one sample along the route.

    Attributes:
        id: Unique within one generation pass
        type: One of "high-pollution", "sensitive-advisory", "improvement"
        severity: One of "high", "moderate", "low", "info"
        distance: Approximate distance along the route, e.g. "4.0 km"
        aqi: AQI of the sample that triggered the alert
        aqi_level: Category label of that AQI
        message: Text shown to the rider
        action: Short suggested action
        location: Coordinate of the triggering sample
    """

    id: str
    type: str
    severity: str
    distance: str
    aqi: int
    aqi_level: str
    message: str
    action: str
    location: Coordinate

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "type": self.type,
            "severity": self.severity,
            "distance": self.distance,
            "aqi": self.aqi,
            "aqiLevel": self.aqi_level,
            "message": self.message,
            "action": self.action,
            "location": self.location.to_dict(),
        }


class ProactiveAlertGenerator:
    """
    Generates alerts from an ordered sequence of AQI samples.

    For every index the generator first compares the sample with the previous
    one (improvement check), then checks the sample itself (high-pollution or
    sensitive advisory). Alerts are returned in that discovery order; callers
    that need them sorted by distance must sort explicitly.
    """

    HIGH_POLLUTION_THRESHOLD = 150
    SEVERE_THRESHOLD = 200
    SENSITIVE_THRESHOLD = 100
    IMPROVEMENT_DROP = 50

    # Approximate spacing between consecutive samples
    KM_PER_SAMPLE = 2

    def __init__(self, classifier: Optional[AQIClassifier] = None) -> None:
        self.classifier = classifier or AQIClassifier()

    def generate_alerts(
        self,
        samples: Sequence[AQISample],
        profile: HealthProfile,
        generated_at: Optional[datetime] = None
    ) -> list[Alert]:
        """
        Generates proactive alerts for a route.

        Args:
            samples: Readings in route order
            profile: The rider's health profile
            generated_at: Generation time used to stamp alert ids
                          (defaults to now)

        Returns:
            List of alerts in discovery order; empty if `samples` is empty
        """
        stamp = int((generated_at or datetime.now()).timestamp() * 1000)
        alerts = []

        for i, sample in enumerate(samples):
            if i >= 1:
                previous = samples[i - 1]
                if previous.aqi - sample.aqi >= self.IMPROVEMENT_DROP:
                    alerts.append(self._improvement_alert(i, sample, stamp))

            if sample.aqi > self.HIGH_POLLUTION_THRESHOLD:
                alerts.append(self._high_pollution_alert(i, sample, profile, stamp))
            elif sample.aqi > self.SENSITIVE_THRESHOLD and (
                profile.has_respiratory_conditions or profile.sensitivity_level == "sensitive"
            ):
                alerts.append(self._sensitive_alert(i, sample, stamp))

        return alerts

    def recommendation_for(self, aqi: int, profile: HealthProfile) -> str:
        """Advice appended to a high-pollution alert message."""
        if aqi > self.SEVERE_THRESHOLD:
            return "Close windows immediately and use A/C recirculation."
        if aqi > self.HIGH_POLLUTION_THRESHOLD:
            if profile.has_respiratory_conditions:
                return "Close windows and consider wearing a mask."
            return "Close windows and use A/C recirculation."
        return "Monitor air quality and consider precautions."

    def action_for(self, aqi: int) -> str:
        if aqi > self.SEVERE_THRESHOLD:
            return "Close Windows"
        if aqi > self.HIGH_POLLUTION_THRESHOLD:
            return "Use Recirculation"
        return "Monitor"

    def distance_for(self, index: int) -> str:
        if index == 0:
            return "0 km"
        return f"{index * self.KM_PER_SAMPLE:.1f} km"

    def _high_pollution_alert(self, index: int, sample: AQISample, profile: HealthProfile, stamp: int) -> Alert:
        return Alert(
            id=f"alert_{index}_{stamp}",
            type="high-pollution",
            severity="high" if sample.aqi > self.SEVERE_THRESHOLD else "moderate",
            distance=self.distance_for(index),
            aqi=sample.aqi,
            aqi_level=self.classifier.classify(sample.aqi).level,
            message=f"High pollution zone ahead (AQI {sample.aqi}). {self.recommendation_for(sample.aqi, profile)}",
            action=self.action_for(sample.aqi),
            location=sample.location,
        )

    def _sensitive_alert(self, index: int, sample: AQISample, stamp: int) -> Alert:
        return Alert(
            id=f"alert_sensitive_{index}_{stamp}",
            type="sensitive-advisory",
            severity="low",
            distance=self.distance_for(index),
            aqi=sample.aqi,
            aqi_level=self.classifier.classify(sample.aqi).level,
            message=f"Moderate pollution ahead (AQI {sample.aqi}). Consider precautions due to your health profile.",
            action="Monitor Symptoms",
            location=sample.location,
        )

    def _improvement_alert(self, index: int, sample: AQISample, stamp: int) -> Alert:
        return Alert(
            id=f"improvement_{index}_{stamp}",
            type="improvement",
            severity="info",
            distance=self.distance_for(index),
            aqi=sample.aqi,
            aqi_level=self.classifier.classify(sample.aqi).level,
            message="Air quality improving ahead! Good area for a break if needed.",
            action="Plan Break",
            location=sample.location,
        )
